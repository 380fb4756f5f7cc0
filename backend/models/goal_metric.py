from datetime import datetime, timezone

from sqlalchemy import Column, Integer, DateTime, ForeignKey
from database import Base


class GoalMetric(Base):
    __tablename__ = "goal_metrics"

    goal_id = Column(Integer, ForeignKey("goals.id"), primary_key=True)
    metric_id = Column(Integer, ForeignKey("metrics.id"), primary_key=True)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
