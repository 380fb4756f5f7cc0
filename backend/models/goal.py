from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from database import Base


class Goal(Base):
    __tablename__ = "goals"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(500), nullable=False)
    description = Column(Text, nullable=True)
    status = Column(String(20), default="Active")  # Planning/Active/OnTrack/AtRisk/Achieved/Abandoned
    parent_goal_id = Column(Integer, ForeignKey("goals.id"), nullable=True)
    success_criteria = Column(Text, nullable=True)  # JSON array of {id, description, is_completed, target_date, linked_metric_id}
    progress_config = Column(Text, nullable=True)  # JSON object of category weights, e.g. {"tasks_weight": 50}
    target_date = Column(DateTime, nullable=True)
    last_activity_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    tasks = relationship("Task", back_populates="goal")
