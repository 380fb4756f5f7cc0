from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Text, DateTime, Float
from database import Base


class Metric(Base):
    __tablename__ = "metrics"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    unit = Column(String(20), default="count")
    direction = Column(String(10), default="Higher")  # Higher/Lower/Target
    current_value = Column(Float, nullable=True)  # latest logged value
    target_value = Column(Float, nullable=True)
    status = Column(String(20), default="Active")  # Active/Paused/Archived
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
