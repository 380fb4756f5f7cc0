from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Text, DateTime, Boolean
from sqlalchemy.orm import relationship
from database import Base


class Habit(Base):
    __tablename__ = "habits"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    habit_type = Column(String(20), default="Build")  # Build/Maintain/Reduce/Quit
    frequency = Column(String(20), default="Daily")  # Daily/Weekly/Monthly/Custom
    daily_target = Column(Integer, nullable=True)  # completions expected per day
    weekly_target = Column(Integer, nullable=True)  # completions expected per week
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    logs = relationship("HabitLog", back_populates="habit", order_by="HabitLog.date.desc()")
