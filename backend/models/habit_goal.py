from datetime import datetime, timezone

from sqlalchemy import Column, Integer, DateTime, ForeignKey
from database import Base


class HabitGoal(Base):
    __tablename__ = "habit_goals"

    habit_id = Column(Integer, ForeignKey("habits.id"), primary_key=True)
    goal_id = Column(Integer, ForeignKey("goals.id"), primary_key=True)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
