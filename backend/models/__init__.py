# Import all models so they register with SQLAlchemy Base.metadata
# This ensures Base.metadata.create_all() creates all tables

from models.goal import Goal
from models.task import Task
from models.metric import Metric
from models.goal_metric import GoalMetric
from models.habit import Habit
from models.habit_goal import HabitGoal
from models.habit_log import HabitLog

__all__ = [
    "Goal",
    "Task",
    "Metric",
    "GoalMetric",
    "Habit",
    "HabitGoal",
    "HabitLog",
]
