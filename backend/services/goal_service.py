"""
goal_service.py — Goal & linked-entity reads
Loads a goal plus the tasks, metrics and habits linked to it, either from the
SQL database (SQLAlchemy) or from Supabase's PostgREST API. Both sources expose
the same methods so the progress loader doesn't care which one it gets.
"""

import logging
from datetime import datetime, timedelta, timezone

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from config import HABIT_CONSISTENCY_WINDOW_DAYS, is_supabase_configured
from models.goal import Goal
from models.goal_metric import GoalMetric
from models.habit import Habit
from models.habit_goal import HabitGoal
from models.metric import Metric
from models.task import Task
from services.goal_progress_service import GoalProgressService
from supabase_rest import in_filter, sb_count, sb_select, sb_select_all

logger = logging.getLogger(__name__)


class GoalService:
    """SQL-backed source."""

    def __init__(self, db: Session):
        self.db = db

    def _run(self, query_fn):
        try:
            return query_fn()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Goal query failed: {e}")
            raise

    def get_goal(self, goal_id: int) -> Goal | None:
        return self._run(lambda: self.db.query(Goal).filter_by(id=goal_id).first())

    def get_all(self) -> list[Goal]:
        return self._run(lambda: self.db.query(Goal).order_by(Goal.id).all())

    def get_linked_tasks(self, goal_id: int) -> list[Task]:
        return self._run(lambda: self.db.query(Task).filter(Task.goal_id == goal_id).all())

    def get_linked_metrics(self, goal_id: int) -> list[Metric]:
        return self._run(lambda: self.db.query(Metric)
                         .join(GoalMetric, GoalMetric.metric_id == Metric.id)
                         .filter(GoalMetric.goal_id == goal_id)
                         .all())

    def get_linked_habits(self, goal_id: int) -> list[Habit]:
        """Linked habits with their logs loaded."""
        return self._run(lambda: self.db.query(Habit)
                         .join(HabitGoal, HabitGoal.habit_id == Habit.id)
                         .filter(HabitGoal.goal_id == goal_id)
                         .options(selectinload(Habit.logs))
                         .all())

    def get_linked_counts(self, goal_id: int) -> dict:
        def counts():
            return {
                "tasks": self.db.query(Task).filter(Task.goal_id == goal_id).count(),
                "metrics": self.db.query(GoalMetric).filter(GoalMetric.goal_id == goal_id).count(),
                "habits": self.db.query(HabitGoal).filter(HabitGoal.goal_id == goal_id).count(),
            }
        return self._run(counts)

    def get_hierarchy(self, today=None) -> list[dict]:
        """Build tree structure by parent_goal_id, each node carrying its overall progress."""
        return build_hierarchy(self, self.get_all(), today)


class GoalRestService:
    """PostgREST-backed source (Supabase edge backend)."""

    def get_goal(self, goal_id) -> dict | None:
        rows = sb_select("goals", filters={"id": goal_id})
        return rows[0] if rows else None

    def get_all(self) -> list[dict]:
        return sb_select("goals", query_string="order=id.asc")

    def get_linked_tasks(self, goal_id) -> list[dict]:
        return sb_select("tasks", filters={"goal_id": goal_id})

    def _linked_ids(self, table: str, column: str, goal_id) -> list:
        links = sb_select(table, filters={"goal_id": goal_id}, columns=column)
        return [link[column] for link in links if link.get(column) is not None]

    def get_linked_metrics(self, goal_id) -> list[dict]:
        metric_ids = self._linked_ids("goal_metrics", "metric_id", goal_id)
        if not metric_ids:
            return []
        return sb_select("metrics", query_string=in_filter("id", metric_ids))

    def get_linked_habits(self, goal_id) -> list[dict]:
        """Linked habits, each with a `logs` list covering the consistency window."""
        habit_ids = self._linked_ids("habit_goals", "habit_id", goal_id)
        if not habit_ids:
            return []
        habits = sb_select("habits", query_string=in_filter("id", habit_ids))

        # Streaks can outlast the window, so fetch a year back
        since = datetime.now(timezone.utc).date() - timedelta(days=max(HABIT_CONSISTENCY_WINDOW_DAYS, 365))
        logs = sb_select_all(
            "habit_logs",
            query_string=f"{in_filter('habit_id', habit_ids)}&date=gte.{since.isoformat()}&order=date.desc,id.desc",
        )
        logs_by_habit = {}
        for log in logs:
            logs_by_habit.setdefault(log.get("habit_id"), []).append(log)

        return [{**h, "logs": logs_by_habit.get(h.get("id"), [])} for h in habits]

    def get_linked_counts(self, goal_id) -> dict:
        return {
            "tasks": sb_count("tasks", filters={"goal_id": goal_id}),
            "metrics": sb_count("goal_metrics", filters={"goal_id": goal_id}),
            "habits": sb_count("habit_goals", filters={"goal_id": goal_id}),
        }

    def get_hierarchy(self, today=None) -> list[dict]:
        return build_hierarchy(self, self.get_all(), today)


def _value(record, name):
    return record.get(name) if isinstance(record, dict) else getattr(record, name, None)


def build_hierarchy(source, goals, today=None) -> list[dict]:
    nodes = {}
    for g in goals:
        goal_id = _value(g, "id")
        progress = GoalProgressService.load_progress(source, goal_id, today=today)
        nodes[goal_id] = {
            "id": goal_id,
            "title": _value(g, "title"),
            "status": _value(g, "status"),
            "progress": progress.overall if progress else 0,
            "children": [],
        }

    parents = {_value(g, "id"): _value(g, "parent_goal_id") for g in goals}
    roots = []
    for goal_id, node in nodes.items():
        parent_id = parents[goal_id]
        if parent_id in nodes and not _links_back(goal_id, parents):
            nodes[parent_id]["children"].append(node)
        else:
            roots.append(node)
    return roots


def _links_back(goal_id, parents) -> bool:
    """True when following parent links from goal_id returns to it (a cycle)."""
    seen = set()
    current = parents.get(goal_id)
    while current is not None and current not in seen:
        if current == goal_id:
            return True
        seen.add(current)
        current = parents.get(current)
    return False


def get_goal_source(db: Session):
    """REST source when Supabase is configured, otherwise the SQL database."""
    if is_supabase_configured():
        return GoalRestService()
    return GoalService(db)
