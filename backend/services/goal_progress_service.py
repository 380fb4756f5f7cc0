"""
goal_progress_service.py — Goal progress aggregation
Blends success criteria, linked tasks, metrics and habits into one overall
percentage. Categories with nothing linked drop out of the weighting instead
of dragging the figure toward zero.
"""

import json
import logging
import math
from datetime import date, datetime, timezone

from config import DEFAULT_PROGRESS_WEIGHTS, METRIC_TARGET_TOLERANCE, DORMANT_AFTER_DAYS
from schemas.goal_progress import (
    CountProgress,
    GoalHealth,
    GoalProgressBreakdown,
    HabitProgress,
    MetricProgress,
)
from services.habit_service import HabitService

logger = logging.getLogger(__name__)

COMPLETED_TASK_STATUSES = {"done", "completed"}
LEGACY_CHECK_MARK = "✓"


def _read(record, name, default=None):
    if record is None:
        return default
    if isinstance(record, dict):
        value = record.get(name, default)
    else:
        value = getattr(record, name, default)
    return default if value is None else value


def _as_number(value) -> float | None:
    if isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    return number if math.isfinite(number) else None


def _as_list(value) -> list:
    return list(value) if isinstance(value, (list, tuple)) else []


def _load_json(value, expected_type):
    """JSON text columns arrive as strings from SQL and as objects from PostgREST."""
    if isinstance(value, (str, bytes)):
        try:
            value = json.loads(value)
        except ValueError:
            return None
    return value if isinstance(value, expected_type) else None


def _to_naive_utc(value) -> datetime | None:
    if isinstance(value, str) and value:
        try:
            value = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc).replace(tzinfo=None)
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    return None


def round_percent(value: float) -> int:
    """Round half-up, so 12.5 shows as 13 rather than Python's banker's 12."""
    return int(math.floor(value + 0.5))


def percentage(part: float, total: float) -> int:
    return round_percent(part / total * 100) if total > 0 else 0


def combine_weighted(parts) -> int:
    """Weighted average over (weight, score, total) triples, skipping categories with total == 0."""
    present = [(weight, score) for weight, score, total in parts if total > 0]
    top = max((weight for weight, _ in present), default=0)
    if top <= 0:
        return 0
    # scale by the largest weight so huge finite weights can't overflow the sums
    scaled = [(weight / top, score) for weight, score in present]
    return round_percent(sum(w * score for w, score in scaled) / sum(w for w, _ in scaled))


class GoalProgressService:
    @staticmethod
    def parse_success_criteria(raw) -> list:
        if raw is None:
            return []
        if isinstance(raw, (str, bytes)):
            return _load_json(raw, list) or []
        return _as_list(raw)

    @staticmethod
    def is_criterion_completed(criterion) -> bool:
        if isinstance(criterion, str):
            return LEGACY_CHECK_MARK in criterion
        return bool(_read(criterion, "is_completed") or _read(criterion, "isCompleted", False))

    @staticmethod
    def calculate_criteria_progress(success_criteria) -> CountProgress:
        """Completed vs total success criteria. Safe for empty, None or JSON-text input."""
        criteria = GoalProgressService.parse_success_criteria(success_criteria)
        completed = sum(1 for c in criteria if GoalProgressService.is_criterion_completed(c))
        total = len(criteria)
        return CountProgress(completed=completed, total=total, percentage=percentage(completed, total))

    @staticmethod
    def is_task_completed(task) -> bool:
        status = str(_read(task, "status", "")).lower().replace(" ", "").replace("_", "")
        return status in COMPLETED_TASK_STATUSES

    @staticmethod
    def calculate_tasks_progress(tasks) -> CountProgress:
        tasks = _as_list(tasks)
        completed = sum(1 for t in tasks if GoalProgressService.is_task_completed(t))
        total = len(tasks)
        return CountProgress(completed=completed, total=total, percentage=percentage(completed, total))

    @staticmethod
    def is_metric_at_target(metric, tolerance: float = METRIC_TARGET_TOLERANCE) -> bool:
        current = _as_number(_read(metric, "current_value"))
        target = _as_number(_read(metric, "target_value"))
        if current is None or target is None:
            return False

        direction = str(_read(metric, "direction", "Higher")).lower()
        if direction == "lower":
            return current <= target
        if direction == "target":
            return abs(current - target) <= abs(target) * tolerance
        return current >= target

    @staticmethod
    def calculate_metrics_progress(metrics) -> MetricProgress:
        metrics = _as_list(metrics)
        at_target = sum(1 for m in metrics if GoalProgressService.is_metric_at_target(m))
        total = len(metrics)
        return MetricProgress(at_target=at_target, total=total, percentage=percentage(at_target, total))

    @staticmethod
    def calculate_habits_progress(habits, today: date | None = None) -> HabitProgress:
        habits = _as_list(habits)
        if not habits:
            return HabitProgress()

        stats = [HabitService.get_stats(h, today) for h in habits]
        count = len(stats)
        return HabitProgress(
            streak_days=max(s["streak"] for s in stats),
            consistency=round_percent(sum(s["consistency"] for s in stats) / count),
            total=count,
            score=round_percent(sum(s["score"] for s in stats) / count),
        )

    @staticmethod
    def resolve_weights(goal) -> dict:
        """Default weights, overridden by any valid non-negative values in goal.progress_config."""
        weights = dict(DEFAULT_PROGRESS_WEIGHTS)
        config = _load_json(_read(goal, "progress_config"), dict) or {}
        for key in weights:
            value = _as_number(config.get(key))
            if value is not None and value >= 0:
                weights[key] = value
        return weights

    @staticmethod
    def compute_progress(goal, tasks=None, metrics=None, habits=None,
                         today: date | None = None) -> GoalProgressBreakdown:
        """Full breakdown for a goal from its already-linked tasks, metrics and habits."""
        criteria = GoalProgressService.calculate_criteria_progress(_read(goal, "success_criteria"))
        tasks_progress = GoalProgressService.calculate_tasks_progress(tasks)
        metrics_progress = GoalProgressService.calculate_metrics_progress(metrics)
        habits_progress = GoalProgressService.calculate_habits_progress(habits, today)

        weights = GoalProgressService.resolve_weights(goal)
        overall = combine_weighted([
            (weights["criteria_weight"], criteria.percentage, criteria.total),
            (weights["tasks_weight"], tasks_progress.percentage, tasks_progress.total),
            (weights["metrics_weight"], metrics_progress.percentage, metrics_progress.total),
            (weights["habits_weight"], habits_progress.score, habits_progress.total),
        ])

        return GoalProgressBreakdown(
            overall=overall,
            criteria=criteria,
            tasks=tasks_progress,
            metrics=metrics_progress,
            habits=habits_progress,
        )

    @staticmethod
    def criteria_only_progress(goal) -> GoalProgressBreakdown:
        """Degraded breakdown used when linked entities can't be loaded."""
        criteria = GoalProgressService.calculate_criteria_progress(_read(goal, "success_criteria"))
        return GoalProgressBreakdown(overall=criteria.percentage, criteria=criteria)

    @staticmethod
    def load_progress(source, goal_id, today: date | None = None, goal=None) -> GoalProgressBreakdown | None:
        """Fetch a goal's linked entities and compute its progress, falling back to criteria only.

        Pass `goal` when the caller already has the record to skip fetching it again.
        """
        if goal is None:
            goal = source.get_goal(goal_id)
        if goal is None:
            return None
        try:
            tasks = source.get_linked_tasks(goal_id)
            metrics = source.get_linked_metrics(goal_id)
            habits = source.get_linked_habits(goal_id)
            return GoalProgressService.compute_progress(goal, tasks, metrics, habits, today=today)
        except Exception as e:
            logger.warning(f"Progress for goal {goal_id} fell back to success criteria: {e}")
            return GoalProgressService.criteria_only_progress(goal)

    @staticmethod
    def calculate_health(goal, progress: GoalProgressBreakdown, now: datetime | None = None) -> GoalHealth:
        """Classify a goal as healthy / at_risk / behind / dormant from its timeline and progress."""
        now = _to_naive_utc(now) or datetime.now(timezone.utc).replace(tzinfo=None)
        created = _to_naive_utc(_read(goal, "created_at")) or now
        target = _to_naive_utc(_read(goal, "target_date"))
        last_activity = _to_naive_utc(_read(goal, "last_activity_at")) or created

        seconds_per_day = 86400
        days_remaining = math.ceil((target - now).total_seconds() / seconds_per_day) if target else None
        days_since_activity = math.ceil((now - last_activity).total_seconds() / seconds_per_day)
        momentum = "active" if days_since_activity <= DORMANT_AFTER_DAYS else "dormant"

        days_alive = max(math.ceil((now - created).total_seconds() / seconds_per_day), 1)
        velocity_score = progress.overall / days_alive

        status = "healthy"
        if momentum == "dormant":
            status = "dormant"
        elif target is not None:
            total_days = math.ceil((target - created).total_seconds() / seconds_per_day)
            expected = (total_days - days_remaining) / total_days * 100 if total_days > 0 else 0
            if progress.overall < expected - 20:
                status = "behind"
            elif progress.overall < expected - 10:
                status = "at_risk"

        return GoalHealth(
            status=status,
            days_remaining=days_remaining,
            velocity_score=round(velocity_score, 2),
            momentum=momentum,
        )
