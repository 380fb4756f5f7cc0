"""
habit_service.py — Habit streaks & consistency
Pure analytics over a habit's log history: backward-looking streaks,
trailing-window completion rate, and the blended score goals consume.
"""

import math
from datetime import date, datetime, timedelta, timezone

from config import HABIT_CONSISTENCY_WINDOW_DAYS, HABIT_STREAK_CAP_DAYS


def _read(record, name, default=None):
    if isinstance(record, dict):
        value = record.get(name, default)
    else:
        value = getattr(record, name, default)
    return default if value is None else value


def to_date(value) -> date | None:
    """Accept date, datetime or ISO string; anything else is None."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value:
        try:
            return date.fromisoformat(value[:10])
        except ValueError:
            return None
    return None


def _positive_number(value) -> float | None:
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    if not math.isfinite(number) or number <= 0:
        return None
    return number


class HabitService:
    @staticmethod
    def get_logs(habit) -> list:
        logs = _read(habit, "logs", [])
        return list(logs) if isinstance(logs, (list, tuple)) else []

    @staticmethod
    def log_date(log) -> date | None:
        return to_date(_read(log, "date")) or to_date(_read(log, "completed_at"))

    @staticmethod
    def completion_dates(logs) -> set[date]:
        """Days with at least one completed log."""
        days = set()
        for log in logs or []:
            if not _read(log, "completed", True):
                continue
            d = HabitService.log_date(log)
            if d is not None:
                days.add(d)
        return days

    @staticmethod
    def calculate_streak(logs, today: date | None = None) -> int:
        """Count backward consecutive. 1 day grace period for today."""
        today = today or datetime.now(timezone.utc).date()
        days = {d for d in HabitService.completion_dates(logs) if d <= today}
        if not days:
            return 0

        # A streak isn't lost just because today hasn't been logged yet
        curr_date = today if today in days else today - timedelta(days=1)
        streak = 0
        while curr_date in days:
            streak += 1
            curr_date -= timedelta(days=1)
        return streak

    @staticmethod
    def expected_completions(habit, days: int) -> float:
        """How many completions a habit calls for over `days` days."""
        if days <= 0:
            return 0
        daily_target = _positive_number(_read(habit, "daily_target"))
        if daily_target:
            return days * daily_target
        weekly_target = _positive_number(_read(habit, "weekly_target"))
        if weekly_target:
            return math.ceil(days / 7) * weekly_target

        frequency = str(_read(habit, "frequency", "Daily")).lower()
        if frequency == "weekly":
            return math.ceil(days / 7)
        if frequency == "monthly":
            return math.ceil(days / 30)
        return days

    @staticmethod
    def calculate_consistency(habit, logs=None, today: date | None = None,
                              window_days: int = HABIT_CONSISTENCY_WINDOW_DAYS) -> float:
        """Actual vs expected completions over the trailing window, 0-100."""
        today = today or datetime.now(timezone.utc).date()
        if logs is None:
            logs = HabitService.get_logs(habit)

        start = today - timedelta(days=max(window_days, 1) - 1)
        created = to_date(_read(habit, "created_at"))
        if created and start < created <= today:
            # Young habits are judged only on the days they existed
            start = created

        expected = HabitService.expected_completions(habit, (today - start).days + 1)
        if expected <= 0:
            return 0.0

        actual = 0.0
        for log in logs or []:
            if not _read(log, "completed", True):
                continue
            d = HabitService.log_date(log)
            if d is None or d < start or d > today:
                continue
            actual += _positive_number(_read(log, "amount")) or 1

        return min(100.0, actual / expected * 100)

    @staticmethod
    def habit_score(streak: int, consistency: float,
                    streak_cap: int = HABIT_STREAK_CAP_DAYS) -> float:
        """Average of the capped streak (mapped to 0-100) and the consistency rate."""
        cap = max(streak_cap, 1)
        streak_score = min(max(streak, 0), cap) / cap * 100
        return (streak_score + max(0.0, min(consistency, 100.0))) / 2

    @staticmethod
    def get_stats(habit, today: date | None = None) -> dict:
        """Streak, consistency and blended score for a single habit."""
        logs = HabitService.get_logs(habit)
        streak = HabitService.calculate_streak(logs, today)
        consistency = HabitService.calculate_consistency(habit, logs, today)
        return {
            "streak": streak,
            "consistency": consistency,
            "score": HabitService.habit_score(streak, consistency),
        }
