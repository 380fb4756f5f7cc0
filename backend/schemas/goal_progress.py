from datetime import date, datetime
from typing import Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


# --- Progress breakdown (response) ---

class CountProgress(CamelModel):
    completed: int = 0
    total: int = 0
    percentage: int = 0


class MetricProgress(CamelModel):
    at_target: int = Field(0, alias="atTarget")
    total: int = 0
    percentage: int = 0


class HabitProgress(CamelModel):
    streak_days: int = Field(0, alias="streakDays")
    consistency: int = 0
    total: int = 0
    score: int = 0


class GoalProgressBreakdown(CamelModel):
    overall: int = 0
    criteria: CountProgress = Field(default_factory=CountProgress)
    tasks: CountProgress = Field(default_factory=CountProgress)
    metrics: MetricProgress = Field(default_factory=MetricProgress)
    habits: HabitProgress = Field(default_factory=HabitProgress)


class GoalHealth(CamelModel):
    status: str
    days_remaining: Optional[int] = Field(None, alias="daysRemaining")
    velocity_score: float = Field(0.0, alias="velocityScore")
    momentum: str


class GoalHealthResponse(CamelModel):
    progress: GoalProgressBreakdown
    health: GoalHealth


class LinkedCounts(CamelModel):
    tasks: int = 0
    metrics: int = 0
    habits: int = 0


# --- Preview payload (request) ---

class SuccessCriterionIn(CamelModel):
    id: Optional[Union[int, str]] = None
    description: Optional[str] = None
    is_completed: bool = Field(False, alias="isCompleted")
    target_date: Optional[date] = Field(None, alias="targetDate")
    linked_metric_id: Optional[Union[int, str]] = Field(None, alias="linkedMetricId")


class GoalIn(CamelModel):
    id: Optional[Union[int, str]] = None
    success_criteria: List[Union[SuccessCriterionIn, str]] = Field(default_factory=list, alias="successCriteria")
    progress_config: Optional[dict[str, Any]] = Field(None, alias="progressConfig")


class TaskIn(CamelModel):
    id: Optional[Union[int, str]] = None
    status: Optional[str] = None


class MetricIn(CamelModel):
    id: Optional[Union[int, str]] = None
    current_value: Optional[float] = Field(None, alias="currentValue")
    target_value: Optional[float] = Field(None, alias="targetValue")
    direction: Optional[str] = None


class HabitLogIn(CamelModel):
    date: date
    completed: bool = True
    amount: Optional[float] = None


class HabitIn(CamelModel):
    id: Optional[Union[int, str]] = None
    frequency: Optional[str] = None
    daily_target: Optional[int] = Field(None, alias="dailyTarget")
    weekly_target: Optional[int] = Field(None, alias="weeklyTarget")
    created_at: Optional[datetime] = Field(None, alias="createdAt")
    logs: List[HabitLogIn] = Field(default_factory=list)


class ProgressPreviewRequest(CamelModel):
    goal: GoalIn
    tasks: List[TaskIn] = Field(default_factory=list)
    metrics: List[MetricIn] = Field(default_factory=list)
    habits: List[HabitIn] = Field(default_factory=list)
    today: Optional[date] = None
