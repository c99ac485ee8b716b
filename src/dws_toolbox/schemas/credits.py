from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

Period = Literal["day", "week", "month", "all"]
Confidence = Literal["low", "medium", "high"]


class PeriodRange(BaseModel):
    start: str
    end: str


class OperationUsage(BaseModel):
    operation: str
    count: int = Field(..., ge=0)
    credits: float
    avg_cost: float


class UsageSummary(BaseModel):
    period: PeriodRange
    total_credits: float
    total_operations: int
    breakdown: list[OperationUsage] = Field(default_factory=list)


class Forecast(BaseModel):
    daily_average: float
    days_remaining: float | None = None
    exhaustion_date: str | None = None
    confidence: Confidence = "low"


class BalanceReport(BaseModel):
    remaining: float
    as_of: str
    used_today: float
    used_this_week: float
    used_this_month: float
    daily_rate: float
    days_remaining: float | None = None
    exhaustion_date: str | None = None
    confidence: Confidence = "low"


__all__ = [
    "BalanceReport",
    "Confidence",
    "Forecast",
    "OperationUsage",
    "Period",
    "PeriodRange",
    "UsageSummary",
]
