from __future__ import annotations

import math
from datetime import datetime, timedelta, timezone

from ..schemas import (
    BalanceReport,
    Confidence,
    Forecast,
    OperationUsage,
    Period,
    PeriodRange,
    UsageSummary,
)
from .storage import CreditLedger

FORECAST_WINDOW_DAYS = 30
_ALL_TIME = PeriodRange(start="1970-01-01T00:00:00Z", end="2099-12-31T23:59:59Z")


def to_timestamp(moment: datetime) -> str:
    """Format like the SQLite default column value (UTC, no fractional seconds)."""

    return moment.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def _now(now: datetime | None) -> datetime:
    return now if now is not None else datetime.now(timezone.utc)


def resolve_period(period: Period, now: datetime | None = None) -> PeriodRange:
    current = _now(now)
    if period == "day":
        start = current.astimezone().replace(hour=0, minute=0, second=0, microsecond=0)
    elif period == "week":
        start = current - timedelta(days=7)
    elif period == "month":
        start = current - timedelta(days=30)
    elif period == "all":
        return _ALL_TIME
    else:
        raise ValueError(f"Unknown period: {period!r}. Use day, week, month or all.")
    return PeriodRange(start=to_timestamp(start), end=to_timestamp(current))


def usage_summary(
    ledger: CreditLedger,
    period: Period,
    now: datetime | None = None,
) -> UsageSummary:
    window = resolve_period(period, now)
    breakdown = [
        OperationUsage(
            operation=row.operation,
            count=row.count,
            credits=row.total_credits,
            avg_cost=row.avg_cost,
        )
        for row in ledger.usage_summary(window.start, window.end)
    ]
    return UsageSummary(
        period=window,
        total_credits=sum(item.credits for item in breakdown),
        total_operations=sum(item.count for item in breakdown),
        breakdown=breakdown,
    )


def _confidence(days_with_usage: int) -> Confidence:
    if days_with_usage >= 30:
        return "high"
    if days_with_usage >= 7:
        return "medium"
    return "low"


def forecast(ledger: CreditLedger, now: datetime | None = None) -> Forecast:
    current = _now(now)
    start = to_timestamp(current - timedelta(days=FORECAST_WINDOW_DAYS))
    usage = ledger.usage_by_period(start, to_timestamp(current))
    if not usage:
        return Forecast(daily_average=0.0)

    daily_average = sum(record.request_cost for record in usage) / FORECAST_WINDOW_DAYS
    confidence = _confidence(len({record.timestamp[:10] for record in usage}))

    balance = ledger.latest_balance()
    if balance is None or daily_average == 0:
        return Forecast(daily_average=daily_average, confidence=confidence)

    days_remaining = balance.remaining / daily_average
    exhaustion = current + timedelta(days=math.ceil(days_remaining))
    return Forecast(
        daily_average=daily_average,
        days_remaining=days_remaining,
        exhaustion_date=exhaustion.date().isoformat(),
        confidence=confidence,
    )


def balance_report(ledger: CreditLedger, now: datetime | None = None) -> BalanceReport:
    current = _now(now)
    balance = ledger.latest_balance()
    outlook = forecast(ledger, current)

    def used(period: Period) -> float:
        window = resolve_period(period, current)
        return ledger.total_usage(window.start, window.end)

    return BalanceReport(
        remaining=balance.remaining if balance else 0.0,
        as_of=balance.as_of if balance else to_timestamp(current),
        used_today=used("day"),
        used_this_week=used("week"),
        used_this_month=used("month"),
        daily_rate=outlook.daily_average,
        days_remaining=outlook.days_remaining,
        exhaustion_date=outlook.exhaustion_date,
        confidence=outlook.confidence,
    )


__all__ = ["balance_report", "forecast", "resolve_period", "to_timestamp", "usage_summary"]
