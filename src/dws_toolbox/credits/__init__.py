from .aggregator import balance_report, forecast, resolve_period, to_timestamp, usage_summary
from .storage import Balance, CreditLedger, UsageRecord, UsageSummaryRow
from .usage import (
    CREDIT_COST_HEADER,
    REMAINING_CREDITS_HEADER,
    classify_instructions,
    record_usage,
)

__all__ = [
    "Balance",
    "CREDIT_COST_HEADER",
    "CreditLedger",
    "REMAINING_CREDITS_HEADER",
    "UsageRecord",
    "UsageSummaryRow",
    "balance_report",
    "classify_instructions",
    "forecast",
    "record_usage",
    "resolve_period",
    "to_timestamp",
    "usage_summary",
]
