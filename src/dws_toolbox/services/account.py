from __future__ import annotations

import json
import logging
from typing import Any

from ..credits import CreditLedger, balance_report, usage_summary
from ..schemas import Period, ToolResult
from .api import DWSClient
from .responses import error_result

logger = logging.getLogger(__name__)


def sanitize_account_info(data: dict[str, Any]) -> dict[str, Any]:
    """Drop the API keys the account endpoint echoes back before they reach the model."""

    return {key: value for key, value in data.items() if key != "apiKeys"}


def summarize_account_info(data: dict[str, Any]) -> dict[str, Any]:
    safe = sanitize_account_info(data)
    usage = safe.get("usage") or {}
    if not isinstance(usage, dict):
        raise TypeError(f"usage must be an object, got {type(usage).__name__}")
    total = usage.get("totalCredits")
    used = usage.get("usedCredits")
    remaining = total - used if total is not None and used is not None else None
    return {
        "subscriptionType": safe.get("subscriptionType") or "unknown",
        "totalCredits": total if total is not None else "unknown",
        "usedCredits": used if used is not None else "unknown",
        "remainingCredits": remaining if remaining is not None else "unknown",
        "signedIn": safe.get("signedIn"),
    }


async def perform_check_credits_call(client: DWSClient) -> ToolResult:
    try:
        raw = await client.get_text("account/info")
    except Exception as exc:
        logger.warning("account info request failed: %s", exc)
        return error_result(exc)

    try:
        parsed = json.loads(raw)
    except ValueError:
        return ToolResult.failure(f"Unexpected non-JSON response from /account/info: {raw}")
    if not isinstance(parsed, dict):
        return ToolResult.failure(f"Unexpected response from /account/info: {raw}")

    try:
        summary = summarize_account_info(parsed)
    except Exception as exc:
        logger.warning("unexpected account info shape: %s", exc)
        return ToolResult.failure(f"Unexpected response from /account/info: {raw}")
    return ToolResult.success(json.dumps(summary, indent=2))


def perform_credit_usage_call(ledger: CreditLedger, period: Period = "week") -> ToolResult:
    try:
        summary = usage_summary(ledger, period)
    except Exception as exc:
        logger.warning("credit usage lookup failed: %s", exc)
        return error_result(exc)
    return ToolResult.success(summary.model_dump_json(indent=2))


def perform_credit_forecast_call(ledger: CreditLedger) -> ToolResult:
    """Report the last known balance with a burn rate forecast from the local ledger."""

    try:
        report = balance_report(ledger)
    except Exception as exc:
        logger.warning("credit forecast failed: %s", exc)
        return error_result(exc)
    return ToolResult.success(report.model_dump_json(indent=2))


__all__ = [
    "perform_check_credits_call",
    "perform_credit_forecast_call",
    "perform_credit_usage_call",
    "sanitize_account_info",
    "summarize_account_info",
]
