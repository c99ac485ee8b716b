from __future__ import annotations

import logging
from collections.abc import Mapping

from ..schemas import (
    ApplyInstantJsonAction,
    ApplyRedactionsAction,
    ApplyXfdfAction,
    CreateRedactionsAction,
    FlattenAction,
    Instructions,
    OcrAction,
    PDFAOutput,
    PDFOutput,
    WatermarkAction,
)
from .storage import CreditLedger

CREDIT_COST_HEADER = "x-pspdfkit-credit-usage"
REMAINING_CREDITS_HEADER = "x-pspdfkit-remaining-credits"

_ACTION_OPERATIONS: tuple[tuple[type, str], ...] = (
    (OcrAction, "ocr"),
    (WatermarkAction, "watermark"),
    (CreateRedactionsAction, "redact"),
    (ApplyRedactionsAction, "redact"),
    (ApplyXfdfAction, "form-fill"),
    (ApplyInstantJsonAction, "form-fill"),
    (FlattenAction, "flatten"),
)

logger = logging.getLogger(__name__)


def classify_instructions(instructions: Instructions) -> str:
    """Coarse operation label used to group build calls in the ledger."""

    kinds: set[str] = set()
    for action in instructions.actions or []:
        for action_type, operation in _ACTION_OPERATIONS:
            if isinstance(action, action_type):
                kinds.add(operation)

    output = instructions.output
    if isinstance(output, (PDFOutput, PDFAOutput)) and output.optimize is not None:
        kinds.add("optimize")
    if output is not None and not isinstance(output, PDFOutput):
        kinds.add("convert")
    if len(instructions.parts) > 1:
        kinds.add("merge")

    if not kinds:
        return "build-unknown"
    if len(kinds) == 1:
        return kinds.pop()
    return "multi:" + "+".join(sorted(kinds))


def _header_number(headers: Mapping[str, str], name: str) -> float | None:
    raw = headers.get(name)
    if raw is None or not raw.strip():
        return None
    try:
        return float(raw)
    except ValueError:
        logger.debug("Ignoring non numeric %s header: %r", name, raw)
        return None


def record_usage(
    ledger: CreditLedger | None,
    operation: str,
    headers: Mapping[str, str],
) -> None:
    """Log the credit cost reported by the API; never lets a failure reach the caller."""

    if ledger is None:
        return
    cost = _header_number(headers, CREDIT_COST_HEADER)
    if cost is None:
        logger.debug("No credit usage header for %s; skipping ledger entry", operation)
        return
    remaining = _header_number(headers, REMAINING_CREDITS_HEADER)
    try:
        ledger.log_usage(operation, cost, remaining)
    except Exception:
        logger.warning("Could not record credit usage for %s", operation, exc_info=True)


__all__ = [
    "CREDIT_COST_HEADER",
    "REMAINING_CREDITS_HEADER",
    "classify_instructions",
    "record_usage",
]
