from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import anyio
import httpx

from ..errors import DWSAPIError, ResponseStreamError
from ..schemas import ToolResult

_HOSTED_ERROR_FIELDS = ("status", "requestId", "failingPaths")

logger = logging.getLogger(__name__)


async def read_body(response: httpx.Response) -> bytes:
    try:
        return await response.aread()
    except (httpx.HTTPError, httpx.StreamError) as exc:
        raise ResponseStreamError(str(exc) or exc.__class__.__name__) from exc


async def materialize_json_content(response: httpx.Response) -> ToolResult:
    """Return the body verbatim; the service is trusted to send well formed JSON."""

    body = await read_body(response)
    return ToolResult.success(body.decode("utf-8", errors="replace"))


async def materialize_file(
    response: httpx.Response,
    output_path: Path,
    success_message: str,
) -> ToolResult:
    body = await read_body(response)
    target = anyio.Path(output_path)
    await target.parent.mkdir(parents=True, exist_ok=True)
    await target.write_bytes(body)
    logger.info("Wrote %d bytes to %s", len(body), output_path)
    return ToolResult.success(f"{success_message} and saved to: {output_path}")


def parse_hosted_error(body: str) -> dict[str, Any] | None:
    try:
        payload = json.loads(body)
    except ValueError:
        return None
    if not isinstance(payload, dict) or not _is_present(payload.get("details")):
        return None
    if any(_is_present(payload.get(name)) for name in _HOSTED_ERROR_FIELDS):
        return payload
    return None


def _is_present(value: Any) -> bool:
    # Empty lists and objects still count: `failingPaths: []` marks a hosted error.
    if value is None or value is False or value == "":
        return False
    return not (isinstance(value, (int, float)) and value == 0)


def error_result(exc: BaseException) -> ToolResult:
    """Convert any failure into the uniform error result."""

    if isinstance(exc, DWSAPIError):
        if exc.stream_error is not None:
            return ToolResult.failure(f"Error processing API response: {exc.stream_error}")
        body = exc.body or ""
        hosted = parse_hosted_error(body)
        if hosted is not None:
            return ToolResult.failure(json.dumps(hosted, indent=2))
        return ToolResult.failure(f"Error processing API response: {body}")
    if isinstance(exc, ResponseStreamError):
        return ToolResult.failure(f"Error processing API response: {exc}")
    return ToolResult.failure(f"Error: {exc}")


__all__ = [
    "error_result",
    "materialize_file",
    "materialize_json_content",
    "parse_hosted_error",
    "read_body",
]
