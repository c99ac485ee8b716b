from __future__ import annotations

import logging

import anyio
from anyio import to_thread

from ..config import AI_REDACT_TIMEOUT_SECONDS
from ..credits import CreditLedger, classify_instructions, record_usage
from ..errors import FileReferenceError
from ..schemas import Instructions, SignatureOptions, ToolResult
from .api import DWSClient
from .dispatch import plan_ai_redact_request, plan_build_request, plan_sign_request, send_request
from .references import FileReference, collect_file_references, load_file_reference
from .responses import error_result, materialize_file, materialize_json_content
from .sandbox import Sandbox

NO_REFERENCES_MESSAGE = "Error: No valid files or urls found in instructions"
STAGE_APPLY_CONFLICT_MESSAGE = (
    "Error: stage and apply cannot both be set. Use stage to create redactions for review, "
    "or apply to apply previously staged redactions."
)

logger = logging.getLogger(__name__)


async def perform_build_call(
    instructions: Instructions,
    output_path: str,
    *,
    sandbox: Sandbox,
    client: DWSClient,
    ledger: CreditLedger | None = None,
) -> ToolResult:
    """Run a build request and either save the document or return extracted JSON."""

    try:
        # Resolve the output first so a bad path fails before any upload.
        resolved_output = await to_thread.run_sync(sandbox.resolve_write, output_path)

        instructions, references = await collect_file_references(instructions, sandbox)
        if not references:
            return ToolResult.failure(NO_REFERENCES_MESSAGE)

        request = plan_build_request(instructions, references)
        async with send_request(client, request) as response:
            operation = classify_instructions(instructions)
            await to_thread.run_sync(record_usage, ledger, operation, response.headers)
            if instructions.wants_json_content:
                return await materialize_json_content(response)
            return await materialize_file(
                response,
                resolved_output,
                "File processed successfully using build API",
            )
    except Exception as exc:
        logger.warning("build failed: %s", exc)
        return error_result(exc)


async def _load_labelled(
    reference: str,
    label: str,
    sandbox: Sandbox,
) -> FileReference:
    try:
        return await load_file_reference(reference, sandbox)
    except FileReferenceError as exc:
        cause = exc.__cause__ or exc
        raise FileReferenceError(reference, f"Error with {label} {reference}: {cause}") from exc


async def perform_sign_call(
    file_path: str,
    output_path: str,
    *,
    sandbox: Sandbox,
    client: DWSClient,
    signature_options: SignatureOptions | None = None,
    watermark_image_path: str | None = None,
    graphic_image_path: str | None = None,
    ledger: CreditLedger | None = None,
) -> ToolResult:
    try:
        resolved_output = await to_thread.run_sync(sandbox.resolve_write, output_path)

        document = await _load_labelled(file_path, "file", sandbox)
        watermark = None
        if watermark_image_path:
            watermark = await _load_labelled(watermark_image_path, "watermark image", sandbox)
        graphic = None
        if graphic_image_path:
            graphic = await _load_labelled(graphic_image_path, "graphic image", sandbox)

        request = plan_sign_request(
            document,
            signature_options or SignatureOptions(),
            watermark=watermark,
            graphic=graphic,
        )
        async with send_request(client, request) as response:
            await to_thread.run_sync(record_usage, ledger, "sign", response.headers)
            return await materialize_file(response, resolved_output, "File signed successfully")
    except Exception as exc:
        logger.warning("sign failed: %s", exc)
        return error_result(exc)


async def perform_ai_redact_call(
    file_path: str,
    criteria: str,
    output_path: str,
    *,
    sandbox: Sandbox,
    client: DWSClient,
    stage: bool = False,
    apply: bool = False,
    ledger: CreditLedger | None = None,
) -> ToolResult:
    """Detect and redact sensitive content with the AI redaction endpoint.

    ``stage`` only creates redaction annotations for review, ``apply`` applies
    previously staged ones; the two are mutually exclusive. The output must
    not be the input document since the service streams the result back
    while the source is still being read.
    """

    if stage and apply:
        return ToolResult.failure(STAGE_APPLY_CONFLICT_MESSAGE)

    try:
        resolved_input = await to_thread.run_sync(sandbox.resolve_read, file_path)
        resolved_output = await to_thread.run_sync(sandbox.resolve_write, output_path)
        if resolved_input == resolved_output:
            return ToolResult.failure(
                f"Error: Output path must differ from the input path ({resolved_input}) "
                "to avoid overwriting the source document."
            )

        content = await anyio.Path(resolved_input).read_bytes()
        document = FileReference(
            key="file1",
            name=resolved_input.name,
            local_path=resolved_input,
            content=content,
        )

        request = plan_ai_redact_request(document, criteria, stage=stage, apply=apply)
        async with send_request(client, request, timeout=AI_REDACT_TIMEOUT_SECONDS) as response:
            await to_thread.run_sync(record_usage, ledger, "ai-redact", response.headers)
            return await materialize_file(
                response,
                resolved_output,
                "AI redaction completed successfully",
            )
    except Exception as exc:
        logger.warning("ai redaction failed: %s", exc)
        return error_result(exc)


__all__ = [
    "NO_REFERENCES_MESSAGE",
    "STAGE_APPLY_CONFLICT_MESSAGE",
    "perform_ai_redact_call",
    "perform_build_call",
    "perform_sign_call",
]
