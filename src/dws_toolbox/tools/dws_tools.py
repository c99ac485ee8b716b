from __future__ import annotations

from typing import Annotated, Any

from fastmcp import FastMCP
from fastmcp.exceptions import ToolError
from pydantic import Field

from ..credits import CreditLedger
from ..schemas import Instructions, Period, SignatureOptions, ToolResult
from ..services import Sandbox
from ..services import account as account_service
from ..services import directory_tree as tree_service
from ..services import operations as operations_service
from ..services.api import DWSClient

_PATH_HINT = (
    "Resolves to sandbox path if enabled, otherwise resolves to the local file system."
)


def _unwrap(result: ToolResult) -> str:
    if result.is_error:
        raise ToolError(result.text)
    return result.text


def register_dws_tools(
    mcp: FastMCP[Any],
    *,
    sandbox: Sandbox,
    client: DWSClient,
    ledger: CreditLedger | None = None,
) -> None:
    @mcp.tool(
        description=(
            "Processes documents with the DWS Build API: merge parts, convert formats, OCR, "
            "watermark, rotate, redact, flatten, fill forms or extract text and tables as JSON."
        )
    )
    async def document_processor(
        instructions: Instructions,
        output_path: Annotated[
            str,
            Field(
                description=(
                    "Where the resulting file is stored. Still validated for json-content output, "
                    f"which is returned inline instead of written. {_PATH_HINT}"
                ),
            ),
        ],
    ) -> str:
        """Build a document from parts, actions and an output definition."""

        return _unwrap(
            await operations_service.perform_build_call(
                instructions,
                output_path,
                sandbox=sandbox,
                client=client,
                ledger=ledger,
            )
        )
    _ = document_processor

    @mcp.tool(
        description=(
            "Digitally signs a PDF with a CMS or CAdES signature, optionally visible with a "
            "watermark and graphic image."
        )
    )
    async def document_signer(
        file_path: Annotated[
            str, Field(description=f"The PDF to sign. {_PATH_HINT}")
        ],
        output_path: Annotated[
            str, Field(description=f"Where the signed PDF is stored. {_PATH_HINT}")
        ],
        signature_options: Annotated[
            SignatureOptions | None,
            Field(description="Signature type, appearance, position and metadata."),
        ] = None,
        watermark_image_path: Annotated[
            str | None,
            Field(description=f"Watermark image. {_PATH_HINT}"),
        ] = None,
        graphic_image_path: Annotated[
            str | None,
            Field(description=f"Signature graphic. {_PATH_HINT}"),
        ] = None,
    ) -> str:
        return _unwrap(
            await operations_service.perform_sign_call(
                file_path,
                output_path,
                sandbox=sandbox,
                client=client,
                signature_options=signature_options,
                watermark_image_path=watermark_image_path,
                graphic_image_path=graphic_image_path,
                ledger=ledger,
            )
        )
    _ = document_signer

    @mcp.tool(
        description=(
            "Detects and redacts sensitive content (names, addresses, identifiers...) with AI. "
            "Use stage to only mark redactions for review and apply to burn in staged ones. "
            "This can take several minutes."
        )
    )
    async def ai_redactor(
        file_path: Annotated[
            str, Field(description=f"The document to redact. {_PATH_HINT}")
        ],
        criteria: Annotated[
            str,
            Field(description="What to redact, e.g. 'All personally identifiable information'."),
        ],
        output_path: Annotated[
            str,
            Field(
                description=(
                    f"Where the redacted file is stored; must differ from the input. {_PATH_HINT}"
                ),
            ),
        ],
        stage: bool = False,
        apply: bool = False,
    ) -> str:
        return _unwrap(
            await operations_service.perform_ai_redact_call(
                file_path,
                criteria,
                output_path,
                sandbox=sandbox,
                client=client,
                stage=stage,
                apply=apply,
                ledger=ledger,
            )
        )
    _ = ai_redactor

    @mcp.tool(description="Reports the subscription and remaining credits of the DWS account.")
    async def check_credits() -> str:
        return _unwrap(await account_service.perform_check_credits_call(client))
    _ = check_credits

    if ledger is not None:

        @mcp.tool(
            description=(
                "Summarizes credits spent by this server per operation for a day, week, month "
                "or all time, from the local usage log."
            )
        )
        async def credit_usage(period: Period = "week") -> str:
            return _unwrap(account_service.perform_credit_usage_call(ledger, period))
        _ = credit_usage

        @mcp.tool(
            description=(
                "Forecasts when the credit balance runs out from the last 30 days of local usage."
            )
        )
        async def credit_forecast() -> str:
            return _unwrap(account_service.perform_credit_forecast_call(ledger))
        _ = credit_forecast

    if sandbox.enabled:

        @mcp.tool(description="Lists the files and folders inside the sandbox directory as JSON.")
        async def sandbox_file_tree() -> str:
            return _unwrap(await tree_service.perform_directory_tree_call(".", sandbox=sandbox))
        _ = sandbox_file_tree

    else:

        @mcp.tool(
            description="Lists the files and folders below an absolute directory path as JSON."
        )
        async def directory_tree(
            path: Annotated[str, Field(description="Absolute path of the directory to list.")],
        ) -> str:
            return _unwrap(await tree_service.perform_directory_tree_call(path, sandbox=sandbox))
        _ = directory_tree


__all__ = ["register_dws_tools"]
