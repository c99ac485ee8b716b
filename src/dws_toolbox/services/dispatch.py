from __future__ import annotations

import json
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any

import httpx

from ..schemas import Instructions, SignatureOptions
from .api import DWSClient, MultipartFiles
from .references import FileReference, ReferenceMap


@dataclass(slots=True)
class OutboundRequest:
    """Either a pure JSON body or a multipart body made of form fields and files."""

    endpoint: str
    json_body: dict[str, Any] | None = None
    form: dict[str, str] = field(default_factory=dict)
    files: list[tuple[str, tuple[str, bytes]]] = field(default_factory=list)

    @property
    def is_multipart(self) -> bool:
        return self.json_body is None


def _attach(request: OutboundRequest, field_name: str, reference: FileReference) -> None:
    if reference.is_url:
        request.form[field_name] = reference.url or ""
        return
    request.files.append((field_name, (reference.name, reference.content or b"")))


def plan_build_request(instructions: Instructions, references: ReferenceMap) -> OutboundRequest:
    """Send JSON when every reference is a URL, multipart as soon as one file is local.

    In multipart mode URL references stay embedded in the instructions field.
    """

    wire = instructions.to_wire()
    if all(reference.is_url for reference in references.values()):
        return OutboundRequest("build", json_body=wire)

    request = OutboundRequest("build", form={"instructions": json.dumps(wire)})
    for key, reference in references.items():
        if not reference.is_url:
            _attach(request, key, reference)
    return request


def plan_sign_request(
    document: FileReference,
    options: SignatureOptions,
    *,
    watermark: FileReference | None = None,
    graphic: FileReference | None = None,
) -> OutboundRequest:
    request = OutboundRequest("sign")
    _attach(request, "file", document)
    request.form["data"] = json.dumps(options.to_wire())
    if watermark is not None:
        _attach(request, "watermark", watermark)
    if graphic is not None:
        _attach(request, "graphic", graphic)
    return request


def plan_ai_redact_request(
    document: FileReference,
    criteria: str,
    *,
    stage: bool = False,
    apply: bool = False,
) -> OutboundRequest:
    payload: dict[str, Any] = {
        "documents": [{"documentId": "file1"}],
        "criteria": criteria,
    }
    if stage:
        payload["redaction_state"] = "stage"
    elif apply:
        payload["redaction_state"] = "apply"

    request = OutboundRequest("ai/redact", form={"data": json.dumps(payload)})
    _attach(request, "file1", document)
    return request


@asynccontextmanager
async def send_request(
    client: DWSClient,
    request: OutboundRequest,
    *,
    timeout: float | None = None,
) -> AsyncIterator[httpx.Response]:
    if request.is_multipart:
        # httpx only encodes multipart when there is at least one file entry.
        files: MultipartFiles = request.files or [
            (name, (None, value)) for name, value in request.form.items()
        ]
        stream = client.stream_post(
            request.endpoint,
            data=request.form if request.files else None,
            files=files,
            timeout=timeout,
        )
    else:
        stream = client.stream_post(request.endpoint, json=request.json_body, timeout=timeout)
    async with stream as response:
        yield response


__all__ = [
    "OutboundRequest",
    "plan_ai_redact_request",
    "plan_build_request",
    "plan_sign_request",
    "send_request",
]
