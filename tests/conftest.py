from __future__ import annotations

import json
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any

import httpx
import pytest

from dws_toolbox.credits import CreditLedger
from dws_toolbox.services import DWSClient, Sandbox

Handler = Callable[[httpx.Request], httpx.Response]


class RecordingTransport(httpx.MockTransport):
    """MockTransport that keeps every request it served."""

    def __init__(self, handler: Handler) -> None:
        self.requests: list[httpx.Request] = []

        def recorder(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        super().__init__(recorder)


def pdf_response(
    body: bytes = b"%PDF-1.7 result",
    *,
    cost: str | None = None,
    remaining: str | None = None,
) -> Handler:
    headers: dict[str, str] = {}
    if cost is not None:
        headers["x-pspdfkit-credit-usage"] = cost
    if remaining is not None:
        headers["x-pspdfkit-remaining-credits"] = remaining

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=body, headers=headers)

    return handler


def json_response(status: int, payload: Any) -> Handler:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status, content=json.dumps(payload).encode())

    return handler


def make_client(handler: Handler) -> tuple[DWSClient, RecordingTransport]:
    transport = RecordingTransport(handler)
    client = DWSClient(api_key="test-key", base_url="https://api.test", transport=transport)
    return client, transport


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("DWS_TOOLBOX_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("NUTRIENT_DWS_API_KEY", "test-key")
    monkeypatch.delenv("SANDBOX_PATH", raising=False)
    monkeypatch.delenv("NUTRIENT_DWS_API_BASE_URL", raising=False)


@pytest.fixture
def sandbox_root(tmp_path: Path) -> Path:
    root = tmp_path / "sandbox"
    root.mkdir()
    return root.resolve()


@pytest.fixture
def sandbox(sandbox_root: Path) -> Sandbox:
    return Sandbox.create(sandbox_root)


@pytest.fixture
def ledger(tmp_path: Path) -> Iterator[CreditLedger]:
    ledger = CreditLedger(tmp_path / "ledger" / "credits.db")
    yield ledger
    ledger.close()
