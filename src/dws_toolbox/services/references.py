from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

import anyio
from anyio import to_thread

from ..errors import DWSToolboxError, FileReferenceError
from ..schemas import (
    ApplyInstantJsonAction,
    ApplyXfdfAction,
    BuildAction,
    Instructions,
    WatermarkAction,
)
from .sandbox import Sandbox

_URL_PREFIXES = ("http://", "https://")
_UNSAFE_KEY_CHARS = re.compile(r"[^a-zA-Z0-9]")

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class FileReference:
    """A file the remote service needs: either local bytes or a URL it fetches itself."""

    key: str
    name: str
    local_path: Path | None = None
    content: bytes | None = None
    url: str | None = None

    def __post_init__(self) -> None:
        is_local = self.local_path is not None and self.content is not None
        if is_local == (self.url is not None):
            raise ValueError(f"File reference {self.key!r} must be either a local file or a URL.")

    @property
    def is_url(self) -> bool:
        return self.url is not None


ReferenceMap = dict[str, FileReference]


def is_remote_url(reference: str) -> bool:
    return reference.startswith(_URL_PREFIXES)


def reference_key(file_name: str) -> str:
    return _UNSAFE_KEY_CHARS.sub("_", file_name)


async def load_file_reference(
    reference: str,
    sandbox: Sandbox,
    known: Mapping[str, FileReference] | None = None,
) -> FileReference:
    """Turn a path or URL string into a :class:`FileReference`.

    Local files are read whole into memory. A reference already present in
    ``known`` for the same resolved path is reused instead of being read twice.
    """

    if is_remote_url(reference):
        return FileReference(key=reference, name=reference, url=reference)

    try:
        resolved = await to_thread.run_sync(sandbox.resolve_read, reference)
        name = resolved.name
        key = reference_key(name)
        cached = known.get(key) if known is not None else None
        if cached is not None and cached.local_path == resolved:
            return cached
        content = await anyio.Path(resolved).read_bytes()
    except (DWSToolboxError, OSError) as exc:
        raise FileReferenceError(
            reference, f"Error with referenced file {reference}: {exc}"
        ) from exc

    logger.debug("Loaded %s (%d bytes) as %s", resolved, len(content), key)
    return FileReference(key=key, name=name, local_path=resolved, content=content)


async def _register(reference: str, sandbox: Sandbox, references: ReferenceMap) -> str:
    file_reference = await load_file_reference(reference, sandbox, references)
    references[file_reference.key] = file_reference
    return file_reference.key


async def _register_action(action: BuildAction, sandbox: Sandbox, references: ReferenceMap) -> None:
    # Only these action kinds carry a file; every other action passes through untouched.
    if isinstance(action, WatermarkAction):
        if action.image:
            action.image = await _register(action.image, sandbox, references)
    elif isinstance(action, (ApplyXfdfAction, ApplyInstantJsonAction)):
        action.file = await _register(action.file, sandbox, references)


async def collect_file_references(
    instructions: Instructions,
    sandbox: Sandbox,
) -> tuple[Instructions, ReferenceMap]:
    """Replace every file field of ``instructions`` with its reference key.

    The instructions are rewritten in place and returned together with the
    reference map. Actions nested inside parts are not supported; only the
    top level action list is inspected.
    """

    references: ReferenceMap = {}

    for part in instructions.parts:
        if part.file:
            part.file = await _register(part.file, sandbox, references)

    for action in instructions.actions or []:
        await _register_action(action, sandbox, references)

    return instructions, references


__all__ = [
    "FileReference",
    "ReferenceMap",
    "collect_file_references",
    "is_remote_url",
    "load_file_reference",
    "reference_key",
]
