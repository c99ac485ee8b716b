from __future__ import annotations

import asyncio
import json
import logging
from functools import partial
from pathlib import Path

import anyio
from anyio import to_thread

from ..errors import DWSToolboxError
from ..schemas import ToolResult, TreeEntry
from .sandbox import Sandbox

logger = logging.getLogger(__name__)


async def perform_directory_tree_call(path: str, *, sandbox: Sandbox) -> ToolResult:
    try:
        directory = await to_thread.run_sync(partial(sandbox.resolve_read, path, kind="directory"))
    except DWSToolboxError as exc:
        return ToolResult.failure(f"Error: {exc}")

    tree = await build_directory_tree("root", directory)
    if tree is None:
        return ToolResult.failure(
            "Cannot read the directory tree, make sure to allow this application access to "
            f"{directory}"
        )
    children = [child.model_dump(exclude_none=True) for child in tree.children or []]
    return ToolResult.success(json.dumps(children, indent=2))


async def build_directory_tree(name: str, directory: Path) -> TreeEntry | None:
    """Walk ``directory`` recursively; sibling entries are processed concurrently.

    Returns ``None`` when the directory itself cannot be listed. Unreadable
    files, symlinks and special files are left out of the tree.
    """

    try:
        entries = sorted(
            [Path(entry) async for entry in anyio.Path(directory).iterdir()],
            key=lambda entry: entry.name,
        )
    except OSError as exc:
        logger.info("Cannot list %s: %s", directory, exc)
        return None

    results = await asyncio.gather(*(_build_entry(entry) for entry in entries))
    return TreeEntry(
        name=name,
        path=str(directory),
        type="directory",
        children=[entry for entry in results if entry is not None],
    )


async def _build_entry(entry: Path) -> TreeEntry | None:
    candidate = anyio.Path(entry)
    if await candidate.is_symlink():
        return None
    if await candidate.is_dir():
        return await build_directory_tree(entry.name, entry)
    if not await candidate.is_file():
        return None
    try:
        handle = await candidate.open("rb")
        await handle.aclose()
    except OSError:
        return None
    return TreeEntry(name=entry.name, path=str(entry), type="file")


__all__ = ["build_directory_tree", "perform_directory_tree_call"]
