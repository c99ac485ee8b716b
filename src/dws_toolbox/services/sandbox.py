from __future__ import annotations

import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from ..errors import PathError, PathNotFoundError, SandboxViolationError

PathKind = Literal["file", "directory"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Sandbox:
    """Resolves agent supplied paths, optionally confined to a root directory.

    With a root every path is interpreted relative to it (absolute paths that
    already point inside the root are accepted as they are) and anything that
    escapes the root is rejected. Without a root only absolute paths are
    accepted.
    """

    root: Path | None = None

    @classmethod
    def create(cls, root: str | Path | None) -> Sandbox:
        if root is None or not str(root).strip():
            return cls(None)

        directory = Path(root).expanduser()
        if directory.exists() and not directory.is_dir():
            raise PathError(f"Sandbox path is not a directory: {directory}")
        directory.mkdir(parents=True, exist_ok=True)
        return cls(directory.resolve())

    @classmethod
    def disabled(cls) -> Sandbox:
        return cls(None)

    @property
    def enabled(self) -> bool:
        return self.root is not None

    def contains(self, candidate: Path) -> bool:
        if self.root is None:
            return True
        return _is_within(self.root, candidate)

    def resolve_path(self, path: str) -> Path:
        """Map ``path`` to an absolute path without touching the filesystem contents."""

        if "\x00" in path:
            raise PathError(f"Invalid Path: {path!r}. Paths must not contain NUL characters.")

        if self.root is None:
            if not os.path.isabs(path):
                raise PathError(
                    f"Invalid Path: {path}. Absolute paths are required when sandbox is not "
                    "enabled. Use / (MacOS/Linux) or C:\\ (Windows) to start from the root "
                    "directory."
                )
            return Path(os.path.normpath(path))

        candidate = Path(path)
        if candidate.is_absolute():
            direct = candidate.resolve()
            if self.contains(direct):
                return direct
            candidate = candidate.relative_to(candidate.anchor)

        resolved = (self.root / candidate).resolve()
        if not self.contains(resolved):
            raise SandboxViolationError(
                f"Invalid Path: {path}. You may only access files within the sandbox "
                "directory, please use relative paths."
            )
        return resolved

    def resolve_read(self, path: str, kind: PathKind = "file") -> Path:
        resolved = self.resolve_path(path)

        if not resolved.exists():
            if self.root is not None:
                raise PathNotFoundError(
                    f"Path not found in sandbox: {path}. Please make sure the file exists "
                    f"in the sandbox directory: {self.root}."
                )
            raise PathNotFoundError(f"Path not found: {resolved}")

        if kind == "directory" and not resolved.is_dir():
            raise PathNotFoundError(f"Path is not a directory: {resolved}")
        if kind == "file" and not resolved.is_file():
            raise PathNotFoundError(f"Path is not a file: {resolved}")
        return resolved

    def resolve_write(self, path: str) -> Path:
        resolved = self.resolve_path(path)
        if resolved.is_dir():
            raise PathError(f"Invalid output path: {path} points to a directory: {resolved}")
        _probe_writable_directory(resolved.parent)
        return resolved


def _is_within(root: Path, candidate: Path) -> bool:
    try:
        relative = os.path.relpath(candidate, root)
    except ValueError:
        # Different drives on Windows.
        return False
    if os.path.isabs(relative):
        return False
    return relative != os.pardir and not relative.startswith(os.pardir + os.sep)


def _probe_writable_directory(directory: Path) -> None:
    """Check that ``directory`` exists or can be created and accepts new files.

    Directories created for the probe are removed again; the caller creates
    them for real when the output is written.
    """

    missing: list[Path] = []
    existing = directory
    while not existing.exists():
        missing.append(existing)
        if existing.parent == existing:
            break
        existing = existing.parent

    if not existing.is_dir():
        raise PathError(
            f"Cannot create output directory {directory}: {existing} is not a directory"
        )

    created: list[Path] = []
    try:
        for pending in reversed(missing):
            pending.mkdir()
            created.append(pending)
        with tempfile.TemporaryFile(dir=directory):
            pass
    except OSError as exc:
        raise PathError(
            f"Output directory is not writable: {directory} ({exc.strerror or exc})"
        ) from exc
    finally:
        for pending in reversed(created):
            try:
                pending.rmdir()
            except OSError as exc:
                logger.warning("Could not remove probe directory %s: %s", pending, exc)


__all__ = ["PathKind", "Sandbox"]
