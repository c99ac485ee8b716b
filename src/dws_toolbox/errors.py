from __future__ import annotations


class DWSToolboxError(Exception):
    """Base class for every error raised by the toolbox."""


class ConfigurationError(DWSToolboxError, RuntimeError):
    """Process configuration is missing or invalid (e.g. no API key)."""


class PathError(DWSToolboxError, ValueError):
    """A caller supplied path cannot be used."""


class SandboxViolationError(PathError, PermissionError):
    """The path resolves outside of the sandbox directory."""


class PathNotFoundError(PathError, FileNotFoundError):
    """The path does not exist or is not of the expected kind."""


class FileReferenceError(DWSToolboxError, ValueError):
    """A file or URL referenced by the instructions could not be resolved."""

    def __init__(self, reference: str, message: str) -> None:
        super().__init__(message)
        self.reference = reference


class DWSAPIError(DWSToolboxError):
    """The remote service answered with a non-success status."""

    def __init__(
        self,
        status_code: int,
        body: str | None = None,
        *,
        stream_error: Exception | None = None,
    ) -> None:
        super().__init__(f"DWS API request failed with status {status_code}")
        self.status_code = status_code
        self.body = body
        self.stream_error = stream_error


class ResponseStreamError(DWSToolboxError):
    """Reading a successful response body failed mid-stream."""


__all__ = [
    "ConfigurationError",
    "DWSAPIError",
    "DWSToolboxError",
    "FileReferenceError",
    "PathError",
    "PathNotFoundError",
    "ResponseStreamError",
    "SandboxViolationError",
]
