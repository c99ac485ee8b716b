from __future__ import annotations

from pydantic import BaseModel, Field


class ToolResult(BaseModel):
    """Uniform outcome of every operation: a flag plus self-contained text."""

    is_error: bool = False
    text: str = Field(..., description="Success message, inline JSON content or error text.")

    @classmethod
    def success(cls, text: str) -> ToolResult:
        return cls(is_error=False, text=text)

    @classmethod
    def failure(cls, text: str) -> ToolResult:
        return cls(is_error=True, text=text)


__all__ = ["ToolResult"]
