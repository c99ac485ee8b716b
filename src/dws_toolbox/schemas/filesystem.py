from __future__ import annotations

from typing import Literal

from pydantic import BaseModel


class TreeEntry(BaseModel):
    name: str
    path: str
    type: Literal["file", "directory"]
    children: list[TreeEntry] | None = None


__all__ = ["TreeEntry"]
