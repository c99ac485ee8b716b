from __future__ import annotations

from . import credits, schemas, services, tools
from .server import create_server

__all__ = ["create_server", "credits", "schemas", "services", "tools"]
