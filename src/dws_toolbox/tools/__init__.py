from .dws_tools import register_dws_tools

__all__ = ["register_dws_tools"]
