from .hashline_edit import register_tools

__all__ = ["register_tools"]
