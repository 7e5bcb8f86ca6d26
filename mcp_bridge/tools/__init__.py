"""Built-in sample tools."""

from .courses import CourseCatalog, register_tools

__all__ = ["CourseCatalog", "register_tools"]
