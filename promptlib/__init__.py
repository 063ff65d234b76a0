"""
promptlib - a personal prompt library.

Store, tag, rank and search reusable text prompts, and bulk-import them
from CSV or JSON exports.
"""

from .library import PromptLibrary

try:
    from importlib.metadata import version

    __version__ = version("promptlib")
except Exception:
    __version__ = "0.0.0"

__all__ = ["PromptLibrary"]
