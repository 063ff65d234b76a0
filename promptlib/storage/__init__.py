"""Storage backends for promptlib."""

from promptlib.storage.base import Storage
from promptlib.storage.supabase import SupabaseStorage

__all__ = ["Storage", "SupabaseStorage"]
