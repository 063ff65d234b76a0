"""Test doubles for promptlib.

``FakeSupabaseClient`` replaces the hosted database so that
``SupabaseStorage`` can be exercised without a network.
"""

from promptlib.testing.fake_supabase import FakeSupabaseClient

__all__ = ["FakeSupabaseClient"]
