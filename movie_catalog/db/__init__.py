"""
Database helpers for the movie catalog sync.
"""

from movie_catalog.db.supabase import create_supabase_admin_client

__all__ = [
    "create_supabase_admin_client",
]
