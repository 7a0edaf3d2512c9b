from __future__ import annotations

from supabase import Client, create_client


def create_supabase_admin_client(*, url: str | None, service_role_key: str | None) -> Client:
    """
    Create a Supabase client using the service role key (bypasses RLS).

    Intended for the sync scripts, which write `movies` rows that browser clients only read.
    """

    url = (url or "").strip()
    service_role_key = (service_role_key or "").strip()
    if not url or not service_role_key:
        raise RuntimeError("Supabase url and service role key are required to create an admin client.")
    return create_client(url, service_role_key)
