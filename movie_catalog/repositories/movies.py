from __future__ import annotations

from typing import Any, Mapping

from supabase import Client

MOVIES_TABLE = "movies"
MOVIES_CONFLICT_KEY = "tmdb_id,country"


class MovieRepositoryError(RuntimeError):
    pass


def _error_text(error: object) -> str:
    parts = [
        str(getattr(error, "code", "") or ""),
        str(getattr(error, "message", "") or ""),
        str(getattr(error, "details", "") or ""),
        str(getattr(error, "hint", "") or ""),
        str(error),
    ]
    return " ".join([p for p in parts if p]).strip()


def assert_movies_table_exists(db: Client) -> None:
    """
    Fail fast with a clear error if `public.movies` is missing or unreadable.
    """

    def is_missing_relation(message: str) -> bool:
        msg = (message or "").casefold()
        return (
            "42p01" in msg  # undefined_table
            or "pgrst205" in msg  # postgrest: relation not found in schema cache
            or ("relation" in msg and "does not exist" in msg)
            or ("schema cache" in msg and MOVIES_TABLE in msg)
        )

    def is_permission_denied(message: str) -> bool:
        msg = (message or "").casefold()
        return "permission denied" in msg or "42501" in msg

    def help_message() -> str:
        return (
            "Database table `movies` is missing. "
            "Create it with a unique constraint on (tmdb_id, country), then re-run the sync."
        )

    try:
        response = db.table(MOVIES_TABLE).select("tmdb_id").limit(1).execute()
    except Exception as exc:
        if is_permission_denied(str(exc)):
            raise MovieRepositoryError(
                "Supabase key lacks access to `movies`; the sync needs the service role key."
            ) from exc
        if is_missing_relation(str(exc)):
            raise MovieRepositoryError(help_message()) from exc
        raise MovieRepositoryError(f"Supabase error during movies preflight: {exc}") from exc

    error = getattr(response, "error", None)
    if not error:
        return

    combined = _error_text(error)
    if is_missing_relation(combined):
        raise MovieRepositoryError(help_message())
    raise MovieRepositoryError(f"Supabase error during movies preflight: {combined}")


def upsert_movie(
    db: Client,
    row: Mapping[str, Any],
    *,
    on_conflict: str = MOVIES_CONFLICT_KEY,
) -> list[dict[str, Any]]:
    """Insert or overwrite the `movies` row for `(row["tmdb_id"], row["country"])`."""

    payload = dict(row)
    if payload.get("tmdb_id") is None or not payload.get("country"):
        raise MovieRepositoryError("movies upsert requires tmdb_id and country.")

    try:
        response = db.table(MOVIES_TABLE).upsert(payload, on_conflict=on_conflict).execute()
    except Exception as exc:
        raise MovieRepositoryError(f"Supabase error upserting movie tmdb_id={payload.get('tmdb_id')}: {exc}") from exc
    if hasattr(response, "error") and response.error:
        raise MovieRepositoryError(
            f"Supabase error upserting movie tmdb_id={payload.get('tmdb_id')}: {_error_text(response.error)}"
        )
    data = response.data or []
    return data if isinstance(data, list) else []


def fetch_movies_by_country(db: Client, country: str) -> list[dict[str, Any]]:
    """All synced rows for `country`, best IMDb rating first (unrated rows last)."""

    country = (country or "").strip().upper()
    if not country:
        return []
    response = (
        db.table(MOVIES_TABLE)
        .select("*")
        .eq("country", country)
        .order("imdb_rating", desc=True, nullsfirst=False)
        .execute()
    )
    if hasattr(response, "error") and response.error:
        raise MovieRepositoryError(f"Supabase error listing movies for {country}: {_error_text(response.error)}")
    data = response.data or []
    return data if isinstance(data, list) else []
