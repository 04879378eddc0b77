"""Helpers for keeping credentials out of logs."""

from __future__ import annotations

from urllib.parse import urlparse


def redact_database_url(url: str) -> str:
    """Return DATABASE_URL with the password masked."""
    raw = (url or "").strip()
    if not raw:
        return "EMPTY_DATABASE_URL"
    try:
        parsed = urlparse(raw)
        scheme = parsed.scheme or "postgresql"
        host = parsed.hostname or "unknown-host"
        port = f":{parsed.port}" if parsed.port else ""
        db_name = parsed.path.lstrip("/") or "unknown-db"
        if parsed.username:
            return f"{scheme}://{parsed.username}:****@{host}{port}/{db_name}"
        return f"{scheme}://{host}{port}/{db_name}"
    except ValueError:
        return "INVALID_DATABASE_URL"


def redact_token(token: str | None, keep: int = 4) -> str:
    """Mask an access token, keeping only the last few characters."""
    if not token:
        return "<none>"
    if len(token) <= keep:
        return "****"
    return f"****{token[-keep:]}"
