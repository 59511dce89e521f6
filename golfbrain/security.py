"""Security helpers for API authentication."""

from __future__ import annotations

from fastapi import Header, HTTPException, Query, status

from golfbrain.config import get_settings


def require_api_key(
    x_api_key: str | None = Header(default=None, alias="x-api-key"),
    api_key_query: str | None = Query(default=None, alias="apiKey"),
) -> str | None:
    """Require a matching API key header when enabled via env.

    Returns the resolved API key (from header or query).
    """

    candidate = x_api_key or api_key_query

    settings = get_settings()
    if not settings.require_api_key:
        return candidate

    if not settings.api_keys or candidate not in settings.api_keys:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="invalid api key",
        )

    return candidate


__all__ = ["require_api_key"]
