# citenet/web/security.py

from __future__ import annotations

import threading
import time
from typing import Dict, Tuple

from fastapi import Header, HTTPException, status, Request

from citenet.config.settings import settings
from citenet.library.gateway import DEFAULT_USER_ID


# -------------------------------
# API key auth
# -------------------------------

def api_key_auth(x_api_key: str | None = Header(default=None, alias="X-API-Key")):
    """
    Simple header-based API key auth.
    If settings.API_KEY is None, auth is disabled.
    """
    expected = settings.API_KEY.get_secret_value() if settings.API_KEY else None
    if expected is None:
        # auth disabled
        return

    if x_api_key is None or x_api_key != expected:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or missing API key.",
        )


def current_user(x_user_id: str | None = Header(default=None, alias="X-User-Id")) -> str:
    """
    Whose library a request operates on. Identity itself is established
    upstream of this service; we only read the header it forwards.
    """
    user_id = (x_user_id or "").strip()
    return user_id or DEFAULT_USER_ID


# -------------------------------
# In-memory fixed-window rate limiter
# -------------------------------

# client host -> (window_start, count)
_RATE_LIMIT_STATE: Dict[str, Tuple[float, int]] = {}
_RATE_LIMIT_LOCK = threading.Lock()

RATE_LIMIT_WINDOW_SECONDS = 60.0  # 1 minute


def _prune_expired(now: float) -> None:
    """Drop hosts whose window has closed. Caller holds the lock."""
    expired = [
        host
        for host, (window_start, _) in _RATE_LIMIT_STATE.items()
        if now - window_start >= RATE_LIMIT_WINDOW_SECONDS
    ]
    for host in expired:
        del _RATE_LIMIT_STATE[host]


def rate_limiter(request: Request):
    """
    Per-client-host request budget of settings.RATE_LIMIT_PER_MINUTE.

    Network builds fan out into many upstream calls, so this mostly protects
    the Semantic Scholar quota rather than this process. FastAPI runs sync
    dependencies in a threadpool, hence the lock.
    """
    client_host = request.client.host if request.client else "unknown"
    now = time.time()

    with _RATE_LIMIT_LOCK:
        _prune_expired(now)
        window_start, count = _RATE_LIMIT_STATE.get(client_host, (now, 0))

        if count >= settings.RATE_LIMIT_PER_MINUTE:
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail="Rate limit exceeded. Try again later.",
            )

        _RATE_LIMIT_STATE[client_host] = (window_start, count + 1)
