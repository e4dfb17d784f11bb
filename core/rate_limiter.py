# core/rate_limiter.py

from typing import Dict, List, Optional, Tuple
from fastapi import HTTPException, Request
from threading import Lock
import time


# In-memory sliding window, per process
_rate_limit_store: Dict[str, List[float]] = {}
_store_lock = Lock()
_last_sweep = 0.0


def _sweep_expired(window_start: float):
    # Caller holds _store_lock
    expired = [
        key for key, attempts in _rate_limit_store.items()
        if not attempts or attempts[-1] <= window_start
    ]
    for key in expired:
        del _rate_limit_store[key]


def check_rate_limit(
    identifier: str,
    max_requests: int = 10,
    window_seconds: int = 60,
) -> Tuple[bool, int]:
    """
    Record one attempt for `identifier` and report whether it is allowed.

    Returns:
        Tuple of (allowed: bool, remaining: int)
    """
    global _last_sweep

    now = time.time()
    window_start = now - window_seconds

    with _store_lock:
        # Drop idle identifiers at most once per window
        if now - _last_sweep >= window_seconds:
            _sweep_expired(window_start)
            _last_sweep = now

        attempts = [ts for ts in _rate_limit_store.get(identifier, ()) if ts > window_start]

        if len(attempts) >= max_requests:
            _rate_limit_store[identifier] = attempts
            return False, 0

        attempts.append(now)
        _rate_limit_store[identifier] = attempts
        return True, max_requests - len(attempts)


def client_ip(request: Request) -> str:
    """Client address, preferring the first X-Forwarded-For hop (proxies)."""
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


def get_rate_limit_identifier(request: Request, subject: Optional[str] = None) -> str:
    ip = client_ip(request)
    if subject:
        return f"{subject}@{ip}"
    return f"ip:{ip}"


def require_rate_limit(
    request: Request,
    identifier: Optional[str] = None,
    max_requests: int = 10,
    window_seconds: int = 60,
) -> int:
    """
    Raises HTTPException 429 when the limit is exceeded,
    otherwise returns the number of attempts left in the window.
    """
    if identifier is None:
        identifier = get_rate_limit_identifier(request)

    allowed, remaining = check_rate_limit(identifier, max_requests, window_seconds)

    if not allowed:
        raise HTTPException(
            status_code=429,
            detail=f"Rate limit exceeded. Maximum {max_requests} requests per {window_seconds} seconds.",
            headers={
                "X-RateLimit-Limit": str(max_requests),
                "X-RateLimit-Window": str(window_seconds),
                "Retry-After": str(window_seconds),
            },
        )

    return remaining


def reset_rate_limits():
    global _last_sweep

    with _store_lock:
        _rate_limit_store.clear()
        _last_sweep = 0.0
