"""Shared HTTP clients for talking to scoreboards.

Both clients are created lazily and shared process-wide.  Every request made
through them carries a timeout, even when the caller forgets to pass one.
"""

from __future__ import annotations

import logging
import threading
from typing import Optional

import httpx
import requests
from requests import Session
from requests.adapters import HTTPAdapter

from .config import SCOREBOARD_HTTP_MAX_CONNECTIONS, SCOREBOARD_HTTP_TIMEOUT_S

log = logging.getLogger(__name__)

__all__ = [
    "get_sync_session",
    "get_async_client",
    "close_sync_session",
]

_ASYNC_CLIENT: Optional[httpx.AsyncClient] = None
_ASYNC_LOCK = threading.Lock()

_SYNC_SESSION: Optional[Session] = None
_SYNC_LOCK = threading.Lock()


class _TimeoutHTTPAdapter(HTTPAdapter):
    """HTTP adapter that injects a default timeout when none is given."""

    def __init__(
        self,
        *args: object,
        timeout: float | tuple[float, float] = SCOREBOARD_HTTP_TIMEOUT_S,
        **kwargs: object,
    ) -> None:
        super().__init__(*args, **kwargs)
        self._timeout = timeout

    def send(self, request, **kwargs):  # type: ignore[override]
        if kwargs.get("timeout") is None:
            kwargs["timeout"] = self._timeout
        return super().send(request, **kwargs)


def get_async_client() -> httpx.AsyncClient:
    """Return the shared :class:`httpx.AsyncClient` instance."""

    global _ASYNC_CLIENT
    if _ASYNC_CLIENT is None:
        with _ASYNC_LOCK:
            if _ASYNC_CLIENT is None:
                _ASYNC_CLIENT = httpx.AsyncClient(
                    timeout=httpx.Timeout(SCOREBOARD_HTTP_TIMEOUT_S, pool=1.0),
                    limits=httpx.Limits(
                        max_keepalive_connections=SCOREBOARD_HTTP_MAX_CONNECTIONS,
                        max_connections=SCOREBOARD_HTTP_MAX_CONNECTIONS,
                        keepalive_expiry=30.0,
                    ),
                )
                log.debug("shared httpx client created pool=%d", SCOREBOARD_HTTP_MAX_CONNECTIONS)
    return _ASYNC_CLIENT


def get_sync_session() -> Session:
    """Return the shared :class:`requests.Session` instance."""

    global _SYNC_SESSION
    if _SYNC_SESSION is None:
        with _SYNC_LOCK:
            if _SYNC_SESSION is None:
                session = requests.Session()
                adapter = _TimeoutHTTPAdapter(
                    pool_connections=SCOREBOARD_HTTP_MAX_CONNECTIONS,
                    pool_maxsize=SCOREBOARD_HTTP_MAX_CONNECTIONS,
                    max_retries=0,
                    timeout=(SCOREBOARD_HTTP_TIMEOUT_S, SCOREBOARD_HTTP_TIMEOUT_S),
                )
                session.mount("http://", adapter)
                session.headers.setdefault("Connection", "keep-alive")
                _SYNC_SESSION = session
                log.debug("shared requests session created pool=%d", SCOREBOARD_HTTP_MAX_CONNECTIONS)
    return _SYNC_SESSION


def close_sync_session() -> None:
    """Close and forget the shared requests session."""

    global _SYNC_SESSION
    with _SYNC_LOCK:
        if _SYNC_SESSION is not None:
            _SYNC_SESSION.close()
            _SYNC_SESSION = None

