"""HTTP bridge to a single scoreboard.

The firmware exposes three endpoints on port 5005:

* ``GET /`` returns ``{"screen_on": bool, "sport": int}``
* ``POST /setPower`` accepts ``{"screen_on": bool}``
* ``POST /setSport`` accepts ``{"sport": int}``

Every operation performs exactly one bounded round trip and returns a
:class:`Result`.  Device failures never raise out of the bridge; they are
translated to :class:`ConnectivityError` or :class:`ProtocolError` inside the
result.  Nothing is retried and nothing is cached.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Generic, Mapping, Optional, TypeVar

import httpx
import requests
from requests import Session

from .config import SCOREBOARD_HTTP_TIMEOUT_S, SCOREBOARD_PORT
from .errors import BridgeError, ConnectivityError, ProtocolError
from .http_client import get_async_client, get_sync_session
from .logging import get_logger
from .models import ScoreboardState

__all__ = [
    "Result",
    "ScoreboardBridge",
    "AsyncScoreboardBridge",
    "base_url_for",
]

T = TypeVar("T")

_STATE_PATH = ""
_POWER_PATH = "setPower"
_SPORT_PATH = "setSport"

log = get_logger("core.bridge")


@dataclass(frozen=True)
class Result(Generic[T]):
    """Outcome of one bridge operation: a value or an error, never both."""

    value: Optional[T] = None
    error: Optional[BridgeError] = None

    @classmethod
    def success(cls, value: T) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: BridgeError) -> "Result[T]":
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        """Return the value or raise the stored error."""

        if self.error is not None:
            raise self.error
        return self.value  # type: ignore[return-value]

    def map(self, fn) -> "Result[Any]":
        if self.error is not None:
            return Result.failure(self.error)
        return Result.success(fn(self.value))


def base_url_for(address: str, port: int = SCOREBOARD_PORT) -> str:
    return f"http://{address}:{port}/"


# -- response interpretation shared by both transports -------------------------


def _check_status(address: str, status: int, path: str) -> None:
    if status != 200:
        raise ConnectivityError(
            f"{address}: /{path} answered HTTP {status}",
            address=address,
            status=status,
        )


def _require_mapping(address: str, payload: Any) -> Mapping[str, Any]:
    if not isinstance(payload, Mapping):
        raise ProtocolError(
            f"{address}: expected a JSON object, got {type(payload).__name__}",
            address=address,
        )
    return payload


def _read_screen_on(address: str, payload: Any) -> bool:
    body = _require_mapping(address, payload)
    value = body.get("screen_on")
    if not isinstance(value, bool):
        raise ProtocolError(f"{address}: 'screen_on' missing or not a boolean: {value!r}", address=address)
    return value


def _read_sport(address: str, payload: Any) -> int:
    body = _require_mapping(address, payload)
    value = body.get("sport")
    if isinstance(value, bool) or not isinstance(value, int):
        raise ProtocolError(f"{address}: 'sport' missing or not an integer: {value!r}", address=address)
    return value


def _read_state(address: str, payload: Any) -> ScoreboardState:
    return ScoreboardState(
        screen_on=_read_screen_on(address, payload),
        sport=_read_sport(address, payload),
    )


def _power_body(on: bool) -> dict[str, bool]:
    return {"screen_on": bool(on)}


def _sport_body(sport: int) -> dict[str, int]:
    if isinstance(sport, bool):
        raise TypeError("sport must be an integer identifier, not a bool")
    return {"sport": int(sport)}


class ScoreboardBridge:
    """Blocking bridge backed by a shared :class:`requests.Session`."""

    def __init__(
        self,
        address: str,
        *,
        port: int = SCOREBOARD_PORT,
        timeout: float = SCOREBOARD_HTTP_TIMEOUT_S,
        session: Optional[Session] = None,
    ) -> None:
        self._address = address
        self._base_url = base_url_for(address, port)
        self._timeout = timeout
        self._session = session if session is not None else get_sync_session()

    @property
    def address(self) -> str:
        return self._address

    @property
    def base_url(self) -> str:
        return self._base_url

    def __repr__(self) -> str:
        return f"ScoreboardBridge({self._base_url!r}, timeout={self._timeout})"

    # -- public operations -------------------------------------------------

    def get_state(self) -> Result[ScoreboardState]:
        return self._fetch(_read_state)

    def get_power(self) -> Result[bool]:
        return self._fetch(_read_screen_on)

    def get_active_input(self) -> Result[int]:
        return self._fetch(_read_sport)

    def set_power(self, on: bool) -> Result[None]:
        return self._send(_POWER_PATH, _power_body(on))

    def set_active_input(self, sport: int) -> Result[None]:
        return self._send(_SPORT_PATH, _sport_body(sport))

    # -- transport ---------------------------------------------------------

    def _fetch(self, reader) -> Result[Any]:
        start = time.perf_counter()
        try:
            response = self._session.get(self._base_url, timeout=self._timeout)
            try:
                _check_status(self._address, response.status_code, _STATE_PATH)
                try:
                    payload = response.json()
                except ValueError as exc:
                    raise ProtocolError(
                        f"{self._address}: response body is not JSON ({exc})",
                        address=self._address,
                    ) from exc
            finally:
                response.close()
            value = reader(self._address, payload)
        except BridgeError as exc:
            return self._failed("GET /", exc)
        except requests.Timeout as exc:
            return self._failed("GET /", self._timed_out(exc))
        except requests.RequestException as exc:
            return self._failed("GET /", self._unreachable(exc))
        log.debug(
            "GET / address=%s ok in %.1f ms",
            self._address,
            (time.perf_counter() - start) * 1000.0,
        )
        return Result.success(value)

    def _send(self, path: str, body: Mapping[str, Any]) -> Result[None]:
        start = time.perf_counter()
        label = f"POST /{path}"
        try:
            response = self._session.post(
                self._base_url + path, json=dict(body), timeout=self._timeout
            )
            try:
                _check_status(self._address, response.status_code, path)
            finally:
                response.close()
        except BridgeError as exc:
            return self._failed(label, exc)
        except requests.Timeout as exc:
            return self._failed(label, self._timed_out(exc))
        except requests.RequestException as exc:
            return self._failed(label, self._unreachable(exc))
        log.debug(
            "%s address=%s body=%s ok in %.1f ms",
            label,
            self._address,
            dict(body),
            (time.perf_counter() - start) * 1000.0,
        )
        return Result.success(None)

    def _timed_out(self, exc: Exception) -> ConnectivityError:
        error = ConnectivityError(
            f"{self._address}: no answer within {self._timeout:g}s",
            address=self._address,
        )
        error.__cause__ = exc
        return error

    def _unreachable(self, exc: Exception) -> ConnectivityError:
        error = ConnectivityError(f"{self._address}: {exc}", address=self._address)
        error.__cause__ = exc
        return error

    def _failed(self, label: str, error: BridgeError) -> Result[Any]:
        log.warning("%s failed address=%s error=%s", label, self._address, error)
        return Result.failure(error)


class AsyncScoreboardBridge:
    """Coroutine flavour of :class:`ScoreboardBridge` backed by httpx."""

    def __init__(
        self,
        address: str,
        *,
        port: int = SCOREBOARD_PORT,
        timeout: float = SCOREBOARD_HTTP_TIMEOUT_S,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._address = address
        self._base_url = base_url_for(address, port)
        self._timeout = timeout
        self._client = client

    @property
    def address(self) -> str:
        return self._address

    @property
    def base_url(self) -> str:
        return self._base_url

    def _http(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = get_async_client()
        return self._client

    async def get_state(self) -> Result[ScoreboardState]:
        return await self._fetch(_read_state)

    async def get_power(self) -> Result[bool]:
        return await self._fetch(_read_screen_on)

    async def get_active_input(self) -> Result[int]:
        return await self._fetch(_read_sport)

    async def set_power(self, on: bool) -> Result[None]:
        return await self._send(_POWER_PATH, _power_body(on))

    async def set_active_input(self, sport: int) -> Result[None]:
        return await self._send(_SPORT_PATH, _sport_body(sport))

    async def _fetch(self, reader) -> Result[Any]:
        try:
            response = await self._http().get(self._base_url, timeout=self._timeout)
            _check_status(self._address, response.status_code, _STATE_PATH)
            try:
                payload = response.json()
            except ValueError as exc:
                raise ProtocolError(
                    f"{self._address}: response body is not JSON ({exc})",
                    address=self._address,
                ) from exc
            return Result.success(reader(self._address, payload))
        except BridgeError as exc:
            return self._failed("GET /", exc)
        except httpx.TimeoutException as exc:
            return self._failed("GET /", self._wrap(exc, f"no answer within {self._timeout:g}s"))
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            return self._failed("GET /", self._wrap(exc, str(exc) or type(exc).__name__))

    async def _send(self, path: str, body: Mapping[str, Any]) -> Result[None]:
        label = f"POST /{path}"
        try:
            response = await self._http().post(
                self._base_url + path, json=dict(body), timeout=self._timeout
            )
            _check_status(self._address, response.status_code, path)
            return Result.success(None)
        except BridgeError as exc:
            return self._failed(label, exc)
        except httpx.TimeoutException as exc:
            return self._failed(label, self._wrap(exc, f"no answer within {self._timeout:g}s"))
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            return self._failed(label, self._wrap(exc, str(exc) or type(exc).__name__))

    def _wrap(self, exc: Exception, detail: str) -> ConnectivityError:
        error = ConnectivityError(f"{self._address}: {detail}", address=self._address)
        error.__cause__ = exc
        return error

    def _failed(self, label: str, error: BridgeError) -> Result[Any]:
        log.warning("%s failed address=%s error=%s", label, self._address, error)
        return Result.failure(error)
