"""Error taxonomy shared by the resolver, registry and device bridge."""

from __future__ import annotations

from typing import Optional

__all__ = [
    "ScoreboardError",
    "ConfigError",
    "DecodeError",
    "BridgeError",
    "ConnectivityError",
    "ProtocolError",
]


class ScoreboardError(Exception):
    """Base class for all errors raised by this package."""


class ConfigError(ScoreboardError, ValueError):
    """Raised when the platform configuration block is malformed."""


class DecodeError(ScoreboardError, ValueError):
    """An 8-letter sync code that does not decode to a valid address."""

    def __init__(self, token: str, reason: str) -> None:
        super().__init__(f"cannot decode sync code {token!r}: {reason}")
        self.token = token
        self.reason = reason


class BridgeError(ScoreboardError):
    """Failure talking to a scoreboard device."""

    def __init__(self, message: str, *, address: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.address = address


class ConnectivityError(BridgeError):
    """Network failure, timeout or non-200 status from the device."""

    def __init__(
        self,
        message: str,
        *,
        address: Optional[str] = None,
        status: Optional[int] = None,
    ) -> None:
        super().__init__(message, address=address)
        self.status = status


class ProtocolError(BridgeError):
    """The device answered 200 but the body has an unexpected shape."""
