"""Core infrastructure for the scoreboard bridge."""

__all__ = [
    "address",
    "bridge",
    "cache",
    "config",
    "errors",
    "http_client",
    "identity",
    "logging",
    "models",
    "registry",
]
