"""Turn configured device tokens into dotted-quad addresses.

A token is either a literal address (``192.168.1.5``) or an eight letter
sync code.  Each pair of letters in a sync code encodes one octet in base 26:
``AB`` is ``0 * 26 + 1``, ``ZZ`` would be ``675`` and is rejected.
"""

from __future__ import annotations

import re

from .errors import DecodeError

__all__ = ["resolve", "is_sync_code", "encode_sync_code", "SYNC_CODE_LENGTH"]

SYNC_CODE_LENGTH = 8

_SYNC_CODE_PATTERN = re.compile(r"[A-Za-z]{%d}" % SYNC_CODE_LENGTH)
_ALPHABET_SIZE = 26
_MAX_OCTET = 255


def is_sync_code(token: str) -> bool:
    """Return ``True`` when *token* is exactly eight ASCII letters."""

    return _SYNC_CODE_PATTERN.fullmatch(token) is not None


def resolve(token: str) -> str:
    """Return the address *token* stands for.

    Tokens that are not sync codes come back unchanged; literal addresses are
    not validated here.  Raises :class:`DecodeError` when a sync code decodes
    to an octet above 255.
    """

    if not is_sync_code(token):
        return token

    letters = "".join(ch for ch in token.upper() if "A" <= ch <= "Z")
    if len(letters) % 2:
        raise DecodeError(token, "odd number of letters")

    octets = []
    for index in range(0, len(letters), 2):
        high = ord(letters[index]) - ord("A")
        low = ord(letters[index + 1]) - ord("A")
        octet = high * _ALPHABET_SIZE + low
        if octet > _MAX_OCTET:
            raise DecodeError(
                token,
                f"pair {letters[index:index + 2]!r} decodes to {octet} (> {_MAX_OCTET})",
            )
        octets.append(octet)

    if len(octets) != 4:
        raise DecodeError(token, f"expected 4 octets, got {len(octets)}")
    return ".".join(str(octet) for octet in octets)


def encode_sync_code(address: str) -> str:
    """Return the sync code that resolves to the dotted-quad *address*."""

    parts = address.strip().split(".")
    if len(parts) != 4:
        raise DecodeError(address, "expected a dotted quad")
    pairs = []
    for part in parts:
        if not part.isdigit():
            raise DecodeError(address, f"octet {part!r} is not a number")
        value = int(part)
        if value > _MAX_OCTET:
            raise DecodeError(address, f"octet {value} out of range")
        high, low = divmod(value, _ALPHABET_SIZE)
        pairs.append(chr(ord("A") + high) + chr(ord("A") + low))
    return "".join(pairs)
