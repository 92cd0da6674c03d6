"""Deterministic accessory identities."""

from __future__ import annotations

import hashlib

__all__ = ["generate_uuid", "is_valid_uuid"]

_TEMPLATE = "xxxxxxxx-xxxx-4xxx-yxxx-xxxxxxxxxxxx"


def generate_uuid(data: str) -> str:
    """Return the HAP-style UUID for *data*.

    The SHA-1 hex digest is poured into a version 4 template: ``x`` slots
    take the next digest nibble, the ``y`` slot takes the next nibble with
    the variant bits forced to ``10``.  Literal template characters do not
    consume digest nibbles.  Identities computed by a HomeKit bridge host for
    the same string are identical, so persisted records reconcile.
    """

    digest = hashlib.sha1(data.encode("utf-8")).hexdigest()
    nibbles = iter(digest)
    out = []
    for slot in _TEMPLATE:
        if slot == "x":
            out.append(next(nibbles))
        elif slot == "y":
            out.append(format((int(next(nibbles), 16) & 0x3) | 0x8, "x"))
        else:
            out.append(slot)
    return "".join(out)


def is_valid_uuid(value: str) -> bool:
    """Return whether *value* has the ``8-4-4-4-12`` hex layout."""

    parts = value.split("-")
    if [len(part) for part in parts] != [8, 4, 4, 4, 12]:
        return False
    try:
        int("".join(parts), 16)
    except ValueError:
        return False
    return True
