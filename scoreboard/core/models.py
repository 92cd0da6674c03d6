"""Value types exchanged with the scoreboard device."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Union

__all__ = ["InputSource", "ScoreboardState", "parse_input_source"]


class InputSource(IntEnum):
    """Display modes a scoreboard can switch to.

    The values are the ``sport`` codes the firmware reports and accepts.
    """

    HOCKEY = 1
    BASEBALL = 2
    CLOCK = 3

    @property
    def label(self) -> str:
        return self.name.capitalize()


@dataclass(frozen=True)
class ScoreboardState:
    """Live state reported by ``GET /``."""

    screen_on: bool
    sport: int

    @property
    def input_source(self) -> InputSource | None:
        try:
            return InputSource(self.sport)
        except ValueError:
            return None


def parse_input_source(value: Union[str, int]) -> InputSource:
    """Return the :class:`InputSource` named or numbered by *value*.

    Raises :class:`ValueError` for unknown names and codes.
    """

    if isinstance(value, bool):
        raise ValueError(f"unknown input source {value!r}")
    if isinstance(value, int):
        return InputSource(value)
    text = value.strip()
    if text.isdigit():
        return InputSource(int(text))
    try:
        return InputSource[text.upper()]
    except KeyError:
        raise ValueError(f"unknown input source {value!r}") from None
