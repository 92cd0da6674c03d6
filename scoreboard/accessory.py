"""Accessory handlers answering the host's get/set characteristic events.

The host calls ``handle_*`` with a ``callback(error, value)`` that must be
invoked exactly once.  Device calls go through a :class:`ScoreboardBridge`
whose tagged results are converted here; when a dispatcher is supplied the
round trip runs on its worker threads so the host's event thread is never
blocked on the network.
"""

from __future__ import annotations

import threading
from typing import Any, Callable, Dict, List, Optional

from scoreboard.core.bridge import Result, ScoreboardBridge
from scoreboard.core.errors import ConnectivityError, ScoreboardError
from scoreboard.core.logging import get_logger
from scoreboard.core.models import InputSource
from scoreboard.core.registry import AccessoryRecord
from scoreboard.utils.async_tasks import AsyncCallQueue

__all__ = ["Completion", "ScoreboardAccessory", "MANUFACTURER", "MODEL"]

MANUFACTURER = "MarkSchmidt"
MODEL = "SS-001"

HostCallback = Callable[..., None]

log = get_logger("accessory")


class Completion:
    """Wrap a host callback so that it fires exactly once."""

    def __init__(self, callback: HostCallback, label: str) -> None:
        self._callback = callback
        self._label = label
        self._done = False
        self._lock = threading.Lock()

    @property
    def done(self) -> bool:
        return self._done

    def __call__(self, error: Optional[BaseException] = None, value: Any = None) -> bool:
        with self._lock:
            if self._done:
                log.warning("%s completed twice; ignoring error=%s value=%r", self._label, error, value)
                return False
            self._done = True
        self._callback(error, value)
        return True


class ScoreboardAccessory:
    """Television-style accessory for one scoreboard."""

    def __init__(
        self,
        record: AccessoryRecord,
        bridge: ScoreboardBridge,
        *,
        dispatcher: Optional[AsyncCallQueue] = None,
    ) -> None:
        self.record = record
        self._bridge = bridge
        self._dispatcher = dispatcher
        self._active_identifier = InputSource.HOCKEY
        self._log = get_logger(f"accessory.{bridge.address}")

    @property
    def address(self) -> str:
        return self._bridge.address

    @property
    def bridge(self) -> ScoreboardBridge:
        return self._bridge

    @property
    def active_identifier(self) -> InputSource:
        """Last input seen or set; display only, the device stays authoritative."""

        return self._active_identifier

    # -- static layout -------------------------------------------------------

    def describe(self) -> Dict[str, Any]:
        """Return the services the host should create for this accessory."""

        sources: List[Dict[str, Any]] = [
            {
                "subtype": source.label.lower(),
                "Identifier": int(source),
                "ConfiguredName": source.label,
                "CurrentVisibilityState": "SHOWN",
                "IsConfigured": "CONFIGURED",
                "InputSourceType": "HDMI",
            }
            for source in InputSource
        ]
        return {
            "information": {
                "Name": self.record.display_name,
                "Manufacturer": MANUFACTURER,
                "Model": MODEL,
                "SerialNumber": self.address,
            },
            "television": {
                "ConfiguredName": self.record.display_name,
                "ActiveIdentifier": int(self._active_identifier),
                "SleepDiscoveryMode": "ALWAYS_DISCOVERABLE",
            },
            "input_sources": sources,
        }

    # -- characteristic handlers ----------------------------------------------

    def handle_get_on(self, callback: HostCallback) -> None:
        self._dispatch("get On", self._bridge.get_power, callback)

    def handle_set_on(self, value: Any, callback: HostCallback) -> None:
        on = bool(value)
        self._log.info("set On => %s", on)
        self._dispatch("set On", lambda: self._bridge.set_power(on), callback)

    def handle_get_active_identifier(self, callback: HostCallback) -> None:
        self._dispatch(
            "get ActiveIdentifier",
            self._bridge.get_active_input,
            callback,
            on_success=self._remember_input,
        )

    def handle_set_active_identifier(self, value: Any, callback: HostCallback) -> None:
        completion = Completion(callback, "set ActiveIdentifier")
        try:
            source = InputSource(int(value))
        except (TypeError, ValueError, OverflowError):
            self._log.warning("set ActiveIdentifier rejected unknown input %r", value)
            completion(ValueError(f"unknown input source {value!r}"))
            return
        self._log.info("set ActiveIdentifier => %s (%d)", source.label, int(source))
        self._run(
            completion,
            lambda: self._bridge.set_active_input(int(source)),
            on_success=lambda _: self._remember_input(int(source)),
        )

    # -- plumbing ---------------------------------------------------------------

    def _remember_input(self, sport: Optional[int]) -> None:
        try:
            self._active_identifier = InputSource(sport)
        except ValueError:
            self._log.debug("device reported unlisted input %r", sport)

    def _dispatch(
        self,
        label: str,
        operation: Callable[[], Result[Any]],
        callback: HostCallback,
        *,
        on_success: Optional[Callable[[Any], None]] = None,
    ) -> None:
        self._run(Completion(callback, label), operation, on_success=on_success)

    def _run(
        self,
        completion: Completion,
        operation: Callable[[], Result[Any]],
        *,
        on_success: Optional[Callable[[Any], None]] = None,
    ) -> None:
        def task() -> None:
            try:
                result = operation()
            except ScoreboardError as exc:
                completion(exc)
                return
            except Exception as exc:
                self._log.exception("unexpected failure while talking to %s", self.address)
                completion(exc)
                return
            if not result.ok:
                completion(result.error)
                return
            if on_success is not None:
                on_success(result.value)
            completion(None, result.value)

        if self._dispatcher is None:
            task()
            return
        if not self._dispatcher.submit(task):
            completion(ConnectivityError(f"{self.address}: request queue saturated", address=self.address))
