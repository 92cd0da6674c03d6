"""Platform entry point wired into the accessory host's lifecycle."""

from __future__ import annotations

from typing import Callable, Dict, Optional

from scoreboard.accessory import ScoreboardAccessory
from scoreboard.core.bridge import ScoreboardBridge
from scoreboard.core.config import PlatformConfig
from scoreboard.core.logging import get_logger
from scoreboard.core.registry import AccessoryHost, AccessoryRecord, AccessoryRegistry, DiscoveryReport
from scoreboard.utils.async_tasks import AsyncCallQueue

__all__ = ["ScoreboardPlatform"]

BridgeFactory = Callable[[str], ScoreboardBridge]


class ScoreboardPlatform:
    """Discover configured scoreboards once the host finished launching.

    The host calls :meth:`configure_accessory` for every cached accessory it
    restores, then :meth:`did_finish_launching` exactly when restoring is
    complete.  Registration of new accessories only happens after that point.
    """

    def __init__(
        self,
        config: PlatformConfig,
        host: AccessoryHost,
        *,
        bridge_factory: BridgeFactory = ScoreboardBridge,
        dispatcher: Optional[AsyncCallQueue] = None,
    ) -> None:
        self.config = config
        self.registry = AccessoryRegistry(host)
        self._bridge_factory = bridge_factory
        self._dispatcher = dispatcher
        self._accessories: Dict[str, ScoreboardAccessory] = {}
        self._report: Optional[DiscoveryReport] = None
        self._log = get_logger("platform")
        self._log.debug("Finished initializing platform: %s", config.name)

    @property
    def accessories(self) -> Dict[str, ScoreboardAccessory]:
        return dict(self._accessories)

    def configure_accessory(self, record: AccessoryRecord) -> None:
        self.registry.configure_accessory(record)

    def did_finish_launching(self) -> DiscoveryReport:
        """Run discovery once and attach handlers to every resulting record."""

        if self._report is not None:
            self._log.debug("discovery already ran; returning previous report")
            return self._report
        self._log.debug("Executed did_finish_launching callback")
        report = self.registry.discover(self.config.scoreboards)
        for record in report.records:
            address = report.addresses[record.uuid]
            self._accessories[record.uuid] = ScoreboardAccessory(
                record,
                self._bridge_factory(address),
                dispatcher=self._dispatcher,
            )
        self._log.info(
            "discovery complete restored=%d created=%d failed=%d",
            len(report.restored),
            len(report.created),
            len(report.failures),
        )
        self._report = report
        return report

