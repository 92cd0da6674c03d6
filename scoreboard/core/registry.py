"""Reconcile configured scoreboards with the host's persisted accessories.

The host restores cached accessories at startup and hands each one to
:meth:`AccessoryRegistry.configure_accessory`.  Once launch has finished,
:meth:`AccessoryRegistry.discover` walks the configured tokens, reuses any
restored record whose identity matches, and asks the host to register the
rest.  Registration happens at most once per identity per process.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional, Protocol, Sequence, Tuple

from .address import resolve
from .errors import ScoreboardError
from .logging import get_logger

__all__ = [
    "AccessoryHost",
    "AccessoryRecord",
    "AccessoryRegistry",
    "DiscoveryFailure",
    "DiscoveryReport",
]


@dataclass
class AccessoryRecord:
    """One scoreboard as known to the accessory host."""

    uuid: str
    display_name: str
    context: Dict[str, Any] = field(default_factory=dict)

    @property
    def device(self) -> Optional[str]:
        """Resolved address stored when the record was created."""

        value = self.context.get("device")
        return value if isinstance(value, str) else None


class AccessoryHost(Protocol):
    """Capabilities the registry needs from the accessory framework."""

    def generate_uuid(self, data: str) -> str: ...

    def lookup_persisted(self, identity: str) -> Optional[AccessoryRecord]: ...

    def register_new(self, record: AccessoryRecord) -> None: ...


@dataclass(frozen=True)
class DiscoveryFailure:
    token: str
    error: Exception

    def __str__(self) -> str:
        return f"{self.token}: {self.error}"


@dataclass
class DiscoveryReport:
    """Outcome of one discovery pass, in configured token order."""

    restored: List[AccessoryRecord] = field(default_factory=list)
    created: List[AccessoryRecord] = field(default_factory=list)
    failures: List[DiscoveryFailure] = field(default_factory=list)
    records: List[AccessoryRecord] = field(default_factory=list)
    addresses: Dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failures


class AccessoryRegistry:
    """Own restored and created accessory records for the process lifetime."""

    def __init__(
        self,
        host: AccessoryHost,
        *,
        resolver: Callable[[str], str] = resolve,
    ) -> None:
        self._host = host
        self._resolve = resolver
        self._records: Dict[str, AccessoryRecord] = {}
        self._registered: set[str] = set()
        self._restored: set[str] = set()
        self._log = get_logger("core.registry")

    def configure_accessory(self, record: AccessoryRecord) -> None:
        """Take ownership of a record the host restored from its cache."""

        self._log.info("Loading accessory from cache: %s", record.display_name)
        self._records.setdefault(record.uuid, record)
        self._restored.add(record.uuid)

    def identity_for(self, address: str) -> str:
        return self._host.generate_uuid(address)

    def get(self, identity: str) -> Optional[AccessoryRecord]:
        return self._records.get(identity)

    def records(self) -> List[AccessoryRecord]:
        return list(self._records.values())

    def reconcile(
        self,
        address: str,
        persisted: Iterable[AccessoryRecord] = (),
    ) -> Tuple[AccessoryRecord, bool]:
        """Return the record for *address* and whether it is new.

        *persisted* is searched in addition to records restored through
        :meth:`configure_accessory`, the host lookup and records created
        earlier in this process.  Existing records are returned untouched.
        A record created here stays new until :meth:`register` succeeds.
        """

        identity = self.identity_for(address)
        existing = self._records.get(identity)
        if existing is not None:
            if identity in self._restored or identity in self._registered:
                return existing, False
            if self._host.lookup_persisted(identity) is None:
                return existing, True
            self._restored.add(identity)
            return existing, False

        existing = next((item for item in persisted if item.uuid == identity), None)
        if existing is None:
            existing = self._host.lookup_persisted(identity)
        if existing is not None:
            self._records[identity] = existing
            self._restored.add(identity)
            return existing, False

        record = AccessoryRecord(
            uuid=identity,
            display_name=address,
            context={"device": address},
        )
        self._records[identity] = record
        return record, True

    def register(self, record: AccessoryRecord) -> bool:
        """Ask the host to register *record* once; return ``True`` if it did so now."""

        if record.uuid in self._registered:
            self._log.debug("registration skipped, already registered uuid=%s", record.uuid)
            return False
        self._host.register_new(record)
        self._registered.add(record.uuid)
        return True

    def discover(
        self,
        tokens: Sequence[str],
        persisted: Iterable[AccessoryRecord] = (),
    ) -> DiscoveryReport:
        """Resolve, reconcile and register every token in *tokens*.

        A failing token is recorded in the report and the pass continues
        with the next one.
        """

        persisted = list(persisted)
        report = DiscoveryReport()
        seen: set[str] = set()
        for token in tokens:
            try:
                address = self._resolve(token)
                record, is_new = self.reconcile(address, persisted)
                if record.uuid in seen:
                    self._log.info("Skipping duplicate scoreboard token %s (%s)", token, address)
                    continue
                if is_new:
                    self._log.info("Adding new accessory with IP: %s", address)
                    self.register(record)
                    report.created.append(record)
                else:
                    self._log.info("Restoring existing accessory from cache: %s", record.display_name)
                    report.restored.append(record)
                seen.add(record.uuid)
                report.records.append(record)
                report.addresses[record.uuid] = address
            except ScoreboardError as exc:
                self._fail(report, token, exc)
            except Exception as exc:  # host callbacks are foreign code
                self._log.exception("unexpected failure for token %r", token)
                report.failures.append(DiscoveryFailure(token, exc))

        if report.failures:
            self._log.warning(
                "discovery finished with %d failure(s): %s",
                len(report.failures),
                "; ".join(str(failure) for failure in report.failures),
            )
        return report

    def _fail(self, report: DiscoveryReport, token: str, exc: Exception) -> None:
        self._log.warning("scoreboard token %r skipped: %s", token, exc)
        report.failures.append(DiscoveryFailure(token, exc))
