"""File-backed accessory host used by the command line tool."""

from __future__ import annotations

import json
import threading
from pathlib import Path
from typing import Dict, List, Optional

from .errors import ConfigError
from .identity import generate_uuid, is_valid_uuid
from .logging import get_logger
from .registry import AccessoryRecord

__all__ = ["JsonAccessoryCache"]


class JsonAccessoryCache:
    """Persist accessory records in a JSON file.

    Implements the :class:`~scoreboard.core.registry.AccessoryHost` protocol,
    so a discovery pass against the same file across runs behaves like a host
    restart: records written by one run are restored by the next.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self._lock = threading.Lock()
        self._log = get_logger("core.cache")
        self._records: Dict[str, AccessoryRecord] = self.load()

    def load(self) -> Dict[str, AccessoryRecord]:
        """Read records from disk; a missing file means an empty cache."""

        if not self.path.exists():
            return {}
        try:
            text = self.path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise ConfigError(f"{self.path}: cannot read accessory cache ({exc})") from exc
        try:
            raw = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ConfigError(f"{self.path}: invalid accessory cache ({exc})") from exc
        if not isinstance(raw, list):
            raise ConfigError(f"{self.path}: accessory cache must be a JSON list")
        records: Dict[str, AccessoryRecord] = {}
        for entry in raw:
            try:
                record = AccessoryRecord(
                    uuid=str(entry["uuid"]),
                    display_name=str(entry.get("displayName", entry["uuid"])),
                    context=dict(entry.get("context") or {}),
                )
            except (KeyError, TypeError, AttributeError, ValueError) as exc:
                raise ConfigError(f"{self.path}: malformed cache entry {entry!r}") from exc
            if not is_valid_uuid(record.uuid):
                raise ConfigError(f"{self.path}: cache entry has invalid uuid {record.uuid!r}")
            records[record.uuid] = record
        self._log.debug("loaded %d cached accessories from %s", len(records), self.path)
        return records

    def save(self) -> None:
        payload = [
            {"uuid": record.uuid, "displayName": record.display_name, "context": record.context}
            for record in self._records.values()
        ]
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        tmp.replace(self.path)

    def persisted(self) -> List[AccessoryRecord]:
        with self._lock:
            return list(self._records.values())

    # -- AccessoryHost -------------------------------------------------------

    def generate_uuid(self, data: str) -> str:
        return generate_uuid(data)

    def lookup_persisted(self, identity: str) -> Optional[AccessoryRecord]:
        with self._lock:
            return self._records.get(identity)

    def register_new(self, record: AccessoryRecord) -> None:
        with self._lock:
            self._records[record.uuid] = record
            self.save()
        self._log.info("registered accessory %s uuid=%s", record.display_name, record.uuid)
