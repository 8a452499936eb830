"""
State Store - YAML file of Tracked State records.

Records are keyed by an instance name chosen by the caller. Each record
holds the entity type name and the flat attribute mapping returned by the
controller's last successful operation.
"""

import logging
import os
import tempfile
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import yaml

logger = logging.getLogger(__name__)

STATE_VERSION = 1


@dataclass
class InstanceRecord:
    """Tracked State of one entity instance."""

    name: str
    type_name: str
    state: Dict[str, Any]

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type_name, "state": dict(self.state)}


class StateStore:
    """File-backed store of instance records."""

    def __init__(self, path: str):
        self.path = path

    def _load(self) -> Dict[str, Any]:
        if not os.path.exists(self.path):
            return {"version": STATE_VERSION, "instances": {}}

        with open(self.path, "r") as f:
            data = yaml.safe_load(f) or {}

        version = data.get("version", STATE_VERSION)
        if version != STATE_VERSION:
            raise ValueError(
                f"Unsupported state file version {version} in {self.path}"
            )
        data.setdefault("instances", {})
        return data

    def _save(self, data: Dict[str, Any]) -> None:
        directory = os.path.dirname(os.path.abspath(self.path))
        fd, tmp_path = tempfile.mkstemp(dir=directory, suffix=".tmp")
        try:
            with os.fdopen(fd, "w") as f:
                yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)
            os.replace(tmp_path, self.path)
        except Exception:
            os.unlink(tmp_path)
            raise

    def get(self, name: str) -> Optional[InstanceRecord]:
        """Get the record for an instance, or None if it is not tracked."""
        entry = self._load()["instances"].get(name)
        if entry is None:
            return None
        return InstanceRecord(name=name, type_name=entry["type"], state=entry["state"])

    def put(self, record: InstanceRecord) -> None:
        """Store or overwrite an instance record."""
        data = self._load()
        data["instances"][record.name] = record.to_dict()
        self._save(data)
        logger.debug(f"Saved state for {record.name} ({record.type_name})")

    def remove(self, name: str) -> bool:
        """
        Erase an instance record.

        Returns:
            True if a record was removed, False if none existed
        """
        data = self._load()
        if data["instances"].pop(name, None) is None:
            return False
        self._save(data)
        logger.debug(f"Removed state for {name}")
        return True

    def list(self) -> List[InstanceRecord]:
        """All tracked instances, in file order."""
        return [
            InstanceRecord(name=name, type_name=entry["type"], state=entry["state"])
            for name, entry in self._load()["instances"].items()
        ]
