# replay.py
# Content-addressed replay cache.
#
# A successful fresh run is stored under a fingerprint of (location, goal).
# Two tests with the same intent against the same page share one record, so
# no test names need to be tracked. Records are written whole and never
# merged; a re-run overwrites.

import hashlib

from pydantic import ValidationError

from page_pilot.models import ReplayRecord, StepRecord
from page_pilot.store import KeyValueStore


def _sha256(data: str) -> str:
    return hashlib.sha256(data.encode("utf-8")).hexdigest()


def normalize_location(location: str) -> str:
    return location.rstrip("/")


def fingerprint(location: str, goal: str) -> str:
    """Hex SHA-256 of the normalized location followed by the goal."""
    return _sha256(normalize_location(location) + goal)


class ReplayStore:
    """
    Reads and writes ReplayRecords through a KeyValueStore.

    ``namespace`` optionally scopes records (for example per test module);
    with no namespace every caller shares one global keyspace.
    """

    def __init__(self, store: KeyValueStore, namespace: str | None = None) -> None:
        self._store = store
        self._namespace = namespace.strip("/") if namespace else None

    def key_for(self, location: str, goal: str) -> str:
        digest = fingerprint(location, goal)
        return f"{self._namespace}/{digest}" if self._namespace else digest

    def exists(self, location: str, goal: str) -> bool:
        return self._store.get(self.key_for(location, goal)) is not None

    def load(self, location: str, goal: str) -> list[StepRecord] | None:
        """
        Return the stored sequence, or None if there is nothing usable.

        Missing and corrupt records are indistinguishable to the caller.
        """
        raw = self._store.get(self.key_for(location, goal))
        if raw is None:
            return None
        try:
            record = ReplayRecord.model_validate_json(raw)
        except (ValidationError, ValueError, TypeError):
            return None
        return record.action_sequence

    def save(self, location: str, goal: str, sequence: list[StepRecord]) -> str:
        """Write the full record, replacing any earlier one. Returns the key."""
        key = self.key_for(location, goal)
        record = ReplayRecord(location=location, goal=goal, action_sequence=list(sequence))
        self._store.put(key, record.model_dump_json(by_alias=True, indent=2).encode("utf-8"))
        return key
