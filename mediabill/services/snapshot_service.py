from __future__ import annotations

import logging
import threading
from datetime import datetime, timezone

from mediabill.models.schedule import ScheduleMonth
from mediabill.models.snapshot import DeliverySnapshot, SnapshotKey
from mediabill.repositories.base import DeliverySnapshotRepository

logger = logging.getLogger(__name__)


class DeliverySnapshotService:
    """Freezes the first delivery schedule computed for a campaign key.

    Later recomputes, including switches to manual billing, never change what
    is reported for that key. A new key (other dates or plan) drops the old
    snapshot so the next capture starts fresh.
    """

    def __init__(self, repo: DeliverySnapshotRepository) -> None:
        self.repo = repo
        self.active_key: SnapshotKey | None = None
        self._lock = threading.Lock()

    def _activate(self, key: SnapshotKey) -> None:
        with self._lock:
            previous = self.active_key
            if previous == key:
                return
            self.active_key = key
        if previous is not None:
            self.repo.delete(previous)
            logger.info("Delivery snapshot key changed from %s to %s, old snapshot cleared", previous.slug, key.slug)

    def capture(self, key: SnapshotKey, live: list[ScheduleMonth]) -> list[ScheduleMonth]:
        self._activate(key)
        if not live:
            logger.debug("Empty delivery schedule for %s, nothing captured", key.slug)
            return []
        candidate = DeliverySnapshot(
            key=key,
            months=[m.model_copy(deep=True) for m in live],
            captured_at=datetime.now(timezone.utc),
        )
        stored = self.repo.put_if_absent(candidate)
        if stored.captured_at == candidate.captured_at:
            logger.info("Delivery snapshot captured for %s (%d months)", key.slug, len(stored.months))
        return stored.months

    def get(self, key: SnapshotKey) -> list[ScheduleMonth] | None:
        snapshot = self.repo.get(key)
        if snapshot is None:
            return None
        return snapshot.months

    def resolve(self, key: SnapshotKey, live: list[ScheduleMonth]) -> list[ScheduleMonth]:
        """The delivery schedule to report: the frozen one if captured, else the live one."""
        self._activate(key)
        frozen = self.get(key)
        if frozen is not None:
            return frozen
        return [m.model_copy(deep=True) for m in live]

    def clear(self) -> None:
        with self._lock:
            key, self.active_key = self.active_key, None
        if key is not None:
            self.repo.delete(key)
            logger.info("Delivery snapshot cleared for %s", key.slug)
