import logging
import threading

from mediabill.models.snapshot import DeliverySnapshot, SnapshotKey
from mediabill.repositories.base import DeliverySnapshotRepository

logger = logging.getLogger(__name__)


class InMemoryDeliverySnapshotRepository(DeliverySnapshotRepository):
    def __init__(self) -> None:
        self._snapshots: dict[SnapshotKey, DeliverySnapshot] = {}
        self._lock = threading.Lock()

    def get(self, key: SnapshotKey) -> DeliverySnapshot | None:
        with self._lock:
            snapshot = self._snapshots.get(key)
        if snapshot is None:
            return None
        return snapshot.model_copy(deep=True)

    def put_if_absent(self, snapshot: DeliverySnapshot) -> DeliverySnapshot:
        with self._lock:
            stored = self._snapshots.get(snapshot.key)
            if stored is None:
                stored = snapshot.model_copy(deep=True)
                self._snapshots[snapshot.key] = stored
                logger.debug("Stored snapshot %s", snapshot.key.slug)
            else:
                logger.debug("Snapshot %s already stored, keeping first", snapshot.key.slug)
            return stored.model_copy(deep=True)

    def delete(self, key: SnapshotKey) -> None:
        with self._lock:
            self._snapshots.pop(key, None)
        logger.debug("Deleted snapshot %s", key.slug)
