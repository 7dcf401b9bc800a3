import hashlib
import logging
from pathlib import Path

from mediabill.models.snapshot import DeliverySnapshot, SnapshotKey
from mediabill.repositories.base import DeliverySnapshotRepository

logger = logging.getLogger(__name__)


class LocalDeliverySnapshotRepository(DeliverySnapshotRepository):
    """One JSON file per key; exclusive creation makes the first writer win.

    File names carry the readable slug plus a digest of the full key, since
    the slug alone is lossy.
    """

    def __init__(self, base_dir: str) -> None:
        self.base_dir = Path(base_dir)
        self.base_dir.mkdir(parents=True, exist_ok=True)

    def _path(self, key: SnapshotKey) -> Path:
        digest = hashlib.sha256(key.model_dump_json().encode("utf-8")).hexdigest()
        return self.base_dir / f"{key.slug}_{digest[:32]}.json"

    def _read(self, path: Path, key: SnapshotKey) -> DeliverySnapshot | None:
        snapshot = DeliverySnapshot.model_validate_json(path.read_text(encoding="utf-8"))
        if snapshot.key != key:
            logger.warning("Snapshot file %s holds key %s, not %s; ignoring it", path.name, snapshot.key, key)
            return None
        return snapshot

    def get(self, key: SnapshotKey) -> DeliverySnapshot | None:
        path = self._path(key)
        if not path.exists():
            return None
        logger.debug("Reading snapshot from %s", path.resolve())
        return self._read(path, key)

    def put_if_absent(self, snapshot: DeliverySnapshot) -> DeliverySnapshot:
        path = self._path(snapshot.key)
        try:
            with path.open("x", encoding="utf-8") as fh:
                fh.write(snapshot.model_dump_json())
        except FileExistsError:
            logger.debug("Snapshot file %s already exists, keeping first", path.name)
            stored = self._read(path, snapshot.key)
            if stored is None:
                raise ValueError(f"Snapshot file {path.name} belongs to another key") from None
            return stored
        logger.debug("Saved snapshot to %s", path.resolve())
        return snapshot.model_copy(deep=True)

    def delete(self, key: SnapshotKey) -> None:
        self._path(key).unlink(missing_ok=True)
        logger.debug("Deleted snapshot %s", key.slug)
