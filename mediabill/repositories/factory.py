import logging

from mediabill.repositories.base import DeliverySnapshotRepository
from mediabill.settings import settings

logger = logging.getLogger(__name__)


def get_snapshot_repository() -> DeliverySnapshotRepository:
    backend = settings.snapshot_backend

    if backend == "memory":
        from mediabill.repositories.memory import InMemoryDeliverySnapshotRepository

        logger.info("Using snapshot backend: memory")
        return InMemoryDeliverySnapshotRepository()

    if backend == "local":
        from mediabill.repositories.local import LocalDeliverySnapshotRepository

        logger.info("Using snapshot backend: local path=%s", settings.snapshot_local_path)
        return LocalDeliverySnapshotRepository(settings.snapshot_local_path)

    raise ValueError(f"Unsupported snapshot backend: {backend}")
