from abc import ABC, abstractmethod

from mediabill.models.snapshot import DeliverySnapshot, SnapshotKey


class DeliverySnapshotRepository(ABC):
    @abstractmethod
    def get(self, key: SnapshotKey) -> DeliverySnapshot | None: ...

    @abstractmethod
    def put_if_absent(self, snapshot: DeliverySnapshot) -> DeliverySnapshot:
        """Store the snapshot unless one exists for its key; return whichever is stored."""
        ...

    @abstractmethod
    def delete(self, key: SnapshotKey) -> None: ...
