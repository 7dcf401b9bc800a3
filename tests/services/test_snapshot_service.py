from datetime import date
from decimal import Decimal
from unittest.mock import MagicMock

from mediabill.models.burst import Channel
from mediabill.models.snapshot import SnapshotKey
from mediabill.repositories.memory import InMemoryDeliverySnapshotRepository
from mediabill.services.schedule_service import ScheduleService
from mediabill.services.snapshot_service import DeliverySnapshotService

KEY = SnapshotKey(campaign_start=date(2025, 1, 1), campaign_end=date(2025, 3, 31), plan_identity="v1")
OTHER_KEY = SnapshotKey(campaign_start=date(2025, 1, 1), campaign_end=date(2025, 4, 30), plan_identity="v1")


class TestDeliverySnapshotService:
    def setup_method(self):
        self.repo = InMemoryDeliverySnapshotRepository()
        self.service = DeliverySnapshotService(self.repo)

    def test_first_capture_wins(self, sample_schedules):
        first = self.service.capture(KEY, sample_schedules.delivery)

        changed = [m.model_copy(deep=True) for m in sample_schedules.delivery]
        changed[0].media_costs[Channel.SEARCH] = Decimal("1")
        second = self.service.capture(KEY, changed)

        assert second == first
        assert self.service.get(KEY) == sample_schedules.delivery

    def test_stable_across_recompute(self, make_burst, make_line_item, sample_line_items, sample_schedules):
        self.service.capture(KEY, sample_schedules.delivery)

        extra = make_line_item(make_burst(line_item_id="radio-1", channel=Channel.RADIO))
        recomputed = ScheduleService().compute_for_line_items(
            [*sample_line_items, extra], date(2025, 1, 1), date(2025, 3, 31)
        )
        assert self.service.resolve(KEY, recomputed.delivery) == sample_schedules.delivery

    def test_empty_schedule_not_captured(self):
        assert self.service.capture(KEY, []) == []
        assert self.service.get(KEY) is None

    def test_resolve_without_snapshot_uses_live(self, sample_schedules):
        assert self.service.resolve(KEY, sample_schedules.delivery) == sample_schedules.delivery

    def test_key_change_drops_old_snapshot(self, sample_schedules):
        self.service.capture(KEY, sample_schedules.delivery)
        self.service.capture(OTHER_KEY, sample_schedules.delivery[:1])

        assert self.service.get(KEY) is None
        assert self.service.get(OTHER_KEY) == sample_schedules.delivery[:1]
        assert self.service.active_key == OTHER_KEY

    def test_returning_to_old_key_recaptures(self, sample_schedules):
        self.service.capture(KEY, sample_schedules.delivery)
        self.service.capture(OTHER_KEY, sample_schedules.delivery)
        fresh = self.service.capture(KEY, sample_schedules.delivery[:2])
        assert fresh == sample_schedules.delivery[:2]

    def test_clear(self, sample_schedules):
        self.service.capture(KEY, sample_schedules.delivery)
        self.service.clear()
        assert self.service.get(KEY) is None
        assert self.service.active_key is None

    def test_uses_put_if_absent(self, sample_schedules):
        repo = MagicMock()
        repo.put_if_absent.side_effect = lambda snapshot: snapshot
        service = DeliverySnapshotService(repo)
        service.capture(KEY, sample_schedules.delivery)
        repo.put_if_absent.assert_called_once()
        repo.delete.assert_not_called()
