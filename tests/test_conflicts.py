"""Tests for multi-block overlap detection."""

import pytest

from clinic_scheduler.engine.conflicts import ConflictDetector
from clinic_scheduler.schemas.booking_schema import BookingStatus
from tests.conftest import CONSULTATION, DENTAL, MONDAY, SURGERY, TUESDAY, make_booking, slot_id_at


class TestReferenceScenario:
    """60-minute request against a booking holding the 10:00 block."""

    def setup_method(self):
        self.existing = [make_booking(booking_id=1, start="10:00", service_id=CONSULTATION)]

    def test_same_start_conflicts(self, conflicts):
        assert conflicts.has_conflict(MONDAY, slot_id_at("10:00"), 2, self.existing)

    def test_earlier_start_spanning_booked_block_conflicts(self, conflicts):
        assert conflicts.has_conflict(MONDAY, slot_id_at("09:30"), 2, self.existing)

    def test_start_after_booked_block_is_free(self, conflicts):
        assert not conflicts.has_conflict(MONDAY, slot_id_at("10:30"), 2, self.existing)

    def test_other_dates_are_independent(self, conflicts):
        assert not conflicts.has_conflict(TUESDAY, slot_id_at("10:00"), 2, self.existing)


class TestBlockRanges:
    def test_existing_multi_block_booking_holds_every_block(self, conflicts):
        existing = [make_booking(start="10:00", service_id=DENTAL)]
        assert conflicts.booked_slot_ids(MONDAY, existing) == {slot_id_at("10:00"), slot_id_at("10:30")}
        assert conflicts.has_conflict(MONDAY, slot_id_at("10:30"), 1, existing)
        assert not conflicts.has_conflict(MONDAY, slot_id_at("11:00"), 1, existing)

    @pytest.mark.parametrize(
        "first, second",
        [("09:00", "10:00"), ("10:00", "11:00"), ("09:00", "14:00"), ("15:00", "16:00")],
    )
    def test_disjoint_two_block_ranges_never_conflict(self, conflicts, first, second):
        a = make_booking(booking_id=1, start=first, service_id=DENTAL)
        b = make_booking(booking_id=2, start=second, service_id=DENTAL)
        assert not conflicts.has_conflict(MONDAY, a.start_slot_id, 2, [b])
        assert not conflicts.has_conflict(MONDAY, b.start_slot_id, 2, [a])

    @pytest.mark.parametrize(
        "first, second", [("09:00", "09:30"), ("10:00", "10:00"), ("11:30", "11:00")]
    )
    def test_overlapping_ranges_always_conflict(self, conflicts, first, second):
        a = make_booking(booking_id=1, start=first, service_id=DENTAL)
        b = make_booking(booking_id=2, start=second, service_id=DENTAL)
        assert conflicts.has_conflict(MONDAY, a.start_slot_id, 2, [b])
        assert conflicts.has_conflict(MONDAY, b.start_slot_id, 2, [a])

    def test_range_past_last_slot_conflicts(self, conflicts):
        assert conflicts.has_conflict(MONDAY, slot_id_at("16:30"), 2, [])
        assert not conflicts.has_conflict(MONDAY, slot_id_at("16:30"), 1, [])

    def test_unknown_start_slot_conflicts(self, conflicts):
        assert conflicts.has_conflict(MONDAY, 999, 1, [])

    def test_existing_booking_near_close_is_clipped(self, conflicts):
        existing = [make_booking(start="16:00", service_id=SURGERY)]
        assert conflicts.booked_slot_ids(MONDAY, existing) == {slot_id_at("16:00"), slot_id_at("16:30")}


class TestExclusion:
    def test_excluded_booking_does_not_block_itself(self, conflicts):
        existing = [make_booking(booking_id=7, start="10:00", service_id=DENTAL)]
        assert conflicts.has_conflict(MONDAY, slot_id_at("10:30"), 2, existing)
        assert not conflicts.has_conflict(
            MONDAY, slot_id_at("10:30"), 2, existing, exclude_booking_id=7
        )

    def test_exclusion_only_skips_that_booking(self, conflicts):
        existing = [
            make_booking(booking_id=7, start="10:00"),
            make_booking(booking_id=8, start="11:00"),
        ]
        assert conflicts.has_conflict(
            MONDAY, slot_id_at("10:30"), 2, existing, exclude_booking_id=7
        )


class TestCancelledPolicy:
    def test_cancelled_booking_still_blocks_by_default(self, conflicts):
        existing = [make_booking(start="10:00", status=BookingStatus.CANCELLED)]
        assert conflicts.has_conflict(MONDAY, slot_id_at("10:00"), 1, existing)

    def test_cancelled_booking_frees_slot_when_enabled(self, catalog, durations):
        detector = ConflictDetector(catalog, durations, cancelled_frees_slot=True)
        existing = [make_booking(start="10:00", status=BookingStatus.CANCELLED)]
        assert not detector.has_conflict(MONDAY, slot_id_at("10:00"), 1, existing)

    def test_completed_booking_always_blocks(self, catalog, durations):
        detector = ConflictDetector(catalog, durations, cancelled_frees_slot=True)
        existing = [make_booking(start="10:00", status=BookingStatus.COMPLETED)]
        assert detector.has_conflict(MONDAY, slot_id_at("10:00"), 1, existing)
