"""Tests for transfer snapshot change detection."""
from datetime import datetime, timezone

from conftest import make_record

from transfer_feed.domain.transfers import Changed, Unchanged, detect_changes
from transfer_feed.domain.transfers.models import build_snapshot


class TestDetectChanges:
    def test_empty_fetch_against_empty_snapshot_is_unchanged(self):
        result = detect_changes({}, [])
        assert isinstance(result, Unchanged)
        assert result.snapshot == {}

    def test_first_observation_reports_every_record_as_new(self):
        records = [make_record("t1"), make_record("t2")]
        result = detect_changes({}, records)
        assert isinstance(result, Changed)
        assert result.has_new
        assert not result.has_updated
        assert list(result.records) == records

    def test_superset_with_new_id_is_changed(self):
        previous = build_snapshot([make_record("t1")])
        fetched = [make_record("t2"), make_record("t1")]
        result = detect_changes(previous, fetched)
        assert isinstance(result, Changed)
        assert result.has_new
        assert [record.id for record in result.records] == ["t2", "t1"]

    def test_same_ids_same_status_and_timestamp_is_unchanged(self):
        stamp = datetime(2026, 10, 2, 8, 30, tzinfo=timezone.utc)
        previous = build_snapshot([make_record("t1", updated_at=stamp), make_record("t2")])
        fetched = [make_record("t1", updated_at=stamp), make_record("t2")]
        assert isinstance(detect_changes(previous, fetched), Unchanged)

    def test_single_status_change_returns_full_sequence(self):
        previous = build_snapshot([make_record("t1"), make_record("t2"), make_record("t3")])
        fetched = [make_record("t1"), make_record("t2", status="completed"), make_record("t3")]
        result = detect_changes(previous, fetched)
        assert isinstance(result, Changed)
        assert result.has_updated
        assert not result.has_new
        assert list(result.records) == fetched

    def test_updated_at_change_is_detected(self):
        previous = build_snapshot([make_record("t1")])
        fetched = [make_record("t1", updated_at=datetime(2026, 10, 3, tzinfo=timezone.utc))]
        assert isinstance(detect_changes(previous, fetched), Changed)

    def test_untracked_field_differences_are_ignored(self):
        previous = build_snapshot([make_record("t1", label="rent")])
        fetched = [make_record("t1", label="Rent ")]
        assert isinstance(detect_changes(previous, fetched), Unchanged)

    def test_dropped_ids_leave_the_new_snapshot(self):
        previous = build_snapshot([make_record("t1"), make_record("t2")])
        result = detect_changes(previous, [make_record("t2")])
        assert isinstance(result, Unchanged)
        assert set(result.snapshot) == {"t2"}

    def test_snapshot_holds_latest_observation(self):
        previous = build_snapshot([make_record("t1")])
        result = detect_changes(previous, [make_record("t1", status="pending")])
        assert result.snapshot["t1"].status == "pending"
