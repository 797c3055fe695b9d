"""Tests for the timeline coalescer."""

from datetime import datetime

from arcdiary.services.coalescer import TimelineCoalescer, coalesce_timeline, has_gps_data
from conftest import parse_items, sample, trip, visit, walk_samples


class TestMerge:
    """Tests for merging adjacent visits."""

    def test_merge_within_window(self):
        """Test visits 10 minutes apart at the same place merge."""
        items = parse_items(
            visit("v1", "2024-03-10T10:00:00", "2024-03-10T11:00:00", place_id="p1", notes="first"),
            visit("v2", "2024-03-10T11:10:00", "2024-03-10T12:00:00", place_id="p1", notes="second"),
        )
        result = coalesce_timeline(items)

        assert len(result) == 1
        merged = result[0]
        assert merged.id == "v1"
        assert merged.end == datetime(2024, 3, 10, 12, 0)
        assert merged.merged_count == 2
        assert merged.annotations.has_collapsed_segments
        assert [n.body for n in merged.notes] == ["first", "second"]

    def test_no_merge_beyond_window(self):
        """Test visits 20 minutes apart stay separate."""
        items = parse_items(
            visit("v1", "2024-03-10T10:00:00", "2024-03-10T11:00:00", place_id="p1", notes="first"),
            visit("v2", "2024-03-10T11:20:00", "2024-03-10T12:00:00", place_id="p1", notes="second"),
        )
        result = coalesce_timeline(items)
        assert [d.id for d in result] == ["v1", "v2"]

    def test_gap_from_own_end(self):
        """Test the gap is measured from the previous visit's own end."""
        items = parse_items(
            visit("v1", "2024-03-10T10:00:00", "2024-03-10T10:30:00", place_id="p1"),
            visit("v2", "2024-03-10T10:40:00", "2024-03-10T11:00:00", place_id="p1"),
            visit("v3", "2024-03-10T11:10:00", "2024-03-10T11:20:00", place_id="p1"),
        )
        result = coalesce_timeline(items)

        assert [d.id for d in result] == ["v1", "v3"]
        assert result[0].end == datetime(2024, 3, 10, 11, 0)
        assert result[0].merged_count == 2

    def test_no_merge_different_places(self):
        """Test visits to different places stay separate."""
        items = parse_items(
            visit("v1", "2024-03-10T10:00:00", "2024-03-10T11:00:00", place_id="p1"),
            visit("v2", "2024-03-10T11:05:00", "2024-03-10T12:00:00", place_id="p2"),
        )
        assert len(coalesce_timeline(items)) == 2

    def test_merge_by_proximity(self):
        """Test a visit without a place merges via a nearby named place."""
        items = parse_items(
            visit("v1", "2024-03-10T10:00:00", "2024-03-10T11:00:00", lat=50.0, lng=14.0, place_id="p1"),
            visit("v2", "2024-03-10T11:05:00", "2024-03-10T12:00:00", lat=50.0001, lng=14.0),
        )
        coalescer = TimelineCoalescer()
        result = coalescer.coalesce(items)

        assert len(result) == 1
        assert coalescer.effective_place_id(items[1]) == "p1"


class TestSuppression:
    """Tests for suppression of noise between visits to one place."""

    def test_zero_duration_visit(self):
        """Test a zero-length visit between two visits to one place is suppressed."""
        items = parse_items(
            visit("v1", "2024-03-10T10:00:00", "2024-03-10T11:00:00", place_id="p1"),
            visit("z", "2024-03-10T11:05:00", "2024-03-10T11:05:00", place_id="p2"),
            visit("v3", "2024-03-10T11:10:00", "2024-03-10T12:00:00", place_id="p1"),
        )
        result = coalesce_timeline(items)

        assert [d.id for d in result] == ["v1"]
        assert [i.id for i in result[0].annotations.suppressed_visits] == ["z"]
        assert result[0].suppressed_count == 1
        assert result[0].merged_count == 2

    def test_titled_zero_duration_visit_kept(self):
        """Test a zero-length visit with a custom title is kept."""
        items = parse_items(
            visit("v1", "2024-03-10T10:00:00", "2024-03-10T11:00:00", place_id="p1"),
            visit("z", "2024-03-10T11:05:00", "2024-03-10T11:05:00", place_id="p2", customTitle="Mailbox"),
            visit("v3", "2024-03-10T11:10:00", "2024-03-10T12:00:00", place_id="p1"),
        )
        assert "z" in [d.id for d in coalesce_timeline(items)]

    def test_unknown_trip_collapsed(self):
        """Test a short unknown trip between visits to one place is collapsed."""
        items = parse_items(
            visit("v1", "2024-03-10T10:00:00", "2024-03-10T11:00:00", place_id="p1"),
            trip("t", "2024-03-10T11:01:00", "2024-03-10T11:05:00", activity="unknown"),
            visit("v3", "2024-03-10T11:06:00", "2024-03-10T12:00:00", place_id="p1"),
        )
        result = coalesce_timeline(items)

        assert [d.id for d in result] == ["v1"]
        assert [i.id for i in result[0].annotations.collapsed_unknowns] == ["t"]

    def test_real_walk_kept(self):
        """Test a genuine walk between visits is not collapsed."""
        samples = walk_samples(50.0, 14.0, ["2024-03-10T11:01:00", "2024-03-10T11:03:00", "2024-03-10T11:05:00"])
        items = parse_items(
            visit("v1", "2024-03-10T10:00:00", "2024-03-10T11:00:00", place_id="p1"),
            trip("t", "2024-03-10T11:01:00", "2024-03-10T11:05:00", samples=samples),
            visit("v3", "2024-03-10T11:06:00", "2024-03-10T12:00:00", place_id="p1"),
        )
        assert [d.id for d in coalesce_timeline(items)] == ["v1", "t", "v3"]

    def test_noted_trip_kept(self):
        """Test a trip with a user note is never collapsed."""
        items = parse_items(
            visit("v1", "2024-03-10T10:00:00", "2024-03-10T11:00:00", place_id="p1"),
            trip("t", "2024-03-10T11:01:00", "2024-03-10T11:05:00", activity="unknown", notes="Fetched the mail"),
            visit("v3", "2024-03-10T11:06:00", "2024-03-10T12:00:00", place_id="p1"),
        )
        assert "t" in [d.id for d in coalesce_timeline(items)]


class TestContainmentAndGaps:
    """Tests for contained items and data gaps."""

    def test_contained_trip_dropped(self):
        """Test an item inside a visit window is not shown."""
        items = parse_items(
            visit("v", "2024-03-10T10:00:00", "2024-03-10T12:00:00", place_id="p1"),
            trip("t", "2024-03-10T10:30:00", "2024-03-10T11:00:00"),
        )
        assert [d.id for d in coalesce_timeline(items)] == ["v"]

    def test_custom_containment(self):
        """Test the containment primitive can be replaced."""
        items = parse_items(
            visit("v", "2024-03-10T10:00:00", "2024-03-10T12:00:00", place_id="p1"),
            trip("t", "2024-03-10T10:30:00", "2024-03-10T11:00:00"),
        )
        result = TimelineCoalescer(containment=lambda _: set()).coalesce(items)
        assert [d.id for d in result] == ["v", "t"]

    def test_data_gap_flag(self):
        """Test items without any GPS data are flagged."""
        items = parse_items(
            trip("gap", "2024-03-10T10:00:00", "2024-03-10T10:30:00", activity="unknown"),
            trip("t", "2024-03-10T11:00:00", "2024-03-10T11:30:00",
                 samples=[sample(50.0, 14.0), sample(50.01, 14.0)]),
        )
        result = coalesce_timeline(items)
        flags = {d.id: d.annotations.data_gap for d in result}
        assert flags == {"gap": True, "t": False}
        assert not has_gps_data(items[0])

    def test_sorted_by_start(self):
        """Test output is chronological regardless of input order."""
        items = parse_items(
            visit("late", "2024-03-10T15:00:00", "2024-03-10T16:00:00", place_id="p2"),
            visit("early", "2024-03-10T09:00:00", "2024-03-10T10:00:00", place_id="p1"),
        )
        assert [d.id for d in coalesce_timeline(items)] == ["early", "late"]

    def test_empty(self):
        """Test no items give no output."""
        assert coalesce_timeline([]) == []


class TestProperties:
    """Tests for idempotence and immutability."""

    def _noisy_day(self):
        return parse_items(
            visit("home", "2024-03-10T08:00:00", "2024-03-10T09:00:00", place_id="p1", notes="coffee"),
            trip("inside", "2024-03-10T08:10:00", "2024-03-10T08:20:00", activity="unknown"),
            visit("home2", "2024-03-10T09:05:00", "2024-03-10T09:30:00", place_id="p1", notes="more coffee"),
            visit("shop", "2024-03-10T10:00:00", "2024-03-10T11:00:00", place_id="p2"),
        )

    def test_idempotent(self):
        """Test coalescing the canonical output again changes nothing."""
        once = coalesce_timeline(self._noisy_day())
        twice = coalesce_timeline([d.item for d in once])
        assert [d.id for d in twice] == [d.id for d in once]
        assert [d.end for d in twice] == [d.item.end for d in once]

    def test_idempotent_with_contained_item_inside_drift_run(self):
        """Test a contained item does not keep a drift run apart."""
        walk = walk_samples(50.0, 14.0, ["2024-03-10T10:01:00", "2024-03-10T10:02:00"], step=0.01)
        items = parse_items(
            visit("v", "2024-03-10T10:00:00", "2024-03-10T10:05:00"),
            trip("n", "2024-03-10T10:01:00", "2024-03-10T10:02:00", samples=walk),
            trip("b", "2024-03-10T10:05:10", "2024-03-10T10:05:40"),
            trip("c", "2024-03-10T10:05:50", "2024-03-10T10:06:20"),
        )
        once = coalesce_timeline(items)
        twice = coalesce_timeline([d.item for d in once])

        assert [d.id for d in once] == ["v"]
        assert once[0].annotations.drift_cluster_size == 3
        assert [d.id for d in twice] == [d.id for d in once]

    def test_does_not_mutate_input(self):
        """Test canonical items are unchanged and annotations are fresh each run."""
        items = self._noisy_day()
        snapshot = list(items)

        first = coalesce_timeline(items)
        second = coalesce_timeline(items)

        assert items == snapshot
        assert items[0].end == datetime(2024, 3, 10, 9, 0)
        assert [n.body for n in items[0].notes] == ["coffee"]
        assert first[0].merged_count == second[0].merged_count == 2
        assert first[0] is not second[0]
