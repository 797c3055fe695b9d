"""Tests for daily and monthly statistics."""

from datetime import datetime

import pytest

from arcdiary.models.diary import DiaryNote, Entry
from arcdiary.services.stats import (
    MonthlyAccumulator,
    activity_signature,
    daily_stats,
    filter_notes_for_day,
    fold_day,
    location_totals,
    monthly_stats,
)


def _trip(activity="walking", distance=1000.0, duration=600.0, start=datetime(2024, 3, 10, 10, 0),
          body="", lat=None, lng=None, elevation_gain=None):
    return DiaryNote(
        note_id=None,
        date=start,
        body=body,
        location=activity.capitalize(),
        is_visit=False,
        activity_type=activity,
        latitude=lat,
        longitude=lng,
        duration=duration,
        distance=distance,
        elevation_gain=elevation_gain,
        start=start,
    )


def _visit(lat=50.0, lng=14.0, radius=50.0, body=""):
    return DiaryNote(
        note_id=None,
        date=datetime(2024, 3, 10, 9, 0),
        body=body,
        location="Home",
        is_visit=True,
        activity_type="stationary",
        latitude=lat,
        longitude=lng,
        radius_meters=radius,
        duration=3600.0,
    )


def _entry(location, day_key, duration, kind="visit"):
    return Entry(
        entry_id=f"{location}-{day_key}",
        day_key=day_key,
        start=None,
        end=None,
        duration=duration,
        kind=kind,
        activity_type="stationary" if kind == "visit" else "walking",
        location=location,
    )


class TestDailyStats:
    """Tests for daily_stats."""

    def test_sums_per_category(self):
        """Test trips are summed per category."""
        stats = daily_stats([
            _trip("walking", 1000.0, 600.0, elevation_gain=10.0),
            _trip("Walking", 500.0, 300.0, start=datetime(2024, 3, 10, 12, 0)),
            _trip("cycling", 4000.0, 900.0),
        ])
        assert set(stats) == {"walking", "cycling"}
        assert stats["walking"].distance == pytest.approx(1500.0)
        assert stats["walking"].duration == pytest.approx(900.0)
        assert stats["walking"].elevation_gain == pytest.approx(10.0)
        assert stats["walking"].count == 2

    def test_excludes_visits_stationary_and_zero_distance(self):
        """Test visits, stationary trips and distance-less categories are left out."""
        stats = daily_stats([
            _visit(),
            _trip("stationary", 100.0),
            _trip("teleport", 100.0),
            _trip("running", None, 600.0),
        ])
        assert stats == {}


class TestMonthlyStats:
    """Tests for monthly_stats."""

    def test_duplicate_counted_once(self):
        """Test the same activity on two days counts once."""
        start = datetime(2024, 3, 10, 23, 50)
        month = {
            "2024-03-11": [_trip(distance=2500.4, duration=1800.2, start=start)],
            "2024-03-10": [_trip(distance=2500.4, duration=1800.2, start=start)],
        }
        stats = monthly_stats(month)
        assert stats["walking"].count == 1
        assert stats["walking"].distance == pytest.approx(2500.4)

    def test_distinct_activities_counted(self):
        """Test different activities are all counted."""
        month = {
            "2024-03-10": [_trip(start=datetime(2024, 3, 10, 10, 0))],
            "2024-03-11": [_trip(start=datetime(2024, 3, 11, 10, 0))],
        }
        assert monthly_stats(month)["walking"].count == 2

    def test_without_signature_always_counted(self):
        """Test activities without a start are never treated as duplicates."""
        month = {
            "2024-03-10": [_trip(start=None)],
            "2024-03-11": [_trip(start=None)],
        }
        assert monthly_stats(month)["walking"].count == 2

    def test_fold_tracks_duplicates(self):
        """Test the accumulator records seen signatures."""
        note = _trip()
        acc = fold_day(MonthlyAccumulator(), [note])
        acc = fold_day(acc, [note])
        assert acc.duplicates == 1
        assert activity_signature(note, "walking") in acc.seen

    def test_signature(self):
        """Test the signature rounds duration and distance."""
        note = _trip(distance=1000.4, duration=599.6)
        assert activity_signature(note, "walking") == ("walking", datetime(2024, 3, 10, 10, 0), 600, 1000)
        assert activity_signature(_trip(duration=None), "walking") is None


class TestFilterNotesForDay:
    """Tests for filter_notes_for_day."""

    def test_trip_at_visit_hidden(self):
        """Test a short trip starting inside a visit radius is hidden."""
        notes = [_visit(), _trip(distance=20.0, lat=50.0001, lng=14.0)]
        assert filter_notes_for_day(notes) == [notes[0]]

    def test_motorized_trip_kept(self):
        """Test motorized trips are kept near a visit."""
        notes = [_visit(), _trip("car", distance=20.0, lat=50.0001, lng=14.0)]
        assert len(filter_notes_for_day(notes)) == 2

    def test_long_trip_kept(self):
        """Test trips longer than twice the radius are kept."""
        notes = [_visit(), _trip(distance=500.0, lat=50.0001, lng=14.0)]
        assert len(filter_notes_for_day(notes)) == 2

    def test_radius_clamped(self):
        """Test a huge radius is capped at 150 m."""
        notes = [_visit(radius=1000.0), _trip(distance=20.0, lat=50.0018, lng=14.0)]
        assert len(filter_notes_for_day(notes)) == 2

    def test_notes_only(self):
        """Test only notes with a body remain when the flags are off."""
        notes = [
            _visit(body="Home sweet home"),
            _visit(lat=51.0, body=""),
            _trip(body="", lat=49.0, lng=14.0),
            _trip(body="Nice walk", lat=49.0, lng=14.0),
        ]
        visible = filter_notes_for_day(notes, include_all_locations=False, include_all_activities=False)
        assert [n.body for n in visible] == ["Home sweet home", "Nice walk"]


class TestLocationTotals:
    """Tests for location_totals."""

    def test_totals(self):
        """Test visits are aggregated per location name."""
        totals = location_totals([
            _entry("Home", "2024-03-11", 1800.0),
            _entry("Home", "2024-03-10", 3600.0),
            _entry("Cafe", "2024-03-10", 7200.0),
            _entry("Walking", "2024-03-10", 600.0, kind="activity"),
        ])
        assert [t.name for t in totals] == ["Cafe", "Home"]
        home = totals[1]
        assert home.visit_count == 2
        assert home.total_duration == pytest.approx(5400.0)
        assert (home.first_visit, home.last_visit) == ("2024-03-10", "2024-03-11")
