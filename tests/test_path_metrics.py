"""Tests for path metrics."""

from datetime import datetime

import pytest

from arcdiary.models.location import Sample
from arcdiary.models.timeline import TimelineItem
from arcdiary.services.path_metrics import duration_seconds, elevation_gain, path_distance, trip_distance


class TestPathDistance:
    """Tests for path_distance."""

    def test_two_points(self):
        """Test a short diagonal path."""
        samples = [Sample(10.0, 10.0, 0.0), Sample(10.001, 10.001, 5.0)]
        assert path_distance(samples) > 0

    def test_single_point(self):
        """Test one located sample gives no distance."""
        assert path_distance([Sample(10.0, 10.0)]) is None

    def test_skips_unlocated_samples(self):
        """Test samples without coordinates are ignored."""
        samples = [Sample(10.0, 10.0), Sample(altitude=3.0), Sample(10.001, 10.0)]
        assert path_distance(samples) == pytest.approx(111.2, abs=0.5)

    def test_no_movement(self):
        """Test a stationary path gives no distance."""
        assert path_distance([Sample(10.0, 10.0), Sample(10.0, 10.0)]) is None


class TestElevationGain:
    """Tests for elevation_gain."""

    def test_zero_altitude_is_valid(self):
        """Test a climb from 0 m counts fully."""
        samples = [Sample(10.0, 10.0, 0.0), Sample(10.001, 10.001, 5.0)]
        assert elevation_gain(samples) == pytest.approx(5.0)

    def test_only_climbs_count(self):
        """Test descents do not reduce the gain."""
        samples = [Sample(altitude=a) for a in (100.0, 110.0, 90.0, 95.0)]
        assert elevation_gain(samples) == pytest.approx(15.0)

    def test_descent_only(self):
        """Test a pure descent has no gain."""
        samples = [Sample(altitude=a) for a in (100.0, 90.0)]
        assert elevation_gain(samples) is None


class TestItemHelpers:
    """Tests for per-item helpers."""

    def test_trip_distance_needs_two_samples(self):
        """Test a single sample gives zero distance."""
        item = TimelineItem(id="t", is_visit=False, samples=(Sample(10.0, 10.0),))
        assert trip_distance(item) == 0.0

    def test_duration_seconds(self):
        """Test duration from start and end."""
        item = TimelineItem(
            id="t", is_visit=False, start=datetime(2024, 3, 10, 10), end=datetime(2024, 3, 10, 10, 2)
        )
        assert duration_seconds(item) == 120.0

    def test_duration_missing_end(self):
        """Test a missing timestamp gives zero."""
        item = TimelineItem(id="t", is_visit=False, start=datetime(2024, 3, 10, 10))
        assert duration_seconds(item) == 0.0
