"""Tests for the per-cycle scan index.

Tests:
- Nearest-neighbour search (lower bound, left/right comparison, ties)
- Single-element and empty scans
- Peak reference mapping
- Building scan indices from flat arrays
- Input validation
"""

import numpy as np
import pytest

from alphasweep.exceptions import InvalidConfigurationError
from alphasweep.features import ScanIndex, build_scan_indices, nearest_peak_index


class TestNearestPeakIndex:
    """Test the Numba nearest-neighbour kernel."""

    def setup_method(self):
        self.mz = np.array([100.0, 100.5, 101.0, 102.0])

    def test_exact_match(self):
        """Exact position returns that peak."""
        assert nearest_peak_index(self.mz, 100.5) == 1

    def test_query_closer_to_left(self):
        """Left neighbour is returned when strictly closer."""
        assert nearest_peak_index(self.mz, 100.6) == 1
        assert nearest_peak_index(self.mz, 100.1) == 0

    def test_query_closer_to_right(self):
        """Right neighbour (lower bound) is returned when closer."""
        assert nearest_peak_index(self.mz, 100.9) == 2

    def test_tie_resolves_to_right(self):
        """Equal distance picks the first value >= query."""
        assert nearest_peak_index(self.mz, 100.25) == 1
        assert nearest_peak_index(self.mz, 101.5) == 3

    def test_query_below_all(self):
        """Query below the first peak returns the first peak."""
        assert nearest_peak_index(self.mz, 50.0) == 0

    def test_query_above_all(self):
        """Query beyond the last peak returns the last peak."""
        assert nearest_peak_index(self.mz, 500.0) == 3

    def test_single_element(self):
        """Single-element scan always returns that element."""
        mz = np.array([250.0])
        for query in (0.0, 249.9, 250.0, 250.1, 1e6):
            assert nearest_peak_index(mz, query) == 0

    def test_empty(self):
        """Empty scan returns -1."""
        assert nearest_peak_index(np.zeros(0), 100.0) == -1

    def test_matches_brute_force(self):
        """Agree with a linear scan on random data."""
        mz = np.sort(np.random.uniform(300.0, 1500.0, 200))
        for query in np.random.uniform(250.0, 1550.0, 500):
            distances = np.abs(mz - query)
            best = distances.min()
            candidates = np.flatnonzero(distances == best)
            assert nearest_peak_index(mz, query) == candidates[-1]


class TestScanIndex:
    """Test the ScanIndex wrapper."""

    def test_peak_references(self):
        """Local indices map onto global peak references."""
        scan = ScanIndex(rt=5.0, mz=[400.0, 400.5, 401.0], first_peak=10)

        assert len(scan) == 3
        assert scan.peak_reference(0) == 10
        assert scan.peak_reference(2) == 12
        assert list(scan.peak_references) == [10, 11, 12]
        assert scan.end_peak == 13

    def test_peak_reference_out_of_range(self):
        scan = ScanIndex(rt=5.0, mz=[400.0])
        with pytest.raises(IndexError):
            scan.peak_reference(1)

    def test_nearest(self):
        scan = ScanIndex(rt=5.0, mz=[400.0, 400.5, 401.0])
        assert scan.nearest(400.6) == 1

    def test_default_intensity(self):
        scan = ScanIndex(rt=5.0, mz=[400.0, 400.5])
        np.testing.assert_array_equal(scan.intensity, [1.0, 1.0])

    def test_arrays_are_read_only(self):
        """Scan data cannot be modified after construction."""
        source = np.array([400.0, 400.5])
        scan = ScanIndex(rt=5.0, mz=source)

        source[0] = 0.0
        assert scan.mz[0] == 400.0
        with pytest.raises(ValueError):
            scan.mz[0] = 1.0

    def test_unsorted_rejected(self):
        with pytest.raises(InvalidConfigurationError):
            ScanIndex(rt=5.0, mz=[401.0, 400.0])

    def test_duplicate_positions_rejected(self):
        with pytest.raises(InvalidConfigurationError):
            ScanIndex(rt=5.0, mz=[400.0, 400.0])

    def test_intensity_length_mismatch(self):
        with pytest.raises(InvalidConfigurationError):
            ScanIndex(rt=5.0, mz=[400.0, 401.0], intensity=[1.0])

    def test_non_finite_rt_rejected(self):
        with pytest.raises(InvalidConfigurationError):
            ScanIndex(rt=np.nan, mz=[400.0])

    @pytest.mark.parametrize("bad", [np.nan, np.inf, -np.inf])
    def test_non_finite_positions_rejected(self, bad):
        """NaN or infinite positions would break the binary search."""
        with pytest.raises(InvalidConfigurationError, match="finite"):
            ScanIndex(rt=0.0, mz=[100.0, bad, 101.0])


class TestBuildScanIndices:
    """Test splitting flat arrays into cycles."""

    def test_groups_by_rt(self, two_envelopes):
        rt, mz, intensity = two_envelopes
        scans = build_scan_indices(rt, mz, intensity)

        assert [scan.rt for scan in scans] == [0.0, 1.0, 2.0]
        assert [len(scan) for scan in scans] == [2, 3, 2]
        assert [scan.first_peak for scan in scans] == [0, 2, 5]
        np.testing.assert_array_equal(scans[1].mz, [500.5, 800.333, 1200.0])
        np.testing.assert_array_equal(scans[1].intensity, [7e5, 6e5, 1e4])

    def test_empty_input(self):
        assert build_scan_indices(np.zeros(0), np.zeros(0)) == []

    def test_length_mismatch(self):
        with pytest.raises(InvalidConfigurationError):
            build_scan_indices(np.array([0.0, 1.0]), np.array([100.0]))

    def test_unsorted_rt(self):
        with pytest.raises(InvalidConfigurationError):
            build_scan_indices(np.array([1.0, 0.0]), np.array([100.0, 100.5]))

    def test_unsorted_mz_within_cycle(self):
        with pytest.raises(InvalidConfigurationError):
            build_scan_indices(np.array([0.0, 0.0]), np.array([100.5, 100.0]))
