"""Per-cycle peak index with O(log n) nearest-neighbour lookup.

A ``ScanIndex`` wraps the centroided peaks of one acquisition cycle: the
cycle coordinate (retention time) and the m/z positions sorted ascending.
Peaks are referenced by global integer indices into the caller's signal
store, so the index never owns peak data beyond read-only copies.

Examples
--------
>>> import numpy as np
>>> from alphasweep.features import ScanIndex
>>>
>>> scan = ScanIndex(rt=12.5, mz=np.array([400.0, 400.5, 401.0]), first_peak=100)
>>> i = scan.nearest(400.6)
>>> float(scan.mz[i]), scan.peak_reference(i)
(400.5, 101)
"""

from typing import List, Optional

import numba as nb
import numpy as np

from alphasweep.exceptions import InvalidConfigurationError


@nb.njit
def nearest_peak_index(mz_array: np.ndarray, query: float) -> int:
    """Find the index of the peak closest to ``query`` in a sorted array.

    Parameters
    ----------
    mz_array : np.ndarray
        Sorted array of m/z values (ascending)
    query : float
        Position to search for

    Returns
    -------
    int
        Index of the closest peak, or -1 if ``mz_array`` is empty.
        On equal distance the right-hand neighbour (first value >= query)
        wins.

    Performance
    -----------
    O(log n) complexity for each search

    Examples
    --------
    >>> nearest_peak_index(np.array([100.0, 100.5, 101.0]), 100.2)
    0
    >>> nearest_peak_index(np.array([100.0, 100.5, 101.0]), 100.25)
    1
    """
    n = len(mz_array)
    if n == 0:
        return -1

    # Binary search for lower bound (first value >= query)
    left, right = 0, n
    while left < right:
        mid = (left + right) // 2
        if mz_array[mid] < query:
            left = mid + 1
        else:
            right = mid

    # Past the end: only the last peak is a candidate
    if left == n:
        return n - 1

    # Nothing to the left to compare with
    if left == 0:
        return 0

    # Left neighbour wins only when strictly closer
    if abs(mz_array[left - 1] - query) < abs(mz_array[left] - query):
        return left - 1
    return left


def _readonly_float_array(values) -> np.ndarray:
    array = np.array(values, dtype=np.float64, copy=True).ravel()
    array.setflags(write=False)
    return array


class ScanIndex:
    """Immutable, m/z-sorted view of the peaks of one acquisition cycle.

    Parameters
    ----------
    rt : float
        Cycle coordinate (retention time) of this scan
    mz : array-like
        Peak positions, strictly ascending (no duplicates)
    intensity : array-like, optional
        Peak intensities (same length as ``mz``). Defaults to ones.
    first_peak : int
        Global peak reference of the first peak; local index ``i`` maps to
        ``first_peak + i``.
    """

    __slots__ = ("rt", "mz", "intensity", "first_peak")

    def __init__(self, rt: float, mz, intensity=None, first_peak: int = 0):
        mz = _readonly_float_array(mz)
        if intensity is None:
            intensity = np.ones(len(mz), dtype=np.float64)
        intensity = _readonly_float_array(intensity)

        if len(intensity) != len(mz):
            raise InvalidConfigurationError(
                f"Scan at rt={rt}: {len(mz)} positions but {len(intensity)} intensities"
            )
        if not np.all(np.isfinite(mz)):
            raise InvalidConfigurationError(
                f"Scan at rt={rt}: peak positions must be finite"
            )
        if len(mz) > 1 and np.any(np.diff(mz) <= 0):
            raise InvalidConfigurationError(
                f"Scan at rt={rt}: peak positions must be strictly ascending"
            )
        if not np.isfinite(rt):
            raise InvalidConfigurationError(f"Cycle coordinate must be finite, got {rt}")
        if first_peak < 0:
            raise InvalidConfigurationError(
                f"Scan at rt={rt}: first_peak must be non-negative, got {first_peak}"
            )

        self.rt = float(rt)
        self.mz = mz
        self.intensity = intensity
        self.first_peak = int(first_peak)

    def __len__(self) -> int:
        return len(self.mz)

    def __repr__(self):
        return f"{self.__class__.__name__}(rt={self.rt}, <{len(self)} peaks>)"

    @property
    def end_peak(self) -> int:
        """One past the last global peak reference of this scan."""
        return self.first_peak + len(self)

    @property
    def peak_references(self) -> range:
        return range(self.first_peak, self.end_peak)

    def peak_reference(self, index: int) -> int:
        """Translate a local index into a global peak reference."""
        if not 0 <= index < len(self):
            raise IndexError(f"Peak index {index} out of range for {self!r}")
        return self.first_peak + index

    def nearest(self, query: float) -> int:
        """Local index of the peak nearest ``query``, or -1 for an empty scan.

        The result is only a candidate; whether it belongs to a cluster is
        decided by the distance classifier.
        """
        return nearest_peak_index(self.mz, float(query))


def build_scan_indices(
    rt_array: np.ndarray,
    mz_array: np.ndarray,
    intensity_array: Optional[np.ndarray] = None,
) -> List[ScanIndex]:
    """Split flat per-peak arrays into one ``ScanIndex`` per cycle.

    Args:
        rt_array: Cycle coordinate of each peak, non-decreasing
        mz_array: m/z of each peak, ascending within a cycle
        intensity_array: Intensity of each peak (optional)

    Returns:
        List of ScanIndex objects in cycle order. The peak reference of each
        peak is its row index in the input arrays, so the same arrays can be
        used later to look up peak data for a region.

    Raises:
        InvalidConfigurationError: If the arrays differ in length or are not
            sorted by (rt, mz)
    """
    rt_array = np.asarray(rt_array, dtype=np.float64)
    mz_array = np.asarray(mz_array, dtype=np.float64)
    if intensity_array is None:
        intensity_array = np.ones(len(mz_array), dtype=np.float64)
    intensity_array = np.asarray(intensity_array, dtype=np.float64)

    if not (len(rt_array) == len(mz_array) == len(intensity_array)):
        raise InvalidConfigurationError(
            f"Array length mismatch: rt={len(rt_array)}, mz={len(mz_array)}, "
            f"intensity={len(intensity_array)}"
        )
    if len(rt_array) == 0:
        return []
    if np.any(np.diff(rt_array) < 0):
        raise InvalidConfigurationError("rt_array must be sorted ascending")

    # Cycle boundaries are where rt changes
    boundaries = np.flatnonzero(np.diff(rt_array) != 0) + 1
    starts = np.concatenate(([0], boundaries))
    ends = np.concatenate((boundaries, [len(rt_array)]))

    scans = []
    for start, end in zip(starts, ends):
        scans.append(
            ScanIndex(
                rt=rt_array[start],
                mz=mz_array[start:end],
                intensity=intensity_array[start:end],
                first_peak=int(start),
            )
        )
    return scans
