"""Feature summaries for finished isotope clusters.

Turns a registered cluster (a set of peak references) into a feature
candidate for downstream feature construction: m/z, retention time span and
apex, summed intensity and, when the charge is known, the neutral mass.

Peak data is looked up in the caller's flat signal arrays, indexed by peak
reference (the same arrays passed to ``build_scan_indices``).
"""

from dataclasses import dataclass
from typing import List

import numpy as np

from alphasweep.constants import NO_CHARGE, PROTON_MASS
from .registry import ClusterRegistry, IndexSet, IsotopeCluster


@dataclass
class RegionFeature:
    """Container for one isotope cluster summarised as a feature."""

    peaks: IndexSet
    charge: int
    start_rt: float
    end_rt: float
    apex_rt: float
    mz: float            # intensity-weighted mean m/z
    intensity: float     # summed intensity
    n_peaks: int
    neutral_mass: float  # NaN if charge unknown

    @property
    def has_charge(self) -> bool:
        return self.charge != NO_CHARGE


def summarize_region(
    cluster: IsotopeCluster,
    mz_array: np.ndarray,
    intensity_array: np.ndarray,
) -> RegionFeature:
    """Summarise one cluster as a RegionFeature.

    Args:
        cluster: Registered cluster
        mz_array: m/z of every peak, indexed by peak reference
        intensity_array: Intensity of every peak, indexed by peak reference

    Returns:
        RegionFeature for the cluster
    """
    idx = np.asarray(cluster.peaks, dtype=np.int64)
    mz = np.asarray(mz_array, dtype=np.float64)[idx]
    intensity = np.asarray(intensity_array, dtype=np.float64)[idx]
    scans = np.asarray(cluster.scans, dtype=np.float64)

    total = float(intensity.sum())
    if total > 0:
        mean_mz = float(np.dot(mz, intensity) / total)
    else:
        mean_mz = float(mz.mean())

    if cluster.charge != NO_CHARGE:
        neutral_mass = (mean_mz - PROTON_MASS) * cluster.charge
    else:
        neutral_mass = np.nan

    return RegionFeature(
        peaks=cluster.index_set(),
        charge=cluster.charge,
        start_rt=float(scans[0]),
        end_rt=float(scans[-1]),
        apex_rt=float(scans[int(np.argmax(intensity))]),
        mz=mean_mz,
        intensity=total,
        n_peaks=len(idx),
        neutral_mass=neutral_mass,
    )


def summarize_registry(
    registry: ClusterRegistry,
    mz_array: np.ndarray,
    intensity_array: np.ndarray,
    min_peaks: int = 1,
) -> List[RegionFeature]:
    """Summarise every registered cluster with at least ``min_peaks`` peaks."""
    return [
        summarize_region(cluster, mz_array, intensity_array)
        for cluster in registry.values()
        if len(cluster) >= min_peaks
    ]


REGION_DTYPE = [
    ('mz', 'f8'),
    ('rt', 'f8'),
    ('start_rt', 'f8'),
    ('end_rt', 'f8'),
    ('intensity', 'f8'),
    ('charge', 'i8'),
    ('n_peaks', 'i8'),
    ('neutral_mass', 'f8'),
]


def regions_to_arrays(features: List[RegionFeature]) -> np.ndarray:
    """Convert RegionFeatures to a structured array (``rt`` is the apex)."""
    rows = [
        (f.mz, f.apex_rt, f.start_rt, f.end_rt, f.intensity, f.charge, f.n_peaks, f.neutral_mass)
        for f in features
    ]
    return np.array(rows, dtype=REGION_DTYPE)
