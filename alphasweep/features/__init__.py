"""Isotope cluster sweep over LC-MS cycles.

This module provides:
- Per-cycle scan indices with nearest-neighbour lookup
- Charge-state classification of peak-to-peak distances
- Running-average cluster positions
- The sweep engine and the registry of finished clusters
- Feature summaries for finished clusters
"""

from .scan_index import (
    ScanIndex,
    build_scan_indices,
    nearest_peak_index,
)

from .distance import (
    ChargeWindow,
    DistanceClassifier,
    classify_distance,
)

from .running_average import RunningAveragePosition

from .registry import (
    ClusterRegistry,
    ClusterState,
    IndexSet,
    IsotopeCluster,
    RegionKey,
)

from .sweep import (
    SweepExtender,
    SweepParams,
    SweepState,
    sweep_clusters,
)

from .regions import (
    RegionFeature,
    regions_to_arrays,
    summarize_region,
    summarize_registry,
)

__all__ = [
    # Scan index
    'ScanIndex',
    'build_scan_indices',
    'nearest_peak_index',

    # Distance classification
    'ChargeWindow',
    'DistanceClassifier',
    'classify_distance',

    # Running average
    'RunningAveragePosition',

    # Registry
    'ClusterRegistry',
    'ClusterState',
    'IndexSet',
    'IsotopeCluster',
    'RegionKey',

    # Sweep
    'SweepExtender',
    'SweepParams',
    'SweepState',
    'sweep_clusters',

    # Region summaries
    'RegionFeature',
    'regions_to_arrays',
    'summarize_region',
    'summarize_registry',
]
