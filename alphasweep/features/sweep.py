"""Sweep-line extension of isotope clusters across acquisition cycles.

The sweep walks through the cycles once, in increasing retention time. Every
open cluster looks up the peak nearest its running-average m/z in the next
cycle and classifies the distance from its last peak against the charge
windows (1 Da for z=1, 0.5 Da for z=2, ...). A matching distance extends
the cluster and fixes its charge; anything else closes it. Peaks that no
cluster claims open new clusters. Closed clusters go into a
``ClusterRegistry`` keyed by their first peak, from which ``extend`` hands
out regions by seed peak.

Works on centroided peaks only; peak picking happens upstream.

Examples
--------
>>> import numpy as np
>>> from alphasweep.features import SweepExtender, build_scan_indices
>>>
>>> scans = build_scan_indices(
...     rt_array=np.array([0.0, 1.0, 2.0]),
...     mz_array=np.array([100.0, 100.5, 101.0]),
... )
>>> extender = SweepExtender()
>>> registry = extender.sweep(scans)
>>> sorted(extender.extend(0))
[0, 1, 2]
>>> registry.cluster_for_peak(0).charge
2
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, List, Optional, Sequence, Set

import numpy as np

from alphasweep.exceptions import InvalidConfigurationError, NotInitializedError
from .distance import DistanceClassifier
from .registry import ClusterRegistry, IndexSet, IsotopeCluster
from .scan_index import ScanIndex

logger = logging.getLogger(__name__)


class SweepState(Enum):
    """Whether a registry is available for ``extend`` queries."""
    NOT_RUN = "not_run"
    COMPLETE = "complete"


@dataclass
class SweepParams:
    """Parameters for the isotope cluster sweep.

    Attributes:
        classifier: Charge windows for peak-to-peak distances
        intensity_weighted: Weight the running m/z average by peak intensity
        min_cluster_size: Smallest cluster handed out by ``iter_regions``
    """

    classifier: DistanceClassifier = field(default_factory=DistanceClassifier.default)
    intensity_weighted: bool = False
    min_cluster_size: int = 1

    def __post_init__(self):
        if not isinstance(self.classifier, DistanceClassifier):
            raise InvalidConfigurationError(
                f"classifier must be a DistanceClassifier, got {type(self.classifier).__name__}"
            )
        if self.min_cluster_size < 1:
            raise InvalidConfigurationError(
                f"min_cluster_size must be >= 1, got {self.min_cluster_size}"
            )

    @classmethod
    def from_bounds(cls, bounds, **kwargs) -> "SweepParams":
        """Parameters from (lower, upper) pairs for charges 1..n."""
        return cls(classifier=DistanceClassifier.from_bounds(bounds), **kwargs)


class SweepExtender:
    """Detects isotope clusters by sweeping through scans.

    A single instance owns its registry and must not run two sweeps at the
    same time. Each call to ``sweep`` replaces the previous registry.
    """

    def __init__(self, params: Optional[SweepParams] = None):
        self.params = params if params is not None else SweepParams()
        self._registry: Optional[ClusterRegistry] = None
        self._state = SweepState.NOT_RUN

    @property
    def state(self) -> SweepState:
        return self._state

    @property
    def registry(self) -> ClusterRegistry:
        if self._state is SweepState.NOT_RUN:
            raise NotInitializedError("No sweep has been run yet")
        return self._registry

    def sweep(self, scans: Sequence[ScanIndex]) -> ClusterRegistry:
        """Run one pass over ``scans`` and register every cluster found.

        Args:
            scans: One ScanIndex per cycle, strictly increasing in rt, with
                non-overlapping peak reference ranges

        Returns:
            The populated ClusterRegistry (also kept for ``extend``)
        """
        scans = list(scans)
        _validate_scans(scans)
        if self.params.intensity_weighted:
            for scan in scans:
                if not np.all(scan.intensity > 0):
                    raise InvalidConfigurationError(
                        f"Intensity-weighted sweep needs positive intensities (scan at rt={scan.rt})"
                    )

        registry = ClusterRegistry()
        open_clusters: List[IsotopeCluster] = []
        n_extensions = 0

        for scan in scans:
            claimed: Set[int] = set()
            still_open = []
            for cluster in open_clusters:
                if self._extend_into(cluster, scan, claimed):
                    still_open.append(cluster)
                    n_extensions += 1
                else:
                    registry.register(cluster)

            for i in range(len(scan)):
                if i in claimed:
                    continue
                still_open.append(
                    IsotopeCluster.seeded(
                        scan.peak_reference(i), scan.rt, float(scan.mz[i]), self._weight(scan, i)
                    )
                )
            open_clusters = still_open

        for cluster in open_clusters:
            registry.register(cluster)

        self._registry = registry
        self._state = SweepState.COMPLETE

        n_charged = sum(1 for cluster in registry.values() if cluster.charge)
        logger.info(
            f"Sweep over {len(scans):,} cycles: {len(registry):,} clusters, "
            f"{n_charged:,} with charge, {n_extensions:,} extensions"
        )
        return registry

    def _weight(self, scan: ScanIndex, index: int) -> float:
        if self.params.intensity_weighted:
            return float(scan.intensity[index])
        return 1.0

    def _extend_into(self, cluster: IsotopeCluster, scan: ScanIndex, claimed: Set[int]) -> bool:
        """Try to add the nearest peak of ``scan`` to ``cluster``.

        Returns True and marks the peak as claimed when the extension is
        accepted.
        """
        index = scan.nearest(cluster.position)
        if index < 0:
            return False
        if index in claimed:
            logger.debug(
                f"Peak {scan.peak_reference(index)} at rt={scan.rt} already claimed, "
                f"closing cluster {cluster.key}"
            )
            return False

        mz = float(scan.mz[index])
        charge = self.params.classifier.classify(abs(mz - cluster.last_mz))
        if charge is None:
            return False
        if cluster.charge and charge != cluster.charge:
            logger.debug(
                f"Charge mismatch at rt={scan.rt}: cluster {cluster.key} has z={cluster.charge}, "
                f"distance suggests z={charge}"
            )
            return False

        cluster.append(
            scan.peak_reference(index), scan.rt, mz, charge, self._weight(scan, index)
        )
        claimed.add(index)
        return True

    def extend(self, seed: int) -> IndexSet:
        """Return the peak references of the region containing ``seed``.

        Raises:
            NotInitializedError: If no sweep has been run
            SeedNotFoundError: If no cluster contains ``seed``
        """
        return self.registry.extend(seed)

    def iter_regions(self) -> Iterator[IndexSet]:
        """Yield regions in registry order, skipping undersized clusters."""
        for cluster in self.registry.values():
            if len(cluster) >= self.params.min_cluster_size:
                yield cluster.index_set()


def sweep_clusters(
    scans: Sequence[ScanIndex],
    params: Optional[SweepParams] = None,
) -> ClusterRegistry:
    """Run a sweep with a throwaway SweepExtender and return its registry."""
    return SweepExtender(params).sweep(scans)


def _validate_scans(scans: List[ScanIndex]) -> None:
    for previous, current in zip(scans, scans[1:]):
        if current.rt <= previous.rt:
            raise InvalidConfigurationError(
                f"Cycle coordinates must be strictly increasing: {current.rt} after {previous.rt}"
            )
    ranges = sorted(
        (scan.first_peak, scan.end_peak) for scan in scans if len(scan)
    )
    for (_, end), (start, _) in zip(ranges, ranges[1:]):
        if start < end:
            raise InvalidConfigurationError(
                f"Peak reference ranges of scans overlap at peak {start}"
            )
