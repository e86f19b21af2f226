"""Isotope clusters and the registry of finished clusters.

An ``IsotopeCluster`` collects one peak per cycle while the sweep extends
it. Once it can no longer be extended it is closed and stored in the
``ClusterRegistry``, keyed by the cycle coordinate and position of its first
peak. Registered clusters are never modified again.
"""

from bisect import bisect_left, insort
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, Iterator, List, NamedTuple, Optional, Tuple

from alphasweep.constants import NO_CHARGE
from alphasweep.exceptions import SeedNotFoundError
from .running_average import RunningAveragePosition

# Set of peak references forming one region
IndexSet = FrozenSet[int]


class ClusterState(Enum):
    """Lifecycle of a cluster during the sweep."""
    OPEN = "open"          # seed peak only
    EXTENDED = "extended"  # at least one extension accepted
    CLOSED = "closed"      # registered, immutable


class RegionKey(NamedTuple):
    """Cycle coordinate and m/z of a cluster's first peak."""
    rt: float
    mz: float


@dataclass
class IsotopeCluster:
    """Candidate isotopic envelope (potential peptide charge variant).

    ``peaks`` and ``scans`` are parallel: ``peaks[i]`` was found in the cycle
    at ``scans[i]``. ``charge`` stays 0 until a second peak is accepted and
    never changes afterwards.
    """

    charge: int = NO_CHARGE
    peaks: List[int] = field(default_factory=list)
    scans: List[float] = field(default_factory=list)
    first_mz: float = field(default=float("nan"), compare=False)
    last_mz: float = field(default=float("nan"), compare=False)
    state: ClusterState = field(default=ClusterState.OPEN, compare=False)
    position_estimator: RunningAveragePosition = field(
        default_factory=RunningAveragePosition, compare=False, repr=False
    )

    @classmethod
    def seeded(cls, peak: int, rt: float, mz: float, weight: float = 1.0) -> "IsotopeCluster":
        """Open a new cluster from a single seed peak."""
        cluster = cls()
        cluster._add(peak, rt, mz, weight)
        return cluster

    def _add(self, peak: int, rt: float, mz: float, weight: float) -> None:
        if not self.peaks:
            self.first_mz = mz
        self.peaks.append(peak)
        self.scans.append(rt)
        self.last_mz = mz
        self.position_estimator.add(mz, weight)

    def append(self, peak: int, rt: float, mz: float, charge: int, weight: float = 1.0) -> None:
        """Extend the cluster by one peak found with charge hypothesis ``charge``.

        Raises:
            ValueError: If the cluster is closed, empty, the cycle does not
                come after the last one, or ``charge`` contradicts the
                charge already fixed
        """
        if self.state is ClusterState.CLOSED:
            raise ValueError("Cannot extend a closed cluster")
        if not self.peaks:
            raise ValueError("Cannot extend an empty cluster, use IsotopeCluster.seeded")
        if rt <= self.scans[-1]:
            raise ValueError(f"Cycle {rt} does not follow last cycle {self.scans[-1]}")
        if charge < 1:
            raise ValueError(f"Extension requires a positive charge, got {charge}")
        if self.charge != NO_CHARGE and charge != self.charge:
            raise ValueError(f"Cluster charge is {self.charge}, cannot extend with {charge}")

        self.charge = charge
        self._add(peak, rt, mz, weight)
        self.state = ClusterState.EXTENDED

    @property
    def position(self) -> float:
        """Running average m/z used for the next nearest-neighbour query."""
        return self.position_estimator.position

    @property
    def key(self) -> RegionKey:
        return RegionKey(self.scans[0], self.first_mz)

    @property
    def start_rt(self) -> float:
        return self.scans[0]

    @property
    def end_rt(self) -> float:
        return self.scans[-1]

    def index_set(self) -> IndexSet:
        return frozenset(self.peaks)

    def __len__(self):
        return len(self.peaks)


class ClusterRegistry:
    """Ordered mapping of RegionKey -> closed IsotopeCluster.

    Keys are kept in a sorted list next to a dict, so iteration is ordered by
    cycle coordinate (then m/z) regardless of the order clusters were closed
    in. Every member peak is indexed for ``extend`` lookups.
    """

    def __init__(self):
        self._keys: List[RegionKey] = []
        self._clusters: Dict[RegionKey, IsotopeCluster] = {}
        self._peak_to_key: Dict[int, RegionKey] = {}

    def register(self, cluster: IsotopeCluster) -> RegionKey:
        """Close ``cluster`` and store it under the key of its first peak."""
        if not cluster.peaks:
            raise ValueError("Cannot register an empty cluster")
        key = cluster.key
        if key in self._clusters:
            raise ValueError(f"A cluster is already registered at {key}")
        claimed = [p for p in cluster.peaks if p in self._peak_to_key]
        if claimed:
            raise ValueError(f"Peaks {claimed} already belong to registered clusters")

        cluster.state = ClusterState.CLOSED
        insort(self._keys, key)
        self._clusters[key] = cluster
        for peak in cluster.peaks:
            self._peak_to_key[peak] = key
        return key

    def at(self, rt: float) -> List[IsotopeCluster]:
        """All clusters whose first peak lies in the cycle at ``rt``, by m/z."""
        i = bisect_left(self._keys, (rt, float("-inf")))
        result = []
        while i < len(self._keys) and self._keys[i].rt == rt:
            result.append(self._clusters[self._keys[i]])
            i += 1
        return result

    def find(self, rt: float, mz: float) -> IsotopeCluster:
        return self._clusters[RegionKey(rt, mz)]

    def cluster_for_peak(self, peak: int) -> IsotopeCluster:
        key = self._peak_to_key.get(peak)
        if key is None:
            raise SeedNotFoundError(peak)
        return self._clusters[key]

    def extend(self, seed: int) -> IndexSet:
        """Peak references of the cluster containing ``seed``."""
        return self.cluster_for_peak(seed).index_set()

    def get(self, key: RegionKey, default: Optional[IsotopeCluster] = None):
        return self._clusters.get(key, default)

    def keys(self) -> List[RegionKey]:
        return list(self._keys)

    def values(self) -> List[IsotopeCluster]:
        return [self._clusters[k] for k in self._keys]

    def items(self) -> List[Tuple[RegionKey, IsotopeCluster]]:
        return [(k, self._clusters[k]) for k in self._keys]

    def __getitem__(self, key: RegionKey) -> IsotopeCluster:
        return self._clusters[key]

    def __contains__(self, key) -> bool:
        return key in self._clusters

    def __iter__(self) -> Iterator[RegionKey]:
        return iter(list(self._keys))

    def __len__(self):
        return len(self._keys)

    def __eq__(self, other):
        if not isinstance(other, ClusterRegistry):
            return NotImplemented
        return self.items() == other.items()

    def __ne__(self, other):
        return not self == other

    def __repr__(self):
        return f"{self.__class__.__name__}(<{len(self)} clusters>)"
