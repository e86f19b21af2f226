"""Online (optionally weighted) mean of a cluster position."""


class RunningAveragePosition:
    """Incrementally updated mean of the positions added so far.

    With unit weights the update is ``mean += (x - mean) / count``; with
    weights (e.g. peak intensities) it becomes
    ``mean += w * (x - mean) / total_weight``. Both are O(1).

    Examples
    --------
    >>> avg = RunningAveragePosition()
    >>> avg.add(100.0)
    >>> avg.add(100.5)
    >>> avg.position
    100.25
    """

    __slots__ = ("_mean", "_count", "_total_weight")

    def __init__(self):
        self._mean = 0.0
        self._count = 0
        self._total_weight = 0.0

    def add(self, value: float, weight: float = 1.0) -> None:
        if not weight > 0:
            raise ValueError(f"Weight must be positive, got {weight}")
        self._count += 1
        self._total_weight += weight
        self._mean += weight * (value - self._mean) / self._total_weight

    @property
    def position(self) -> float:
        if self._count == 0:
            raise ValueError("No positions added yet")
        return self._mean

    @property
    def count(self) -> int:
        return self._count

    @property
    def total_weight(self) -> float:
        return self._total_weight

    def __len__(self):
        return self._count

    def __repr__(self):
        return f"{self.__class__.__name__}(position={self._mean}, count={self._count})"
