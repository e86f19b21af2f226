"""Charge-state classification of peak-to-peak distances.

Isotope peaks of an ion with charge z are spaced by roughly 1.0033548 / z on
the m/z axis. The classifier maps an observed distance to the charge whose
tolerance window contains it, using a table of (charge, lower, upper) rows
evaluated in ascending charge order. The first matching row wins, so
overlapping windows resolve to the lowest charge.

Examples
--------
>>> from alphasweep.features import DistanceClassifier
>>>
>>> classifier = DistanceClassifier.default()
>>> classifier.classify(0.5)
2
>>> classifier.classify(0.7) is None
True
>>>
>>> # Ten-value configuration: (lower, upper) for charges 1..5
>>> classifier = DistanceClassifier.from_bounds([
...     (0.9, 1.1), (0.45, 0.55), (0.30, 0.36), (0.23, 0.27), (0.18, 0.22),
... ])
"""

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence, Tuple

import numpy as np
from numba import njit

from alphasweep.constants import C13_MASS_DIFF, DEFAULT_CHARGE_BOUNDS, NO_CHARGE
from alphasweep.exceptions import InvalidConfigurationError


@njit
def classify_distance(
    delta: float,
    charges: np.ndarray,
    lower_bounds: np.ndarray,
    upper_bounds: np.ndarray,
) -> int:
    """Return the first charge whose window contains ``delta``.

    Args:
        delta: Observed distance between two peaks (m/z)
        charges: Charge per window, ascending
        lower_bounds: Inclusive lower bound per window
        upper_bounds: Inclusive upper bound per window

    Returns:
        Matching charge, or 0 if ``delta`` fits no window
    """
    for i in range(len(charges)):
        if lower_bounds[i] <= delta <= upper_bounds[i]:
            return charges[i]
    return 0


@dataclass(frozen=True)
class ChargeWindow:
    """Tolerance window for the isotope spacing of one charge state."""

    charge: int
    lower: float
    upper: float

    def contains(self, delta: float) -> bool:
        return self.lower <= delta <= self.upper

    def overlaps(self, other: "ChargeWindow") -> bool:
        return self.lower <= other.upper and other.lower <= self.upper


class DistanceClassifier:
    """Stateless mapping from peak distance to charge hypothesis.

    Windows are validated at construction time:

    - at least one window
    - positive integer charges, each charge at most once
    - finite, non-negative bounds with ``lower <= upper``
    - no overlapping windows when ``allow_overlap`` is False

    With ``allow_overlap=True`` (default) overlaps are legal and the lowest
    charge wins.
    """

    def __init__(self, windows: Iterable[ChargeWindow], allow_overlap: bool = True):
        windows = tuple(
            w if isinstance(w, ChargeWindow) else ChargeWindow(*w) for w in windows
        )
        _validate_windows(windows, allow_overlap)

        self.windows: Tuple[ChargeWindow, ...] = tuple(
            sorted(windows, key=lambda w: w.charge)
        )
        self.allow_overlap = allow_overlap

        self._charges = np.array([w.charge for w in self.windows], dtype=np.int64)
        self._lower = np.array([w.lower for w in self.windows], dtype=np.float64)
        self._upper = np.array([w.upper for w in self.windows], dtype=np.float64)

    @classmethod
    def default(cls) -> "DistanceClassifier":
        """Classifier for z = 1..5 with the default disjoint windows."""
        return cls(ChargeWindow(*row) for row in DEFAULT_CHARGE_BOUNDS)

    @classmethod
    def from_bounds(
        cls,
        bounds: Sequence[Tuple[float, float]],
        allow_overlap: bool = True,
    ) -> "DistanceClassifier":
        """Create a classifier from (lower, upper) pairs for charges 1..n.

        Args:
            bounds: One (lower, upper) pair per charge, starting at z=1
            allow_overlap: Accept overlapping windows (lowest charge wins)

        Returns:
            DistanceClassifier with one window per pair
        """
        return cls(
            (ChargeWindow(charge, lower, upper)
             for charge, (lower, upper) in enumerate(bounds, start=1)),
            allow_overlap=allow_overlap,
        )

    @classmethod
    def from_isotope_spacing(
        cls,
        max_charge: int = 5,
        tolerance: float = 0.02,
        allow_overlap: bool = True,
    ) -> "DistanceClassifier":
        """Create windows centred on the 13C spacing for z = 1..max_charge.

        Args:
            max_charge: Highest charge state to test
            tolerance: Half-width of every window (m/z)
            allow_overlap: Accept overlapping windows (lowest charge wins)
        """
        if max_charge < 1:
            raise InvalidConfigurationError(f"max_charge must be >= 1, got {max_charge}")
        return cls(
            (ChargeWindow(z, C13_MASS_DIFF / z - tolerance, C13_MASS_DIFF / z + tolerance)
             for z in range(1, max_charge + 1)),
            allow_overlap=allow_overlap,
        )

    @property
    def charges(self) -> Tuple[int, ...]:
        return tuple(w.charge for w in self.windows)

    def classify(self, delta: float) -> Optional[int]:
        """Charge whose window contains ``delta`` (bounds inclusive), or None.

        ``delta`` is compared as given. Distances computed by subtracting two
        m/z values carry rounding error (600.55 - 600.0 gives
        0.5499999999999545), so a peak spaced exactly on a bound may land
        on either side of it.
        """
        charge = classify_distance(float(delta), self._charges, self._lower, self._upper)
        if charge == NO_CHARGE:
            return None
        return int(charge)

    def __eq__(self, other):
        if not isinstance(other, DistanceClassifier):
            return NotImplemented
        return self.windows == other.windows and self.allow_overlap == other.allow_overlap

    def __repr__(self):
        windows = ", ".join(f"z={w.charge}:[{w.lower}, {w.upper}]" for w in self.windows)
        return f"{self.__class__.__name__}({windows})"


def _validate_windows(windows: Tuple[ChargeWindow, ...], allow_overlap: bool) -> None:
    if not windows:
        raise InvalidConfigurationError("At least one charge window is required")

    seen = set()
    for w in windows:
        if isinstance(w.charge, bool) or int(w.charge) != w.charge or w.charge < 1:
            raise InvalidConfigurationError(
                f"Charge must be a positive integer, got {w.charge!r}"
            )
        if w.charge in seen:
            raise InvalidConfigurationError(f"Duplicate window for charge {w.charge}")
        seen.add(w.charge)

        if not (np.isfinite(w.lower) and np.isfinite(w.upper)):
            raise InvalidConfigurationError(f"Non-finite bounds for charge {w.charge}")
        if w.lower < 0:
            raise InvalidConfigurationError(
                f"Negative lower bound {w.lower} for charge {w.charge}"
            )
        if w.lower > w.upper:
            raise InvalidConfigurationError(
                f"Inverted bounds for charge {w.charge}: lower={w.lower} > upper={w.upper}"
            )

    if not allow_overlap:
        ordered = sorted(windows, key=lambda w: w.lower)
        for a, b in zip(ordered, ordered[1:]):
            if a.overlaps(b):
                raise InvalidConfigurationError(
                    f"Windows for charge {a.charge} and {b.charge} overlap "
                    f"([{a.lower}, {a.upper}] and [{b.lower}, {b.upper}])"
                )
