"""alphasweep - Isotope cluster detection for LC-MS data.

Groups centroided MS1 peaks into isotopic envelopes by sweeping once through
the acquisition cycles. Consecutive peaks whose spacing matches a charge
window (about 1.0 / z on the m/z axis) are collected into one cluster; the
finished clusters are handed to feature construction as sets of peak
references.

Hot loops (binary search, distance classification) are Numba-compiled.
"""

__version__ = "0.1.0"

from alphasweep import constants
from alphasweep import exceptions
from alphasweep import features

__all__ = [
    "constants",
    "exceptions",
    "features",
]
