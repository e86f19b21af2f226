"""Physical constants and default charge windows for isotope cluster sweeps.

This module provides the physical constants and the default tolerance
table used throughout alphasweep. Mass values are sourced from NIST.

Key Features
------------
- Correct PROTON_MASS (1.007276466622 Da, not hydrogen atom mass!)
- 13C isotope spacing used to derive expected m/z spacings per charge
- Default (charge, lower, upper) distance windows for z = 1..5

Sources
-------
- NIST physical constants: https://physics.nist.gov/cgi-bin/cuu/Value
"""

# =============================================================================
# Fundamental Physical Constants (NIST values)
# =============================================================================

# Proton mass (NOT hydrogen atom mass!)
# Source: NIST 2018 CODATA
PROTON_MASS = 1.007276466622  # Da

# Mass difference between 13C and 12C
# Expected spacing of isotope peaks is C13_MASS_DIFF / z on the m/z axis
C13_MASS_DIFF = 1.0033548  # Da

# =============================================================================
# Charge States
# =============================================================================

# Charge value for "undetermined" / "no window matched"
NO_CHARGE = 0

# Default distance windows (charge, lower bound, upper bound) in m/z units.
# Both bounds are inclusive. Windows are disjoint, so the ascending-charge
# priority never has to break a tie with these values.
DEFAULT_CHARGE_BOUNDS = (
    (1, 0.90, 1.10),
    (2, 0.45, 0.55),
    (3, 0.30, 0.36),
    (4, 0.23, 0.27),
    (5, 0.18, 0.22),
)
