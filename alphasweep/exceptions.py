"""Exceptions raised by the isotope cluster sweep.

Configuration problems derive from ``ValueError`` and are raised before a
sweep runs. Lookup problems (``NotInitializedError``, ``SeedNotFoundError``)
are recoverable: run a sweep, or retry with another seed.
"""


class SweepError(Exception):
    """Base class for all alphasweep errors."""


class InvalidConfigurationError(SweepError, ValueError):
    """Tolerance windows or input signal cannot be used for a sweep."""


class NotInitializedError(SweepError, RuntimeError):
    """A region was requested before any sweep populated the registry."""


class SeedNotFoundError(SweepError, KeyError):
    """No registered cluster contains the requested seed peak."""

    def __init__(self, seed):
        self.seed = seed
        super().__init__(seed)

    def __str__(self):
        return f"No isotope cluster contains peak {self.seed}"
