"""
Exception types raised by the k-means engine.

Every error is detected before the iteration loop starts; once iterating
begins, degenerate states such as empty clusters are handled by policy.
The classes also derive from the matching builtin (``ValueError`` or
``TypeError``) so callers can catch them generically.
"""


class KMeansError(Exception):
    """Base class for all engine errors."""


class InvalidClusterCountError(KMeansError, ValueError):
    """Requested cluster count is not in ``[1, n_points]``."""


class InvalidPercentageError(KMeansError, ValueError):
    """Refined-start sampling percentage is outside ``(0, 1]``."""


class MissingInputError(KMeansError, ValueError):
    """Dataset or cluster count was not supplied."""


class DegenerateInitError(KMeansError, ValueError):
    """Initializer cannot produce the requested number of centroids."""


class InvalidDatasetError(KMeansError, ValueError):
    """Dataset is empty, not two-dimensional, or holds non-finite values."""


class InPlaceUnsupportedError(KMeansError, TypeError):
    """In-place output was requested for storage that cannot grow a column."""
