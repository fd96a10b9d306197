"""Exception types raised by the feasibility engine."""


class FeasibilityError(Exception):
    """Base class for engine errors."""


class InvalidGeometry(FeasibilityError, ValueError):
    """A drawn geometry is structurally unusable (too few vertices, open ring, negative radius)."""


class CatalogLoadFailure(FeasibilityError, RuntimeError):
    """Reference data for restricted zones or grid lines could not be loaded."""
