"""Exceptions raised before any route or pacing computation begins."""


class InputTooShortError(ValueError):
    """Track or segment sequence too short to describe a route."""


class NonPhysicalParameterError(ValueError):
    """Rider, environment or segment value outside its physical range."""
