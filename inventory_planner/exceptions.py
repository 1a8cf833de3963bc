class PlannerError(Exception):
    """Base class for errors raised outside the per-SKU projection core."""


class DataLoadError(PlannerError):
    """A snapshot file could not be found or read."""


class ConfigurationError(PlannerError):
    """An option (grouping key, sort key, ...) is not one we know how to apply."""
