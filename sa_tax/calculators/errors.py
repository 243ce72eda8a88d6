"""Calculator exceptions."""


class InvalidInputError(ValueError):
    """Caller supplied a negative or otherwise out-of-domain value."""


class PolicyConfigurationError(ValueError):
    """A tax-year policy table is malformed (gaps, overlaps, falling rates)."""
