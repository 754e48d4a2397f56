"""
ChromiQ error taxonomy.

All engine failures are deterministic input-validation problems: they are
raised immediately and never retried.
"""
from typing import Any, Optional


class ChromiqError(ValueError):
    """Base class for engine input errors."""
    pass


class InvalidInputError(ChromiqError):
    """Missing or malformed input (no pixel buffer, no color, bad array or hex)."""
    pass


class OutOfRangeError(ChromiqError):
    """A numeric argument fell outside its allowed range."""

    def __init__(self, name: str, value: Any,
                 minimum: Optional[Any] = None,
                 maximum: Optional[Any] = None,
                 message: Optional[str] = None):
        self.name = name
        self.value = value
        self.minimum = minimum
        self.maximum = maximum
        if message is None:
            message = f"{name} ({value}) must be between {minimum} and {maximum}"
        super().__init__(message)


def require_in_range(name: str, value: int, minimum: int, maximum: int) -> int:
    """Raise OutOfRangeError unless minimum <= value <= maximum."""
    if value < minimum or value > maximum:
        raise OutOfRangeError(name, value, minimum, maximum)
    return value
