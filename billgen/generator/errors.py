"""Exceptions raised while validating a configuration or expanding dates."""


class ValidationError(Exception):
    """A generation parameter violates a constraint.

    Raised before any synthesis begins; nothing partial is produced.

    Attributes:
        message: Human-readable explanation naming the field and bounds
    """

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class DateFormatError(ValidationError):
    """A date string is not a real DD-MM-YYYY calendar date."""


class EmptyRangeError(ValidationError):
    """Date expansion left no usable dates after exclusions."""
