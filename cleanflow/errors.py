"""Exceptions raised by the cleaning engine."""


class CleaningError(Exception):
    """Base class for all engine errors."""
    pass


class InvalidColumnError(CleaningError, KeyError):
    """Raised when an operation references a column not present in the table."""

    def __init__(self, column, available=None):
        self.column = column
        self.available = list(available) if available is not None else None
        super().__init__(column)

    def __str__(self):
        return f"Column '{self.column}' not found"


class InvalidParameterError(CleaningError, ValueError):
    """Raised when operation parameters are missing or malformed."""
    pass


class MalformedOrdinalOrderError(InvalidParameterError):
    """Raised when ordinal encoding is invoked without a category order."""
    pass


class UnknownOperationError(CleaningError):
    """Raised when a named operation does not exist."""
    pass


class NonNumericColumnError(CleaningError, ValueError):
    """Raised when a numeric operator meets values it cannot use as numbers."""
    pass


class AutopilotPartialFailure(CleaningError):
    """Raised on demand when some autopilot column operations failed."""

    def __init__(self, failures):
        self.failures = list(failures)
        columns = ", ".join(f"{f.column} ({f.phase})" for f in self.failures)
        super().__init__(f"Autopilot skipped {len(self.failures)} column operation(s): {columns}")


class SessionNotFoundError(CleaningError):
    """Raised when a requested session cannot be found."""
    pass


class IngestionError(CleaningError):
    """Raised when a file cannot be converted into a table."""
    pass
