class AggregationError(Exception):
    """Base exception for all aggregation-related errors."""


class ArchivedDayError(AggregationError):
    """Raised when an aggregation window covers a day already moved to the upload queue."""
