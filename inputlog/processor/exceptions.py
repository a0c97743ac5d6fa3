class ProcessorError(Exception):
    """Base exception for all processor-related errors."""


class InvalidLogFileError(ProcessorError):
    """Raised when a claimed log file name does not carry a date."""
