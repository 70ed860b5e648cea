"""
Exception types raised by the log aggregation engine.
"""


class DlaError(Exception):
    """Base exception for all dla failures."""
    pass


class ConfigError(DlaError):
    """Exception raised when the configuration is invalid."""
    pass


class ResolutionError(DlaError):
    """Exception raised when the set of log sources cannot be determined."""
    pass


class StreamOpenError(DlaError):
    """Exception raised when a source's log streams cannot be opened."""

    def __init__(self, source_name: str, cause: BaseException):
        super().__init__(f"Logger failed for {source_name}: {cause}")
        self.source_name = source_name
        self.cause = cause


class FollowError(DlaError):
    """Exception raised when a follow call ends unsuccessfully."""

    def __init__(self, message: str, returncode: int = None):
        super().__init__(message)
        self.returncode = returncode


class FramingError(DlaError):
    """Exception raised when a byte stream cannot be split into lines."""
    pass


class LineTooLongError(FramingError):
    """Exception raised when a line exceeds the framing buffer limit."""
    pass


class ShortWriteError(DlaError):
    """Exception raised when a destination stops accepting bytes."""
    pass


class UnknownTagError(DlaError, KeyError):
    """Exception raised when a tag is requested for a name that was never registered."""
    pass
