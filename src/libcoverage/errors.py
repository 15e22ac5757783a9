"""Custom exception hierarchy for libcoverage."""

from typing import Optional


class LibCoverageError(Exception):
    """Base exception for libcoverage library."""

    def __init__(self, message: str, cause: Optional[Exception] = None):
        super().__init__(message)
        self.cause = cause


class InvalidArgument(LibCoverageError, ValueError):
    """A mandatory request argument is missing or an option value is invalid."""
    pass


class NoParserRegistered(LibCoverageError, LookupError):
    """Dispatch was attempted for a tag name without registered parsers."""

    def __init__(self, tag_name: str):
        super().__init__(f"No parsing function for tag name '{tag_name}' registered.")
        self.tag_name = tag_name


class ParseError(LibCoverageError):
    """Data parsing errors."""
    pass


class ServiceException(LibCoverageError):
    """An ``ows:ExceptionReport`` returned by the service."""

    def __init__(self, text: str, code: Optional[str] = None, locator: Optional[str] = None):
        super().__init__(text or code or "Service exception")
        self.text = text
        self.code = code
        self.locator = locator


class NetworkError(LibCoverageError):
    """Network-related errors."""
    pass


class ConfigurationError(LibCoverageError):
    """Configuration and setup errors."""
    pass
