"""
Cumuli Exceptions and Error Utilities

File Purpose: Centralized exception types and simple error handling helpers
Primary Classes/Functions: CumuliError, DirectoryError, FetchFailed, AggregationAborted, InvalidInput, handle_error
Inputs and Outputs (I/O): Accepts exceptions and console; prints user-friendly messages
"""

from typing import Optional

from rich.console import Console


class CumuliError(Exception):
    """Base exception for all Cumuli-specific errors."""

    def __init__(
        self,
        message: str,
        details: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ):
        self.message = message
        self.details = details
        self.original_error = original_error
        super().__init__(message)


class ConfigurationError(CumuliError):
    """Raised when a configuration value is missing or invalid."""

    pass


class InvalidInput(CumuliError):
    """Raised when the requested user identifiers are empty or malformed."""

    pass


class DirectoryError(CumuliError):
    """Raised when the remote directory cannot answer a query."""

    pass


class TransportError(DirectoryError):
    """Raised on network failures and unexpected HTTP statuses."""

    pass


class NotFoundError(DirectoryError):
    """Raised when the requested user does not exist."""

    pass


class RateLimitedError(DirectoryError):
    """Raised when the remote directory keeps throttling after retries."""

    pass


class MalformedResponseError(DirectoryError):
    """Raised when a response body cannot be interpreted."""

    pass


class FetchCancelled(CumuliError):
    """Raised inside a fetch task when its aggregation was cancelled."""

    pass


class FetchTimeout(CumuliError):
    """Raised when a user's paged fetch exceeds its time budget."""

    pass


class FetchFailed(CumuliError):
    """A single user's followings could not be retrieved."""

    def __init__(self, user: str, cause: Optional[BaseException] = None):
        self.user = user
        self.cause = cause
        details = str(cause) if cause is not None else None
        super().__init__(
            f"Fetching followings for '{user}' failed",
            details=details,
            original_error=cause if isinstance(cause, Exception) else None,
        )


class AggregationAborted(CumuliError):
    """The whole request was abandoned because a user's fetch failed."""

    def __init__(self, cause: FetchFailed):
        self.cause = cause
        super().__init__(
            f"Aborted: {cause.message}",
            details=cause.details,
            original_error=cause,
        )

    @property
    def user(self) -> str:
        return self.cause.user


def handle_error(
    console: Console,
    error: Exception,
    operation: str,
    show_details: bool = False,
) -> None:
    """
    Standardized error rendering.

    Args:
        console: Rich console for output
        error: The exception that occurred
        operation: Description of the operation that failed
        show_details: Whether to show detailed error information
    """
    if isinstance(error, CumuliError):
        console.print(f"[red]{operation} failed: {error.message}[/]")
        if show_details and error.details:
            console.print(f"[dim]   Details: {error.details}[/]")
        if show_details and error.original_error:
            console.print(f"[dim]   Original error: {error.original_error}[/]")
    else:
        console.print(f"[red]{operation} failed: {str(error)}[/]")
        if show_details:
            console.print(f"[dim]   Error type: {type(error).__name__}[/]")
