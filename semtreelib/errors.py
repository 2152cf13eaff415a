"""Exception hierarchy for SemTreeLib.

All library errors derive from SemTreeError so callers can catch
everything raised by the library with a single except clause, while
still distinguishing bad arguments (ValidationError) from conversion
failures (ProcessingError).
"""

from typing import Any, Dict, Optional

_MISSING = object()


class SemTreeError(Exception):
    """Base class for all SemTreeLib errors.

    Attributes:
        details: Optional structured payload describing the failure
    """

    def __init__(self, message: str, details: Any = None):
        super().__init__(message)
        self.details = details


class ValidationError(SemTreeError):
    """Raised when arguments at an API boundary are invalid.

    Used for:
    - Predicates, transforms or reducers that are not callable
    - Missing source tree before a transformation
    - Invalid configuration values
    - Adapter input that cannot be converted
    """
    pass


class BranchConflictError(ValidationError):
    """Raised when branch() is called while another branch is still open."""

    def __init__(self, message: str = "Cannot create nested branches. "
                 "Call merge() first to close the current branch."):
        super().__init__(message)


class ProcessingError(SemTreeError):
    """Raised when an adapter fails to parse, convert or serialize data.

    Attributes:
        source: The input that was being processed when the failure occurred
    """

    def __init__(self, message: str, source: Any = None):
        super().__init__(message, {"source": source})
        self.source = source


def validate(condition: bool, message: str, details: Any = None) -> None:
    """Raise ValidationError if condition is false.

    Args:
        condition: Condition that must hold
        message: Error message used when it does not
        details: Optional payload attached to the error

    Raises:
        ValidationError: If condition is falsy
    """
    if not condition:
        raise ValidationError(message, details)


def handle_error(err: Any,
                 context: str,
                 fallback: Any = _MISSING,
                 data: Optional[Dict[str, Any]] = None) -> Any:
    """Resolve a caught error into a fallback value or a raised exception.

    Args:
        err: The caught error, or any non-exception value that was reported
        context: Short description of where the error happened
        fallback: Value to return instead of raising (omit to raise)
        data: Extra details attached when the error has to be wrapped

    Returns:
        The fallback value, when one was supplied

    Raises:
        The original exception when err is an exception, otherwise a
        ProcessingError describing it.
    """
    if fallback is not _MISSING:
        return fallback

    if isinstance(err, BaseException):
        raise err

    wrapped = ProcessingError(f"{context}: {err}", err)
    if data:
        wrapped.details = data
    raise wrapped
