"""
Error handling policies for SemTreeLib traversal.

This module provides a flexible error handling system through the Policy pattern,
allowing users to define what happens when a visitor raises on a node during
traverse_tree().

Every policy receives the partial result already captured for the failing node
(the pre-order visit result, or the post-order result when the failure happened
while combining) and decides whether to substitute it or stop the traversal.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from .errors import ProcessingError

logger = logging.getLogger(__name__)


def _path_text(traversal_context: Any) -> str:
    path = getattr(traversal_context, "path", None)
    if not path:
        return "/"
    return "/" + "/".join(str(index) for index in path)


class ErrorPolicy(ABC):
    """
    Base class for traversal error policies.

    Subclasses implement different strategies for handling exceptions
    raised by a visitor while a node is being processed.
    """

    @abstractmethod
    def handle(self,
               error: Exception,
               node: Any,
               traversal_context: Any,
               partial_result: Any = None,
               has_partial: bool = False) -> Any:
        """
        Handle an error raised while visiting a node.

        Args:
            error: The exception that was raised
            node: The node being processed when the error occurred
            traversal_context: TraversalContext of that node
            partial_result: Result already captured for the node, if any
            has_partial: Whether partial_result holds a captured result

        Returns:
            The result to use for the node so traversal can continue,
            or re-raises to stop traversal.
        """
        pass


class FailFastPolicy(ErrorPolicy):
    """
    Policy that immediately re-raises any error, stopping traversal.

    Useful when partial results are not acceptable.
    """

    def handle(self, error, node, traversal_context, partial_result=None, has_partial=False):
        """Re-raise the error immediately."""
        raise error


class _RecordingPolicy(ErrorPolicy):
    """Shared bookkeeping for policies that record errors and continue."""

    def __init__(self):
        self.errors: List[Dict[str, Any]] = []
        self.skipped_paths: List[str] = []

    def _record(self, error: Exception, node: Any,
                traversal_context: Any) -> Optional[Dict[str, Any]]:
        """Record an error, or return None if it was already recorded.

        An error nothing could recover from on a child is re-raised and
        reaches the parent's handler a second time; it is counted once.
        """
        if any(record['error'] is error for record in self.errors):
            return None
        path = _path_text(traversal_context)
        record = {
            'name': getattr(node, 'name', None),
            'path': path,
            'error': error,
            'error_type': type(error).__name__,
            'error_message': str(error),
        }
        self.errors.append(record)
        return record

    def _resolve(self, error: Exception,
                 partial_result: Any, has_partial: bool) -> Any:
        if has_partial:
            return partial_result
        # Nothing captured for this node, so there is nothing to continue with
        raise error

    def get_statistics(self) -> dict:
        """
        Get statistics about errors encountered.

        Returns:
            Dictionary with error counts and details
        """
        by_type: Dict[str, int] = {}
        for record in self.errors:
            by_type[record['error_type']] = by_type.get(record['error_type'], 0) + 1
        return {
            'total_errors': len(self.errors),
            'errors_by_type': by_type,
            'skipped_paths': len(self.skipped_paths),
            'errors': self.errors,
        }


class ContinueOnErrorsPolicy(_RecordingPolicy):
    """
    Policy that logs errors and continues traversal.

    This is the default policy of traverse_tree(). A failing node keeps
    whatever result was captured before the failure; when nothing was
    captured the error propagates.
    """

    def __init__(self, verbose: bool = True):
        """
        Initialize the policy.

        Args:
            verbose: If True, log a warning for each error
        """
        super().__init__()
        self.verbose = verbose

    def handle(self, error, node, traversal_context, partial_result=None, has_partial=False):
        record = self._record(error, node, traversal_context)
        if record is not None:
            if self.verbose:
                logger.warning(
                    f"Error visiting node '{record['name']}' at path {record['path']}: {error}"
                )
            if has_partial:
                self.skipped_paths.append(record['path'])
        return self._resolve(error, partial_result, has_partial)


class CollectErrorsPolicy(_RecordingPolicy):
    """
    Policy that collects all errors without logging, for batch processing.

    Similar to ContinueOnErrorsPolicy but silent. Useful for collecting
    all errors and presenting them at the end.
    """

    def handle(self, error, node, traversal_context, partial_result=None, has_partial=False):
        """Silently collect the error and continue with the partial result."""
        record = self._record(error, node, traversal_context)
        if record is not None and has_partial:
            self.skipped_paths.append(record['path'])
        return self._resolve(error, partial_result, has_partial)


class ThresholdPolicy(_RecordingPolicy):
    """
    Policy that tolerates errors up to a threshold, then fails fast.

    Useful when some errors are expected but too many indicate
    a systemic problem that should halt processing.
    """

    def __init__(self, max_errors: int = 10, verbose: bool = True):
        """
        Initialize threshold policy.

        Args:
            max_errors: Maximum errors to tolerate before failing
            verbose: If True, log a warning for each tolerated error
        """
        super().__init__()
        self.max_errors = max_errors
        self.verbose = verbose
        self._tripped: Optional[ProcessingError] = None

    @property
    def error_count(self) -> int:
        return len(self.errors)

    def handle(self, error, node, traversal_context, partial_result=None, has_partial=False):
        """Handle error if under threshold, otherwise raise ProcessingError."""
        if error is self._tripped:
            raise error

        record = self._record(error, node, traversal_context)

        if self.error_count > self.max_errors:
            self._tripped = ProcessingError(
                f"Error threshold exceeded ({self.max_errors} errors)", node
            )
            raise self._tripped from error

        if record is not None and self.verbose:
            logger.warning(
                f"[{self.error_count}/{self.max_errors}] Error visiting node "
                f"'{record['name']}' at path {record['path']}: {error}"
            )
        return self._resolve(error, partial_result, has_partial)
