"""Adapter abstraction for SemTreeLib.

Adapters are the boundary between external data formats and the XNode
tree. Each adapter converts one way (format to XNode, or XNode to
format); the pipeline core never imports them and never sees format
details.
"""

from abc import ABC, abstractmethod
from typing import Any

from ..context import PipelineContext
from ..errors import ProcessingError, SemTreeError

PREVIEW_LENGTH = 100


class Adapter(ABC):
    """Abstract one-way converter between a data format and XNode.

    Subclasses set ``name`` and implement execute(). validate() runs
    first and should raise ValidationError for input that cannot be
    converted; the default rejects None.
    """

    name: str = "adapter"

    @abstractmethod
    def execute(self, input: Any, context: PipelineContext) -> Any:
        """Convert input.

        Args:
            input: Data to convert
            context: Pipeline context (configuration, logging, metadata)

        Returns:
            Converted data
        """
        pass

    def validate(self, input: Any, context: PipelineContext) -> None:
        """Check input before conversion.

        Raises:
            ValidationError: If input is None
        """
        context.validate_input(input is not None, f"{self.name}: Input cannot be None")


def input_preview(input: Any) -> Any:
    """Short description of input for error details."""
    if isinstance(input, str):
        return input if len(input) <= PREVIEW_LENGTH else input[:PREVIEW_LENGTH] + "..."
    if isinstance(input, (list, tuple)):
        return f"list({len(input)})"
    if isinstance(input, dict):
        return f"dict({len(input)} keys)"
    return input


class AdapterExecutor:
    """Runs adapters with validation, logging and uniform error wrapping."""

    @staticmethod
    def execute(adapter: Adapter, input: Any, context: PipelineContext) -> Any:
        """Validate then execute an adapter.

        Args:
            adapter: Adapter to run
            input: Data to convert
            context: Pipeline context

        Returns:
            The adapter's output

        Raises:
            SemTreeError: Library errors raised by the adapter, unchanged
            ProcessingError: Wrapping any other exception
        """
        context.log_operation(f"adapter-{adapter.name}", input_type=type(input).__name__)
        try:
            adapter.validate(input, context)
            result = adapter.execute(input, context)
        except SemTreeError as e:
            context.log_error(f"adapter-{adapter.name}", e)
            raise
        except Exception as e:
            context.log_error(f"adapter-{adapter.name}", e)
            raise ProcessingError(
                f"Adapter {adapter.name} failed: {e}", input_preview(input)
            ) from e

        context.logger.debug(f"Adapter {adapter.name} completed successfully")
        return result
