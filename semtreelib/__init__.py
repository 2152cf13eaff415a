"""SemTreeLib - Semantic Tree Transformation Library.

SemTreeLib converts hierarchical data (JSON objects, XML documents,
serialized trees) into one universal node model, the XNode tree, and
transforms it with a chainable functional pipeline: filter, map,
select, branch/merge and reduce.

Quick start:
━━━━━━━━━━━━━━━━━━━━━━━━━━
    from semtreelib import TreePipeline
    from semtreelib.transforms import to_number

    result = (TreePipeline()
              .from_json({"price": "12.50"})
              .map(to_number())
              .to_json())
━━━━━━━━━━━━━━━━━━━━━━━━━━

Logging is silent by default; call ``configure_logging()`` to see it.
"""

__version__ = "0.1.0"

from .log import LogLevel, configure_logging, get_log_level, get_logger, set_log_level
from .errors import BranchConflictError, ProcessingError, SemTreeError, ValidationError
from ._common import Configuration, FormattingConfig, create_config
from .core import (
    TraversalContext,
    TraversalOrder,
    XNode,
    XNodeAttribute,
    XNodeType,
    traverse_tree,
)
from .context import PipelineContext
from .error_policies import (
    CollectErrorsPolicy,
    ContinueOnErrorsPolicy,
    ErrorPolicy,
    FailFastPolicy,
    ThresholdPolicy,
)
from .pipeline import TreePipeline
from . import adapters
from . import api
from . import core
from . import transforms

__all__ = [
    "__version__",
    # Session
    "TreePipeline",
    "PipelineContext",
    # Model
    "XNode",
    "XNodeAttribute",
    "XNodeType",
    "TraversalContext",
    "TraversalOrder",
    "traverse_tree",
    # Configuration
    "Configuration",
    "FormattingConfig",
    "create_config",
    # Errors
    "SemTreeError",
    "ValidationError",
    "BranchConflictError",
    "ProcessingError",
    "ErrorPolicy",
    "ContinueOnErrorsPolicy",
    "CollectErrorsPolicy",
    "FailFastPolicy",
    "ThresholdPolicy",
    # Logging
    "LogLevel",
    "configure_logging",
    "get_log_level",
    "get_logger",
    "set_log_level",
    # Submodules
    "adapters",
    "api",
    "core",
    "transforms",
]
