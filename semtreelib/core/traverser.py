"""Tree traversal engine for SemTreeLib.

traverse_tree() is the single generalized walk every tree operation is
built on: depth-first, left to right, visiting each node before its
children, after them, or both. Visitors return a result per node and may
combine it with their children's results.

What happens when a visitor raises is decided by an ErrorPolicy. The
default ContinueOnErrorsPolicy logs a warning and keeps the result
already captured for the failing node, re-raising only when nothing was
captured.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Iterator, List, Optional, Tuple, Union

from .node import XNode
from ..error_policies import ContinueOnErrorsPolicy, ErrorPolicy

logger = logging.getLogger(__name__)


class TraversalOrder(Enum):
    """When a node is visited relative to its children."""
    PRE = "pre"     # Parent before children
    POST = "post"   # Children before parent
    BOTH = "both"   # Before and after children (two visit calls)


@dataclass
class TraversalContext:
    """Position of the node being visited.

    Attributes:
        path: Child indices from the root (empty for the root)
        depth: Distance from the root (0 for the root)
        parent: Parent node (None for the root)
        index: Position in the parent's children (None for the root)
        pipeline_context: PipelineContext passed to traverse_tree(), if any
    """
    path: List[int] = field(default_factory=list)
    depth: int = 0
    parent: Optional[XNode] = field(default=None, repr=False)
    index: Optional[int] = None
    pipeline_context: Any = field(default=None, repr=False)

    def child(self, node: XNode, index: int) -> 'TraversalContext':
        """Return the context for the child of ``node`` at ``index``."""
        return TraversalContext(
            path=self.path + [index],
            depth=self.depth + 1,
            parent=node,
            index=index,
            pipeline_context=self.pipeline_context,
        )


class TreeVisitor(ABC):
    """Abstract base class for traversal visitors.

    Subclasses implement visit(). They may also define
    ``combine_results(own_result, child_results)`` to fold the results of
    a node's children into its own; without it a node's result is its
    own visit result, and in BOTH order the post-order result wins.
    """

    @abstractmethod
    def visit(self, node: XNode, context: TraversalContext) -> Any:
        """Visit a single node.

        Args:
            node: Node being visited
            context: Position of the node in the tree

        Returns:
            Result for this node
        """
        pass


class FunctionVisitor(TreeVisitor):
    """Visitor built from plain callables.

    Allows custom visiting logic without subclassing.
    """

    def __init__(self,
                 visit_func: Callable[[XNode, TraversalContext], Any],
                 combine_func: Optional[Callable[[Any, List[Any]], Any]] = None):
        """Initialize with visit and optional combine functions.

        Args:
            visit_func: Function(node, context) -> result
            combine_func: Function(own_result, child_results) -> result
        """
        self.visit_func = visit_func
        if combine_func is not None:
            self.combine_results = combine_func

    def visit(self, node: XNode, context: TraversalContext) -> Any:
        return self.visit_func(node, context)


def _parse_order(order: Union[TraversalOrder, str]) -> TraversalOrder:
    """Parse traversal order from string or enum."""
    if isinstance(order, TraversalOrder):
        return order
    try:
        return TraversalOrder(str(order).lower())
    except ValueError:
        raise ValueError(
            f"Unknown traversal order: {order}. "
            f"Choose from: {', '.join(member.value for member in TraversalOrder)}"
        ) from None


def traverse_tree(root: XNode,
                  visitor: TreeVisitor,
                  order: Union[TraversalOrder, str] = TraversalOrder.PRE,
                  context: Any = None,
                  error_policy: Optional[ErrorPolicy] = None) -> Any:
    """Walk a tree with a visitor and return the root's result.

    Args:
        root: Node to start from
        visitor: Visitor to call for each node
        order: TraversalOrder or one of "pre", "post", "both"
        context: PipelineContext exposed to the visitor as
            ``TraversalContext.pipeline_context``
        error_policy: Policy for visitor errors (default: ContinueOnErrorsPolicy)

    Returns:
        Result for the root node

    Raises:
        Any visitor error the policy does not recover from

    Example:
        >>> count = traverse_tree(root, FunctionVisitor(
        ...     lambda node, ctx: 1,
        ...     lambda own, children: own + sum(children)), order="post")
    """
    parsed_order = _parse_order(order)
    policy = error_policy if error_policy is not None else ContinueOnErrorsPolicy()

    logger.debug(
        f"Starting tree traversal: root='{root.name}' type={root.type.value} "
        f"order={parsed_order.value}"
    )
    try:
        result = _traverse_node(root, visitor, parsed_order, policy,
                                TraversalContext(pipeline_context=context))
    except Exception as e:
        logger.error(f"Tree traversal failed: {e}")
        raise
    logger.debug("Tree traversal completed")
    return result


def _traverse_node(node: XNode,
                   visitor: TreeVisitor,
                   order: TraversalOrder,
                   policy: ErrorPolicy,
                   traversal_context: TraversalContext) -> Any:
    """Recursive step of traverse_tree()."""
    pre_result = post_result = None
    has_pre = has_post = False

    try:
        if order is not TraversalOrder.POST:
            pre_result = visitor.visit(node, traversal_context)
            has_pre = True

        child_results = []
        for i, child in enumerate(node.children or []):
            child_results.append(
                _traverse_node(child, visitor, order, policy,
                               traversal_context.child(node, i))
            )

        if order is not TraversalOrder.PRE:
            post_result = visitor.visit(node, traversal_context)
            has_post = True

        own_result = post_result if has_post else pre_result
        combine = getattr(visitor, "combine_results", None)
        if combine is not None:
            return combine(own_result, child_results)
        return own_result

    except Exception as e:
        if has_pre:
            return policy.handle(e, node, traversal_context, pre_result, True)
        return policy.handle(e, node, traversal_context, post_result, has_post)


def iter_tree(root: XNode,
              order: Union[TraversalOrder, str] = TraversalOrder.PRE
              ) -> Iterator[Tuple[XNode, TraversalContext]]:
    """Lazily yield (node, context) pairs in the given order.

    In BOTH order every node is yielded twice, before and after its
    children.
    """
    parsed_order = _parse_order(order)

    def _walk(node: XNode, ctx: TraversalContext) -> Iterator[Tuple[XNode, TraversalContext]]:
        if parsed_order is not TraversalOrder.POST:
            yield (node, ctx)
        for i, child in enumerate(node.children or []):
            yield from _walk(child, ctx.child(node, i))
        if parsed_order is not TraversalOrder.PRE:
            yield (node, ctx)

    yield from _walk(root, TraversalContext())
