"""Stock visitors for common aggregations.

Visitors define what information is extracted from nodes during a
traverse_tree() walk. The same traversal can count nodes, measure
depth or gather matches depending on the visitor handed to it.
"""

from typing import Any, Callable, Dict, List, Optional

from .node import XNode
from .traverser import TraversalContext, TreeVisitor


class NodeCountVisitor(TreeVisitor):
    """Counts nodes, optionally only those matching a predicate.

    Use with TraversalOrder.POST or PRE; the root's result is the total.
    """

    def __init__(self, predicate: Optional[Callable[[XNode], bool]] = None):
        self.predicate = predicate

    def visit(self, node: XNode, context: TraversalContext) -> int:
        if self.predicate is None or self.predicate(node):
            return 1
        return 0

    def combine_results(self, own_result: int, child_results: List[int]) -> int:
        return own_result + sum(child_results)


class MaxDepthVisitor(TreeVisitor):
    """Finds the depth of the deepest node (0 for a lone root)."""

    def visit(self, node: XNode, context: TraversalContext) -> int:
        return context.depth

    def combine_results(self, own_result: int, child_results: List[int]) -> int:
        return max([own_result] + child_results)


class CollectingVisitor(TreeVisitor):
    """Collects matching nodes in visit order.

    Results accumulate on the visitor rather than flowing through
    combine_results, so the collected list keeps traversal order.
    """

    def __init__(self, predicate: Optional[Callable[[XNode], bool]] = None):
        self.predicate = predicate
        self.nodes: List[XNode] = []
        self.paths: List[List[int]] = []

    def visit(self, node: XNode, context: TraversalContext) -> None:
        if self.predicate is None or self.predicate(node):
            self.nodes.append(node)
            self.paths.append(list(context.path))


class TypeCountVisitor(TreeVisitor):
    """Tallies nodes per XNodeType value."""

    def __init__(self):
        self.counts: Dict[str, int] = {}

    def visit(self, node: XNode, context: TraversalContext) -> Dict[str, int]:
        key = node.type.value
        self.counts[key] = self.counts.get(key, 0) + 1
        return self.counts


class CustomVisitor(TreeVisitor):
    """Visitor that accumulates a user function's results in visit order.

    Allows custom data collection without subclassing.
    """

    def __init__(self, collect_func: Callable[[XNode, TraversalContext], Any]):
        """Initialize with custom collection function.

        Args:
            collect_func: Function(node, context) -> Any
        """
        self.collect_func = collect_func
        self.results: List[Any] = []

    def visit(self, node: XNode, context: TraversalContext) -> Any:
        result = self.collect_func(node, context)
        self.results.append(result)
        return result
