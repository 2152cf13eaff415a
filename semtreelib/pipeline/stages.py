"""Pipeline stages for SemTreeLib.

Each stage is a pure function from a tree (plus parameters) to a new
tree or a terminal value. Stages never mutate the tree they are given;
merge only mutates the private deep copy it builds. User callables are
invoked directly, so an exception from a predicate, transform or reducer
aborts the stage and propagates to the caller unchanged.

Stages are wrapped in PipelineStage objects and run through
execute_stage(), which adds start/finish/failure logging.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional, Sequence, Tuple

from ..core.node import XNode, XNodeAttribute, add_child, clone_node
from ..core.paths import Path, create_results_container, remove_node_at_path, replace_node_at_path

logger = logging.getLogger(__name__)

Predicate = Callable[[XNode], bool]
Transform = Callable[[XNode], XNode]
Reducer = Callable[[Any, XNode], Any]

DEFAULT_FRAGMENT_ROOT = "results"


@dataclass
class BranchContext:
    """State of one in-flight branch/merge cycle.

    Attributes:
        parent_node: The tree as it stood at branch time (by reference)
        selected_nodes: Deep clones of every matched node, in pre-order
        original_paths: Root-relative path of each matched node
    """
    parent_node: XNode
    selected_nodes: List[XNode] = field(default_factory=list)
    original_paths: List[Path] = field(default_factory=list)


@dataclass(frozen=True)
class PipelineStage:
    """A named pipeline operation.

    Attributes:
        name: Stage name used in log messages
        func: Function(*args, context) implementing the stage
        terminal: True when the stage yields a value rather than a tree
    """
    name: str
    func: Callable[..., Any]
    terminal: bool = False

    def execute(self, *args: Any, context: Any = None) -> Any:
        return self.func(*args, context=context)


def _fragment_root(context: Any) -> str:
    config = getattr(context, "config", None)
    return getattr(config, "fragment_root", None) or DEFAULT_FRAGMENT_ROOT


def _copy_attributes(node: XNode) -> Optional[List[XNodeAttribute]]:
    if node.attributes is None:
        return None
    return [XNodeAttribute(a.name, a.value, a.namespace, a.label) for a in node.attributes]


# --- filter ---

def filter_stage(tree: XNode, predicate: Predicate, context: Any = None) -> XNode:
    """Keep matching nodes together with their ancestors.

    A node survives if it matches or any of its (recursively filtered)
    children survive. Survivors are fresh shallow copies carrying their
    attributes and surviving children. When the root itself does not
    match, surviving children are wrapped in a results container; when
    nothing survives an empty results container is returned.
    """
    result, root_matched = _filter_node(tree, predicate)

    if result is None:
        return create_results_container(_fragment_root(context))

    if not root_matched and result.children:
        container = create_results_container(_fragment_root(context))
        for child in result.children:
            add_child(container, child)
        return container

    return result


def _filter_node(node: XNode, predicate: Predicate) -> Tuple[Optional[XNode], bool]:
    matched = bool(predicate(node))

    survivors = []
    for child in node.children or []:
        filtered, _ = _filter_node(child, predicate)
        if filtered is not None:
            survivors.append(filtered)

    if not matched and not survivors:
        return None, matched

    result = clone_node(node, False)
    result.attributes = _copy_attributes(node)
    if survivors or node.children is not None:
        result.children = []
        for child in survivors:
            add_child(result, child)
    return result, matched


# --- map ---

def map_stage(tree: XNode, transform: Transform, context: Any = None) -> XNode:
    """Apply transform to every node.

    If the node returned by transform carries a children list other than
    the original node's list, that list is used as given. Otherwise the
    original children are mapped recursively and attached to the
    transformed node. A node that had no children list and gained no
    children keeps children set to None.
    """
    result = _map_node(tree, transform)
    result.parent = None
    return result


def _map_node(node: XNode, transform: Transform) -> XNode:
    transformed = transform(node)
    if transformed is node:
        # Identity result: copy so the input tree is left untouched
        transformed = clone_node(node, False)
        transformed.attributes = _copy_attributes(node)
        transformed.children = node.children

    if transformed.children is not None and transformed.children is not node.children:
        # Children still owned by another tree are copied, never re-parented
        children = [
            child if child.parent is None or child.parent is transformed
            else clone_node(child, True)
            for child in transformed.children
        ]
    elif node.children:
        children = [_map_node(child, transform) for child in node.children]
    else:
        children = []

    if children or node.children is not None:
        transformed.children = list(children)
        for child in transformed.children:
            child.parent = transformed
    else:
        transformed.children = None

    return transformed


# --- select ---

def select_stage(tree: XNode, predicate: Predicate, context: Any = None) -> XNode:
    """Flatten every matching node (root included) into a results container.

    Matches are deep-copied in pre-order and become direct children of
    the container regardless of their original depth.
    """
    container = create_results_container(_fragment_root(context))

    def _collect(node: XNode) -> None:
        if predicate(node):
            add_child(container, clone_node(node, True))
        for child in node.children or []:
            _collect(child)

    _collect(tree)
    return container


# --- branch / merge ---

def branch_stage(tree: XNode, predicate: Predicate, context: Any = None) -> Tuple[XNode, List[Path]]:
    """Detach deep copies of matching nodes, remembering where they lived.

    Returns:
        Tuple of (results container holding the copies, parallel list of
        root-relative paths)
    """
    container = create_results_container(_fragment_root(context))
    paths: List[Path] = []

    def _collect(node: XNode, path: Path) -> None:
        if predicate(node):
            add_child(container, clone_node(node, True))
            paths.append(list(path))
        for i, child in enumerate(node.children or []):
            _collect(child, path + [i])

    _collect(tree, [])
    return container, paths


def merge_stage(original: XNode,
                modified: Sequence[XNode],
                paths: Sequence[Path],
                context: Any = None) -> XNode:
    """Write branch results back into a deep copy of the original tree.

    modified[i] belongs at paths[i]; a missing entry means the node was
    removed while branched. Edits are applied deepest first and, at equal
    depth, right-most first so that no removal shifts an index still
    waiting to be applied. A modified node recorded at the empty path
    replaces the whole tree.
    """
    if not paths:
        return original

    result = clone_node(original, True)

    pairs = [
        (list(path), modified[i] if i < len(modified) else None)
        for i, path in enumerate(paths)
    ]
    pairs.sort(key=lambda pair: (len(pair[0]), pair[0][-1] if pair[0] else 0), reverse=True)

    for path, node in pairs:
        if node is not None and not path:
            node.parent = None
            return node
        if node is not None:
            replace_node_at_path(result, node, path)
        elif path:
            remove_node_at_path(result, path)

    return result


# --- reduce ---

def reduce_stage(tree: XNode, reducer: Reducer, initial: Any, context: Any = None) -> Any:
    """Fold reducer over every node in pre-order."""
    accumulator = initial

    def _visit(node: XNode) -> None:
        nonlocal accumulator
        accumulator = reducer(accumulator, node)
        for child in node.children or []:
            _visit(child)

    _visit(tree)
    return accumulator


FILTER = PipelineStage("filter", filter_stage)
MAP = PipelineStage("map", map_stage)
SELECT = PipelineStage("select", select_stage)
BRANCH = PipelineStage("branch", branch_stage)
MERGE = PipelineStage("merge", merge_stage)
REDUCE = PipelineStage("reduce", reduce_stage, terminal=True)


def execute_stage(stage: PipelineStage, *args: Any, context: Any = None) -> Any:
    """Run a stage with start/finish logging.

    Failures are logged at ERROR with the stage name and re-raised
    unchanged.
    """
    logger.debug(f"Executing pipeline stage: {stage.name}")
    try:
        result = stage.execute(*args, context=context)
    except Exception as e:
        logger.error(f"Error in pipeline stage {stage.name}: {e}")
        raise
    logger.debug(f"Completed pipeline stage: {stage.name}")
    return result
