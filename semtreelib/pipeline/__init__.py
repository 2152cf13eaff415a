"""Functional transformation pipeline for SemTreeLib.

Stages (filter, map, select, branch, merge, reduce) are pure functions
in ``stages``; ``TreePipeline`` chains them over a working tree.
"""

from .stages import (
    BRANCH,
    FILTER,
    MAP,
    MERGE,
    REDUCE,
    SELECT,
    BranchContext,
    PipelineStage,
    branch_stage,
    execute_stage,
    filter_stage,
    map_stage,
    merge_stage,
    reduce_stage,
    select_stage,
)
from .session import TreePipeline

__all__ = [
    'BRANCH',
    'FILTER',
    'MAP',
    'MERGE',
    'REDUCE',
    'SELECT',
    'BranchContext',
    'PipelineStage',
    'TreePipeline',
    'branch_stage',
    'execute_stage',
    'filter_stage',
    'map_stage',
    'merge_stage',
    'reduce_stage',
    'select_stage',
]
