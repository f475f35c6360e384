"""corrmap：带行过滤与并行目标分发的成对 Pearson 相关分析。

结果以长格式（Target, Correlation, n, r, p, q）的 pandas.DataFrame 返回。
"""

__version__ = "0.1.0"

from corrmap.correlate import (
    correlate_matrix,
    correlate_target,
    correlate_target_map,
    correlate_targets_sequential,
)
from corrmap.errors import (
    ColumnResolutionError,
    CorrelationComputationError,
    CorrmapError,
    InputTypeError,
    InvalidFilterSpecError,
    InvalidOptionError,
    InvalidTargetSetError,
    KeyMismatchError,
    TargetDispatchError,
)
from corrmap.schemas.options import CorrelationOptions, build_options
from corrmap.schemas.results import PAIR_COLUMNS, DispatchResult, TargetOutcome
from corrmap.tools import (
    ComputeStrategy,
    SubsetView,
    WorkerPool,
    active_pool,
    adjust_pvalues,
    assemble_pairs,
    dispatch_targets,
    get_key,
    pairwise_matrix,
    set_key,
    start_workers,
    stop_workers,
    subset_dataset,
    target_correlations,
)

__all__ = [
    "PAIR_COLUMNS",
    "ColumnResolutionError",
    "ComputeStrategy",
    "CorrelationComputationError",
    "CorrelationOptions",
    "CorrmapError",
    "DispatchResult",
    "InputTypeError",
    "InvalidFilterSpecError",
    "InvalidOptionError",
    "InvalidTargetSetError",
    "KeyMismatchError",
    "SubsetView",
    "TargetDispatchError",
    "TargetOutcome",
    "WorkerPool",
    "active_pool",
    "adjust_pvalues",
    "assemble_pairs",
    "build_options",
    "correlate_matrix",
    "correlate_target",
    "correlate_target_map",
    "correlate_targets_sequential",
    "dispatch_targets",
    "get_key",
    "pairwise_matrix",
    "set_key",
    "start_workers",
    "stop_workers",
    "subset_dataset",
    "target_correlations",
]
