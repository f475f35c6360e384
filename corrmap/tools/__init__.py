"""工具包初始化模块。

该模块汇总子集、相关计算、结果组装与并行分发的底层工具函数。
"""

from corrmap.tools.dataframe.keys import get_key, set_key
from corrmap.tools.dataframe.subset import SubsetView, subset_dataset
from corrmap.tools.parallel.dispatch import ComputeStrategy, dispatch_targets
from corrmap.tools.parallel.pool import WorkerPool, active_pool, start_workers, stop_workers
from corrmap.tools.stats.adjust import adjust_pvalues
from corrmap.tools.stats.assemble import assemble_pairs
from corrmap.tools.stats.correlation import pairwise_matrix, target_correlations

__all__ = [
    "ComputeStrategy",
    "SubsetView",
    "WorkerPool",
    "active_pool",
    "adjust_pvalues",
    "assemble_pairs",
    "dispatch_targets",
    "get_key",
    "pairwise_matrix",
    "set_key",
    "start_workers",
    "stop_workers",
    "subset_dataset",
    "target_correlations",
]
