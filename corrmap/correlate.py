"""相关性分析入口模块。

该模块提供四个公共入口，共享同一套子集逻辑：

* ``correlate_matrix``：数据集全部列两两相关；
* ``correlate_target``：单个目标，若有工作池则作为一个任务在工作池中执行；
* ``correlate_targets_sequential``：单个目标，总是同步执行；
* ``correlate_target_map``：多个目标并行分发后合并。

全部参数校验在子集与计算之前完成，校验错误直接抛给调用方。
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Sequence

import pandas as pd

from corrmap.errors import (
    CorrelationComputationError,
    InvalidTargetSetError,
    TargetDispatchError,
)
from corrmap.schemas.options import build_options
from corrmap.tools.dataframe.subset import subset_dataset
from corrmap.tools.parallel.dispatch import (
    ComputeStrategy,
    dispatch_targets,
    resolve_strategy,
    validate_targets,
)
from corrmap.tools.parallel.pool import WorkerPool, active_pool, run_task
from corrmap.tools.stats.assemble import assemble_pairs
from corrmap.tools.stats.correlation import pairwise_matrix, target_correlations

logger = logging.getLogger(__name__)


def _single_target(target: Any) -> str:
    if not isinstance(target, str) or not target:
        raise InvalidTargetSetError(
            "`target` must be a single column name; use `correlate_target_map` for multiple targets."
        )
    return target


def correlate_matrix(
    dataset: pd.DataFrame,
    select_cols: Any = None,
    filter_rows: Optional[Mapping[str, Any]] = None,
    metadata: Optional[pd.DataFrame] = None,
    self_corr: str = "yes",
    method: str = "BH",
) -> pd.DataFrame:
    """计算数据集所选列两两之间的 Pearson 相关。

    Args:
        dataset: 数据框。
        select_cols: 参与计算的列名或位置索引，默认全部数值列。
        filter_rows: 列名到可接受取值的映射，用于过滤行。
        metadata: 可选的元数据表，与 dataset 共享主键，过滤条件作用于其上。
        self_corr: "yes" 保留自相关（p、q 置 0），"no" 删除。
        method: p 值校正方法。

    Returns:
        pd.DataFrame: 去除对称重复后的长格式结果，列为 Target, Correlation, n, r, p, q 及过滤条件列。

    Raises:
        CorrelationComputationError: 计算过程中出现类型或数值错误。
    """
    options = build_options(self_corr=self_corr, method=method)
    view = subset_dataset(dataset, select_cols=select_cols, filter_rows=filter_rows, metadata=metadata)
    try:
        records = pairwise_matrix(view.table, view.columns)
    except (TypeError, ValueError) as exc:
        raise CorrelationComputationError(f"Correlation matrix failed: {exc}") from exc
    result = assemble_pairs(records, options, filter_rows=view.filter_rows, dedupe=True)
    logger.info(
        "Correlation matrix: %d rows x %d columns -> %d pairs",
        view.table.shape[0], len(view.columns), len(result),
    )
    return result


def correlate_targets_sequential(
    dataset: pd.DataFrame,
    target: str,
    select_cols: Any = None,
    filter_rows: Optional[Mapping[str, Any]] = None,
    metadata: Optional[pd.DataFrame] = None,
    self_corr: str = "yes",
    method: str = "BH",
) -> pd.DataFrame:
    """在当前线程中计算单个目标与所选列的 Pearson 相关。

    参数同 ``correlate_target``，但不使用任何工作池。
    """
    target = _single_target(target)
    options = build_options(self_corr=self_corr, method=method)
    view = subset_dataset(dataset, select_cols, filter_rows, metadata, targets=[target])
    records = target_correlations(view.table, target, view.columns)
    return assemble_pairs(records, options, filter_rows=view.filter_rows)


def correlate_target(
    dataset: pd.DataFrame,
    target: str,
    select_cols: Any = None,
    filter_rows: Optional[Mapping[str, Any]] = None,
    metadata: Optional[pd.DataFrame] = None,
    self_corr: str = "yes",
    method: str = "BH",
    pool: WorkerPool | None = None,
) -> pd.DataFrame:
    """计算单个目标与所选列的 Pearson 相关。

    计算作为一个任务提交到 ``pool``（默认使用当前活动工作池）并阻塞等待；
    没有工作池时同步执行。

    Args:
        dataset: 数据框。
        target: 目标列名，不必包含在 select_cols 中。
        select_cols: 与目标配对的列，默认全部数值列。
        filter_rows: 列名到可接受取值的映射。
        metadata: 可选的元数据表。
        self_corr: "yes" 或 "no"。
        method: p 值校正方法。
        pool: 显式指定的工作池。

    Returns:
        pd.DataFrame: 长格式结果，每个所选列一行。
    """
    target = _single_target(target)
    options = build_options(self_corr=self_corr, method=method)
    view = subset_dataset(dataset, select_cols, filter_rows, metadata, targets=[target])
    pool = pool if pool is not None else active_pool()
    records = run_task(pool, target_correlations, view.table, target, view.columns)
    return assemble_pairs(records, options, filter_rows=view.filter_rows)


def _resolve_compute_fn(compute_fn: Any) -> ComputeStrategy:
    if compute_fn is correlate_targets_sequential:
        return ComputeStrategy.SEQUENTIAL
    if compute_fn is correlate_target:
        return ComputeStrategy.POOLED
    return resolve_strategy(compute_fn)


def correlate_target_map(
    dataset: pd.DataFrame,
    targets: Sequence[str],
    select_cols: Any = None,
    filter_rows: Optional[Mapping[str, Any]] = None,
    metadata: Optional[pd.DataFrame] = None,
    self_corr: str = "yes",
    method: str = "BH",
    compute_fn: Any = correlate_targets_sequential,
    adjust: str = "global",
    strict: bool = False,
    pool: WorkerPool | None = None,
) -> pd.DataFrame:
    """计算多个目标与所选列的 Pearson 相关，每个目标一个并行任务。

    失败的目标被记录并从结果中丢弃；``strict=True`` 时改为抛出 TargetDispatchError。

    Args:
        dataset: 数据框。
        targets: 目标列名，至少两个。
        select_cols: 与每个目标配对的列，默认全部数值列。
        filter_rows: 列名到可接受取值的映射。
        metadata: 可选的元数据表。
        self_corr: "yes" 或 "no"。
        method: p 值校正方法。
        compute_fn: 单目标计算策略，``correlate_targets_sequential``（默认）或 ``correlate_target``，
            也可传入 ComputeStrategy。
        adjust: "global" 对合并结果整体校正，"per_target" 逐目标独立校正。
        strict: 存在失败目标时是否抛出异常。
        pool: 显式指定的工作池，默认使用当前活动工作池。

    Returns:
        pd.DataFrame: 按目标提交顺序、再按 q 排序的长格式结果。

    Raises:
        InvalidTargetSetError: 目标不足两个。
        TargetDispatchError: strict 模式下存在失败目标。
    """
    targets = validate_targets(targets)
    strategy = _resolve_compute_fn(compute_fn)
    options = build_options(self_corr=self_corr, method=method, adjust=adjust)
    view = subset_dataset(dataset, select_cols, filter_rows, metadata, targets=targets)

    pool = pool if pool is not None else active_pool()
    outcome = dispatch_targets(view.table, targets, view.columns, compute_fn=strategy, pool=pool)
    if strict and outcome.failed:
        raise TargetDispatchError(outcome.failed)

    return assemble_pairs(
        outcome.merged(),
        options,
        filter_rows=view.filter_rows,
        target_order=targets,
        per_target=options.adjust == "per_target",
    )
