"""多目标分发模块。

每个目标作为一个独立任务执行单目标相关计算，所有任务结束后按提交顺序返回结果。
单个目标失败不会影响其他目标，失败信息记录在对应的 TargetOutcome 中。
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Sequence

import pandas as pd

from corrmap.errors import InvalidOptionError, InvalidTargetSetError
from corrmap.schemas.results import DispatchResult, TargetOutcome
from corrmap.tools.parallel.pool import WorkerPool, active_pool, run_task
from corrmap.tools.stats.correlation import target_correlations

logger = logging.getLogger(__name__)


class ComputeStrategy(str, Enum):
    """单目标计算策略。

    SEQUENTIAL 在任务内直接计算（默认）；POOLED 通过任务可见的工作池计算，
    在工作池任务内部等同于同步计算，不推荐使用。
    """

    SEQUENTIAL = "sequential"
    POOLED = "pooled"


def resolve_strategy(compute_fn: Any) -> ComputeStrategy:
    try:
        return ComputeStrategy(compute_fn)
    except ValueError as exc:
        raise InvalidOptionError(
            f"`compute_fn` must be one of {[s.value for s in ComputeStrategy]}, got {compute_fn!r}."
        ) from exc


def validate_targets(targets: Any) -> list[str]:
    """校验多目标集合：字符串序列，去重后至少两个。"""
    if isinstance(targets, str) or not isinstance(targets, Sequence):
        raise InvalidTargetSetError(
            "`targets` must be a sequence of column names; use `correlate_target` for a single target."
        )
    if not all(isinstance(t, str) and t for t in targets):
        raise InvalidTargetSetError("All `targets` must be non-empty column names.")
    unique = list(dict.fromkeys(targets))
    if len(unique) < 2:
        raise InvalidTargetSetError(
            f"`targets` must contain at least 2 distinct columns, got {unique}; "
            "use `correlate_target` for a single target."
        )
    return unique


def _run_target_task(table: pd.DataFrame, target: str, columns: list[str], strategy: ComputeStrategy) -> pd.DataFrame:
    if strategy is ComputeStrategy.POOLED:
        return run_task(active_pool(), target_correlations, table, target, columns)
    return target_correlations(table, target, columns)


def _failure(target: str, exc: BaseException) -> TargetOutcome:
    message = f"{type(exc).__name__}: {exc}"
    logger.warning("Correlation for target %s failed and is dropped: %s", target, message)
    return TargetOutcome(target=target, error=message)


def dispatch_targets(
    table: pd.DataFrame,
    targets: Sequence[str],
    columns: Sequence[str],
    compute_fn: ComputeStrategy | str = ComputeStrategy.SEQUENTIAL,
    pool: WorkerPool | None = None,
) -> DispatchResult:
    """将多个目标分发为独立任务并等待全部完成。

    Args:
        table: 子集后的数据框。
        targets: 目标列名，至少两个。
        columns: 与每个目标配对的列。
        compute_fn: 单目标计算策略。
        pool: 工作池，为 None 时在当前线程中依次执行。

    Returns:
        DispatchResult: 按提交顺序排列的每个目标的执行结果。
    """
    targets = validate_targets(targets)
    strategy = resolve_strategy(compute_fn)
    columns = list(columns)
    outcomes: list[TargetOutcome] = []

    if pool is None:
        for target in targets:
            try:
                outcomes.append(TargetOutcome(target, _run_target_task(table, target, columns, strategy)))
            except Exception as exc:
                outcomes.append(_failure(target, exc))
    else:
        futures = [(t, pool.submit(_run_target_task, table, t, columns, strategy)) for t in targets]
        for target, future in futures:
            try:
                outcomes.append(TargetOutcome(target, future.result()))
            except Exception as exc:
                outcomes.append(_failure(target, exc))

    result = DispatchResult(outcomes=outcomes)
    logger.info(
        "Dispatched %d targets (%s): %d succeeded, %d failed",
        len(targets), "pool" if pool is not None else "sequential", len(result.succeeded), len(result.failed),
    )
    return result
