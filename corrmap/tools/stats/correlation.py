"""相关性分析工具模块。

该模块提供两种 Pearson 相关计算方式：

* ``pairwise_matrix``：一次性计算全部列两两之间的相关系数、样本量与 p 值矩阵（闭式解），
  再展开为长格式；
* ``target_correlations``：对单个目标列逐列执行 Pearson 相关检验，可作为独立任务分发。

两者均使用成对完整观测（pairwise-complete observations），对同一列对给出一致的 r 与 p。
"""

from typing import List, Sequence, Tuple

import numpy as np
import pandas as pd
from pandas.api.types import is_numeric_dtype
from scipy import stats

from corrmap.errors import ColumnResolutionError, CorrelationComputationError
from corrmap.schemas.results import RECORD_COLUMNS, empty_records


def _numeric_frame(table: pd.DataFrame, columns: Sequence[str]) -> pd.DataFrame:
    non_numeric = [col for col in columns if not is_numeric_dtype(table[col])]
    if non_numeric:
        raise CorrelationComputationError(f"Columns must be numeric to compute correlations: {non_numeric}")
    return table.loc[:, list(columns)].astype(float)


def pearson_pvalues(r: np.ndarray, n: np.ndarray) -> np.ndarray:
    """根据相关系数与样本量计算双侧 p 值。

    检验统计量 ``t = r * sqrt((n - 2) / (1 - r^2))`` 服从自由度为 n - 2 的 t 分布。
    n < 2 或 r 无定义时为 NaN；n == 2 时为 1.0。

    Args:
        r: 相关系数数组。
        n: 样本量数组，与 r 同形。

    Returns:
        np.ndarray: 双侧 p 值数组。
    """
    r = np.asarray(r, dtype=float)
    n = np.asarray(n, dtype=float)
    dof = n - 2.0
    with np.errstate(divide="ignore", invalid="ignore"):
        clipped = np.clip(r, -1.0, 1.0)
        t = clipped * np.sqrt(dof / (1.0 - clipped * clipped))
        p = 2.0 * stats.t.sf(np.abs(t), dof)
    p = np.where((dof == 0) & np.isfinite(r), 1.0, p)
    return np.where((n < 2) | np.isnan(r), np.nan, p)


def pairwise_matrix(table: pd.DataFrame, columns: Sequence[str] | None = None) -> pd.DataFrame:
    """计算全部列对（含自身配对）的 Pearson 相关。

    Args:
        table: 数值型数据框。
        columns: 参与计算的列，默认全部列。

    Returns:
        pd.DataFrame: 长格式结果，列为 Target, Correlation, n, r, p，每个有序列对一行。
    """
    columns = list(table.columns) if columns is None else list(columns)
    if not columns:
        return empty_records()
    frame = _numeric_frame(table, columns)

    observed = frame.notna().to_numpy(dtype=np.int64)
    counts = observed.T @ observed
    coef = frame.corr(method="pearson", min_periods=1).to_numpy()
    pvalues = pearson_pvalues(coef, counts)

    k = len(columns)
    return pd.DataFrame(
        {
            "Target": np.repeat(np.array(columns, dtype=object), k),
            "Correlation": np.tile(np.array(columns, dtype=object), k),
            "n": counts.ravel().astype("int64"),
            "r": coef.ravel(),
            "p": pvalues.ravel(),
        },
        columns=RECORD_COLUMNS,
    )


def pearson_test(x: np.ndarray, y: np.ndarray) -> Tuple[float, float]:
    """对两组已对齐的观测执行 Pearson 相关检验。

    样本量不足 2 或任一侧为常数时返回 (NaN, NaN)。
    """
    if len(x) < 2 or np.ptp(x) == 0 or np.ptp(y) == 0:
        return float("nan"), float("nan")
    r, p = stats.pearsonr(x, y)
    return float(r), float(p)


def target_correlations(table: pd.DataFrame, target: str, columns: Sequence[str]) -> pd.DataFrame:
    """计算单个目标列与各列之间的 Pearson 相关检验。

    每一对只删除两列中任一缺失的行。

    Args:
        table: 数据框，需包含目标列与所有相关列。
        target: 目标列名。
        columns: 与目标配对的列。

    Returns:
        pd.DataFrame: 长格式结果，列为 Target, Correlation, n, r, p，按 columns 顺序排列。
    """
    if target not in table.columns:
        raise ColumnResolutionError(f"`target` {target!r} does not index within the table.")
    columns = list(columns)
    y_all = _numeric_frame(table, [target])[target].to_numpy()
    frame = _numeric_frame(table, columns)

    rows: List[tuple] = []
    for column in columns:
        x_all = frame[column].to_numpy()
        complete = ~(np.isnan(x_all) | np.isnan(y_all))
        r, p = pearson_test(y_all[complete], x_all[complete])
        rows.append((target, column, int(complete.sum()), r, p))

    if not rows:
        return empty_records()
    return pd.DataFrame.from_records(rows, columns=RECORD_COLUMNS).astype({"n": "int64"})
