"""长格式结果组装模块。

该模块把原始配对记录（Target, Correlation, n, r, p）整理为最终输出：
对称配对去重、p 值校正、附加过滤条件、自相关处理以及排序。
"""

from typing import Any, Dict, List, Optional, Sequence

import numpy as np
import pandas as pd

from corrmap.schemas.options import CorrelationOptions
from corrmap.schemas.results import PAIR_COLUMNS
from corrmap.tools.stats.adjust import adjust_pvalues


def dedupe_pairs(records: pd.DataFrame) -> pd.DataFrame:
    """将无序列对规范为 Target <= Correlation（字典序）并去除重复配对。"""
    swap = records["Target"] > records["Correlation"]
    deduped = records.copy()
    deduped.loc[swap, ["Target", "Correlation"]] = records.loc[swap, ["Correlation", "Target"]].to_numpy()
    return deduped.drop_duplicates(subset=["Target", "Correlation"], keep="first")


def _adjusted(result: pd.DataFrame, method: str, per_target: bool) -> np.ndarray:
    if result.empty:
        return np.array([], dtype=float)
    if not per_target:
        return adjust_pvalues(result["p"].to_numpy(), method)
    p = result["p"].to_numpy()
    q = np.full(len(result), np.nan)
    for index in result.groupby("Target", sort=False).indices.values():
        q[index] = adjust_pvalues(p[index], method)
    return q


def assemble_pairs(
    records: pd.DataFrame,
    options: CorrelationOptions,
    filter_rows: Optional[Dict[str, List[Any]]] = None,
    dedupe: bool = False,
    target_order: Optional[Sequence[str]] = None,
    per_target: bool = False,
) -> pd.DataFrame:
    """组装最终的长格式结果表。

    Args:
        records: 原始配对记录。
        options: 分析选项（自相关处理与校正方法）。
        filter_rows: 规范化后的过滤条件，每个键追加一列，内容为以 ", " 连接的取值。
        dedupe: 是否对称去重（全矩阵模式）。
        target_order: 指定 Target 的排序顺序（多目标模式按提交顺序），为空时按字典序。
        per_target: 是否逐目标独立校正 p 值。

    Returns:
        pd.DataFrame: 列为 Target, Correlation, n, r, p, q 及过滤条件列的结果表。
    """
    result = dedupe_pairs(records) if dedupe else records.copy()
    result = result.reset_index(drop=True)
    result["q"] = _adjusted(result, options.method, per_target)

    filter_cols: List[str] = []
    if filter_rows:
        # Include filters used
        for name, values in filter_rows.items():
            result[name] = ", ".join(str(v) for v in values)
            filter_cols.append(name)

    self_rows = result["Target"] == result["Correlation"]
    if options.self_corr == "yes":
        result.loc[self_rows, ["p", "q"]] = 0.0
        result[["p", "q"]] = result[["p", "q"]].fillna(0.0)
    else:
        result = result.loc[~self_rows]

    # Order output
    if target_order is not None:
        rank = {target: i for i, target in enumerate(dict.fromkeys(target_order))}
        result = result.assign(_rank=result["Target"].map(rank))
        result = result.sort_values(["_rank", "q"], na_position="first").drop(columns="_rank")
    else:
        result = result.sort_values(["Target", "q"], na_position="first")

    result = result.astype({"n": "int64", "r": float, "p": float, "q": float})
    return result.loc[:, PAIR_COLUMNS + filter_cols].reset_index(drop=True)
