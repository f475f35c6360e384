"""结果数据模型模块。

该模块定义长格式结果表的列结构，以及多目标分发时每个目标的执行结果。
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

import pandas as pd

RECORD_COLUMNS = ["Target", "Correlation", "n", "r", "p"]
PAIR_COLUMNS = RECORD_COLUMNS + ["q"]


def empty_records(with_q: bool = False) -> pd.DataFrame:
    """返回具有完整列结构的空结果表。

    Args:
        with_q: 是否包含校正后 p 值列 q。

    Returns:
        pd.DataFrame: 空数据框。
    """
    frame = pd.DataFrame(
        {
            "Target": pd.Series(dtype=object),
            "Correlation": pd.Series(dtype=object),
            "n": pd.Series(dtype="int64"),
            "r": pd.Series(dtype=float),
            "p": pd.Series(dtype=float),
        }
    )
    if with_q:
        frame["q"] = pd.Series(dtype=float)
    return frame


@dataclass
class TargetOutcome:
    """单个目标任务的执行结果。

    Attributes:
        target: 目标列名。
        table: 成功时的原始配对结果表。
        error: 失败时的错误信息。
    """
    target: str
    table: Optional[pd.DataFrame] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.table is not None


@dataclass
class DispatchResult:
    """多目标分发的汇总结果，按提交顺序保存每个目标的结果。"""
    outcomes: List[TargetOutcome] = field(default_factory=list)

    @property
    def succeeded(self) -> List[str]:
        return [o.target for o in self.outcomes if o.ok]

    @property
    def failed(self) -> Dict[str, str]:
        return {o.target: o.error or "no result" for o in self.outcomes if not o.ok}

    def merged(self) -> pd.DataFrame:
        """按目标提交顺序合并所有成功的结果表，失败的目标被丢弃。

        Returns:
            pd.DataFrame: 合并后的原始配对结果表。
        """
        tables = [o.table for o in self.outcomes if o.ok]
        if not tables:
            return empty_records()
        return pd.concat(tables, ignore_index=True)
