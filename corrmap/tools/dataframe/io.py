"""数据输入输出工具模块。

该模块提供数据框的读取、保存与预览功能，支持 CSV 和 Parquet 格式。
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict

import pandas as pd

from corrmap.tools.dataframe.keys import set_key


def load_dataframe(path: Path | str, key: str | None = None) -> pd.DataFrame:
    """读取数据文件。

    按后缀选择格式：``.parquet`` 使用 Parquet，其余按 CSV 读取。

    Args:
        path: 文件路径。
        key: 可选的主键列名，指定时按该列排序并记录主键属性。

    Returns:
        pd.DataFrame: 读取的数据框。
    """
    p = Path(path)
    df = pd.read_parquet(p) if p.suffix == ".parquet" else pd.read_csv(p)
    return set_key(df, key) if key else df


def save_dataframe(df: pd.DataFrame, path: Path | str) -> Path:
    """保存数据框，``.parquet`` 后缀保存为 Parquet，否则保存为 CSV。

    Args:
        df: 待保存的数据框。
        path: 目标文件路径，父目录不存在时自动创建。

    Returns:
        Path: 写入的文件路径。
    """
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    if p.suffix == ".parquet":
        df.to_parquet(p, index=False)
    else:
        df.to_csv(p, index=False)
    return p


def preview_dataframe(df: pd.DataFrame, max_rows: int = 5) -> Dict[str, Any]:
    """获取结果表的预览信息，缺失值（如零方差列的 r）输出为 None。

    Args:
        df: 待预览的数据框。
        max_rows: 最大返回行数。

    Returns:
        Dict[str, Any]: 包含列名、行数据和总行数的字典。
    """
    head = df.head(max_rows).astype(object)
    return {
        "columns": df.columns.tolist(),
        "rows": head.where(head.notna(), None).to_dict(orient="records"),
        "row_count": int(df.shape[0]),
    }
