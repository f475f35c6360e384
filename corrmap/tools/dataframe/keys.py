"""数据表主键工具模块。

主键记录在 ``DataFrame.attrs["key"]`` 中，dataset 与 metadata 通过同名主键列关联。
"""

import pandas as pd

from corrmap.errors import ColumnResolutionError, InputTypeError

KEY_ATTR = "key"


def set_key(df: pd.DataFrame, column: str) -> pd.DataFrame:
    """按主键列排序并记录主键属性。

    不修改输入对象，返回新的数据框。

    Args:
        df: 待处理的数据框。
        column: 主键列名。

    Returns:
        pd.DataFrame: 按主键排序且带有主键属性的数据框。
    """
    if not isinstance(df, pd.DataFrame):
        raise InputTypeError(f"Expected a pandas DataFrame, got {type(df).__name__}.")
    if column not in df.columns:
        raise ColumnResolutionError(f"Key column {column!r} not found in DataFrame.")
    keyed = df.sort_values(column, kind="mergesort").reset_index(drop=True)
    keyed.attrs[KEY_ATTR] = column
    return keyed


def get_key(df: pd.DataFrame) -> str | None:
    """读取数据框的主键列名，未设置时返回 None。"""
    return df.attrs.get(KEY_ATTR)
