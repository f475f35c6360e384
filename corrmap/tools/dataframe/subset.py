"""数据子集工具模块。

该模块根据行过滤条件（filter_rows）和列选择（select_cols）生成用于相关性分析的数据视图。
过滤条件按列取值的笛卡尔积（cross-join）与数据表做内连接；提供 metadata 时，先在 metadata
上连接得到匹配的主键集合，再按主键与 dataset 连接。
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

import numpy as np
import pandas as pd
from pandas.api.types import is_bool_dtype

from corrmap.errors import (
    ColumnResolutionError,
    InputTypeError,
    InvalidFilterSpecError,
    KeyMismatchError,
)
from corrmap.tools.dataframe.keys import get_key

logger = logging.getLogger(__name__)


@dataclass
class SubsetView:
    """子集视图。

    Attributes:
        table: 过滤及投影后的数据框（新对象，不与输入共享行索引）。
        columns: 参与相关性计算的列名，按选择顺序排列。
        filter_rows: 规范化后的过滤条件，未过滤时为 None。
    """
    table: pd.DataFrame
    columns: List[str]
    filter_rows: Optional[Dict[str, List[Any]]] = None


def ensure_dataframe(obj: Any, name: str) -> None:
    if not isinstance(obj, pd.DataFrame):
        raise InputTypeError(f"`{name}` must be a pandas DataFrame, got {type(obj).__name__}.")


def normalize_filter(filter_rows: Any) -> Dict[str, List[Any]] | None:
    """校验并规范化过滤条件。

    标量值视为单个可接受值；每列的取值去重并保持顺序。空映射等同于不过滤。

    Args:
        filter_rows: 列名到可接受取值的映射。

    Returns:
        Dict[str, List[Any]] | None: 规范化后的过滤条件。

    Raises:
        InvalidFilterSpecError: 不是映射，或存在空列名。
    """
    if filter_rows is None:
        return None
    if not isinstance(filter_rows, Mapping):
        raise InvalidFilterSpecError(
            "`filter_rows` must be a mapping of column name to accepted values, "
            f"got {type(filter_rows).__name__}."
        )
    normalized: Dict[str, List[Any]] = {}
    for name, values in filter_rows.items():
        if not isinstance(name, str) or not name:
            raise InvalidFilterSpecError("All elements of `filter_rows` must be named with a non-empty string.")
        if isinstance(values, (str, bytes)) or not isinstance(values, Iterable):
            values = [values]
        normalized[name] = list(dict.fromkeys(values))
    return normalized or None


def resolve_columns(dataset: pd.DataFrame, select_cols: Any) -> List[str]:
    """将列选择解析为列名列表。

    支持列名与从 0 开始的位置索引。为 None 时选择除主键外的全部数值列。

    Args:
        dataset: 数据框。
        select_cols: 列名或位置索引，或其序列。

    Returns:
        List[str]: 去重后的列名列表。

    Raises:
        ColumnResolutionError: 存在无法解析的列。
    """
    if select_cols is None:
        key = get_key(dataset)
        numeric = dataset.select_dtypes(include="number").columns
        return [col for col in numeric if col != key]

    if isinstance(select_cols, (str, int, np.integer)):
        select_cols = [select_cols]

    resolved: List[str] = []
    missing: List[Any] = []
    width = dataset.shape[1]
    for col in select_cols:
        if isinstance(col, (int, np.integer)) and not isinstance(col, bool):
            if 0 <= col < width:
                resolved.append(dataset.columns[col])
            else:
                missing.append(col)
        elif col in dataset.columns:
            resolved.append(col)
        else:
            missing.append(col)
    if missing:
        raise ColumnResolutionError(f"`select_cols` does not index within `dataset`: {missing}")
    return list(dict.fromkeys(resolved))


def _require_columns(frame: pd.DataFrame, columns: Iterable[str], name: str, what: str) -> None:
    missing = [col for col in columns if col not in frame.columns]
    if missing:
        raise ColumnResolutionError(f"`{what}` does not index within `{name}`: {missing}")


def _check_metadata(dataset: pd.DataFrame, metadata: Any) -> str:
    ensure_dataframe(metadata, "metadata")
    key = get_key(dataset)
    meta_key = get_key(metadata)
    if not key or key != meta_key:
        raise KeyMismatchError(
            "`dataset` and `metadata` must be keyed by the same column "
            f"(dataset key: {key!r}, metadata key: {meta_key!r}). Set it with `set_key(df, column)`."
        )
    for frame, name in ((dataset, "dataset"), (metadata, "metadata")):
        if key not in frame.columns:
            raise KeyMismatchError(f"Key column {key!r} is missing from `{name}`.")
    return key


_BOOL_STRINGS = {"true": True, "false": False}


def _bool_values(name: str, values: List[Any]) -> List[bool]:
    """将布尔列的过滤取值解析为 bool，字符串按 "true"/"false"（不区分大小写）解析。"""
    parsed: List[bool] = []
    for value in values:
        if isinstance(value, (bool, np.bool_)):
            parsed.append(bool(value))
        elif isinstance(value, str) and value.strip().lower() in _BOOL_STRINGS:
            parsed.append(_BOOL_STRINGS[value.strip().lower()])
        else:
            raise InvalidFilterSpecError(
                f"`filter_rows` values for boolean column {name!r} must be true or false, got {value!r}."
            )
    return list(dict.fromkeys(parsed))


def _cross_join(filters: Dict[str, List[Any]], frame: pd.DataFrame) -> pd.DataFrame:
    """构建过滤条件的笛卡尔积表，并对齐目标表的列类型。"""
    filters = {
        name: _bool_values(name, values) if is_bool_dtype(frame[name]) else values
        for name, values in filters.items()
    }
    cross = pd.MultiIndex.from_product(list(filters.values()), names=list(filters)).to_frame(index=False)
    try:
        return cross.astype({col: frame[col].dtype for col in filters})
    except (TypeError, ValueError) as exc:
        raise InvalidFilterSpecError(f"`filter_rows` values cannot be matched against column types: {exc}") from exc


def subset_dataset(
    dataset: pd.DataFrame,
    select_cols: Any = None,
    filter_rows: Optional[Mapping[str, Any]] = None,
    metadata: Optional[pd.DataFrame] = None,
    targets: Sequence[str] = (),
) -> SubsetView:
    """按过滤条件与列选择生成数据子集。

    全部校验在连接之前完成。不匹配的行被静默丢弃，零匹配得到空表而非错误。
    ``targets`` 中的列即使不在列选择中也会随子集一起保留，但不参与相关性列。

    Args:
        dataset: 数据框。
        select_cols: 参与相关性计算的列。
        filter_rows: 列名到可接受取值的映射。
        metadata: 可选的元数据表，与 dataset 共享主键。
        targets: 需要保留在子集中的目标列。

    Returns:
        SubsetView: 子集视图。
    """
    ensure_dataframe(dataset, "dataset")
    filters = normalize_filter(filter_rows)
    key = _check_metadata(dataset, metadata) if metadata is not None else None
    columns = resolve_columns(dataset, select_cols)
    if metadata is not None:
        _require_columns(metadata, columns, "metadata", "select_cols")
    _require_columns(dataset, targets, "dataset", "target")
    projection = columns + [t for t in dict.fromkeys(targets) if t not in columns]

    if filters is None:
        table = dataset.loc[:, projection].copy()
    elif metadata is None:
        # Filter using dataset
        _require_columns(dataset, filters, "dataset", "filter_rows")
        matched = dataset.merge(_cross_join(filters, dataset), on=list(filters), how="inner")
        table = matched.loc[:, projection]
    else:
        # Filter using metadata, then join on the shared key
        _require_columns(metadata, filters, "metadata", "filter_rows")
        keys = metadata.merge(_cross_join(filters, metadata), on=list(filters), how="inner")
        keys = keys.loc[:, [key]].drop_duplicates()
        table = dataset.merge(keys, on=key, how="inner").loc[:, projection]

    table = table.reset_index(drop=True)
    logger.debug(
        "Subset %d of %d rows, %d correlation columns (filters: %s)",
        table.shape[0], dataset.shape[0], len(columns), list(filters) if filters else None,
    )
    return SubsetView(table=table, columns=columns, filter_rows=filters)
