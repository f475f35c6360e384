"""p 值多重检验校正工具模块。

该模块基于 statsmodels 的 ``multipletests`` 提供 p 值校正。缺失的 p 值不参与校正，
校正所用的检验数为非缺失 p 值的个数，缺失位置在结果中保持缺失。
"""

from typing import Iterable

import numpy as np
from statsmodels.stats.multitest import multipletests

from corrmap.errors import InvalidOptionError

STATSMODELS_METHODS = {
    "holm": "holm",
    "hochberg": "simes-hochberg",
    "hommel": "hommel",
    "bonferroni": "bonferroni",
    "BH": "fdr_bh",
    "fdr": "fdr_bh",
    "BY": "fdr_by",
    "none": None,
}


def adjust_pvalues(pvalues: Iterable[float], method: str = "BH") -> np.ndarray:
    """对一组 p 值执行多重检验校正。

    Args:
        pvalues: 原始 p 值。
        method: 校正方法，可选 holm, hochberg, hommel, bonferroni, BH (fdr), BY, none。

    Returns:
        np.ndarray: 校正后的 p 值，与输入等长。

    Raises:
        InvalidOptionError: 校正方法不受支持。
    """
    if method not in STATSMODELS_METHODS:
        raise InvalidOptionError(f"`method` must be one of {tuple(STATSMODELS_METHODS)}, got {method!r}.")
    p = np.asarray(pvalues, dtype=float)
    adjusted = p.copy()
    valid = ~np.isnan(p)
    name = STATSMODELS_METHODS[method]
    if name is None or not valid.any():
        return adjusted
    _, corrected, _, _ = multipletests(p[valid], method=name)
    adjusted[valid] = corrected
    return adjusted
