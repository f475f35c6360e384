"""p 值校正功能测试模块。"""

import numpy as np
import pytest

from corrmap.errors import InvalidOptionError
from corrmap.tools.stats.adjust import adjust_pvalues


def test_holm():
    """测试 Holm 校正。"""
    assert adjust_pvalues([0.01, 0.04, 0.03], "holm") == pytest.approx([0.03, 0.06, 0.06])


def test_hochberg():
    """测试 Hochberg 校正。"""
    assert adjust_pvalues([0.01, 0.02, 0.03], "hochberg") == pytest.approx([0.03, 0.03, 0.03])


def test_bh_and_fdr_alias():
    """测试 BH 校正及其别名 fdr。"""
    p = [0.01, 0.02, 0.03, 0.04, 0.05]
    assert adjust_pvalues(p, "BH") == pytest.approx([0.05] * 5)
    np.testing.assert_allclose(adjust_pvalues(p, "fdr"), adjust_pvalues(p, "BH"))


def test_bonferroni_caps_at_one():
    """测试 Bonferroni 校正且结果不超过 1。"""
    assert adjust_pvalues([0.2, 0.6], "bonferroni") == pytest.approx([0.4, 1.0])


def test_none_is_identity():
    """测试 none 方法不改变 p 值。"""
    p = [0.3, 0.01, 0.2]
    np.testing.assert_allclose(adjust_pvalues(p, "none"), p)


def test_missing_pvalues_are_skipped():
    """测试缺失 p 值不计入检验数且保持缺失。"""
    q = adjust_pvalues([0.01, np.nan, 0.02], "bonferroni")
    assert q[0] == pytest.approx(0.02)
    assert np.isnan(q[1])
    assert q[2] == pytest.approx(0.04)
    assert np.isnan(adjust_pvalues([np.nan, np.nan], "BH")).all()


def test_empty_input():
    """测试空输入返回空数组。"""
    assert adjust_pvalues([], "BH").size == 0


@pytest.mark.parametrize("method", ["holm", "hochberg", "hommel", "bonferroni", "BH", "BY"])
def test_adjusted_not_below_raw(method):
    """测试各方法校正后的 p 值不小于原始 p 值。"""
    p = np.array([0.001, 0.2, 0.03, 0.5, 0.04])
    assert (adjust_pvalues(p, method) >= p - 1e-12).all()


def test_unknown_method():
    """测试不支持的校正方法抛出 InvalidOptionError。"""
    with pytest.raises(InvalidOptionError):
        adjust_pvalues([0.1], "sidak")
