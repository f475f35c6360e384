"""分析选项模型模块。

该模块定义相关性分析的可选参数模型，并将校验失败统一转换为 InvalidOptionError。
"""

from typing import Literal

from pydantic import BaseModel, ValidationError, field_validator

from corrmap.errors import InvalidOptionError

SelfMode = Literal["yes", "no"]
AdjustMethod = Literal["holm", "hochberg", "hommel", "bonferroni", "BH", "BY", "fdr", "none"]
AdjustPolicy = Literal["global", "per_target"]

ADJUST_METHODS = ("holm", "hochberg", "hommel", "bonferroni", "BH", "BY", "fdr", "none")


class CorrelationOptions(BaseModel):
    """相关性分析选项。

    Attributes:
        self_corr: 是否保留自相关行（"yes" 保留并将 p/q 置 0，"no" 删除）。
        method: p 值多重检验校正方法，"fdr" 为 "BH" 的别名。
        adjust: 多目标模式下的校正范围，"global" 为合并后整体校正，"per_target" 为逐目标校正。
    """

    self_corr: SelfMode = "yes"
    method: AdjustMethod = "BH"
    adjust: AdjustPolicy = "global"

    @field_validator("method")
    @classmethod
    def _normalize_alias(cls, value: str) -> str:
        return "BH" if value == "fdr" else value


def build_options(self_corr: str = "yes", method: str = "BH", adjust: str = "global") -> CorrelationOptions:
    """构建并校验分析选项。

    Args:
        self_corr: 自相关处理方式。
        method: p 值校正方法。
        adjust: 多目标校正范围。

    Returns:
        CorrelationOptions: 校验后的选项对象。

    Raises:
        InvalidOptionError: 任一选项不在允许取值范围内。
    """
    try:
        return CorrelationOptions(self_corr=self_corr, method=method, adjust=adjust)
    except ValidationError as exc:
        fields = ", ".join(str(err["loc"][0]) for err in exc.errors())
        raise InvalidOptionError(
            f"Invalid option value for: {fields}. "
            f"`self_corr` must be one of ('yes', 'no'); "
            f"`method` must be one of {ADJUST_METHODS}; "
            f"`adjust` must be one of ('global', 'per_target')."
        ) from exc
