"""异常定义模块。

该模块定义相关性分析流程中的全部异常类型。参数校验类异常在任何子集或计算之前抛出，
计算类异常仅在计算阶段出现。
"""


class CorrmapError(Exception):
    """corrmap 所有异常的基类。"""


class InputTypeError(CorrmapError, TypeError):
    """dataset 或 metadata 不是 pandas.DataFrame。"""


class KeyMismatchError(CorrmapError, ValueError):
    """dataset 与 metadata 的 key 属性不一致。"""


class ColumnResolutionError(CorrmapError, ValueError):
    """所选列或目标列在对应的数据表中不存在。"""


class InvalidFilterSpecError(CorrmapError, ValueError):
    """filter_rows 不是以非空字符串为键的映射，或其取值无法与列类型匹配。"""


class InvalidTargetSetError(CorrmapError, ValueError):
    """目标列数量与调用入口不匹配。"""


class InvalidOptionError(CorrmapError, ValueError):
    """self_corr、method 等选项不在允许的取值范围内。"""


class CorrelationComputationError(CorrmapError, RuntimeError):
    """相关性计算过程中的数值或类型错误。"""


class TargetDispatchError(CorrmapError, RuntimeError):
    """严格模式下存在失败的目标任务。

    Attributes:
        failures: 失败目标到错误信息的映射。
    """

    def __init__(self, failures: dict[str, str]):
        self.failures = dict(failures)
        names = ", ".join(self.failures)
        super().__init__(f"Correlation failed for {len(self.failures)} target(s): {names}")
