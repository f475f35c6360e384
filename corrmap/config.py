"""配置管理模块。

该模块定义了相关性分析的默认配置项，通过 Pydantic BaseSettings 支持环境变量与 .env 文件。
"""

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """应用全局设置类。

    Attributes:
        method: 默认的 p 值校正方法。
        self_corr: 是否保留自相关（"yes" 或 "no"）。
        adjust: 多目标模式下的校正策略（"global" 或 "per_target"）。
        worker_backend: 并行工作池类型（"process" 或 "thread"）。
        max_workers: 工作池大小，为空时按 CPU 核数。
        use_logical_cores: 是否按逻辑核数（而非物理核数）创建工作池。
        log_level: 日志级别。
        logs_dir: 日志存储目录，为空时仅输出到控制台。
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    method: str = Field(default="BH", alias="CORR_METHOD")
    self_corr: str = Field(default="yes", alias="CORR_SELF")
    adjust: str = Field(default="global", alias="CORR_ADJUST")

    worker_backend: Literal["process", "thread"] = Field(default="process", alias="CORR_WORKER_BACKEND")
    max_workers: int | None = Field(default=None, alias="CORR_MAX_WORKERS")
    use_logical_cores: bool = Field(default=False, alias="CORR_LOGICAL_CORES")

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    logs_dir: Path | None = Field(default=None, alias="LOGS_DIR")

    def log_file(self) -> Path | None:
        """返回日志文件路径。

        Returns:
            Path | None: 配置了 LOGS_DIR 时为 ``LOGS_DIR/corrmap.log``，否则为 None。
        """
        if self.logs_dir is None:
            return None
        return Path(self.logs_dir) / "corrmap.log"
