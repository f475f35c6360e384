"""日志管理模块。

库内各模块通过 ``logging.getLogger(__name__)`` 记录日志，均挂在 ``corrmap`` 顶层记录器下。
本模块只配置这一个顶层记录器：级别、格式以及控制台/文件输出都来自 ``Settings``
（LOG_LEVEL, LOGS_DIR），重复调用会替换之前安装的处理器而不会叠加。
"""

import logging
from pathlib import Path
from typing import IO, Optional

from corrmap.config import Settings
from corrmap.errors import InvalidOptionError

LOGGER_NAME = "corrmap"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"

_OWNED = "_corrmap_owned"


def _resolve_level(level: int | str) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level).strip().upper())
    if not isinstance(resolved, int):
        raise InvalidOptionError(f"Unknown log level {level!r}; use DEBUG, INFO, WARNING, ERROR or CRITICAL.")
    return resolved


def _detach_owned(logger: logging.Logger) -> None:
    for handler in [h for h in logger.handlers if getattr(h, _OWNED, False)]:
        logger.removeHandler(handler)
        handler.close()


def setup_logger(
    log_file: Optional[Path] = None,
    level: int | str = logging.INFO,
    stream: Optional[IO[str]] = None,
) -> logging.Logger:
    """配置 corrmap 顶层日志记录器。

    每次调用都会移除上一次安装的处理器，再按参数重新安装，
    因此可以在同一进程中切换级别、日志文件或输出流。

    Args:
        log_file: 可选的日志文件路径，父目录不存在时自动创建。
        level: 日志级别，整数或级别名称（不区分大小写）。
        stream: 控制台输出流，默认为当前的 sys.stderr。

    Returns:
        logging.Logger: 配置好的 ``corrmap`` 记录器。

    Raises:
        InvalidOptionError: 级别名称无法识别。
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(_resolve_level(level))
    logger.propagate = False
    _detach_owned(logger)

    formatter = logging.Formatter(LOG_FORMAT)
    handlers: list[logging.Handler] = [logging.StreamHandler(stream)]
    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    for handler in handlers:
        setattr(handler, _OWNED, True)
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    return logger


def configure_logging(settings: Optional[Settings] = None, stream: Optional[IO[str]] = None) -> logging.Logger:
    """按应用配置（LOG_LEVEL, LOGS_DIR）配置日志，日志文件为 ``LOGS_DIR/corrmap.log``。"""
    settings = settings or Settings()
    return setup_logger(log_file=settings.log_file(), level=settings.log_level, stream=stream)
