"""数据读写与配置测试模块。"""

import io
import logging

import pytest

from corrmap.config import Settings
from corrmap.errors import InvalidOptionError
from corrmap.logging_ import LOGGER_NAME, configure_logging, setup_logger
from corrmap.tools.dataframe.io import load_dataframe, preview_dataframe, save_dataframe
from corrmap.tools.dataframe.keys import get_key


def test_csv_round_trip_with_key(tmp_path, mtcars):
    """测试 CSV 保存后按主键读取。"""
    path = save_dataframe(mtcars.iloc[::-1], tmp_path / "nested" / "cars.csv")
    assert path.exists()
    loaded = load_dataframe(path, key="id")
    assert get_key(loaded) == "id"
    assert loaded["id"].is_monotonic_increasing
    assert loaded.shape == mtcars.shape


def test_parquet_round_trip(tmp_path, mtcars):
    """测试 Parquet 格式读写。"""
    path = save_dataframe(mtcars, tmp_path / "cars.parquet")
    loaded = load_dataframe(path)
    assert get_key(loaded) is None
    assert list(loaded.columns) == list(mtcars.columns)


def test_preview(mtcars):
    """测试数据预览。"""
    preview = preview_dataframe(mtcars, max_rows=2)
    assert preview["row_count"] == 32
    assert len(preview["rows"]) == 2
    assert preview["columns"][0] == "id"


def test_preview_missing_values(mtcars):
    """测试预览中的缺失值输出为 None。"""
    df = mtcars.head(2).copy()
    df["r"] = [float("nan"), 0.5]
    rows = preview_dataframe(df)["rows"]
    assert rows[0]["r"] is None
    assert rows[1]["r"] == 0.5


def test_settings_from_env(monkeypatch, tmp_path):
    """测试从环境变量读取配置。"""
    monkeypatch.setenv("CORR_METHOD", "holm")
    monkeypatch.setenv("CORR_WORKER_BACKEND", "thread")
    monkeypatch.setenv("LOGS_DIR", str(tmp_path))
    settings = Settings()
    assert settings.method == "holm"
    assert settings.worker_backend == "thread"
    assert settings.log_file() == tmp_path / "corrmap.log"
    assert Settings(LOGS_DIR=None).log_file() is None


@pytest.fixture
def reset_logger():
    yield
    setup_logger(level=logging.WARNING)


def _owned(logger):
    return [h for h in logger.handlers if getattr(h, "_corrmap_owned", False)]


def test_setup_logger_file(tmp_path, reset_logger):
    """测试日志写入文件，子模块记录器经由 corrmap 顶层记录器输出。"""
    log_file = tmp_path / "logs" / "test.log"
    setup_logger(log_file=log_file, level=logging.INFO, stream=io.StringIO())
    logging.getLogger("corrmap.tools.stats").info("hello")
    for handler in _owned(logging.getLogger(LOGGER_NAME)):
        handler.flush()
    assert "hello" in log_file.read_text(encoding="utf-8")


def test_setup_logger_replaces_handlers(reset_logger):
    """测试重复配置替换已安装的处理器而不叠加。"""
    first, second = io.StringIO(), io.StringIO()
    setup_logger(stream=first)
    logger = setup_logger(level="debug", stream=second)
    assert len(_owned(logger)) == 1
    assert logger.level == logging.DEBUG
    logger.debug("switched")
    assert "switched" in second.getvalue()
    assert first.getvalue() == ""


def test_setup_logger_rejects_unknown_level(reset_logger):
    """测试无法识别的日志级别抛出 InvalidOptionError。"""
    with pytest.raises(InvalidOptionError):
        setup_logger(level="chatty")


def test_configure_logging_from_settings(tmp_path, reset_logger):
    """测试按 LOG_LEVEL 与 LOGS_DIR 配置日志。"""
    stream = io.StringIO()
    logger = configure_logging(Settings(LOGS_DIR=str(tmp_path), LOG_LEVEL="debug"), stream=stream)
    assert logger.level == logging.DEBUG
    logger.debug("from settings")
    for handler in _owned(logger):
        handler.flush()
    assert "from settings" in stream.getvalue()
    assert "from settings" in (tmp_path / "corrmap.log").read_text(encoding="utf-8")
