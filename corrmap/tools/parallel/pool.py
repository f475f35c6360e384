"""并行工作池模块。

该模块提供显式的工作池句柄 ``WorkerPool``，以及进程级默认工作池的启动与关闭。
相关性入口函数在未显式传入工作池时使用当前活动的默认工作池；没有活动工作池时同步执行。
在工作池内部执行的任务看不到任何活动工作池，嵌套分发总是同步执行。
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ProcessPoolExecutor, ThreadPoolExecutor
from contextlib import contextmanager
from typing import Any, Callable, Optional

import psutil

from corrmap.config import Settings
from corrmap.errors import InvalidOptionError

logger = logging.getLogger(__name__)

BACKENDS = ("process", "thread")

_ACTIVE_POOL: Optional["WorkerPool"] = None
_worker_state = threading.local()


def available_workers(use_logical_units: bool = False) -> int:
    """返回可用的工作进程数。

    Args:
        use_logical_units: True 时按逻辑核数，否则按物理核数（无法获取时退回逻辑核数）。

    Returns:
        int: 至少为 1 的工作进程数。
    """
    count = psutil.cpu_count(logical=use_logical_units)
    if not count:
        count = psutil.cpu_count(logical=True)
    return max(1, count or 1)


def _clear_inherited_pool() -> None:
    global _ACTIVE_POOL
    _ACTIVE_POOL = None


@contextmanager
def worker_scope():
    """标记当前线程正在执行工作池任务。"""
    previous = getattr(_worker_state, "active", False)
    _worker_state.active = True
    try:
        yield
    finally:
        _worker_state.active = previous


def _call_in_worker(fn: Callable[..., Any], args: tuple, kwargs: dict) -> Any:
    with worker_scope():
        return fn(*args, **kwargs)


class WorkerPool:
    """固定大小的工作池句柄。

    Attributes:
        max_workers: 工作进程（线程）数。
        backend: "process" 使用独立进程，"thread" 使用线程。
    """

    def __init__(self, max_workers: int | None = None, backend: str = "process", use_logical_units: bool = False):
        if backend not in BACKENDS:
            raise InvalidOptionError(f"`backend` must be one of {BACKENDS}, got {backend!r}.")
        self.backend = backend
        self.max_workers = max_workers or available_workers(use_logical_units)
        if backend == "process":
            self._executor = ProcessPoolExecutor(max_workers=self.max_workers, initializer=_clear_inherited_pool)
        else:
            self._executor = ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="corrmap")
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def submit(self, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Future:
        """提交一个任务。任务函数需可被 pickle（进程模式）。"""
        if self._closed:
            raise RuntimeError("WorkerPool has been shut down.")
        return self._executor.submit(_call_in_worker, fn, args, kwargs)

    def shutdown(self, wait: bool = True) -> None:
        if self._closed:
            return
        self._closed = True
        self._executor.shutdown(wait=wait)

    def __enter__(self) -> "WorkerPool":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown()

    def __repr__(self) -> str:
        state = "closed" if self._closed else "open"
        return f"WorkerPool(backend={self.backend!r}, max_workers={self.max_workers}, {state})"


def active_pool() -> WorkerPool | None:
    """返回当前活动的默认工作池；在工作池任务内部或未启动时返回 None。"""
    if getattr(_worker_state, "active", False):
        return None
    if _ACTIVE_POOL is not None and _ACTIVE_POOL.closed:
        return None
    return _ACTIVE_POOL


def start_workers(
    use_logical_units: bool | None = None,
    backend: str | None = None,
    max_workers: int | None = None,
    settings: Settings | None = None,
) -> WorkerPool:
    """创建工作池并设为进程级默认工作池，替换并关闭之前的默认工作池。

    未指定的参数取自 ``Settings``（CORR_LOGICAL_CORES, CORR_WORKER_BACKEND, CORR_MAX_WORKERS）。

    Args:
        use_logical_units: 是否按逻辑核数创建工作进程。
        backend: "process" 或 "thread"。
        max_workers: 显式指定的工作进程数。
        settings: 可选的应用配置。

    Returns:
        WorkerPool: 新的默认工作池。
    """
    global _ACTIVE_POOL
    settings = settings or Settings()
    pool = WorkerPool(
        max_workers=max_workers if max_workers is not None else settings.max_workers,
        backend=backend or settings.worker_backend,
        use_logical_units=settings.use_logical_cores if use_logical_units is None else use_logical_units,
    )
    previous, _ACTIVE_POOL = _ACTIVE_POOL, pool
    if previous is not None:
        previous.shutdown()
    logger.info("Start parallel %s workers: %d", pool.backend, pool.max_workers)
    return pool


def stop_workers() -> None:
    """关闭默认工作池，恢复同步执行。"""
    global _ACTIVE_POOL
    pool, _ACTIVE_POOL = _ACTIVE_POOL, None
    if pool is not None:
        pool.shutdown()
    logger.info("Stop parallel workers, back to sequential processing")


def run_task(pool: WorkerPool | None, fn: Callable[..., Any], *args: Any) -> Any:
    """在工作池中执行单个任务并等待结果；pool 为 None 时同步执行。"""
    if pool is None:
        return fn(*args)
    return pool.submit(fn, *args).result()
