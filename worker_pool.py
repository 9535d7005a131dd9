#!/usr/bin/env python3
"""
Shared Worker Pool

One process-wide thread pool for directory listing, size aggregation and
deletion. Only leaf tasks are submitted here; the code that waits on their
futures always runs outside the pool.
"""

import os
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Optional

from logging_config import get_logger

logger = get_logger("worker_pool")

_executor: Optional[ThreadPoolExecutor] = None
_max_workers: Optional[int] = None
_lock = threading.Lock()


def default_workers() -> int:
    """Default pool size, same rule as ThreadPoolExecutor"""
    return min(32, (os.cpu_count() or 1) + 4)


def configure(max_workers: Optional[int] = None):
    """Set the pool size, replacing an existing pool if the size changes

    Args:
        max_workers: Number of worker threads (None for the default)
    """
    global _executor, _max_workers

    if max_workers is not None and max_workers < 1:
        raise ValueError("max_workers must be at least 1")

    with _lock:
        if _executor is not None and max_workers != _max_workers:
            _executor.shutdown(wait=True)
            _executor = None
        _max_workers = max_workers


def get_executor() -> ThreadPoolExecutor:
    """Return the shared pool, creating it on first use"""
    global _executor

    with _lock:
        if _executor is None:
            workers = _max_workers or default_workers()
            _executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="kenosis")
            logger.debug("Started worker pool with %d threads", workers)
        return _executor


def shutdown():
    """Stop the shared pool; a later get_executor() starts a fresh one"""
    global _executor

    with _lock:
        if _executor is not None:
            _executor.shutdown(wait=True)
            _executor = None
