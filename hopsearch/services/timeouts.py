"""Per-call timeouts for blocking collaborator calls.

Route graph and schedule store calls run on a shared worker pool and
are abandoned once their budget expires. The abandoned call keeps
running in the background; its result is discarded.
"""

from __future__ import annotations

import concurrent.futures
import threading
from typing import Any, Callable, Optional, TypeVar

from ..domain.errors import CollaboratorTimeoutError

T = TypeVar("T")

_executor: Optional[concurrent.futures.ThreadPoolExecutor] = None
_executor_lock = threading.Lock()

COLLABORATOR_WORKERS = 8


def _get_executor() -> concurrent.futures.ThreadPoolExecutor:
    global _executor
    if _executor is None:
        with _executor_lock:
            if _executor is None:
                _executor = concurrent.futures.ThreadPoolExecutor(
                    max_workers=COLLABORATOR_WORKERS,
                    thread_name_prefix="collaborator",
                )
    return _executor


def call_with_timeout(
    fn: Callable[..., T],
    *args: Any,
    timeout_seconds: Optional[float],
    operation: str,
    **kwargs: Any,
) -> T:
    """Run a blocking call with a time budget.

    Args:
        fn: The callable to run.
        timeout_seconds: Budget in seconds; None runs the call inline.
        operation: Name used in errors and logs.

    Returns:
        Whatever fn returns.

    Raises:
        CollaboratorTimeoutError: If the budget expires first.
        Exception: Whatever fn raises, unchanged.
    """
    if timeout_seconds is None:
        return fn(*args, **kwargs)

    future = _get_executor().submit(fn, *args, **kwargs)
    try:
        return future.result(timeout=timeout_seconds)
    except concurrent.futures.TimeoutError as e:
        future.cancel()
        raise CollaboratorTimeoutError(
            f"{operation} timed out after {timeout_seconds}s",
            operation=operation,
            timeout_seconds=timeout_seconds,
            cause=e,
        )


def shutdown_collaborator_pool() -> None:
    """Stop the shared pool without waiting for abandoned calls."""
    global _executor
    with _executor_lock:
        if _executor is not None:
            _executor.shutdown(wait=False, cancel_futures=True)
            _executor = None
