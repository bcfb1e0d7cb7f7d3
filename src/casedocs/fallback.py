"""Ordered try-chains with per-call timeouts."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import TYPE_CHECKING, TypeVar

from casedocs.exceptions import BackendError
from casedocs.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

logger = get_logger(__name__)

T = TypeVar("T")


def call_with_timeout(func: Callable[[], T], *, timeout: float | None) -> T:
    """Run `func` and give up after `timeout` seconds.

    The call runs in a worker thread. On timeout the caller is released at once; the
    worker is abandoned and its eventual result discarded.

    Args:
        func (Callable[[], T]): Call to run.
        timeout (float | None): Limit in seconds. None or 0 runs the call inline.

    Raises:
        BackendError: If the call does not finish in time.

    Returns:
        T: Value returned by `func`.
    """
    if not timeout:
        return func()

    executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="casedocs-call")
    future = executor.submit(func)
    try:
        return future.result(timeout=timeout)
    except FutureTimeoutError as exc:
        future.cancel()
        raise BackendError(message=f"Call timed out after {timeout:g}s") from exc
    finally:
        executor.shutdown(wait=False, cancel_futures=True)


def first_successful(
    attempts: Sequence[tuple[str, Callable[[], T]]],
    *,
    timeout: float | None = None,
    failure_event: str = "Strategy failed, trying next",
) -> tuple[str, T]:
    """Try named calls in order and return the first result.

    Any exception, including a timeout, moves on to the next attempt.

    Args:
        attempts (Sequence[tuple[str, Callable[[], T]]]): Named calls, tried in order.
        timeout (float | None): Per-attempt limit in seconds.
        failure_event (str): Log message emitted for each failed attempt.

    Raises:
        BackendError: If every attempt failed, or there was nothing to try.

    Returns:
        tuple[str, T]: Name of the successful attempt and its result.
    """
    failures: list[str] = []
    for name, attempt in attempts:
        try:
            return name, call_with_timeout(attempt, timeout=timeout)
        except Exception as exc:  # noqa: BLE001
            failures.append(f"{name}: {exc}")
            logger.warning(failure_event, extra={"strategy": name, "error": str(exc)})
    if not failures:
        raise BackendError(message="No strategy configured")
    raise BackendError(message="All strategies failed (" + "; ".join(failures) + ")")
