from __future__ import annotations

import threading

import pytest

from casedocs.exceptions import BackendError
from casedocs.fallback import call_with_timeout, first_successful


def _fail(message: str):
    def _call() -> str:
        raise RuntimeError(message)

    return _call


def test_call_with_timeout_inline() -> None:
    assert call_with_timeout(lambda: 42, timeout=None) == 42


def test_call_with_timeout_releases_caller() -> None:
    release = threading.Event()

    with pytest.raises(BackendError, match="timed out after 0.05s"):
        call_with_timeout(lambda: release.wait(5), timeout=0.05)
    release.set()


def test_first_successful_returns_first_success() -> None:
    name, value = first_successful([("a", _fail("down")), ("b", lambda: "ok"), ("c", lambda: "late")])

    assert (name, value) == ("b", "ok")


def test_first_successful_reports_every_failure() -> None:
    with pytest.raises(BackendError, match=r"All strategies failed \(a: down; b: broken\)"):
        first_successful([("a", _fail("down")), ("b", _fail("broken"))])


def test_first_successful_needs_attempts() -> None:
    with pytest.raises(BackendError, match="No strategy configured"):
        first_successful([])


def test_timeout_moves_to_next_attempt() -> None:
    release = threading.Event()

    name, value = first_successful([("slow", lambda: release.wait(5)), ("fast", lambda: "ok")], timeout=0.05)
    release.set()

    assert (name, value) == ("fast", "ok")
