import sys

import pytest
from loguru import logger as loguru_logger

from utils.error_tracker import CameraConnectionError, ErrorTracker


@pytest.fixture
def tracker():
    yield ErrorTracker
    ErrorTracker.uninstall()


@pytest.fixture
def errors():
    messages = []
    sink = loguru_logger.add(lambda m: messages.append(m.record["message"]), level="ERROR")
    yield messages
    loguru_logger.remove(sink)


def test_cleanups_run_in_reverse_and_once(tracker):
    order = []
    tracker.register_cleanup(lambda: order.append("context"))
    tracker.register_cleanup(lambda: order.append("pipeline"))
    tracker.run_cleanup()
    tracker.run_cleanup()
    assert order == ["pipeline", "context"]


def test_failing_cleanup_does_not_stop_others(tracker, errors):
    ran = []

    def broken():
        raise RuntimeError("stuck")

    tracker.register_cleanup(lambda: ran.append(True))
    tracker.register_cleanup(broken)
    tracker.run_cleanup()
    assert ran == [True]
    assert any("stuck" in m for m in errors)


def test_unregister_cleanup(tracker):
    ran = []

    def cleanup():
        ran.append(True)

    tracker.register_cleanup(cleanup)
    tracker.unregister_cleanup(cleanup)
    tracker.unregister_cleanup(cleanup)
    tracker.run_cleanup()
    assert ran == []


def test_camera_errors_are_reported_without_traceback(tracker, errors):
    exc = CameraConnectionError("No Orbbec devices found")
    tracker.report(type(exc), exc, None)
    assert errors == ["CameraConnectionError: No Orbbec devices found"]


def test_other_errors_include_traceback(tracker, errors):
    try:
        raise ValueError("bad frame")
    except ValueError as exc:
        tracker.report(type(exc), exc, exc.__traceback__)
    assert errors[0].startswith("Unhandled exception:")
    assert "Traceback" in errors[0]


def test_hook_install_and_uninstall(tracker):
    original = sys.excepthook
    tracker.install_excepthook()
    assert sys.excepthook is not original
    tracker.uninstall()
    assert sys.excepthook is original
