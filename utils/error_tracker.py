"""Process-level handling of failures the capture tools cannot recover from."""

from __future__ import annotations

import signal
import sys
import traceback
from types import TracebackType
from typing import Callable, List, Optional, Type

from utils.logger import Logger


class CameraError(Exception):
    """Base class for camera related errors."""


class CameraConnectionError(CameraError):
    """Raised when no camera device can be opened."""


class SdkLibraryError(CameraConnectionError):
    """Raised when the vendor shared library cannot be loaded."""


class ErrorTracker:
    """Excepthook and signal handlers that release cameras before exit.

    Cleanups run last-registered first, so a pipeline is stopped before the
    context it was opened from.
    """

    logger = Logger.get_logger("utils.error_tracker")
    _installed = False
    _signals_installed = False
    _orig_hook: Optional[Callable[..., None]] = None
    _cleanup_funcs: List[Callable[[], None]] = []

    @classmethod
    def register_cleanup(cls, func: Callable[[], None]) -> None:
        cls._cleanup_funcs.append(func)

    @classmethod
    def unregister_cleanup(cls, func: Callable[[], None]) -> None:
        if func in cls._cleanup_funcs:
            cls._cleanup_funcs.remove(func)

    @classmethod
    def run_cleanup(cls) -> None:
        """Run and forget every registered cleanup; failures are logged."""
        funcs, cls._cleanup_funcs = cls._cleanup_funcs, []
        for func in reversed(funcs):
            try:
                func()
            except Exception as e:
                cls.logger.error(f"Cleanup {getattr(func, '__qualname__', func)} failed: {e}")

    @classmethod
    def report(
        cls,
        exc_type: Type[BaseException],
        exc: BaseException,
        tb: TracebackType | None,
    ) -> None:
        # A missing camera is an operating condition, not a bug.
        if issubclass(exc_type, CameraError):
            cls.logger.error(f"{exc_type.__name__}: {exc}")
            return
        message = "".join(traceback.format_exception(exc_type, exc, tb))
        cls.logger.error(f"Unhandled exception:\n{message}")

    @classmethod
    def install_excepthook(cls) -> None:
        """Log unhandled exceptions and release cameras before exit."""
        if cls._installed:
            return
        cls._orig_hook = sys.excepthook

        def _hook(exc_type, exc, tb) -> None:
            cls.report(exc_type, exc, tb)
            cls.run_cleanup()
            if cls._orig_hook and not issubclass(exc_type, CameraError):
                cls._orig_hook(exc_type, exc, tb)

        sys.excepthook = _hook
        cls._installed = True
        cls.logger.debug("Global exception hook installed")

    @classmethod
    def install_signal_handlers(cls) -> None:
        """Stop streaming cleanly on SIGINT or SIGTERM."""
        if cls._signals_installed:
            return

        def _handler(signum, frame) -> None:
            cls.logger.info(f"Received signal {signal.Signals(signum).name}, stopping")
            cls.run_cleanup()
            raise SystemExit(1)

        signal.signal(signal.SIGINT, _handler)
        signal.signal(signal.SIGTERM, _handler)
        cls._signals_installed = True

    @classmethod
    def uninstall(cls) -> None:
        """Restore the original excepthook and drop registered cleanups."""
        if cls._installed and cls._orig_hook is not None:
            sys.excepthook = cls._orig_hook
        cls._installed = False
        cls._orig_hook = None
        cls._cleanup_funcs = []
