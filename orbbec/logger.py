"""Configuration of the SDK's own log sinks."""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Any, Callable, Optional

from loguru._logger import Logger as LoguruLogger

from orbbec.enums import LogSeverity
from orbbec.sys import NativeBackend, resolve_backend

SdkLogCallback = Callable[[LogSeverity, str], None]

_lock = threading.Lock()
_active: Optional["LoggerCallbackHandle"] = None


class LoggerCallbackHandle:
    """Keeps a log callback registered; closing it unregisters the callback.

    Only one callback is active at a time. Registering another one makes
    this handle inert.
    """

    def __init__(self, backend: NativeBackend, trampoline: Any) -> None:
        self._backend = backend
        self._trampoline = trampoline

    @property
    def active(self) -> bool:
        return _active is self

    def close(self) -> None:
        global _active
        with _lock:
            if _active is not self:
                return
            _active = None
            # Replace rather than clear: the runtime keeps calling the last sink.
            noop = self._backend.log_callback(lambda severity, message: None)
            self._backend.call("ob_set_logger_to_callback", int(LogSeverity.OFF), noop, None)
            self._trampoline = noop

    def __enter__(self) -> "LoggerCallbackHandle":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def __del__(self) -> None:
        if _active is self:
            self.close()


class SdkLogger:
    """Global sinks of the SDK runtime."""

    @staticmethod
    def set_severity(severity: LogSeverity, backend: NativeBackend | str | None = None) -> None:
        resolve_backend(backend).call("ob_set_logger_severity", int(LogSeverity(severity)))

    @staticmethod
    def set_console(severity: LogSeverity, backend: NativeBackend | str | None = None) -> None:
        resolve_backend(backend).call("ob_set_logger_to_console", int(LogSeverity(severity)))

    @staticmethod
    def set_directory(
        severity: LogSeverity,
        directory: str | Path | None,
        backend: NativeBackend | str | None = None,
    ) -> None:
        """Log to files; ``directory=None`` keeps the current one."""
        resolve_backend(backend).call(
            "ob_set_logger_to_file",
            int(LogSeverity(severity)),
            None if directory is None else str(directory),
        )

    @staticmethod
    def set_callback(
        severity: LogSeverity,
        callback: SdkLogCallback,
        backend: NativeBackend | str | None = None,
    ) -> LoggerCallbackHandle:
        global _active
        backend = resolve_backend(backend)
        trampoline = backend.log_callback(callback)
        with _lock:
            backend.call("ob_set_logger_to_callback", int(LogSeverity(severity)), trampoline, None)
            handle = LoggerCallbackHandle(backend, trampoline)
            _active = handle
        return handle

    @staticmethod
    def forward_to(
        logger: LoguruLogger,
        severity: LogSeverity = LogSeverity.WARN,
        backend: NativeBackend | str | None = None,
    ) -> LoggerCallbackHandle:
        """Route SDK log lines into a loguru ``logger``."""

        def _emit(level: LogSeverity, message: str) -> None:
            logger.log(level.loguru_level, message.rstrip())

        return SdkLogger.set_callback(severity, _emit, backend)
