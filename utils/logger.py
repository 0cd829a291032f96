"""Loguru setup shared by the binding and the command line tools.

Records carry a ``module`` extra (the name given to :meth:`Logger.get_logger`)
which the console format prints. Lines forwarded from the SDK runtime arrive
through :meth:`orbbec.SdkLogger.forward_to` and are tagged ``sdk``.
"""

from __future__ import annotations

import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Iterable, TypeVar, cast

from loguru import logger as _logger
from loguru._logger import Logger as LoguruLogger
from tqdm.auto import tqdm

from utils.settings import logging as LOGCFG

LoggerType = LoguruLogger
T = TypeVar("T")


class _Sinks:
    configured = False
    log_dir: Path = Path(LOGCFG.log_dir)
    log_file: Path | None = None


class Logger:
    """Project-wide logger wrapper using loguru and global config."""

    @staticmethod
    def _configure(level: str, json_format: bool) -> None:
        _logger.remove()
        # records from unbound loggers still format
        _logger.configure(extra={"module": "-"})
        _logger.add(sys.stderr, level=level, format=LOGCFG.log_format)
        _Sinks.log_dir.mkdir(parents=True, exist_ok=True)
        stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        _Sinks.log_file = _Sinks.log_dir / f"{stamp}.log.json"
        _logger.add(
            _Sinks.log_file,
            level=level,
            serialize=json_format,
            format=LOGCFG.log_file_format,
            enqueue=True,
        )
        _Sinks.configured = True

    @staticmethod
    def get_logger(
        name: str, level: str | None = None, json_format: bool | None = None, **context: Any
    ) -> LoguruLogger:
        """
        Return a loguru logger bound to ``name`` and any extra ``context``
        (device serial, stream, ...). Sinks are set up on first call from
        :data:`utils.settings.logging` unless ``level``/``json_format`` given.
        """
        if not _Sinks.configured:
            Logger._configure(
                level or LOGCFG.level,
                LOGCFG.json if json_format is None else json_format,
            )
        return _logger.bind(module=name, **context)

    @staticmethod
    def configure(
        level: str | None = None,
        log_dir: str | Path | None = None,
        json_format: bool | None = None,
    ) -> None:
        """Rebuild the sinks, e.g. after the YAML config is loaded."""
        _Sinks.log_dir = Path(log_dir) if log_dir is not None else Path(LOGCFG.log_dir)
        Logger._configure(
            level or LOGCFG.level,
            LOGCFG.json if json_format is None else json_format,
        )

    @staticmethod
    def sdk_logger() -> LoguruLogger:
        """Logger that SDK runtime messages are forwarded into."""
        return Logger.get_logger("sdk")

    @staticmethod
    def progress(
        iterable: Iterable[T],
        desc: str | None = None,
        total: int | None = None,
    ) -> Iterable[T]:
        """Wrap a capture loop in a tqdm bar."""
        return cast(
            Iterable[T],
            tqdm(
                iterable,
                desc=desc,
                total=total,
                leave=False,
                bar_format=LOGCFG.progress_bar_format,
            ),
        )

    @staticmethod
    def log_file() -> Path | None:
        """JSON log file of the current run, once sinks are configured."""
        return _Sinks.log_file
