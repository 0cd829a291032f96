"""Subcommand dispatcher for the camera tools.

Every command gets the global ``--config`` and ``--log-level`` options.
Capture commands add the shared stream options through
:func:`add_common_arguments`. A :class:`~utils.error_tracker.CameraError`
raised by a command (no device, missing SDK library) ends the run with exit
status 1 and a single log line instead of a traceback.
"""

from __future__ import annotations

import argparse
from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional

from utils.config import Config
from utils.error_tracker import CameraError, ErrorTracker
from utils.logger import Logger, LoggerType

Handler = Callable[[argparse.Namespace], object]


@dataclass
class Command:
    name: str
    handler: Handler
    add_arguments: Optional[Callable[[argparse.ArgumentParser], None]] = None
    help: str | None = None


def add_backend_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--backend",
        choices=("native", "software"),
        default=None,
        help="SDK backend (defaults to sdk.backend from the config)",
    )


def add_common_arguments(parser: argparse.ArgumentParser) -> None:
    """Backend, device index and frame count for streaming commands."""
    add_backend_argument(parser)
    parser.add_argument("--device", type=int, default=0, help="Device index")
    parser.add_argument(
        "--frames", type=int, default=None, help="Number of framesets to process"
    )


@dataclass
class CommandDispatcher:
    description: str
    commands: Iterable[Command] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.commands = list(self.commands)
        names = [cmd.name for cmd in self.commands]
        if len(names) != len(set(names)):
            raise ValueError(f"Duplicate command names: {names}")

    def _build_parser(self) -> argparse.ArgumentParser:
        parser = argparse.ArgumentParser(description=self.description)
        parser.add_argument("--config", default=None, help="YAML config file")
        parser.add_argument(
            "--log-level",
            default=None,
            choices=("TRACE", "DEBUG", "INFO", "WARNING", "ERROR"),
            help="Console and file log level",
        )
        subparsers = parser.add_subparsers(dest="command")
        for cmd in self.commands:
            sp = subparsers.add_parser(cmd.name, help=cmd.help)
            if cmd.add_arguments:
                cmd.add_arguments(sp)
            sp.set_defaults(func=cmd.handler)
        return parser

    @staticmethod
    def _apply_globals(ns: argparse.Namespace) -> None:
        # config first: loading it rebuilds the log sinks
        if ns.config:
            Config.load(ns.config, force_reload=True)
        if ns.log_level:
            Logger.configure(level=ns.log_level)

    def run(
        self,
        args: Optional[list[str]] = None,
        *,
        logger: Optional[LoggerType] = None,
        track_exceptions: bool = True,
    ) -> int:
        """Parse ``args``, run the selected command and return an exit status.

        With ``track_exceptions`` the :class:`ErrorTracker` hook and signal
        handlers are installed so open pipelines are stopped on Ctrl+C or an
        unexpected error.
        """
        if logger is None:
            logger = Logger.get_logger("utils.cli")

        if track_exceptions:
            ErrorTracker.install_excepthook()
            ErrorTracker.install_signal_handlers()

        parser = self._build_parser()
        try:
            ns = parser.parse_args(args)
        except SystemExit as exc:
            logger.error(f"Argument parsing failed: {exc}")
            raise

        self._apply_globals(ns)
        if not hasattr(ns, "func"):
            parser.print_help()
            return 0

        logger.debug(f"Dispatching command '{ns.command}'")
        try:
            ns.func(ns)
        except CameraError as exc:
            ErrorTracker.report(type(exc), exc, exc.__traceback__)
            ErrorTracker.run_cleanup()
            return 1
        return 0
