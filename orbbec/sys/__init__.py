"""Native boundary: handle ownership and the backends serving SDK calls."""

from __future__ import annotations

import threading

from orbbec.sys.backend import NativeBackend
from orbbec.sys.handle import NativeHandle
from utils.config import Config
from utils.logger import Logger
from utils.settings import sdk as SDKCFG

logger = Logger.get_logger("orbbec.sys")

_lock = threading.Lock()
_backend: NativeBackend | None = None


def _create(name: str) -> NativeBackend:
    if name == "native":
        from orbbec.sys.native import NativeLibraryBackend

        return NativeLibraryBackend(Config.get("sdk.library", SDKCFG.library))
    if name == "software":
        from orbbec.sys.software import SoftwareBackend

        return SoftwareBackend()
    raise ValueError(f"Unknown SDK backend: {name}")


def get_backend(name: str | None = None) -> NativeBackend:
    """Return the process backend, creating it on first use.

    Selection order: ``name``, then ``sdk.backend`` from the YAML config,
    then :class:`utils.settings.SdkCfg`. An explicit ``name`` that differs
    from the active backend replaces it.
    """
    global _backend
    with _lock:
        if _backend is not None and (name is None or name == _backend.name):
            return _backend
        chosen = name or Config.get("sdk.backend", SDKCFG.backend)
        _backend = _create(chosen)
        logger.debug(f"Using {chosen} SDK backend")
        return _backend


def set_backend(backend: NativeBackend | None) -> None:
    """Install ``backend`` for the process; ``None`` resets to lazy selection."""
    global _backend
    with _lock:
        _backend = backend


def resolve_backend(backend: NativeBackend | str | None = None) -> NativeBackend:
    """Accept a backend instance, a backend name or ``None`` (process default)."""
    if isinstance(backend, NativeBackend):
        return backend
    return get_backend(backend)


__all__ = ["NativeBackend", "NativeHandle", "get_backend", "set_backend", "resolve_backend"]
