"""Process-wide SDK context."""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING

from orbbec.error import WrongAPICallSequenceError
from orbbec.sys import NativeBackend, resolve_backend
from utils.logger import Logger

if TYPE_CHECKING:
    from orbbec.device import DeviceList

logger = Logger.get_logger("orbbec.context")

# The vendor runtime corrupts its state when two contexts coexist.
_slot_lock = threading.Lock()
_slot_taken = False


def _release_slot() -> None:
    global _slot_taken
    with _slot_lock:
        _slot_taken = False


class Context:
    """Entry point of the SDK; at most one may be alive per process.

    Closing the context (explicitly, via ``with`` or by garbage collection)
    frees the slot so a new one can be created.
    """

    def __init__(self, backend: NativeBackend | str | None = None) -> None:
        global _slot_taken
        with _slot_lock:
            if _slot_taken:
                raise WrongAPICallSequenceError("A context already exists", "Context::new")
            _slot_taken = True
        self._closed = False
        try:
            self._backend = resolve_backend(backend)
            self._handle = self._backend.acquire("ob_create_context", "ob_delete_context")
        except BaseException:
            self._closed = True
            _release_slot()
            raise
        logger.debug(f"Context created on {self._backend.name} backend")

    @property
    def backend(self) -> NativeBackend:
        return self._backend

    @property
    def closed(self) -> bool:
        return self._closed

    def query_device_list(self) -> "DeviceList":
        from orbbec.device import DeviceList

        if self._closed:
            raise WrongAPICallSequenceError("Context is closed", "Context::queryDeviceList")
        handle = self._backend.acquire(
            "ob_query_device_list", "ob_delete_device_list", self._handle.raw
        )
        return DeviceList(self, handle)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            self._handle.release()
        finally:
            _release_slot()
            logger.debug("Context closed")

    def __enter__(self) -> "Context":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def __del__(self) -> None:
        if not getattr(self, "_closed", True):
            self.close()
