"""Owned wrapper around one opaque native handle."""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING, Any

from orbbec.error import WrongAPICallSequenceError

if TYPE_CHECKING:
    from orbbec.sys.backend import NativeBackend


class NativeHandle:
    """Owns ``raw`` and releases it exactly once through ``release_fn``.

    Release happens on :meth:`release`/:meth:`close`, on leaving a ``with``
    block, or when the wrapper is garbage collected, whichever comes first.
    Handles are never copied; pass the wrapper around instead.
    """

    __slots__ = ("_backend", "_raw", "_release_fn", "_lock", "_released", "__weakref__")

    def __init__(self, backend: "NativeBackend", raw: Any, release_fn: str | None) -> None:
        if raw is None:
            raise ValueError("NativeHandle requires a non-null handle")
        self._backend = backend
        self._raw = raw
        self._release_fn = release_fn
        self._lock = threading.Lock()
        self._released = False

    @property
    def backend(self) -> "NativeBackend":
        return self._backend

    @property
    def raw(self) -> Any:
        if self._released:
            raise WrongAPICallSequenceError(
                "Handle used after release", "NativeHandle::raw", str(self._release_fn)
            )
        return self._raw

    @property
    def released(self) -> bool:
        return self._released

    def call(self, function: str, *args: Any) -> Any:
        """Invoke ``function`` with this handle as the first argument."""
        return self._backend.call(function, self.raw, *args)

    def release(self) -> None:
        with self._lock:
            if self._released:
                return
            self._released = True
            raw, self._raw = self._raw, None
        if self._release_fn is not None:
            self._backend.call(self._release_fn, raw)

    close = release

    def __enter__(self) -> "NativeHandle":
        return self

    def __exit__(self, *exc: object) -> None:
        self.release()

    def __del__(self) -> None:
        # __init__ may have failed before the slots were filled.
        if not getattr(self, "_released", True):
            self.release()

    def __copy__(self) -> "NativeHandle":
        raise TypeError("NativeHandle cannot be copied")

    def __deepcopy__(self, memo: dict) -> "NativeHandle":
        raise TypeError("NativeHandle cannot be copied")

    def __repr__(self) -> str:
        state = "released" if self._released else "live"
        return f"<NativeHandle {self._release_fn} {state}>"
