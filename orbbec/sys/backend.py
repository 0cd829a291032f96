"""Call/result contract shared by every native backend."""

from __future__ import annotations

from typing import Any, Callable, Optional, Tuple

from orbbec.enums import LogSeverity
from orbbec.error import ErrorRecord, OrbbecError
from orbbec.sys.handle import NativeHandle

FrameCallback = Callable[[NativeHandle], None]
LogCallback = Callable[[LogSeverity, str], None]


class NativeBackend:
    """Strategy interface for talking to the SDK runtime.

    Functions are addressed by their C name (``ob_pipeline_start_with_config``
    and so on). Handles travel as the backend's own raw values and are owned
    by :class:`NativeHandle` wrappers on the Python side.
    """

    name = "abstract"

    def invoke(self, function: str, *args: Any) -> Tuple[Any, Optional[ErrorRecord]]:
        """Run ``function`` and return its value together with the error slot."""
        raise NotImplementedError

    def call(self, function: str, *args: Any) -> Any:
        """Run ``function``; a filled error slot is raised before the value is used."""
        value, record = self.invoke(function, *args)
        if record is not None:
            raise OrbbecError.from_record(record)
        return value

    def acquire(self, function: str, release_fn: str, *args: Any) -> NativeHandle:
        """Create a native object and wrap it; a null result is a logic error."""
        raw = self.call(function, *args)
        if raw is None:
            raise RuntimeError(f"{function} returned a null handle without an error")
        return NativeHandle(self, raw, release_fn)

    def acquire_optional(
        self, function: str, release_fn: str, *args: Any
    ) -> Optional[NativeHandle]:
        """Like :meth:`acquire` but a null result means "absent"."""
        raw = self.call(function, *args)
        return None if raw is None else NativeHandle(self, raw, release_fn)

    def frame_callback(self, func: FrameCallback) -> Any:
        """Return a native-callable trampoline delivering owned frame handles."""
        raise NotImplementedError

    def log_callback(self, func: LogCallback) -> Any:
        raise NotImplementedError

    def read_bytes(self, pointer: Any, size: int) -> bytes:
        """Copy ``size`` bytes out of a data pointer returned by the runtime."""
        raise NotImplementedError
