"""Typed errors raised by the binding.

Every fallible native call reports through an error slot. The backend turns a
filled slot into an :class:`ErrorRecord` and :meth:`OrbbecError.from_record`
maps it onto one class per :class:`~orbbec.enums.ExceptionType`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Type

from orbbec.enums import ExceptionType


@dataclass(frozen=True)
class ErrorRecord:
    """Contents of a native error slot."""

    kind: ExceptionType
    message: str
    function: str
    arguments: str = ""


class OrbbecError(Exception):
    """Base class of all errors reported by the SDK."""

    kind = ExceptionType.UNKNOWN
    label = "Unknown Error"

    def __init__(self, message: str, function: str = "", arguments: str = "") -> None:
        super().__init__(message)
        self.message = message
        self.function = function
        self.arguments = arguments

    def __str__(self) -> str:
        return f"{self.label}: {self.message}"

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(message={self.message!r}, "
            f"function={self.function!r}, arguments={self.arguments!r})"
        )

    @staticmethod
    def from_record(record: ErrorRecord) -> "OrbbecError":
        cls = _BY_KIND.get(int(record.kind), UnknownError)
        return cls(record.message, record.function, record.arguments)


class UnknownError(OrbbecError):
    kind = ExceptionType.UNKNOWN
    label = "Unknown Error"


class StdExceptionError(OrbbecError):
    kind = ExceptionType.STD_EXCEPTION
    label = "Standard Exception"


class CameraDisconnectedError(OrbbecError):
    """The device is gone; the pipeline using it must be torn down."""

    kind = ExceptionType.CAMERA_DISCONNECTED
    label = "Camera Disconnected"


class PlatformError(OrbbecError):
    kind = ExceptionType.PLATFORM
    label = "Platform Exception"


class InvalidValueError(OrbbecError):
    kind = ExceptionType.INVALID_VALUE
    label = "Invalid Value"


class WrongAPICallSequenceError(OrbbecError):
    kind = ExceptionType.WRONG_API_CALL_SEQUENCE
    label = "Wrong API Call Sequence"


class NotImplementedFeatureError(OrbbecError):
    kind = ExceptionType.NOT_IMPLEMENTED
    label = "Not Implemented"


class IOExceptionError(OrbbecError):
    kind = ExceptionType.IO
    label = "I/O Exception"


class MemoryExceptionError(OrbbecError):
    kind = ExceptionType.MEMORY
    label = "Memory Exception"


class UnsupportedOperationError(OrbbecError):
    kind = ExceptionType.UNSUPPORTED_OPERATION
    label = "Unsupported Operation"


_BY_KIND: Dict[ExceptionType, Type[OrbbecError]] = {
    cls.kind: cls
    for cls in (
        UnknownError,
        StdExceptionError,
        CameraDisconnectedError,
        PlatformError,
        InvalidValueError,
        WrongAPICallSequenceError,
        NotImplementedFeatureError,
        IOExceptionError,
        MemoryExceptionError,
        UnsupportedOperationError,
    )
}


__all__ = [
    "ErrorRecord",
    "OrbbecError",
    "UnknownError",
    "StdExceptionError",
    "CameraDisconnectedError",
    "PlatformError",
    "InvalidValueError",
    "WrongAPICallSequenceError",
    "NotImplementedFeatureError",
    "IOExceptionError",
    "MemoryExceptionError",
    "UnsupportedOperationError",
]
