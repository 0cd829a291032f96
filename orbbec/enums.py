"""Enumerations mirrored from the SDK C headers.

Values are the integers used on the native boundary, so members can be
passed straight to the backend with ``int(member)``.
"""

from __future__ import annotations

from enum import IntEnum


class ExceptionType(IntEnum):
    UNKNOWN = 0
    STD_EXCEPTION = 1
    CAMERA_DISCONNECTED = 2
    PLATFORM = 3
    INVALID_VALUE = 4
    WRONG_API_CALL_SEQUENCE = 5
    NOT_IMPLEMENTED = 6
    IO = 7
    MEMORY = 8
    UNSUPPORTED_OPERATION = 9


class SensorType(IntEnum):
    UNKNOWN = 0
    IR = 1
    COLOR = 2
    DEPTH = 3
    ACCEL = 4
    GYRO = 5
    IR_LEFT = 6
    IR_RIGHT = 7
    RAW_PHASE = 8
    CONFIDENCE = 9


class StreamType(IntEnum):
    UNKNOWN = -1
    VIDEO = 0
    IR = 1
    COLOR = 2
    DEPTH = 3
    ACCEL = 4
    GYRO = 5
    IR_LEFT = 6
    IR_RIGHT = 7
    RAW_PHASE = 8
    CONFIDENCE = 9

    @classmethod
    def from_sensor(cls, sensor: SensorType) -> "StreamType":
        """Video sensors share their numeric tag with the stream they produce."""
        if sensor == SensorType.UNKNOWN:
            return cls.UNKNOWN
        return cls(int(sensor))


class FrameType(IntEnum):
    UNKNOWN = -1
    VIDEO = 0
    IR = 1
    COLOR = 2
    DEPTH = 3
    ACCEL = 4
    SET = 5
    POINTS = 6
    GYRO = 7
    IR_LEFT = 8
    IR_RIGHT = 9
    RAW_PHASE = 10
    CONFIDENCE = 11

    @classmethod
    def from_stream(cls, stream: StreamType) -> "FrameType":
        return _STREAM_TO_FRAME.get(stream, cls.UNKNOWN)


_STREAM_TO_FRAME = {
    StreamType.VIDEO: FrameType.VIDEO,
    StreamType.IR: FrameType.IR,
    StreamType.COLOR: FrameType.COLOR,
    StreamType.DEPTH: FrameType.DEPTH,
    StreamType.ACCEL: FrameType.ACCEL,
    StreamType.GYRO: FrameType.GYRO,
    StreamType.IR_LEFT: FrameType.IR_LEFT,
    StreamType.IR_RIGHT: FrameType.IR_RIGHT,
    StreamType.RAW_PHASE: FrameType.RAW_PHASE,
    StreamType.CONFIDENCE: FrameType.CONFIDENCE,
}


class Format(IntEnum):
    YUYV = 0
    YUY2 = 1
    UYVY = 2
    NV12 = 3
    NV21 = 4
    MJPG = 5
    H264 = 6
    H265 = 7
    Y16 = 8
    Y8 = 9
    Y10 = 10
    Y11 = 11
    Y12 = 12
    GRAY = 13
    HEVC = 14
    I420 = 15
    ACCEL = 16
    GYRO = 17
    POINT = 19
    RGB_POINT = 20
    RLE = 21
    RGB = 22
    BGR = 23
    Y14 = 24
    BGRA = 25
    COMPRESSED = 26
    RVL = 27
    Z16 = 28
    YV12 = 29
    BA81 = 30
    RGBA = 31
    BYR2 = 32
    RW16 = 33
    Y12C4 = 34
    UNKNOWN = 0xFF

    @classmethod
    def parse(cls, name: str | int | "Format") -> "Format":
        """Accept a member, its integer value or its (case-insensitive) name."""
        if isinstance(name, cls):
            return name
        if isinstance(name, int):
            return cls(name)
        try:
            return cls[name.upper().replace("RGBPOINT", "RGB_POINT")]
        except KeyError:
            raise ValueError(f"Unknown format: {name}") from None


# Per-pixel layout of uncompressed formats: (numpy dtype, channels).
PIXEL_LAYOUT = {
    Format.Y8: ("uint8", 1),
    Format.GRAY: ("uint8", 1),
    Format.Y10: ("uint16", 1),
    Format.Y11: ("uint16", 1),
    Format.Y12: ("uint16", 1),
    Format.Y14: ("uint16", 1),
    Format.Y16: ("uint16", 1),
    Format.Z16: ("uint16", 1),
    Format.RGB: ("uint8", 3),
    Format.BGR: ("uint8", 3),
    Format.RGBA: ("uint8", 4),
    Format.BGRA: ("uint8", 4),
    Format.YUYV: ("uint8", 2),
    Format.YUY2: ("uint8", 2),
    Format.UYVY: ("uint8", 2),
}


class PermissionType(IntEnum):
    DENY = 0
    READ = 1
    WRITE = 2
    READ_WRITE = 3

    def allows(self, requested: "PermissionType") -> bool:
        return (int(self) & int(requested)) == int(requested)


class AlignMode(IntEnum):
    DISABLE = 0
    HW = 1
    SW = 2


class FrameAggregateOutputMode(IntEnum):
    """How the runtime groups frames of different streams into framesets."""

    ALL_TYPE_FRAME_REQUIRE = 0
    COLOR_FRAME_REQUIRE = 1
    ANY_SITUATION = 2
    DISABLE = 3


class HoleFillMode(IntEnum):
    TOP = 0
    NEAREST = 1
    FARTHEST = 2


class LogSeverity(IntEnum):
    DEBUG = 0
    INFO = 1
    WARN = 2
    ERROR = 3
    FATAL = 4
    OFF = 5

    @property
    def loguru_level(self) -> str:
        return {
            LogSeverity.DEBUG: "DEBUG",
            LogSeverity.INFO: "INFO",
            LogSeverity.WARN: "WARNING",
            LogSeverity.ERROR: "ERROR",
            LogSeverity.FATAL: "CRITICAL",
            LogSeverity.OFF: "CRITICAL",
        }[self]


class DeviceType(IntEnum):
    UNKNOWN = -1
    SL_MONOCULAR_CAMERA = 0
    SL_BINOCULAR_CAMERA = 1
    TOF_CAMERA = 2


class ConvertFormat(IntEnum):
    YUYV_TO_RGB = 0
    I420_TO_RGB = 1
    NV21_TO_RGB = 2
    NV12_TO_RGB = 3
    MJPG_TO_I420 = 4
    RGB_TO_BGR = 5
    MJPG_TO_NV21 = 6
    MJPG_TO_RGB = 7
    MJPG_TO_BGR = 8
    MJPG_TO_BGRA = 9
    UYVY_TO_RGB = 10
    BGR_TO_RGB = 11
    MJPG_TO_NV12 = 12
    YUYV_TO_BGR = 13
    YUYV_TO_RGBA = 14
    YUYV_TO_BGRA = 15
    YUYV_TO_Y16 = 16
    YUYV_TO_Y8 = 17
    RGBA_TO_RGB = 18
    BGRA_TO_BGR = 19
    Y16_TO_RGB = 20
    Y8_TO_RGB = 21

    @property
    def target(self) -> Format:
        return Format[self.name.rsplit("_TO_", 1)[1]]


class CoordinateSystem(IntEnum):
    LEFT_HAND = 0
    RIGHT_HAND = 1


class FilterConfigValueType(IntEnum):
    INVALID = 0
    INT = 1
    FLOAT = 2
    BOOL = 3


class PointCloudFormat(IntEnum):
    """Output layout of the point-cloud filter, a subset of :class:`Format`."""

    POINT = int(Format.POINT)
    RGB_POINT = int(Format.RGB_POINT)
