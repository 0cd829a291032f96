"""In-process software runtime implementing the SDK call contract.

The runtime stands in for ``libOrbbecSDK`` the same way a software device
stands in for a camera: devices are declared in Python (identity, profiles,
properties, presets) and frames are pushed by the caller with
:meth:`SoftwareDevice.push_frame`. Pipelines, frame aggregation, the blocking
wait and callback delivery behave like the native runtime so the binding can
be exercised without hardware.

Post-processing is pluggable per filter name. The built-in processors copy
their input, except the format converter (OpenCV colour conversions) and the
point-cloud filter (pinhole deprojection).
"""

from __future__ import annotations

import math
import queue
import sys
import threading
import time
from dataclasses import asdict, dataclass, field, replace
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, Set, Tuple

import cv2
import numpy as np

from orbbec.device_property import DeviceProperty, PropertySetting, PropertyValue
from orbbec.enums import (
    PIXEL_LAYOUT,
    AlignMode,
    ConvertFormat,
    CoordinateSystem,
    DeviceType,
    ExceptionType,
    FilterConfigValueType,
    Format,
    FrameAggregateOutputMode,
    FrameType,
    LogSeverity,
    PermissionType,
    SensorType,
    StreamType,
)
from orbbec.error import ErrorRecord
from orbbec.sys.backend import FrameCallback, LogCallback, NativeBackend
from orbbec.sys.handle import NativeHandle
from utils.logger import Logger

logger = Logger.get_logger("orbbec.sys.software")

FRAME_QUEUE_SIZE = 16


class SoftwareFault(Exception):
    """Raised inside the runtime; becomes the error slot of the call."""

    def __init__(self, kind: ExceptionType, message: str, function: str = "", arguments: str = "") -> None:
        super().__init__(message)
        self.record = ErrorRecord(kind, message, function, arguments)


def _now_us() -> int:
    return time.monotonic_ns() // 1000


def default_intrinsic(width: int, height: int, hfov_deg: float = 75.0) -> Dict[str, float]:
    """Pinhole intrinsics for a centred sensor with the given horizontal FOV."""
    fx = width / (2.0 * math.tan(math.radians(hfov_deg) / 2.0))
    return {
        "fx": fx,
        "fy": fx,
        "cx": (width - 1) / 2.0,
        "cy": (height - 1) / 2.0,
        "width": width,
        "height": height,
    }


@dataclass(frozen=True)
class SoftwareProfile:
    stream_type: StreamType
    format: Format
    width: int
    height: int
    fps: int
    intrinsic: Dict[str, float] = field(compare=False, hash=False, default_factory=dict)

    def key(self) -> Tuple[int, int, int, int, int]:
        return (int(self.stream_type), self.width, self.height, int(self.format), self.fps)


@dataclass
class PropertySlot:
    kind: type
    value: PropertyValue
    permission: PermissionType = PermissionType.READ_WRITE
    minimum: Optional[float] = None
    maximum: Optional[float] = None


@dataclass
class SoftwareFrame:
    frame_type: FrameType
    format: Format
    data: bytes
    index: int = 0
    timestamp_us: int = 0
    system_timestamp_us: int = 0
    global_timestamp_us: int = 0
    width: int = 0
    height: int = 0
    value_scale: float = 1.0
    coordinate_scale: float = 1.0
    profile: Optional[SoftwareProfile] = None
    frames: Dict[FrameType, "SoftwareFrame"] = field(default_factory=dict)

    @property
    def is_video(self) -> bool:
        return self.frame_type not in (FrameType.SET, FrameType.ACCEL, FrameType.GYRO, FrameType.UNKNOWN)

    def copy(self, **changes: Any) -> "SoftwareFrame":
        """A new frame object; ``data`` is immutable so it is shared."""
        frames = {k: v.copy() for k, v in self.frames.items()}
        return replace(self, frames=frames, **changes)

    def pixels(self) -> np.ndarray:
        dtype, channels = PIXEL_LAYOUT[self.format]
        arr = np.frombuffer(self.data, dtype=dtype)
        shape = (self.height, self.width) if channels == 1 else (self.height, self.width, channels)
        return arr.reshape(shape)


@dataclass
class _Config:
    profiles: List[SoftwareProfile] = field(default_factory=list)
    align_mode: AlignMode = AlignMode.DISABLE
    depth_scale_after_align: bool = False
    aggregate_mode: FrameAggregateOutputMode = FrameAggregateOutputMode.ALL_TYPE_FRAME_REQUIRE

    def enabled_frame_types(self) -> set:
        return {FrameType.from_stream(p.stream_type) for p in self.profiles}


@dataclass(frozen=True)
class _DeviceInfo:
    name: str
    pid: int
    vid: int
    uid: str
    serial_number: str
    firmware_version: str
    hardware_version: str
    connection_type: str
    supported_min_sdk_version: str
    asic_name: str
    device_type: DeviceType


_STOP = object()
_DISCONNECTED = object()


class SoftwareDevice:
    """A declared device: identity, profiles, properties and presets."""

    def __init__(
        self,
        runtime: "SoftwareRuntime",
        name: str = "Software Camera",
        serial_number: str = "SW0000000001",
        vid: int = 0x2BC5,
        pid: int = 0x0800,
        uid: str | None = None,
        firmware_version: str = "1.0.0",
        hardware_version: str = "1.0",
        connection_type: str = "USB3.2",
        supported_min_sdk_version: str = "2.0.0",
        asic_name: str = "SOFT",
        device_type: DeviceType = DeviceType.SL_BINOCULAR_CAMERA,
        depth_scale: float = 1.0,
        autostream: bool = False,
    ) -> None:
        self.runtime = runtime
        self.info = _DeviceInfo(
            name=name,
            pid=pid,
            vid=vid,
            uid=uid or f"sw-{serial_number}",
            serial_number=serial_number,
            firmware_version=firmware_version,
            hardware_version=hardware_version,
            connection_type=connection_type,
            supported_min_sdk_version=supported_min_sdk_version,
            asic_name=asic_name,
            device_type=device_type,
        )
        self.depth_scale = depth_scale
        self.autostream = autostream
        self.sensors: Dict[SensorType, List[SoftwareProfile]] = {}
        self.properties: Dict[int, PropertySlot] = {}
        self.presets: Dict[str, Dict[int, PropertyValue]] = {}
        self.d2c: Dict[Tuple[int, AlignMode], List[SoftwareProfile]] = {}
        self.connected = True
        self._pipeline: Optional["SoftwarePipeline"] = None
        self._counters: Dict[FrameType, int] = {}
        self._lock = threading.Lock()

    # declaration -------------------------------------------------------
    def add_profile(
        self,
        sensor: SensorType,
        width: int,
        height: int,
        fmt: Format | str,
        fps: int,
        intrinsic: Dict[str, float] | None = None,
    ) -> SoftwareProfile:
        profile = SoftwareProfile(
            stream_type=StreamType.from_sensor(sensor),
            format=Format.parse(fmt),
            width=width,
            height=height,
            fps=fps,
            intrinsic=intrinsic or default_intrinsic(width, height),
        )
        self.sensors.setdefault(sensor, []).append(profile)
        return profile

    def add_property(
        self,
        prop: DeviceProperty,
        value: PropertyValue,
        permission: PermissionType = PermissionType.READ_WRITE,
        minimum: float | None = None,
        maximum: float | None = None,
    ) -> None:
        self.properties[prop.id] = PropertySlot(
            prop.kind, prop.coerce(value), permission, minimum, maximum
        )

    def add_preset(self, name: str, settings: Iterable[PropertySetting]) -> None:
        self.presets[name] = {s.property.id: s.value for s in settings}

    def set_d2c(
        self,
        color: SoftwareProfile,
        depth_profiles: Iterable[SoftwareProfile],
        mode: AlignMode | None = None,
    ) -> None:
        """Declare which depth profiles align to ``color``; ``mode=None`` sets HW and SW."""
        modes = [mode] if mode is not None else [AlignMode.HW, AlignMode.SW]
        for m in modes:
            self.d2c[(id(color), m)] = list(depth_profiles)

    def d2c_profiles(self, color: SoftwareProfile, mode: AlignMode) -> List[SoftwareProfile]:
        declared = self.d2c.get((id(color), mode))
        if declared is not None:
            return declared
        # Undeclared: every depth profile running at the colour frame rate.
        return [p for p in self.sensors.get(SensorType.DEPTH, []) if p.fps == color.fps]

    # runtime -----------------------------------------------------------
    def push_frame(
        self,
        sensor: SensorType,
        data: np.ndarray | bytes,
        timestamp_us: int | None = None,
    ) -> bool:
        """Inject one frame for ``sensor``.

        Returns ``False`` when no started pipeline streams that sensor (the
        frame is dropped, as a camera would drop it).
        """
        with self._lock:
            pipeline = self._pipeline
        if not self.connected or pipeline is None:
            return False
        stream = StreamType.from_sensor(sensor)
        profile = pipeline.enabled_profile(stream)
        if profile is None:
            return False
        frame = self._make_frame(profile, data, timestamp_us)
        return pipeline.offer(frame)

    def _make_frame(
        self, profile: SoftwareProfile, data: np.ndarray | bytes, timestamp_us: int | None
    ) -> SoftwareFrame:
        frame_type = FrameType.from_stream(profile.stream_type)
        payload = _encode_payload(profile, data)
        with self._lock:
            index = self._counters.get(frame_type, 0)
            self._counters[frame_type] = index + 1
        ts = _now_us() if timestamp_us is None else int(timestamp_us)
        system_ts = time.time_ns() // 1000
        return SoftwareFrame(
            frame_type=frame_type,
            format=profile.format,
            data=payload,
            index=index,
            timestamp_us=ts,
            system_timestamp_us=system_ts,
            global_timestamp_us=system_ts,
            width=profile.width,
            height=profile.height,
            value_scale=self.depth_scale if frame_type == FrameType.DEPTH else 1.0,
            profile=profile,
        )

    def disconnect(self) -> None:
        """Simulate unplugging: running pipelines fail with CameraDisconnected."""
        self.connected = False
        with self._lock:
            pipeline = self._pipeline
        self.runtime.log(LogSeverity.ERROR, f"Device {self.info.serial_number} disconnected")
        if pipeline is not None:
            pipeline.on_disconnect()

    def _attach(self, pipeline: "SoftwarePipeline") -> None:
        with self._lock:
            if self._pipeline is not None and self._pipeline is not pipeline:
                raise SoftwareFault(
                    ExceptionType.WRONG_API_CALL_SEQUENCE,
                    "Device is already streaming in another pipeline",
                    "Pipeline::start",
                )
            self._pipeline = pipeline

    def _detach(self, pipeline: "SoftwarePipeline") -> None:
        with self._lock:
            if self._pipeline is pipeline:
                self._pipeline = None

    def check_connected(self, function: str) -> None:
        if not self.connected:
            raise SoftwareFault(
                ExceptionType.CAMERA_DISCONNECTED,
                "Device is disconnected",
                function,
                self.info.serial_number,
            )

    # properties --------------------------------------------------------
    def _slot(self, prop_id: int, permission: PermissionType, function: str) -> PropertySlot:
        self.check_connected(function)
        slot = self.properties.get(prop_id)
        if slot is None:
            raise SoftwareFault(
                ExceptionType.UNSUPPORTED_OPERATION,
                f"Property {prop_id} is not supported",
                function,
                f"propertyId={prop_id}",
            )
        if not slot.permission.allows(permission):
            raise SoftwareFault(
                ExceptionType.UNSUPPORTED_OPERATION,
                f"Property {prop_id} does not allow {permission.name}",
                function,
                f"propertyId={prop_id}",
            )
        return slot

    def set_property(self, prop_id: int, kind: type, value: PropertyValue, function: str) -> None:
        slot = self._slot(prop_id, PermissionType.WRITE, function)
        if slot.kind is not kind:
            raise SoftwareFault(
                ExceptionType.INVALID_VALUE,
                f"Property {prop_id} is {slot.kind.__name__}, not {kind.__name__}",
                function,
                f"propertyId={prop_id}",
            )
        if kind is not bool:
            if (slot.minimum is not None and value < slot.minimum) or (
                slot.maximum is not None and value > slot.maximum
            ):
                raise SoftwareFault(
                    ExceptionType.INVALID_VALUE,
                    f"Value {value} out of range [{slot.minimum}, {slot.maximum}]",
                    function,
                    f"propertyId={prop_id}, value={value}",
                )
        if kind is float:
            value = float(np.float32(value))
        slot.value = kind(value)

    def get_property(self, prop_id: int, kind: type, function: str) -> PropertyValue:
        slot = self._slot(prop_id, PermissionType.READ, function)
        if slot.kind is not kind:
            raise SoftwareFault(
                ExceptionType.INVALID_VALUE,
                f"Property {prop_id} is {slot.kind.__name__}, not {kind.__name__}",
                function,
                f"propertyId={prop_id}",
            )
        return slot.value

    def load_preset(self, name: str) -> None:
        self.check_connected("Device::loadPreset")
        preset = self.presets.get(name)
        if preset is None:
            raise SoftwareFault(
                ExceptionType.INVALID_VALUE,
                f"Invalid preset name: {name}",
                "Device::loadPreset",
                f"presetName={name}",
            )
        for prop_id, value in preset.items():
            slot = self.properties.get(prop_id)
            if slot is not None:
                slot.value = value


def _encode_payload(profile: SoftwareProfile, data: np.ndarray | bytes) -> bytes:
    if isinstance(data, (bytes, bytearray, memoryview)):
        return bytes(data)
    arr = np.ascontiguousarray(data)
    if profile.format == Format.MJPG:
        ok, buf = cv2.imencode(".jpg", arr)
        if not ok:
            raise ValueError("JPEG encoding failed")
        return buf.tobytes()
    layout = PIXEL_LAYOUT.get(profile.format)
    if layout is not None:
        dtype, channels = layout
        expected = profile.width * profile.height * channels * np.dtype(dtype).itemsize
        if arr.nbytes != expected:
            raise ValueError(
                f"{profile.format.name} {profile.width}x{profile.height} frame needs "
                f"{expected} bytes, got {arr.nbytes}"
            )
        arr = arr.astype(dtype, copy=False)
    return arr.tobytes()


class SoftwarePipeline:
    """Capture session state machine with aggregation and delivery."""

    def __init__(self, runtime: "SoftwareRuntime", device: SoftwareDevice) -> None:
        self.runtime = runtime
        self.device = device
        self.started = False
        self.frame_sync = False
        self._config: Optional[_Config] = None
        self._lock = threading.Lock()
        self._queue: "queue.Queue[Any]" = queue.Queue(maxsize=FRAME_QUEUE_SIZE)
        self._pending: Dict[FrameType, SoftwareFrame] = {}
        self._callback: Optional[Callable[[Any, Any], None]] = None
        self._thread: Optional[threading.Thread] = None
        self._source: Optional["_SyntheticSource"] = None
        self._disconnected = False
        self._frameset_index = 0

    def enabled_profile(self, stream: StreamType) -> Optional[SoftwareProfile]:
        with self._lock:
            if not self.started or self._config is None:
                return None
            for profile in self._config.profiles:
                if profile.stream_type == stream:
                    return profile
        return None

    def _validate(self, config: _Config) -> None:
        fn = "Pipeline::start"
        if not config.profiles:
            raise SoftwareFault(ExceptionType.INVALID_VALUE, "No stream enabled in config", fn)
        available = {p.key() for profiles in self.device.sensors.values() for p in profiles}
        for profile in config.profiles:
            if profile.key() not in available:
                raise SoftwareFault(
                    ExceptionType.INVALID_VALUE,
                    f"Stream profile {profile.key()} is not supported by the device",
                    fn,
                )
        if config.align_mode != AlignMode.DISABLE:
            by_type = {p.stream_type: p for p in config.profiles}
            color = by_type.get(StreamType.COLOR)
            depth = by_type.get(StreamType.DEPTH)
            if color is None or depth is None:
                raise SoftwareFault(
                    ExceptionType.INVALID_VALUE,
                    "Alignment requires both depth and color streams",
                    fn,
                )
            color_decl = self.runtime.find_profile(self.device, color)
            supported = {p.key() for p in self.device.d2c_profiles(color_decl, config.align_mode)}
            if depth.key() not in supported:
                raise SoftwareFault(
                    ExceptionType.INVALID_VALUE,
                    f"Depth profile {depth.key()} cannot be aligned to {color.key()}",
                    fn,
                )

    def start(self, config: _Config, callback: Optional[Callable[[Any, Any], None]]) -> None:
        self.device.check_connected("Pipeline::start")
        with self._lock:
            if self.started:
                raise SoftwareFault(
                    ExceptionType.WRONG_API_CALL_SEQUENCE, "Pipeline already started", "Pipeline::start"
                )
            self._validate(config)
            self.device._attach(self)
            self._config = replace(config, profiles=list(config.profiles))
            self._queue = queue.Queue(maxsize=FRAME_QUEUE_SIZE)
            self._pending = {}
            self._callback = callback
            self._disconnected = False
            self.started = True
            if callback is not None:
                self._thread = threading.Thread(
                    target=self._deliver, args=(self._queue,), name="ob-frame-delivery", daemon=True
                )
                self._thread.start()
        self.runtime.log(LogSeverity.INFO, f"Pipeline started on {self.device.info.serial_number}")
        if self.device.autostream:
            self._source = _SyntheticSource(self.device, self, list(self._config.profiles))
            self._source.start()

    def stop(self) -> None:
        with self._lock:
            if not self.started:
                return
            self.started = False
            self._callback = None
            thread, self._thread = self._thread, None
            source, self._source = self._source, None
            self._pending = {}
            q = self._queue
        self.device._detach(self)
        if source is not None:
            source.stop()
        self._force_put(q, _STOP)
        if thread is not None and thread is not threading.current_thread():
            thread.join()
        self.runtime.log(LogSeverity.INFO, f"Pipeline stopped on {self.device.info.serial_number}")

    def on_disconnect(self) -> None:
        with self._lock:
            self._disconnected = True
            q = self._queue
        self._force_put(q, _DISCONNECTED)

    @staticmethod
    def _force_put(q: "queue.Queue[Any]", item: Any) -> None:
        while True:
            try:
                q.put_nowait(item)
                return
            except queue.Full:
                try:
                    q.get_nowait()
                except queue.Empty:
                    pass

    def offer(self, frame: SoftwareFrame) -> bool:
        with self._lock:
            if not self.started or self._disconnected:
                return False
            framesets = self._aggregate(frame)
            q = self._queue
        for fs in framesets:
            # Oldest framesets are dropped when the consumer falls behind.
            self._force_put(q, fs)
        return True

    def _frameset(self, frames: Dict[FrameType, SoftwareFrame]) -> SoftwareFrame:
        self._frameset_index += 1
        ts = max(f.timestamp_us for f in frames.values())
        system_ts = max(f.system_timestamp_us for f in frames.values())
        return SoftwareFrame(
            frame_type=FrameType.SET,
            format=Format.UNKNOWN,
            data=b"",
            index=self._frameset_index,
            timestamp_us=ts,
            system_timestamp_us=system_ts,
            global_timestamp_us=system_ts,
            frames=dict(frames),
        )

    def _aggregate(self, frame: SoftwareFrame) -> List[SoftwareFrame]:
        """Group frames whose timestamps lie within half a frame interval.

        A group closes when every enabled stream is present or when a frame
        arrives that does not belong to it (outside the window, or a second
        frame of a type the group already holds). A closed partial group is
        emitted according to the aggregate output mode.
        """
        config = self._config
        mode = config.aggregate_mode
        if not self.frame_sync or mode == FrameAggregateOutputMode.DISABLE:
            return [self._frameset({frame.frame_type: frame})]

        fps = frame.profile.fps if frame.profile is not None else 30
        tolerance = 1e6 / max(fps, 1) / 2.0
        enabled = config.enabled_frame_types()
        out: List[SoftwareFrame] = []
        if self._pending:
            start = min(f.timestamp_us for f in self._pending.values())
            if frame.frame_type in self._pending or abs(frame.timestamp_us - start) > tolerance:
                if self._emit_partial(mode, enabled):
                    out.append(self._frameset(self._pending))
                self._pending = {}
        self._pending[frame.frame_type] = frame
        if enabled <= self._pending.keys():
            out.append(self._frameset(self._pending))
            self._pending = {}
        return out

    def _emit_partial(self, mode: FrameAggregateOutputMode, enabled: Set[FrameType]) -> bool:
        if mode == FrameAggregateOutputMode.ANY_SITUATION:
            return True
        if mode == FrameAggregateOutputMode.COLOR_FRAME_REQUIRE and FrameType.COLOR in enabled:
            return FrameType.COLOR in self._pending
        return False

    def wait(self, timeout_ms: int) -> Optional[SoftwareFrame]:
        fn = "Pipeline::waitForFrameset"
        with self._lock:
            if not self.started:
                raise SoftwareFault(ExceptionType.WRONG_API_CALL_SEQUENCE, "Pipeline not started", fn)
            if self._callback is not None:
                raise SoftwareFault(
                    ExceptionType.WRONG_API_CALL_SEQUENCE,
                    "Pipeline was started with a frame callback",
                    fn,
                )
            q = self._queue
        if self._disconnected:
            raise SoftwareFault(ExceptionType.CAMERA_DISCONNECTED, "Device is disconnected", fn)
        try:
            item = q.get_nowait() if timeout_ms <= 0 else q.get(timeout=timeout_ms / 1000.0)
        except queue.Empty:
            return None
        if item is _DISCONNECTED:
            raise SoftwareFault(ExceptionType.CAMERA_DISCONNECTED, "Device is disconnected", fn)
        if item is _STOP:
            return None
        return item

    def _deliver(self, q: "queue.Queue[Any]") -> None:
        while True:
            item = q.get()
            if item is _STOP or item is _DISCONNECTED:
                return
            callback = self._callback
            if callback is None:
                return
            callback(item, None)


class _SyntheticSource(threading.Thread):
    """Produces a depth ramp and colour gradient for ``autostream`` devices."""

    def __init__(self, device: SoftwareDevice, pipeline: SoftwarePipeline, profiles: List[SoftwareProfile]):
        super().__init__(name="ob-synthetic-source", daemon=True)
        self.device = device
        self.pipeline = pipeline
        self.profiles = profiles
        self._stop_event = threading.Event()

    def stop(self) -> None:
        self._stop_event.set()
        if self is not threading.current_thread():
            self.join()

    def run(self) -> None:
        fps = min(p.fps for p in self.profiles) or 30
        period = 1.0 / fps
        n = 0
        start = _now_us()
        while not self._stop_event.is_set():
            ts = start + int(n * period * 1e6)
            for profile in self.profiles:
                image = synthetic_image(profile, n, self.device.depth_scale)
                if image is None:
                    continue
                frame = self.device._make_frame(profile, image, ts)
                self.pipeline.offer(frame)
            n += 1
            self._stop_event.wait(period)


def synthetic_image(profile: SoftwareProfile, n: int, depth_scale: float = 1.0) -> Optional[np.ndarray]:
    """Deterministic test image for ``profile``; ``None`` for unsupported formats."""
    w, h = profile.width, profile.height
    if profile.stream_type == StreamType.DEPTH and profile.format in (Format.Y16, Format.Z16):
        xs = np.linspace(500.0, 2500.0, w, dtype=np.float32)
        mm = np.tile(xs, (h, 1)) + (n % 100)
        return (mm / depth_scale).astype(np.uint16)
    if profile.format in (Format.Y8, Format.GRAY):
        return np.tile(np.linspace(0, 255, w, dtype=np.uint8), (h, 1))
    if profile.format in (Format.Y16, Format.Z16):
        return np.tile(np.linspace(0, 4095, w, dtype=np.uint16), (h, 1))
    if profile.format in (Format.RGB, Format.BGR, Format.MJPG):
        img = np.zeros((h, w, 3), dtype=np.uint8)
        img[..., 0] = np.linspace(0, 255, w, dtype=np.uint8)[None, :]
        img[..., 1] = np.linspace(0, 255, h, dtype=np.uint8)[:, None]
        img[..., 2] = (n * 5) % 256
        return img
    return None


# Filters ------------------------------------------------------------------


@dataclass(frozen=True)
class SchemaItem:
    name: str
    type: FilterConfigValueType
    min: float
    max: float
    step: float
    default: float
    desc: str = ""


Processor = Callable[["SoftwareFilter", SoftwareFrame], SoftwareFrame]


@dataclass
class FilterSpec:
    schema: List[SchemaItem]
    processor: Processor
    accepts: Callable[[SoftwareFrame], bool] = lambda frame: True


class SoftwareFilter:
    def __init__(self, name: str, spec: FilterSpec) -> None:
        self.name = name
        self.spec = spec
        self.values = {item.name: item.default for item in spec.schema}
        self.state: Dict[str, Any] = {}
        self.align_to: Optional[SoftwareProfile] = None

    def item(self, key: str, function: str) -> SchemaItem:
        for item in self.spec.schema:
            if item.name == key:
                return item
        raise SoftwareFault(
            ExceptionType.INVALID_VALUE,
            f"Invalid config name: {key}",
            function,
            f"filter={self.name}, name={key}",
        )

    def set_value(self, key: str, value: float) -> None:
        fn = "Filter::setConfigValue"
        item = self.item(key, fn)
        if not item.min <= value <= item.max:
            raise SoftwareFault(
                ExceptionType.INVALID_VALUE,
                f"Value {value} of {key} out of range [{item.min}, {item.max}]",
                fn,
                f"filter={self.name}, name={key}, value={value}",
            )
        if item.type in (FilterConfigValueType.INT, FilterConfigValueType.BOOL):
            value = float(int(value))
        self.values[key] = float(value)

    def process(self, frame: SoftwareFrame) -> SoftwareFrame:
        if not self.spec.accepts(frame):
            raise SoftwareFault(
                ExceptionType.INVALID_VALUE,
                f"{self.name} does not accept {frame.frame_type.name} frames",
                "Filter::process",
                f"filter={self.name}",
            )
        return self.spec.processor(self, frame)


def copy_processor(flt: SoftwareFilter, frame: SoftwareFrame) -> SoftwareFrame:
    return frame.copy()


def _depth_input(frame: SoftwareFrame) -> bool:
    return frame.frame_type == FrameType.DEPTH


def _video_input(frame: SoftwareFrame) -> bool:
    return frame.is_video


def _depth_or_set(frame: SoftwareFrame) -> bool:
    if frame.frame_type == FrameType.SET:
        return FrameType.DEPTH in frame.frames
    return frame.frame_type == FrameType.DEPTH


_CONVERSIONS: Dict[ConvertFormat, Tuple[Format, Callable[[SoftwareFrame], np.ndarray]]] = {}


def _decode_mjpg(frame: SoftwareFrame, code: int | None) -> np.ndarray:
    bgr = cv2.imdecode(np.frombuffer(frame.data, dtype=np.uint8), cv2.IMREAD_COLOR)
    if bgr is None:
        raise SoftwareFault(ExceptionType.INVALID_VALUE, "Corrupt MJPG frame", "FormatConverter::process")
    return bgr if code is None else cv2.cvtColor(bgr, code)


def _yuv420(frame: SoftwareFrame, code: int) -> np.ndarray:
    arr = np.frombuffer(frame.data, dtype=np.uint8).reshape(frame.height * 3 // 2, frame.width)
    return cv2.cvtColor(arr, code)


def _register_conversions() -> None:
    px = lambda f: f.pixels()  # noqa: E731
    table = {
        ConvertFormat.YUYV_TO_RGB: (Format.YUYV, lambda f: cv2.cvtColor(px(f), cv2.COLOR_YUV2RGB_YUYV)),
        ConvertFormat.YUYV_TO_BGR: (Format.YUYV, lambda f: cv2.cvtColor(px(f), cv2.COLOR_YUV2BGR_YUYV)),
        ConvertFormat.YUYV_TO_RGBA: (Format.YUYV, lambda f: cv2.cvtColor(px(f), cv2.COLOR_YUV2RGBA_YUYV)),
        ConvertFormat.YUYV_TO_BGRA: (Format.YUYV, lambda f: cv2.cvtColor(px(f), cv2.COLOR_YUV2BGRA_YUYV)),
        ConvertFormat.YUYV_TO_Y8: (Format.YUYV, lambda f: cv2.cvtColor(px(f), cv2.COLOR_YUV2GRAY_YUYV)),
        ConvertFormat.YUYV_TO_Y16: (
            Format.YUYV,
            lambda f: cv2.cvtColor(px(f), cv2.COLOR_YUV2GRAY_YUYV).astype(np.uint16) << 8,
        ),
        ConvertFormat.UYVY_TO_RGB: (Format.UYVY, lambda f: cv2.cvtColor(px(f), cv2.COLOR_YUV2RGB_UYVY)),
        ConvertFormat.I420_TO_RGB: (Format.I420, lambda f: _yuv420(f, cv2.COLOR_YUV2RGB_I420)),
        ConvertFormat.NV21_TO_RGB: (Format.NV21, lambda f: _yuv420(f, cv2.COLOR_YUV2RGB_NV21)),
        ConvertFormat.NV12_TO_RGB: (Format.NV12, lambda f: _yuv420(f, cv2.COLOR_YUV2RGB_NV12)),
        ConvertFormat.MJPG_TO_RGB: (Format.MJPG, lambda f: _decode_mjpg(f, cv2.COLOR_BGR2RGB)),
        ConvertFormat.MJPG_TO_BGR: (Format.MJPG, lambda f: _decode_mjpg(f, None)),
        ConvertFormat.MJPG_TO_BGRA: (Format.MJPG, lambda f: _decode_mjpg(f, cv2.COLOR_BGR2BGRA)),
        ConvertFormat.RGB_TO_BGR: (Format.RGB, lambda f: cv2.cvtColor(px(f), cv2.COLOR_RGB2BGR)),
        ConvertFormat.BGR_TO_RGB: (Format.BGR, lambda f: cv2.cvtColor(px(f), cv2.COLOR_BGR2RGB)),
        ConvertFormat.RGBA_TO_RGB: (Format.RGBA, lambda f: cv2.cvtColor(px(f), cv2.COLOR_RGBA2RGB)),
        ConvertFormat.BGRA_TO_BGR: (Format.BGRA, lambda f: cv2.cvtColor(px(f), cv2.COLOR_BGRA2BGR)),
        ConvertFormat.Y8_TO_RGB: (Format.Y8, lambda f: cv2.cvtColor(px(f), cv2.COLOR_GRAY2RGB)),
        ConvertFormat.Y16_TO_RGB: (
            Format.Y16,
            lambda f: cv2.cvtColor((px(f) >> 8).astype(np.uint8), cv2.COLOR_GRAY2RGB),
        ),
    }
    _CONVERSIONS.update(table)


_register_conversions()


def convert_processor(flt: SoftwareFilter, frame: SoftwareFrame) -> SoftwareFrame:
    convert = ConvertFormat(int(flt.values["convertType"]))
    entry = _CONVERSIONS.get(convert)
    if entry is None:
        raise SoftwareFault(
            ExceptionType.UNSUPPORTED_OPERATION,
            f"Conversion {convert.name} is not supported",
            "FormatConverter::process",
        )
    source, func = entry
    if frame.format != source:
        raise SoftwareFault(
            ExceptionType.INVALID_VALUE,
            f"{convert.name} expects {source.name} input, got {frame.format.name}",
            "FormatConverter::process",
        )
    out = np.ascontiguousarray(func(frame))
    return frame.copy(format=convert.target, data=out.tobytes())


def point_cloud_processor(flt: SoftwareFilter, frame: SoftwareFrame) -> SoftwareFrame:
    fn = "PointCloudFilter::process"
    depth = frame.frames.get(FrameType.DEPTH) if frame.frame_type == FrameType.SET else frame
    point_format = Format(int(flt.values["pointFormat"]))
    scale = flt.values["coordinateDataScale"]

    intr = (depth.profile.intrinsic if depth.profile is not None else None) or default_intrinsic(
        depth.width, depth.height
    )
    mm = depth.pixels().astype(np.float32) * depth.value_scale
    h, w = mm.shape
    us, vs = np.meshgrid(np.arange(w, dtype=np.float32), np.arange(h, dtype=np.float32))
    xs = (us - intr["cx"]) * mm / intr["fx"]
    ys = (vs - intr["cy"]) * mm / intr["fy"]
    if int(flt.values["coordinateSystemType"]) == CoordinateSystem.LEFT_HAND:
        ys = -ys
    xyz = np.stack((xs, ys, mm), axis=-1).reshape(-1, 3) * scale

    if point_format == Format.RGB_POINT:
        color = frame.frames.get(FrameType.COLOR) if frame.frame_type == FrameType.SET else None
        if color is None:
            raise SoftwareFault(
                ExceptionType.INVALID_VALUE, "RGB point cloud requires a color frame", fn
            )
        rgb = _color_as_rgb(color)
        if rgb.shape[:2] != (h, w):
            rgb = cv2.resize(rgb, (w, h), interpolation=cv2.INTER_NEAREST)
        rgb = rgb.reshape(-1, 3).astype(np.float32)
        if flt.values["colorDataNormalization"]:
            rgb /= 255.0
        points = np.concatenate((xyz, rgb), axis=1)
    else:
        points = xyz

    return SoftwareFrame(
        frame_type=FrameType.POINTS,
        format=point_format,
        data=np.ascontiguousarray(points, dtype=np.float32).tobytes(),
        index=depth.index,
        timestamp_us=depth.timestamp_us,
        system_timestamp_us=depth.system_timestamp_us,
        global_timestamp_us=depth.global_timestamp_us,
        width=w,
        height=h,
        coordinate_scale=1.0 / scale,
    )


def _color_as_rgb(frame: SoftwareFrame) -> np.ndarray:
    if frame.format == Format.MJPG:
        return _decode_mjpg(frame, cv2.COLOR_BGR2RGB)
    if frame.format == Format.RGB:
        return frame.pixels()
    if frame.format == Format.BGR:
        return cv2.cvtColor(frame.pixels(), cv2.COLOR_BGR2RGB)
    raise SoftwareFault(
        ExceptionType.UNSUPPORTED_OPERATION,
        f"Color format {frame.format.name} is not supported for RGB points",
        "PointCloudFilter::process",
    )


def align_processor(flt: SoftwareFilter, frame: SoftwareFrame) -> SoftwareFrame:
    return frame.copy()


_I = FilterConfigValueType.INT
_F = FilterConfigValueType.FLOAT
_B = FilterConfigValueType.BOOL


def builtin_filters() -> Dict[str, FilterSpec]:
    return {
        "DecimationFilter": FilterSpec(
            [SchemaItem("decimate", _I, 1, 8, 1, 1, "Decimation factor")],
            copy_processor,
            _video_input,
        ),
        "FormatConverter": FilterSpec(
            [SchemaItem("convertType", _I, 0, 21, 1, 0, "Conversion type")],
            convert_processor,
            _video_input,
        ),
        "HoleFillingFilter": FilterSpec(
            [SchemaItem("hole_filling_mode", _I, 0, 2, 1, 2, "Hole filling mode")],
            copy_processor,
            _depth_input,
        ),
        "TemporalFilter": FilterSpec(
            [
                SchemaItem("diff_scale", _F, 0.1, 0.5, 0.01, 0.1, "Diff threshold"),
                SchemaItem("weight", _F, 0.1, 1.0, 0.01, 0.4, "Weight"),
            ],
            copy_processor,
            _depth_input,
        ),
        "SpatialFastFilter": FilterSpec(
            [SchemaItem("radius", _I, 3, 6, 1, 3, "Window radius")],
            copy_processor,
            _depth_input,
        ),
        "SpatialModerateFilter": FilterSpec(
            [
                SchemaItem("radius", _I, 3, 7, 1, 3, "Window radius"),
                SchemaItem("magnitude", _I, 1, 3, 1, 1, "Iterations"),
                SchemaItem("disp_diff", _I, 1, 10000, 1, 160, "Disparity difference"),
            ],
            copy_processor,
            _depth_input,
        ),
        "SpatialAdvancedFilter": FilterSpec(
            [
                SchemaItem("alpha", _F, 0.01, 1.0, 0.01, 0.5, "Smoothing factor"),
                SchemaItem("disp_diff", _I, 1, 10000, 1, 160, "Disparity difference"),
                SchemaItem("radius", _I, 0, 8, 1, 1, "Hole fill radius"),
                SchemaItem("magnitude", _I, 1, 5, 1, 1, "Iterations"),
            ],
            copy_processor,
            _depth_input,
        ),
        "ThresholdFilter": FilterSpec(
            [
                SchemaItem("min", _I, 0, 16000, 1, 0, "Minimum depth"),
                SchemaItem("max", _I, 0, 16000, 1, 16000, "Maximum depth"),
            ],
            copy_processor,
            _depth_input,
        ),
        "Align": FilterSpec(
            [
                SchemaItem("AlignType", _I, -1, 9, 1, int(StreamType.COLOR), "Target stream type"),
                SchemaItem("TargetDistortion", _B, 0, 1, 1, 0, "Add target distortion"),
                SchemaItem("GapFillCopy", _B, 0, 1, 1, 1, "Gap fill copy"),
                SchemaItem("MatchTargetRes", _B, 0, 1, 1, 1, "Match target resolution"),
            ],
            align_processor,
        ),
        "PointCloudFilter": FilterSpec(
            [
                SchemaItem("pointFormat", _I, 19, 20, 1, int(Format.POINT), "Point format"),
                SchemaItem("coordinateDataScale", _F, 0.001, 100.0, 0.001, 1.0, "Coordinate scale"),
                SchemaItem("colorDataNormalization", _B, 0, 1, 1, 0, "Normalize colors"),
                SchemaItem("coordinateSystemType", _I, 0, 1, 1, 1, "Coordinate system"),
            ],
            point_cloud_processor,
            _depth_or_set,
        ),
    }


# Runtime ------------------------------------------------------------------


class SoftwareRuntime:
    """Devices, filters and log sinks of one in-process SDK runtime."""

    def __init__(self) -> None:
        self.devices: List[SoftwareDevice] = []
        self.filters: Dict[str, FilterSpec] = builtin_filters()
        self.log_severity = LogSeverity.INFO
        self.console_severity = LogSeverity.OFF
        self.file_severity = LogSeverity.OFF
        self.log_directory: Optional[Path] = None
        self._log_callback: Optional[Tuple[LogSeverity, Callable[..., None]]] = None
        self._log_lock = threading.Lock()

    def add_device(self, **kwargs: Any) -> SoftwareDevice:
        device = SoftwareDevice(self, **kwargs)
        self.devices.append(device)
        return device

    def add_default_device(self, **kwargs: Any) -> SoftwareDevice:
        """A device resembling a Gemini 3xx camera."""
        kwargs.setdefault("name", "Orbbec Gemini 335 (software)")
        device = self.add_device(**kwargs)
        for w, h, fps in ((848, 480, 15), (848, 480, 30), (1280, 800, 15), (640, 400, 15)):
            device.add_profile(SensorType.DEPTH, w, h, Format.Y16, fps)
        for w, h, fmt, fps in (
            (1280, 720, Format.MJPG, 15),
            (1280, 720, Format.RGB, 15),
            (1280, 720, Format.MJPG, 30),
            (640, 480, Format.RGB, 30),
            (1920, 1080, Format.MJPG, 15),
        ):
            device.add_profile(SensorType.COLOR, w, h, fmt, fps)
        device.add_profile(SensorType.IR_LEFT, 848, 480, Format.Y8, 15)
        device.add_profile(SensorType.IR_RIGHT, 848, 480, Format.Y8, 15)

        device.add_property(DeviceProperty.LDP, True)
        device.add_property(DeviceProperty.Laser, True)
        device.add_property(DeviceProperty.LaserCurrent, 300.0, minimum=0.0, maximum=1000.0)
        device.add_property(DeviceProperty.MinDepth, 0, minimum=0, maximum=65535)
        device.add_property(DeviceProperty.MaxDepth, 65535, minimum=0, maximum=65535)
        device.add_property(DeviceProperty.DepthNoiseRemovalFilter, False)
        device.add_property(DeviceProperty.DepthNoiseRemovalFilterMaxDiff, 256, minimum=0, maximum=65535)
        device.add_property(
            DeviceProperty.DepthNoiseRemovalFilterMaxSpeckleSize, 480, minimum=0, maximum=65535
        )
        device.add_property(DeviceProperty.DepthPrecisionLevel, 0, minimum=0, maximum=5)
        device.add_property(DeviceProperty.ColorAutoExposure, True)
        device.add_property(DeviceProperty.ColorExposure, 156, minimum=1, maximum=10000)
        device.add_property(DeviceProperty.ColorGain, 16, minimum=0, maximum=255)
        device.add_property(DeviceProperty.DepthAutoExposure, True)
        device.add_property(DeviceProperty.DepthExposure, 3000, minimum=20, maximum=66000)
        device.add_property(DeviceProperty.DepthGain, 16, minimum=16, maximum=248)
        device.add_property(DeviceProperty.DepthUnitFlexibleAdjustment, 1.0, minimum=0.001, maximum=10.0)
        device.add_property(
            DeviceProperty.DeviceInRecoveryMode, False, permission=PermissionType.READ
        )

        device.add_preset("Default", [DeviceProperty.DepthPrecisionLevel(0)])
        device.add_preset(
            "High Accuracy",
            [DeviceProperty.DepthPrecisionLevel(1), DeviceProperty.DepthNoiseRemovalFilter(True)],
        )
        device.add_preset("Hand", [DeviceProperty.DepthPrecisionLevel(2)])
        device.add_preset("High Density", [DeviceProperty.DepthPrecisionLevel(3)])
        return device

    def find_profile(self, device: SoftwareDevice, profile: SoftwareProfile) -> SoftwareProfile:
        """Return the declared profile object equal to ``profile``."""
        for profiles in device.sensors.values():
            for p in profiles:
                if p == profile:
                    return p
        return profile

    def register_filter(
        self,
        name: str,
        processor: Processor,
        schema: Iterable[SchemaItem] | None = None,
        accepts: Callable[[SoftwareFrame], bool] | None = None,
    ) -> None:
        """Install or override the processor (and optionally schema) of ``name``."""
        current = self.filters.get(name)
        items = list(schema) if schema is not None else (current.schema if current else [])
        check = accepts or (current.accepts if current else (lambda frame: True))
        self.filters[name] = FilterSpec(items, processor, check)

    def remove_filter(self, name: str) -> None:
        """Make ``name`` absent from this runtime, like a build without it."""
        self.filters.pop(name, None)

    # logging -----------------------------------------------------------
    def set_log_callback(self, severity: LogSeverity, callback: Optional[Callable[..., None]]) -> None:
        with self._log_lock:
            self._log_callback = None if callback is None else (severity, callback)

    def log(self, severity: LogSeverity, message: str) -> None:
        if severity < self.log_severity or severity == LogSeverity.OFF:
            return
        with self._log_lock:
            sink = self._log_callback
        if sink is not None and severity >= sink[0]:
            sink[1](int(severity), message, None)
        if severity >= self.console_severity:
            print(f"[{severity.name}] {message}", file=sys.stderr)
        if self.log_directory is not None and severity >= self.file_severity:
            self.log_directory.mkdir(parents=True, exist_ok=True)
            with open(self.log_directory / "OrbbecSDK.log.txt", "a") as f:
                f.write(f"[{severity.name}] {message}\n")


class _Context:
    def __init__(self, runtime: SoftwareRuntime) -> None:
        self.runtime = runtime
        self.alive = True


def _fault_if_not(cond: bool, kind: ExceptionType, message: str, function: str) -> None:
    if not cond:
        raise SoftwareFault(kind, message, function)


def _expect(obj: Any, cls: type, function: str) -> Any:
    if not isinstance(obj, cls):
        raise SoftwareFault(
            ExceptionType.INVALID_VALUE,
            f"Expected {cls.__name__}, got {type(obj).__name__}",
            function,
        )
    return obj


def _video(frame: Any, function: str) -> SoftwareFrame:
    frame = _expect(frame, SoftwareFrame, function)
    _fault_if_not(
        frame.is_video, ExceptionType.UNSUPPORTED_OPERATION, "Frame is not a video frame", function
    )
    return frame


class SoftwareBackend(NativeBackend):
    """:class:`NativeBackend` served by a :class:`SoftwareRuntime`."""

    name = "software"

    def __init__(self, runtime: SoftwareRuntime | None = None) -> None:
        if runtime is None:
            runtime = SoftwareRuntime()
            runtime.add_default_device(autostream=True)
        self.runtime = runtime

    def invoke(self, function: str, *args: Any) -> Tuple[Any, Optional[ErrorRecord]]:
        impl = getattr(self, function, None) if function.startswith("ob_") else None
        if impl is None:
            return None, ErrorRecord(
                ExceptionType.NOT_IMPLEMENTED, f"{function} is not available", function
            )
        try:
            return impl(*args), None
        except SoftwareFault as fault:
            return None, fault.record

    def frame_callback(self, func: FrameCallback) -> Any:
        def _trampoline(frame: Any, user_data: Any) -> None:
            func(NativeHandle(self, frame, "ob_delete_frame"))

        return _trampoline

    def log_callback(self, func: LogCallback) -> Any:
        def _trampoline(severity: int, message: str, user_data: Any) -> None:
            func(LogSeverity(severity), message)

        return _trampoline

    def read_bytes(self, pointer: Any, size: int) -> bytes:
        return bytes(pointer[:size])

    # context -----------------------------------------------------------
    def ob_create_context(self) -> _Context:
        return _Context(self.runtime)

    def ob_delete_context(self, ctx: _Context) -> None:
        ctx.alive = False

    def ob_query_device_list(self, ctx: _Context) -> List[SoftwareDevice]:
        _fault_if_not(
            ctx.alive, ExceptionType.WRONG_API_CALL_SEQUENCE, "Context released", "Context::queryDeviceList"
        )
        return [d for d in ctx.runtime.devices if d.connected]

    def ob_delete_device_list(self, devices: List[SoftwareDevice]) -> None:
        pass

    def ob_device_list_get_count(self, devices: List[SoftwareDevice]) -> int:
        return len(devices)

    def ob_device_list_get_device(self, devices: List[SoftwareDevice], index: int) -> SoftwareDevice:
        if not 0 <= index < len(devices):
            raise SoftwareFault(
                ExceptionType.INVALID_VALUE,
                f"Index {index} out of range, device count {len(devices)}",
                "DeviceList::getDevice",
                f"index={index}",
            )
        device = devices[index]
        device.check_connected("DeviceList::getDevice")
        return device

    # device ------------------------------------------------------------
    def ob_delete_device(self, device: SoftwareDevice) -> None:
        pass

    def ob_device_get_device_info(self, device: SoftwareDevice) -> _DeviceInfo:
        device.check_connected("Device::getDeviceInfo")
        return device.info

    def ob_delete_device_info(self, info: _DeviceInfo) -> None:
        pass

    def ob_device_info_get_name(self, info: _DeviceInfo) -> str:
        return info.name

    def ob_device_info_get_pid(self, info: _DeviceInfo) -> int:
        return info.pid

    def ob_device_info_get_vid(self, info: _DeviceInfo) -> int:
        return info.vid

    def ob_device_info_get_uid(self, info: _DeviceInfo) -> str:
        return info.uid

    def ob_device_info_get_serial_number(self, info: _DeviceInfo) -> str:
        return info.serial_number

    def ob_device_info_get_firmware_version(self, info: _DeviceInfo) -> str:
        return info.firmware_version

    def ob_device_info_get_hardware_version(self, info: _DeviceInfo) -> str:
        return info.hardware_version

    def ob_device_info_get_connection_type(self, info: _DeviceInfo) -> str:
        return info.connection_type

    def ob_device_info_get_supported_min_sdk_version(self, info: _DeviceInfo) -> str:
        return info.supported_min_sdk_version

    def ob_device_info_get_asicName(self, info: _DeviceInfo) -> str:
        return info.asic_name

    def ob_device_info_get_device_type(self, info: _DeviceInfo) -> int:
        return int(info.device_type)

    def ob_device_is_property_supported(self, device: SoftwareDevice, prop_id: int, permission: int) -> bool:
        device.check_connected("Device::isPropertySupported")
        slot = device.properties.get(prop_id)
        return slot is not None and slot.permission.allows(PermissionType(permission))

    def ob_device_set_bool_property(self, device: SoftwareDevice, prop_id: int, value: bool) -> None:
        device.set_property(prop_id, bool, value, "Device::setBoolProperty")

    def ob_device_get_bool_property(self, device: SoftwareDevice, prop_id: int) -> bool:
        return device.get_property(prop_id, bool, "Device::getBoolProperty")

    def ob_device_set_int_property(self, device: SoftwareDevice, prop_id: int, value: int) -> None:
        device.set_property(prop_id, int, value, "Device::setIntProperty")

    def ob_device_get_int_property(self, device: SoftwareDevice, prop_id: int) -> int:
        return device.get_property(prop_id, int, "Device::getIntProperty")

    def ob_device_set_float_property(self, device: SoftwareDevice, prop_id: int, value: float) -> None:
        device.set_property(prop_id, float, value, "Device::setFloatProperty")

    def ob_device_get_float_property(self, device: SoftwareDevice, prop_id: int) -> float:
        return device.get_property(prop_id, float, "Device::getFloatProperty")

    def ob_device_load_preset(self, device: SoftwareDevice, name: str) -> None:
        device.load_preset(name)

    # stream profiles ---------------------------------------------------
    def ob_stream_profile_list_get_count(self, profiles: Tuple[SoftwareProfile, ...]) -> int:
        return len(profiles)

    def ob_stream_profile_list_get_profile(
        self, profiles: Tuple[SoftwareProfile, ...], index: int
    ) -> SoftwareProfile:
        if not 0 <= index < len(profiles):
            raise SoftwareFault(
                ExceptionType.INVALID_VALUE,
                f"Index {index} out of range, profile count {len(profiles)}",
                "StreamProfileList::getProfile",
                f"index={index}",
            )
        return profiles[index]

    def ob_stream_profile_list_get_video_stream_profile(
        self, profiles: Tuple[SoftwareProfile, ...], width: int, height: int, fmt: int, fps: int
    ) -> SoftwareProfile:
        for profile in profiles:
            if (profile.width, profile.height, int(profile.format), profile.fps) == (
                width,
                height,
                fmt,
                fps,
            ):
                return profile
        raise SoftwareFault(
            ExceptionType.INVALID_VALUE,
            "Invalid input, No matched video stream profile found!",
            "StreamProfileList::getVideoStreamProfile",
            f"width={width}, height={height}, format={fmt}, fps={fps}",
        )

    def ob_delete_stream_profile_list(self, profiles: Tuple[SoftwareProfile, ...]) -> None:
        pass

    def ob_delete_stream_profile(self, profile: SoftwareProfile) -> None:
        pass

    def ob_stream_profile_get_format(self, profile: SoftwareProfile) -> int:
        return int(profile.format)

    def ob_stream_profile_get_type(self, profile: SoftwareProfile) -> int:
        return int(profile.stream_type)

    def ob_video_stream_profile_get_width(self, profile: SoftwareProfile) -> int:
        return profile.width

    def ob_video_stream_profile_get_height(self, profile: SoftwareProfile) -> int:
        return profile.height

    def ob_video_stream_profile_get_fps(self, profile: SoftwareProfile) -> int:
        return profile.fps

    def ob_video_stream_profile_get_intrinsic(self, profile: SoftwareProfile) -> Dict[str, float]:
        return dict(profile.intrinsic)

    # config ------------------------------------------------------------
    def ob_create_config(self) -> _Config:
        return _Config()

    def ob_delete_config(self, config: _Config) -> None:
        pass

    def ob_config_enable_stream_with_stream_profile(self, config: _Config, profile: SoftwareProfile) -> None:
        _expect(profile, SoftwareProfile, "Config::enableStream")
        config.profiles = [p for p in config.profiles if p.stream_type != profile.stream_type]
        config.profiles.append(profile)

    def ob_config_set_align_mode(self, config: _Config, mode: int) -> None:
        config.align_mode = self._enum(AlignMode, mode, "Config::setAlignMode")

    def ob_config_set_depth_scale_after_align_require(self, config: _Config, enable: bool) -> None:
        config.depth_scale_after_align = bool(enable)

    def ob_config_set_frame_aggregate_output_mode(self, config: _Config, mode: int) -> None:
        config.aggregate_mode = self._enum(
            FrameAggregateOutputMode, mode, "Config::setFrameAggregateOutputMode"
        )

    @staticmethod
    def _enum(cls: type, value: int, function: str) -> Any:
        try:
            return cls(value)
        except ValueError:
            raise SoftwareFault(
                ExceptionType.INVALID_VALUE, f"Invalid {cls.__name__} value {value}", function
            ) from None

    # pipeline ----------------------------------------------------------
    def ob_create_pipeline_with_device(self, device: SoftwareDevice) -> SoftwarePipeline:
        device.check_connected("Pipeline::Pipeline")
        return SoftwarePipeline(self.runtime, device)

    def ob_delete_pipeline(self, pipeline: SoftwarePipeline) -> None:
        pipeline.stop()

    def ob_pipeline_start_with_config(self, pipeline: SoftwarePipeline, config: _Config) -> None:
        pipeline.start(config, None)

    def ob_pipeline_start_with_callback(
        self, pipeline: SoftwarePipeline, config: _Config, callback: Callable[[Any, Any], None], user_data: Any
    ) -> None:
        pipeline.start(config, callback)

    def ob_pipeline_stop(self, pipeline: SoftwarePipeline) -> None:
        pipeline.stop()

    def ob_pipeline_wait_for_frameset(self, pipeline: SoftwarePipeline, timeout_ms: int) -> Optional[SoftwareFrame]:
        return pipeline.wait(timeout_ms)

    def ob_pipeline_enable_frame_sync(self, pipeline: SoftwarePipeline) -> None:
        pipeline.frame_sync = True

    def ob_pipeline_disable_frame_sync(self, pipeline: SoftwarePipeline) -> None:
        pipeline.frame_sync = False

    def ob_pipeline_get_stream_profile_list(
        self, pipeline: SoftwarePipeline, sensor: int
    ) -> Tuple[SoftwareProfile, ...]:
        fn = "Pipeline::getStreamProfileList"
        pipeline.device.check_connected(fn)
        sensor_type = self._enum(SensorType, sensor, fn)
        profiles = pipeline.device.sensors.get(sensor_type)
        if profiles is None:
            raise SoftwareFault(
                ExceptionType.INVALID_VALUE,
                f"Sensor {sensor_type.name} not found on device",
                fn,
                f"sensorType={sensor}",
            )
        return tuple(profiles)

    def ob_pipeline_get_device(self, pipeline: SoftwarePipeline) -> SoftwareDevice:
        pipeline.device.check_connected("Pipeline::getDevice")
        return pipeline.device

    def ob_get_d2c_depth_profile_list(
        self, pipeline: SoftwarePipeline, color: SoftwareProfile, mode: int
    ) -> Tuple[SoftwareProfile, ...]:
        fn = "Pipeline::getD2CDepthProfileList"
        pipeline.device.check_connected(fn)
        align_mode = self._enum(AlignMode, mode, fn)
        _fault_if_not(
            align_mode != AlignMode.DISABLE,
            ExceptionType.INVALID_VALUE,
            "Align mode must be HW or SW",
            fn,
        )
        _fault_if_not(
            color.stream_type == StreamType.COLOR,
            ExceptionType.INVALID_VALUE,
            "Target profile must be a color profile",
            fn,
        )
        declared = self.runtime.find_profile(pipeline.device, color)
        return tuple(pipeline.device.d2c_profiles(declared, align_mode))

    # frames ------------------------------------------------------------
    def ob_delete_frame(self, frame: SoftwareFrame) -> None:
        pass

    def ob_frame_get_index(self, frame: SoftwareFrame) -> int:
        return frame.index

    def ob_frame_get_format(self, frame: SoftwareFrame) -> int:
        return int(frame.format)

    def ob_frame_get_type(self, frame: SoftwareFrame) -> int:
        return int(frame.frame_type)

    def ob_frame_get_data(self, frame: SoftwareFrame) -> bytes:
        return frame.data

    def ob_frame_get_data_size(self, frame: SoftwareFrame) -> int:
        return len(frame.data)

    def ob_frame_get_timestamp_us(self, frame: SoftwareFrame) -> int:
        return frame.timestamp_us

    def ob_frame_get_system_timestamp_us(self, frame: SoftwareFrame) -> int:
        return frame.system_timestamp_us

    def ob_frame_get_global_timestamp_us(self, frame: SoftwareFrame) -> int:
        return frame.global_timestamp_us

    def ob_video_frame_get_width(self, frame: SoftwareFrame) -> int:
        return _video(frame, "VideoFrame::getWidth").width

    def ob_video_frame_get_height(self, frame: SoftwareFrame) -> int:
        return _video(frame, "VideoFrame::getHeight").height

    def ob_depth_frame_get_value_scale(self, frame: SoftwareFrame) -> float:
        fn = "DepthFrame::getValueScale"
        _fault_if_not(
            frame.frame_type == FrameType.DEPTH,
            ExceptionType.UNSUPPORTED_OPERATION,
            "Frame is not a depth frame",
            fn,
        )
        return frame.value_scale

    def ob_points_frame_get_coordinate_value_scale(self, frame: SoftwareFrame) -> float:
        _fault_if_not(
            frame.frame_type == FrameType.POINTS,
            ExceptionType.UNSUPPORTED_OPERATION,
            "Frame is not a points frame",
            "PointsFrame::getCoordinateValueScale",
        )
        return frame.coordinate_scale

    def ob_point_cloud_frame_get_width(self, frame: SoftwareFrame) -> int:
        return frame.width

    def ob_point_cloud_frame_get_height(self, frame: SoftwareFrame) -> int:
        return frame.height

    def _sub_frame(self, frameset: SoftwareFrame, frame_type: FrameType, function: str) -> Optional[SoftwareFrame]:
        _fault_if_not(
            frameset.frame_type == FrameType.SET,
            ExceptionType.UNSUPPORTED_OPERATION,
            "Frame is not a frameset",
            function,
        )
        return frameset.frames.get(frame_type)

    def ob_frameset_get_depth_frame(self, frameset: SoftwareFrame) -> Optional[SoftwareFrame]:
        return self._sub_frame(frameset, FrameType.DEPTH, "FrameSet::getDepthFrame")

    def ob_frameset_get_color_frame(self, frameset: SoftwareFrame) -> Optional[SoftwareFrame]:
        return self._sub_frame(frameset, FrameType.COLOR, "FrameSet::getColorFrame")

    def ob_frameset_get_points_frame(self, frameset: SoftwareFrame) -> Optional[SoftwareFrame]:
        return self._sub_frame(frameset, FrameType.POINTS, "FrameSet::getPointsFrame")

    # filters -----------------------------------------------------------
    def ob_create_filter(self, name: str) -> Optional[SoftwareFilter]:
        spec = self.runtime.filters.get(name)
        if spec is None:
            return None
        self.runtime.log(LogSeverity.DEBUG, f"Filter {name} created")
        return SoftwareFilter(name, spec)

    def ob_delete_filter(self, flt: SoftwareFilter) -> None:
        pass

    def ob_filter_get_name(self, flt: SoftwareFilter) -> str:
        return flt.name

    def ob_filter_process(self, flt: SoftwareFilter, frame: SoftwareFrame) -> SoftwareFrame:
        return flt.process(_expect(frame, SoftwareFrame, "Filter::process"))

    def ob_filter_reset(self, flt: SoftwareFilter) -> None:
        flt.state.clear()

    def ob_filter_get_config_value(self, flt: SoftwareFilter, key: str) -> float:
        flt.item(key, "Filter::getConfigValue")
        return flt.values[key]

    def ob_filter_set_config_value(self, flt: SoftwareFilter, key: str, value: float) -> None:
        flt.set_value(key, float(value))

    def ob_filter_get_config_schema_list(self, flt: SoftwareFilter) -> Tuple[SchemaItem, ...]:
        return tuple(flt.spec.schema)

    def ob_filter_config_schema_list_get_count(self, schema: Tuple[SchemaItem, ...]) -> int:
        return len(schema)

    def ob_filter_config_schema_list_get_item(self, schema: Tuple[SchemaItem, ...], index: int) -> Dict[str, Any]:
        if not 0 <= index < len(schema):
            raise SoftwareFault(
                ExceptionType.INVALID_VALUE,
                f"Index {index} out of range",
                "FilterConfigSchemaList::getItem",
            )
        item = asdict(schema[index])
        item["type"] = int(item["type"])
        return item

    def ob_delete_filter_config_schema_list(self, schema: Tuple[SchemaItem, ...]) -> None:
        pass

    def ob_align_filter_set_align_to_stream_profile(self, flt: SoftwareFilter, profile: SoftwareProfile) -> None:
        fn = "Align::setAlignToStreamProfile"
        _fault_if_not(
            flt.name == "Align", ExceptionType.UNSUPPORTED_OPERATION, "Not an align filter", fn
        )
        flt.align_to = _expect(profile, SoftwareProfile, fn)
        flt.values["AlignType"] = float(int(profile.stream_type))

    # logger ------------------------------------------------------------
    def ob_set_logger_severity(self, severity: int) -> None:
        self.runtime.log_severity = self._enum(LogSeverity, severity, "Logger::setSeverity")

    def ob_set_logger_to_file(self, severity: int, directory: Optional[str]) -> None:
        self.runtime.file_severity = self._enum(LogSeverity, severity, "Logger::setToFile")
        if directory:
            self.runtime.log_directory = Path(directory)

    def ob_set_logger_to_console(self, severity: int) -> None:
        self.runtime.console_severity = self._enum(LogSeverity, severity, "Logger::setToConsole")

    def ob_set_logger_to_callback(self, severity: int, callback: Any, user_data: Any) -> None:
        level = self._enum(LogSeverity, severity, "Logger::setToCallback")
        self.runtime.set_log_callback(level, callback)


__all__ = [
    "SoftwareBackend",
    "SoftwareRuntime",
    "SoftwareDevice",
    "SoftwareProfile",
    "SoftwareFrame",
    "SoftwareFilter",
    "SchemaItem",
    "FilterSpec",
    "SoftwareFault",
    "copy_processor",
    "default_intrinsic",
    "synthetic_image",
]
