"""Capture sessions and their configuration."""

from __future__ import annotations

import threading
from enum import Enum
from typing import Any, Callable, List, Optional

from orbbec.device import Device
from orbbec.enums import AlignMode, FrameAggregateOutputMode, SensorType
from orbbec.frame import FrameSet
from orbbec.stream import StreamProfile, StreamProfileList
from orbbec.sys import NativeBackend, NativeHandle, resolve_backend
from utils.logger import Logger
from utils.settings import sdk as SDKCFG

logger = Logger.get_logger("orbbec.pipeline")

FrameSetCallback = Callable[[FrameSet], None]


class Config:
    """Builder for what a :class:`Pipeline` streams and how it groups frames."""

    def __init__(self, backend: NativeBackend | str | None = None) -> None:
        backend = resolve_backend(backend)
        self._handle = backend.acquire("ob_create_config", "ob_delete_config")
        # Profiles stay referenced for as long as the config may be used.
        self._profiles: List[StreamProfile] = []

    @property
    def handle(self) -> NativeHandle:
        return self._handle

    def enable_stream(self, profile: StreamProfile) -> None:
        if not isinstance(profile, StreamProfile):
            raise TypeError(f"Expected StreamProfile, got {type(profile).__name__}")
        self._handle.call("ob_config_enable_stream_with_stream_profile", profile.handle.raw)
        self._profiles.append(profile)

    def set_align_mode(self, mode: AlignMode) -> None:
        self._handle.call("ob_config_set_align_mode", int(AlignMode(mode)))

    def set_depth_scale_after_align_require(self, enable: bool) -> None:
        self._handle.call("ob_config_set_depth_scale_after_align_require", bool(enable))

    def set_frame_aggregate_output_mode(self, mode: FrameAggregateOutputMode) -> None:
        self._handle.call(
            "ob_config_set_frame_aggregate_output_mode", int(FrameAggregateOutputMode(mode))
        )

    def close(self) -> None:
        self._handle.release()


class PipelineState(Enum):
    CREATED = "created"
    STARTED = "started"
    STOPPED = "stopped"
    CLOSED = "closed"


class Pipeline:
    """A capture session on one device.

    Frames are pulled with :meth:`wait_for_frameset` or pushed to the
    callback given to :meth:`start_with_callback`. Push delivery runs on a
    thread owned by the runtime; the callback is kept alive until
    :meth:`stop` or :meth:`close`, which also cancel future deliveries.
    """

    def __init__(self, device: Device) -> None:
        self._device = device
        backend = device.handle.backend
        self._handle = backend.acquire(
            "ob_create_pipeline_with_device", "ob_delete_pipeline", device.handle.raw
        )
        self._state = PipelineState.CREATED
        self._callback: Any = None
        self._lock = threading.Lock()

    @property
    def state(self) -> PipelineState:
        return self._state

    def get_device(self) -> Device:
        raw = self._handle.call("ob_pipeline_get_device")
        return Device(NativeHandle(self._handle.backend, raw, "ob_delete_device"))

    def get_stream_profiles(self, sensor: SensorType) -> StreamProfileList:
        raw = self._handle.call("ob_pipeline_get_stream_profile_list", int(SensorType(sensor)))
        return StreamProfileList(
            NativeHandle(self._handle.backend, raw, "ob_delete_stream_profile_list")
        )

    def get_d2c_depth_profiles(
        self, color_profile: StreamProfile, align_mode: AlignMode
    ) -> StreamProfileList:
        """Depth profiles that can be aligned to ``color_profile`` with ``align_mode``."""
        raw = self._handle.call(
            "ob_get_d2c_depth_profile_list", color_profile.handle.raw, int(AlignMode(align_mode))
        )
        return StreamProfileList(
            NativeHandle(self._handle.backend, raw, "ob_delete_stream_profile_list")
        )

    def set_frame_sync(self, enable: bool) -> None:
        if enable:
            self._handle.call("ob_pipeline_enable_frame_sync")
        else:
            self._handle.call("ob_pipeline_disable_frame_sync")

    def start(self, config: Config) -> None:
        with self._lock:
            self._handle.call("ob_pipeline_start_with_config", config.handle.raw)
            self._state = PipelineState.STARTED
        logger.info("Pipeline started")

    def start_with_callback(self, config: Config, callback: FrameSetCallback) -> None:
        """Start and deliver every frameset to ``callback``.

        ``callback`` runs on a runtime thread, not the caller's; protecting
        shared state is up to the caller. Exceptions it raises are logged
        since there is no caller to receive them.

        If the device disconnects, delivery ends without a final call and
        ``callback`` is not told; the runtime logs the disconnect at error
        severity (route it with :meth:`SdkLogger.set_callback` or
        :meth:`SdkLogger.forward_to`). ``stop`` still has to be called.
        """
        if not callable(callback):
            raise TypeError("callback must be callable")

        def _deliver(handle: NativeHandle) -> None:
            frameset = FrameSet(handle)
            try:
                callback(frameset)
            except Exception:
                logger.exception("Frameset callback raised")

        trampoline = self._handle.backend.frame_callback(_deliver)
        with self._lock:
            self._handle.call(
                "ob_pipeline_start_with_callback", config.handle.raw, trampoline, None
            )
            self._callback = trampoline
            self._state = PipelineState.STARTED
        logger.info("Pipeline started with callback")

    def wait_for_frameset(self, timeout_ms: int | None = None) -> Optional[FrameSet]:
        """Block up to ``timeout_ms``; ``None`` means no frameset arrived in time."""
        if timeout_ms is None:
            timeout_ms = SDKCFG.wait_timeout_ms
        handle = self._handle.backend.acquire_optional(
            "ob_pipeline_wait_for_frameset", "ob_delete_frame", self._handle.raw, int(timeout_ms)
        )
        return None if handle is None else FrameSet(handle)

    def stop(self) -> None:
        """Stop streaming; calling it on a pipeline that is not started does nothing."""
        with self._lock:
            if self._state != PipelineState.STARTED:
                return
            self._state = PipelineState.STOPPED
        # Not under the lock: the runtime joins its delivery thread here and
        # a callback may itself call stop().
        try:
            self._handle.call("ob_pipeline_stop")
        finally:
            self._callback = None
        logger.info("Pipeline stopped")

    def close(self) -> None:
        if self._state == PipelineState.CLOSED:
            return
        try:
            self.stop()
        finally:
            self._handle.release()
            self._state = PipelineState.CLOSED

    def __enter__(self) -> "Pipeline":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()
