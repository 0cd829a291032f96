# cli/session.py
"""Shared camera session used by the capture commands."""

from __future__ import annotations

from typing import Iterator, Optional

from orbbec import (
    AlignMode,
    Config as StreamConfig,
    Context,
    Device,
    FrameSet,
    LoggerCallbackHandle,
    LogSeverity,
    Pipeline,
    SdkLogger,
    SensorType,
    VideoStreamProfile,
)
from orbbec.sys import NativeBackend
from utils.config import Config
from utils.error_tracker import CameraConnectionError, ErrorTracker
from utils.logger import Logger, LoggerType
from utils.settings import SdkCfg, StreamCfg, paths, sdk, stream


class CameraSession:
    """Context, device and pipeline opened together and closed together.

    ``close`` is registered with :class:`ErrorTracker` so an interrupted
    capture still releases the camera.
    """

    def __init__(
        self,
        backend: NativeBackend | str | None = None,
        device_index: int = 0,
        logger: LoggerType | None = None,
    ) -> None:
        self.logger = logger or Logger.get_logger("cli.session")
        self.cfg: StreamCfg = Config.section("stream", stream)
        self.sdk_cfg: SdkCfg = Config.section("sdk", sdk)
        self.timeout_ms = int(self.sdk_cfg.wait_timeout_ms)
        self.pipeline: Pipeline | None = None
        self._log_handle: LoggerCallbackHandle | None = None
        self.context = Context(backend)
        self.backend = self.context.backend
        try:
            self._open(device_index)
        except Exception:
            self.close()
            raise
        ErrorTracker.register_cleanup(self.close)

    def _open(self, device_index: int) -> None:
        self._log_handle = SdkLogger.forward_to(
            Logger.sdk_logger(), LogSeverity[self.sdk_cfg.sdk_log_severity.upper()], self.backend
        )
        file_severity = LogSeverity[self.sdk_cfg.sdk_file_severity.upper()]
        if file_severity != LogSeverity.OFF:
            SdkLogger.set_directory(file_severity, paths.SDK_LOG_DIR, self.backend)
        devices = self.context.query_device_list()
        if len(devices) == 0:
            raise CameraConnectionError("No Orbbec devices found")
        self.device: Device = devices.get(device_index)
        self.logger.info(f"Using {self.device.info()}")
        self.pipeline = Pipeline(self.device)
        self.config = StreamConfig(self.backend)

    def depth_profile(self) -> VideoStreamProfile:
        profiles = self.pipeline.get_stream_profiles(SensorType.DEPTH)
        return profiles.match(
            self.cfg.depth_width, self.cfg.depth_height, self.cfg.depth_format, self.cfg.fps
        )

    def color_profile(self) -> VideoStreamProfile:
        profiles = self.pipeline.get_stream_profiles(SensorType.COLOR)
        return profiles.match(
            self.cfg.color_width, self.cfg.color_height, self.cfg.color_format, self.cfg.fps
        )

    def align_mode(self) -> AlignMode:
        return AlignMode[self.cfg.align_mode.upper()]

    def start(self, *profiles: VideoStreamProfile, frame_sync: Optional[bool] = None) -> None:
        for profile in profiles:
            self.config.enable_stream(profile)
            self.logger.debug(f"Enabled {profile}")
        self.config.set_align_mode(self.align_mode())
        sync = self.cfg.frame_sync if frame_sync is None else frame_sync
        self.pipeline.set_frame_sync(sync)
        self.pipeline.start(self.config)

    def framesets(self, count: int, desc: str = "frames") -> Iterator[FrameSet]:
        """Yield ``count`` framesets; timeouts are retried, not counted."""
        for _ in Logger.progress(range(count), desc=desc, total=count):
            frameset = None
            while frameset is None:
                frameset = self.pipeline.wait_for_frameset(self.timeout_ms)
                if frameset is None:
                    self.logger.debug("Timeout waiting for frames")
            yield frameset

    def close(self) -> None:
        ErrorTracker.unregister_cleanup(self.close)
        if self.pipeline is not None:
            self.pipeline.close()
            self.pipeline = None
        if self._log_handle is not None:
            self._log_handle.close()
            self._log_handle = None
        self.context.close()

    def __enter__(self) -> "CameraSession":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()
