"""Stream profiles and profile lists."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Tuple

import numpy as np

from orbbec.enums import Format, StreamType
from orbbec.error import InvalidValueError
from orbbec.sys import NativeHandle
from utils.logger import Logger

logger = Logger.get_logger("orbbec.stream")


@dataclass(frozen=True)
class CameraIntrinsic:
    fx: float
    fy: float
    cx: float
    cy: float
    width: int
    height: int

    def as_matrix(self) -> np.ndarray:
        """3x3 pinhole camera matrix."""
        return np.array(
            [[self.fx, 0.0, self.cx], [0.0, self.fy, self.cy], [0.0, 0.0, 1.0]],
            dtype=np.float64,
        )


class StreamProfile:
    """A negotiable capture format; immutable once obtained."""

    def __init__(self, handle: NativeHandle) -> None:
        self._handle = handle

    @property
    def handle(self) -> NativeHandle:
        return self._handle

    @property
    def format(self) -> Format:
        return Format(self._handle.call("ob_stream_profile_get_format"))

    @property
    def stream_type(self) -> StreamType:
        return StreamType(self._handle.call("ob_stream_profile_get_type"))

    def close(self) -> None:
        self._handle.release()


class VideoStreamProfile(StreamProfile):
    @property
    def width(self) -> int:
        return int(self._handle.call("ob_video_stream_profile_get_width"))

    @property
    def height(self) -> int:
        return int(self._handle.call("ob_video_stream_profile_get_height"))

    @property
    def fps(self) -> int:
        return int(self._handle.call("ob_video_stream_profile_get_fps"))

    @property
    def key(self) -> Tuple[int, int, Format, int]:
        return self.width, self.height, self.format, self.fps

    def get_intrinsic(self) -> CameraIntrinsic:
        raw = self._handle.call("ob_video_stream_profile_get_intrinsic")
        return CameraIntrinsic(
            fx=float(raw["fx"]),
            fy=float(raw["fy"]),
            cx=float(raw["cx"]),
            cy=float(raw["cy"]),
            width=int(raw["width"]),
            height=int(raw["height"]),
        )

    def __repr__(self) -> str:
        w, h, fmt, fps = self.key
        return f"VideoStreamProfile({w}x{h} {fmt.name} @{fps}fps)"


class StreamProfileList:
    """Profiles of one sensor in native enumeration order."""

    def __init__(self, handle: NativeHandle) -> None:
        self._handle = handle

    def __len__(self) -> int:
        return int(self._handle.call("ob_stream_profile_list_get_count"))

    def get(self, index: int) -> VideoStreamProfile:
        """Profile at ``index``; the runtime checks the bounds and reports InvalidValue."""
        raw = self._handle.call("ob_stream_profile_list_get_profile", index)
        return VideoStreamProfile(
            NativeHandle(self._handle.backend, raw, "ob_delete_stream_profile")
        )

    def __iter__(self) -> Iterator[VideoStreamProfile]:
        # Each iterator asks for the count afresh.
        for index in range(len(self)):
            yield self.get(index)

    def match(
        self, width: int, height: int, fmt: Format | str, fps: int
    ) -> VideoStreamProfile:
        """Exact lookup on all four fields.

        When several profiles match, the first one in native enumeration
        order wins. That order comes from the device firmware.
        """
        fmt = Format.parse(fmt)
        try:
            raw = self._handle.call(
                "ob_stream_profile_list_get_video_stream_profile",
                width,
                height,
                int(fmt),
                fps,
            )
        except InvalidValueError as e:
            raise InvalidValueError(
                f"{e.message} Requested {width}x{height} {fmt.name} @{fps}fps; "
                f"available: {self.describe()}",
                e.function,
                e.arguments,
            ) from e
        profile = VideoStreamProfile(
            NativeHandle(self._handle.backend, raw, "ob_delete_stream_profile")
        )
        wanted = (width, height, fmt, fps)
        duplicates = sum(1 for p in self if p.key == wanted)
        if duplicates > 1:
            logger.debug(f"{duplicates} profiles match {wanted}; using the first")
        return profile

    def describe(self) -> str:
        return ", ".join(
            f"{w}x{h} {fmt.name} @{fps}" for w, h, fmt, fps in (p.key for p in self)
        )

    def close(self) -> None:
        self._handle.release()
