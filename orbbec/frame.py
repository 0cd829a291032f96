"""Read-only views over captured or filter-produced buffers."""

from __future__ import annotations

from typing import Dict, Optional, Type

import cv2
import numpy as np

from orbbec.enums import PIXEL_LAYOUT, Format, FrameType
from orbbec.sys import NativeHandle


class Frame:
    """One buffer tagged with its role.

    Frames are owned views: the pixel data is copied out of the runtime on
    access, and the native frame is released on :meth:`close` or collection.
    """

    def __init__(self, handle: NativeHandle) -> None:
        self._handle = handle

    @classmethod
    def _from_handle(cls, handle: NativeHandle) -> "Frame":
        return cls(handle)

    @staticmethod
    def wrap(handle: NativeHandle) -> "Frame":
        """Build the class matching the frame type reported by the runtime."""
        frame_type = FrameType(handle.call("ob_frame_get_type"))
        return _BY_TYPE.get(frame_type, VideoFrame)(handle)

    @property
    def handle(self) -> NativeHandle:
        return self._handle

    @property
    def index(self) -> int:
        return int(self._handle.call("ob_frame_get_index"))

    @property
    def format(self) -> Format:
        return Format(self._handle.call("ob_frame_get_format"))

    @property
    def frame_type(self) -> FrameType:
        return FrameType(self._handle.call("ob_frame_get_type"))

    @property
    def timestamp_us(self) -> int:
        """Device clock timestamp."""
        return int(self._handle.call("ob_frame_get_timestamp_us"))

    @property
    def system_timestamp_us(self) -> int:
        return int(self._handle.call("ob_frame_get_system_timestamp_us"))

    @property
    def global_timestamp_us(self) -> int:
        return int(self._handle.call("ob_frame_get_global_timestamp_us"))

    @property
    def data_size(self) -> int:
        return int(self._handle.call("ob_frame_get_data_size"))

    @property
    def data(self) -> bytes:
        size = self.data_size
        pointer = self._handle.call("ob_frame_get_data")
        return self._handle.backend.read_bytes(pointer, size)

    def close(self) -> None:
        self._handle.release()

    def __enter__(self) -> "Frame":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(index={self.index}, format={self.format.name})"


class VideoFrame(Frame):
    @property
    def width(self) -> int:
        return int(self._handle.call("ob_video_frame_get_width"))

    @property
    def height(self) -> int:
        return int(self._handle.call("ob_video_frame_get_height"))

    def to_numpy(self) -> np.ndarray:
        """Pixels as ``(h, w)`` or ``(h, w, c)``; MJPG is decoded to BGR."""
        fmt = self.format
        data = self.data
        if fmt == Format.MJPG:
            image = cv2.imdecode(np.frombuffer(data, dtype=np.uint8), cv2.IMREAD_COLOR)
            if image is None:
                raise ValueError("Cannot decode MJPG frame")
            return image
        layout = PIXEL_LAYOUT.get(fmt)
        if layout is None:
            raise ValueError(f"No pixel layout for format {fmt.name}")
        dtype, channels = layout
        shape = (self.height, self.width) if channels == 1 else (self.height, self.width, channels)
        return np.frombuffer(data, dtype=dtype).reshape(shape)


class ColorFrame(VideoFrame):
    def to_bgr(self) -> np.ndarray:
        """Colour image in OpenCV channel order."""
        image = self.to_numpy()
        fmt = self.format
        if fmt == Format.RGB:
            return cv2.cvtColor(image, cv2.COLOR_RGB2BGR)
        if fmt == Format.RGBA:
            return cv2.cvtColor(image, cv2.COLOR_RGBA2BGR)
        if fmt == Format.BGRA:
            return cv2.cvtColor(image, cv2.COLOR_BGRA2BGR)
        if fmt in (Format.YUYV, Format.YUY2):
            return cv2.cvtColor(image, cv2.COLOR_YUV2BGR_YUYV)
        if fmt == Format.UYVY:
            return cv2.cvtColor(image, cv2.COLOR_YUV2BGR_UYVY)
        return image


class DepthFrame(VideoFrame):
    @property
    def depth_scale(self) -> float:
        """Raw value times this scale gives millimetres."""
        return float(self._handle.call("ob_depth_frame_get_value_scale"))

    def to_millimeters(self) -> np.ndarray:
        return self.to_numpy().astype(np.float32) * self.depth_scale


class IRFrame(VideoFrame):
    pass


class PointCloudFrame(Frame):
    @property
    def coordinate_scale(self) -> float:
        """Stored coordinate times this scale gives millimetres."""
        return float(self._handle.call("ob_points_frame_get_coordinate_value_scale"))

    @property
    def width(self) -> int:
        return int(self._handle.call("ob_point_cloud_frame_get_width"))

    @property
    def height(self) -> int:
        return int(self._handle.call("ob_point_cloud_frame_get_height"))

    def has_color(self) -> bool:
        return self.format == Format.RGB_POINT

    def to_numpy(self) -> np.ndarray:
        """``(N, 3)`` xyz or ``(N, 6)`` xyzrgb, float32, as stored."""
        cols = 6 if self.has_color() else 3
        return np.frombuffer(self.data, dtype=np.float32).reshape(-1, cols)

    def to_millimeters(self) -> np.ndarray:
        points = self.to_numpy().copy()
        points[:, :3] *= self.coordinate_scale
        return points


class FrameSet(Frame):
    """Frames of one capture cycle; a missing role is ``None``."""

    def _sub_frame(self, function: str, cls: Type[Frame]) -> Optional[Frame]:
        handle = self._handle.backend.acquire_optional(
            function, "ob_delete_frame", self._handle.raw
        )
        return None if handle is None else cls(handle)

    def get_depth_frame(self) -> Optional[DepthFrame]:
        return self._sub_frame("ob_frameset_get_depth_frame", DepthFrame)

    def get_color_frame(self) -> Optional[ColorFrame]:
        return self._sub_frame("ob_frameset_get_color_frame", ColorFrame)

    def get_points_frame(self) -> Optional[PointCloudFrame]:
        return self._sub_frame("ob_frameset_get_points_frame", PointCloudFrame)

    def __repr__(self) -> str:
        return f"FrameSet(index={self.index})"


_BY_TYPE: Dict[FrameType, Type[Frame]] = {
    FrameType.VIDEO: VideoFrame,
    FrameType.COLOR: ColorFrame,
    FrameType.DEPTH: DepthFrame,
    FrameType.IR: IRFrame,
    FrameType.IR_LEFT: IRFrame,
    FrameType.IR_RIGHT: IRFrame,
    FrameType.POINTS: PointCloudFrame,
    FrameType.SET: FrameSet,
}
