"""Post-processing filters.

Every filter follows the same contract: ``process(frame)`` returns a new
frame of the same role, computed by the runtime with the filter's current
configuration. Setters write through immediately. Filters are never chained
automatically; the caller threads one filter's output into the next::

    decimation = DecimationFilter()
    decimation.set_factor(2)
    spatial = SpatialAdvancedFilter()
    depth = spatial.process(decimation.process(depth))

A filter keeps history between calls (temporal smoothing), so each stream
needs its own instance and an instance must not be shared across threads.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Tuple, Type

from orbbec.enums import (
    ConvertFormat,
    CoordinateSystem,
    FilterConfigValueType,
    Format,
    HoleFillMode,
    StreamType,
)
from orbbec.error import NotImplementedFeatureError
from orbbec.frame import DepthFrame, Frame, FrameSet, PointCloudFrame, VideoFrame
from orbbec.stream import VideoStreamProfile
from orbbec.sys import NativeBackend, NativeHandle, resolve_backend
from utils.logger import Logger

logger = Logger.get_logger("orbbec.filter")


@dataclass(frozen=True)
class FilterConfigItem:
    """One entry of a filter's configuration schema."""

    name: str
    type: FilterConfigValueType
    min: float
    max: float
    step: float
    default: float
    desc: str


def _check_int(value: object, what: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{what} must be int, got {type(value).__name__}")
    return value


def _check_float(value: object, what: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"{what} must be float, got {type(value).__name__}")
    return float(value)


def _check_bool(value: object, what: str) -> bool:
    if not isinstance(value, bool):
        raise TypeError(f"{what} must be bool, got {type(value).__name__}")
    return value


def _check_enum(value: object, cls: type, what: str):
    if not isinstance(value, cls):
        raise TypeError(f"{what} must be {cls.__name__}, got {type(value).__name__}")
    return value


class Filter:
    """Base class: owns the native filter and marshals its config values."""

    NAME = ""
    OPTIONAL = False
    ACCEPTS: Tuple[Type[Frame], ...] = (Frame,)

    def __init__(self, backend: NativeBackend | str | None = None) -> None:
        backend = resolve_backend(backend)
        handle = backend.acquire_optional("ob_create_filter", "ob_delete_filter", self.NAME)
        if handle is None:
            if self.OPTIONAL:
                raise NotImplementedFeatureError(
                    f"{self.NAME} is not available", f"{self.NAME}::new", self.NAME
                )
            raise RuntimeError(f"{self.NAME} is missing from the SDK runtime")
        self._handle: NativeHandle = handle
        logger.debug(f"{self.NAME} created")

    @property
    def name(self) -> str:
        return self._handle.call("ob_filter_get_name")

    def _set(self, key: str, value: float) -> None:
        # Every config value crosses the boundary as a double.
        self._handle.call("ob_filter_set_config_value", key, float(value))

    def _get(self, key: str) -> float:
        return float(self._handle.call("ob_filter_get_config_value", key))

    def get_config_schema(self) -> List[FilterConfigItem]:
        backend = self._handle.backend
        with backend.acquire(
            "ob_filter_get_config_schema_list",
            "ob_delete_filter_config_schema_list",
            self._handle.raw,
        ) as schema:
            items = []
            for i in range(schema.call("ob_filter_config_schema_list_get_count")):
                raw = schema.call("ob_filter_config_schema_list_get_item", i)
                items.append(
                    FilterConfigItem(
                        name=raw["name"],
                        type=FilterConfigValueType(raw["type"]),
                        min=float(raw["min"]),
                        max=float(raw["max"]),
                        step=float(raw["step"]),
                        default=float(raw["default"]),
                        desc=raw["desc"] or "",
                    )
                )
        return items

    def reset(self) -> None:
        """Drop history kept between :meth:`process` calls."""
        self._handle.call("ob_filter_reset")

    def _check_input(self, frame: Frame) -> None:
        if not isinstance(frame, self.ACCEPTS):
            accepted = ", ".join(c.__name__ for c in self.ACCEPTS)
            raise TypeError(
                f"{type(self).__name__}.process expects {accepted}, got {type(frame).__name__}"
            )

    def process(self, frame: Frame) -> Frame:
        """Return a new frame of the same class as ``frame``."""
        self._check_input(frame)
        raw = self._handle.call("ob_filter_process", frame.handle.raw)
        return type(frame)._from_handle(
            NativeHandle(self._handle.backend, raw, "ob_delete_frame")
        )

    def close(self) -> None:
        self._handle.release()

    def __enter__(self):
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()


class DecimationFilter(Filter):
    NAME = "DecimationFilter"
    ACCEPTS = (VideoFrame,)

    def set_factor(self, factor: int) -> None:
        self._set("decimate", _check_int(factor, "factor"))


class FormatConvertFilter(Filter):
    NAME = "FormatConverter"
    ACCEPTS = (VideoFrame,)

    def set_convert_type(self, convert_type: ConvertFormat) -> None:
        self._set("convertType", int(_check_enum(convert_type, ConvertFormat, "convert_type")))


class HoleFillingFilter(Filter):
    NAME = "HoleFillingFilter"
    OPTIONAL = True
    ACCEPTS = (DepthFrame,)

    def set_mode(self, mode: HoleFillMode) -> None:
        self._set("hole_filling_mode", int(_check_enum(mode, HoleFillMode, "mode")))


class TemporalFilter(Filter):
    NAME = "TemporalFilter"
    OPTIONAL = True
    ACCEPTS = (DepthFrame,)

    def set_threshold(self, threshold: float) -> None:
        self._set("diff_scale", _check_float(threshold, "threshold"))

    def set_weight(self, weight: float) -> None:
        self._set("weight", _check_float(weight, "weight"))


class SpatialFastFilter(Filter):
    NAME = "SpatialFastFilter"
    OPTIONAL = True
    ACCEPTS = (DepthFrame,)

    def set_radius(self, radius: int) -> None:
        self._set("radius", _check_int(radius, "radius"))


class SpatialModerateFilter(Filter):
    NAME = "SpatialModerateFilter"
    OPTIONAL = True
    ACCEPTS = (DepthFrame,)

    def set_radius(self, radius: int) -> None:
        self._set("radius", _check_int(radius, "radius"))

    def set_magnitude(self, magnitude: int) -> None:
        self._set("magnitude", _check_int(magnitude, "magnitude"))

    def set_threshold(self, threshold: int) -> None:
        self._set("disp_diff", _check_int(threshold, "threshold"))


class SpatialAdvancedFilter(Filter):
    NAME = "SpatialAdvancedFilter"
    OPTIONAL = True
    ACCEPTS = (DepthFrame,)

    def set_alpha(self, alpha: float) -> None:
        self._set("alpha", _check_float(alpha, "alpha"))

    def set_threshold(self, threshold: int) -> None:
        self._set("disp_diff", _check_int(threshold, "threshold"))

    def set_radius(self, radius: int) -> None:
        self._set("radius", _check_int(radius, "radius"))

    def set_magnitude(self, magnitude: int) -> None:
        self._set("magnitude", _check_int(magnitude, "magnitude"))


class ThresholdFilter(Filter):
    NAME = "ThresholdFilter"
    ACCEPTS = (DepthFrame,)

    def set_min_depth(self, min_depth: int) -> None:
        self._set("min", _check_int(min_depth, "min_depth"))

    def set_max_depth(self, max_depth: int) -> None:
        self._set("max", _check_int(max_depth, "max_depth"))


class AlignFilter(Filter):
    """Resamples depth into another stream's geometry.

    Accepts a single video frame or a whole :class:`FrameSet`. Target the
    stream by type, or by a concrete profile when that stream has not
    produced a frame yet.
    """

    NAME = "Align"
    ACCEPTS = (VideoFrame, FrameSet)

    def set_align_to_stream_type(self, stream_type: StreamType) -> None:
        self._set("AlignType", int(_check_enum(stream_type, StreamType, "stream_type")))

    def set_align_to_stream_profile(self, profile: VideoStreamProfile) -> None:
        _check_enum(profile, VideoStreamProfile, "profile")
        self._handle.call("ob_align_filter_set_align_to_stream_profile", profile.handle.raw)

    def set_add_distortion(self, enable: bool) -> None:
        self._set("TargetDistortion", _check_bool(enable, "enable"))

    def set_gap_fill(self, enable: bool) -> None:
        self._set("GapFillCopy", _check_bool(enable, "enable"))

    def set_match_resolution(self, enable: bool) -> None:
        self._set("MatchTargetRes", _check_bool(enable, "enable"))


class PointCloudFilter(Filter):
    """Turns depth (or an aligned depth+colour FrameSet) into a point cloud."""

    NAME = "PointCloudFilter"
    ACCEPTS = (DepthFrame, FrameSet)

    def set_color(self, enable: bool) -> None:
        fmt = Format.RGB_POINT if _check_bool(enable, "enable") else Format.POINT
        self._set("pointFormat", int(fmt))

    def set_coordinate_scale(self, scale: float) -> None:
        self._set("coordinateDataScale", _check_float(scale, "scale"))

    def set_color_normalization(self, enable: bool) -> None:
        self._set("colorDataNormalization", _check_bool(enable, "enable"))

    def set_coordinate_system(self, system: CoordinateSystem) -> None:
        self._set("coordinateSystemType", int(_check_enum(system, CoordinateSystem, "system")))

    def process(self, frame: Frame) -> PointCloudFrame:
        self._check_input(frame)
        raw = self._handle.call("ob_filter_process", frame.handle.raw)
        return PointCloudFrame(NativeHandle(self._handle.backend, raw, "ob_delete_frame"))


__all__ = [
    "Filter",
    "FilterConfigItem",
    "DecimationFilter",
    "FormatConvertFilter",
    "HoleFillingFilter",
    "TemporalFilter",
    "SpatialFastFilter",
    "SpatialModerateFilter",
    "SpatialAdvancedFilter",
    "ThresholdFilter",
    "AlignFilter",
    "PointCloudFilter",
]
