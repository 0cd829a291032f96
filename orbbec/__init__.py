"""Python binding for the Orbbec depth-camera SDK.

Typical use::

    with Context() as ctx:
        device = ctx.query_device_list().get(0)
        pipeline = Pipeline(device)
        profiles = pipeline.get_stream_profiles(SensorType.DEPTH)
        config = Config()
        config.enable_stream(profiles.match(848, 480, Format.Y16, 15))
        pipeline.start(config)
        frameset = pipeline.wait_for_frameset(100)
"""

from orbbec.enums import (
    AlignMode,
    ConvertFormat,
    CoordinateSystem,
    DeviceType,
    ExceptionType,
    FilterConfigValueType,
    Format,
    FrameAggregateOutputMode,
    FrameType,
    HoleFillMode,
    LogSeverity,
    PermissionType,
    PointCloudFormat,
    SensorType,
    StreamType,
)
from orbbec.error import (
    CameraDisconnectedError,
    ErrorRecord,
    InvalidValueError,
    IOExceptionError,
    MemoryExceptionError,
    NotImplementedFeatureError,
    OrbbecError,
    PlatformError,
    StdExceptionError,
    UnknownError,
    UnsupportedOperationError,
    WrongAPICallSequenceError,
)
from orbbec.device_property import DeviceProperty, PropertySetting
from orbbec.context import Context
from orbbec.device import Device, DeviceInfo, DeviceList
from orbbec.stream import CameraIntrinsic, StreamProfile, StreamProfileList, VideoStreamProfile
from orbbec.frame import (
    ColorFrame,
    DepthFrame,
    Frame,
    FrameSet,
    IRFrame,
    PointCloudFrame,
    VideoFrame,
)
from orbbec.filter import (
    AlignFilter,
    DecimationFilter,
    Filter,
    FilterConfigItem,
    FormatConvertFilter,
    HoleFillingFilter,
    PointCloudFilter,
    SpatialAdvancedFilter,
    SpatialFastFilter,
    SpatialModerateFilter,
    TemporalFilter,
    ThresholdFilter,
)
from orbbec.pipeline import Config, Pipeline, PipelineState
from orbbec.logger import LoggerCallbackHandle, SdkLogger

__all__ = [
    "AlignMode",
    "ConvertFormat",
    "CoordinateSystem",
    "DeviceType",
    "ExceptionType",
    "FilterConfigValueType",
    "Format",
    "FrameAggregateOutputMode",
    "FrameType",
    "HoleFillMode",
    "LogSeverity",
    "PermissionType",
    "PointCloudFormat",
    "SensorType",
    "StreamType",
    "CameraDisconnectedError",
    "ErrorRecord",
    "InvalidValueError",
    "IOExceptionError",
    "MemoryExceptionError",
    "NotImplementedFeatureError",
    "OrbbecError",
    "PlatformError",
    "StdExceptionError",
    "UnknownError",
    "UnsupportedOperationError",
    "WrongAPICallSequenceError",
    "DeviceProperty",
    "PropertySetting",
    "Context",
    "Device",
    "DeviceInfo",
    "DeviceList",
    "CameraIntrinsic",
    "StreamProfile",
    "StreamProfileList",
    "VideoStreamProfile",
    "ColorFrame",
    "DepthFrame",
    "Frame",
    "FrameSet",
    "IRFrame",
    "PointCloudFrame",
    "VideoFrame",
    "AlignFilter",
    "DecimationFilter",
    "Filter",
    "FilterConfigItem",
    "FormatConvertFilter",
    "HoleFillingFilter",
    "PointCloudFilter",
    "SpatialAdvancedFilter",
    "SpatialFastFilter",
    "SpatialModerateFilter",
    "TemporalFilter",
    "ThresholdFilter",
    "Config",
    "Pipeline",
    "PipelineState",
    "LoggerCallbackHandle",
    "SdkLogger",
]
