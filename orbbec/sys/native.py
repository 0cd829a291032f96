"""ctypes backend over the vendor ``libOrbbecSDK`` shared library."""

from __future__ import annotations

import ctypes
import ctypes.util
import os
import sys
from ctypes import (
    CFUNCTYPE,
    POINTER,
    Structure,
    byref,
    c_bool,
    c_char_p,
    c_double,
    c_float,
    c_int,
    c_int16,
    c_uint32,
    c_uint64,
    c_void_p,
)
from typing import Any, Dict, List, Optional, Tuple

from orbbec.enums import ExceptionType, LogSeverity
from orbbec.error import ErrorRecord
from orbbec.sys.backend import FrameCallback, LogCallback, NativeBackend
from orbbec.sys.handle import NativeHandle
from utils.error_tracker import SdkLibraryError
from utils.logger import Logger

LIBRARY_ENV = "ORBBEC_SDK_LIB"


class OBCameraIntrinsic(Structure):
    _fields_ = [
        ("fx", c_float),
        ("fy", c_float),
        ("cx", c_float),
        ("cy", c_float),
        ("width", c_int16),
        ("height", c_int16),
    ]


class OBFilterConfigSchemaItem(Structure):
    _fields_ = [
        ("name", c_char_p),
        ("type", c_int),
        ("min", c_double),
        ("max", c_double),
        ("step", c_double),
        ("default", c_double),
        ("desc", c_char_p),
    ]


OB_FRAME_CALLBACK = CFUNCTYPE(None, c_void_p, c_void_p)
OB_LOG_CALLBACK = CFUNCTYPE(None, c_int, c_char_p, c_void_p)

H = c_void_p

# name -> (restype, argtypes); every function also takes a trailing ob_error**.
PROTOTYPES: Dict[str, Tuple[Any, List[Any]]] = {
    # context and devices
    "ob_create_context": (H, []),
    "ob_delete_context": (None, [H]),
    "ob_query_device_list": (H, [H]),
    "ob_delete_device_list": (None, [H]),
    "ob_device_list_get_count": (c_uint32, [H]),
    "ob_device_list_get_device": (H, [H, c_uint32]),
    "ob_delete_device": (None, [H]),
    "ob_device_get_device_info": (H, [H]),
    "ob_delete_device_info": (None, [H]),
    "ob_device_info_get_name": (c_char_p, [H]),
    "ob_device_info_get_pid": (c_int, [H]),
    "ob_device_info_get_vid": (c_int, [H]),
    "ob_device_info_get_uid": (c_char_p, [H]),
    "ob_device_info_get_serial_number": (c_char_p, [H]),
    "ob_device_info_get_firmware_version": (c_char_p, [H]),
    "ob_device_info_get_hardware_version": (c_char_p, [H]),
    "ob_device_info_get_connection_type": (c_char_p, [H]),
    "ob_device_info_get_supported_min_sdk_version": (c_char_p, [H]),
    "ob_device_info_get_asicName": (c_char_p, [H]),
    "ob_device_info_get_device_type": (c_int, [H]),
    "ob_device_is_property_supported": (c_bool, [H, c_int, c_int]),
    "ob_device_set_bool_property": (None, [H, c_int, c_bool]),
    "ob_device_get_bool_property": (c_bool, [H, c_int]),
    "ob_device_set_int_property": (None, [H, c_int, c_int]),
    "ob_device_get_int_property": (c_int, [H, c_int]),
    "ob_device_set_float_property": (None, [H, c_int, c_float]),
    "ob_device_get_float_property": (c_float, [H, c_int]),
    "ob_device_load_preset": (None, [H, c_char_p]),
    # stream profiles
    "ob_stream_profile_list_get_count": (c_uint32, [H]),
    "ob_stream_profile_list_get_profile": (H, [H, c_int]),
    "ob_stream_profile_list_get_video_stream_profile": (H, [H, c_int, c_int, c_int, c_int]),
    "ob_delete_stream_profile_list": (None, [H]),
    "ob_delete_stream_profile": (None, [H]),
    "ob_stream_profile_get_format": (c_int, [H]),
    "ob_stream_profile_get_type": (c_int, [H]),
    "ob_video_stream_profile_get_width": (c_uint32, [H]),
    "ob_video_stream_profile_get_height": (c_uint32, [H]),
    "ob_video_stream_profile_get_fps": (c_uint32, [H]),
    "ob_video_stream_profile_get_intrinsic": (OBCameraIntrinsic, [H]),
    # config
    "ob_create_config": (H, []),
    "ob_delete_config": (None, [H]),
    "ob_config_enable_stream_with_stream_profile": (None, [H, H]),
    "ob_config_set_align_mode": (None, [H, c_int]),
    "ob_config_set_depth_scale_after_align_require": (None, [H, c_bool]),
    "ob_config_set_frame_aggregate_output_mode": (None, [H, c_int]),
    # pipeline
    "ob_create_pipeline_with_device": (H, [H]),
    "ob_delete_pipeline": (None, [H]),
    "ob_pipeline_start_with_config": (None, [H, H]),
    "ob_pipeline_start_with_callback": (None, [H, H, OB_FRAME_CALLBACK, c_void_p]),
    "ob_pipeline_stop": (None, [H]),
    "ob_pipeline_wait_for_frameset": (H, [H, c_uint32]),
    "ob_pipeline_enable_frame_sync": (None, [H]),
    "ob_pipeline_disable_frame_sync": (None, [H]),
    "ob_pipeline_get_stream_profile_list": (H, [H, c_int]),
    "ob_pipeline_get_device": (H, [H]),
    "ob_get_d2c_depth_profile_list": (H, [H, H, c_int]),
    # frames
    "ob_delete_frame": (None, [H]),
    "ob_frame_get_index": (c_uint64, [H]),
    "ob_frame_get_format": (c_int, [H]),
    "ob_frame_get_type": (c_int, [H]),
    "ob_frame_get_data": (c_void_p, [H]),
    "ob_frame_get_data_size": (c_uint32, [H]),
    "ob_frame_get_timestamp_us": (c_uint64, [H]),
    "ob_frame_get_system_timestamp_us": (c_uint64, [H]),
    "ob_frame_get_global_timestamp_us": (c_uint64, [H]),
    "ob_video_frame_get_width": (c_uint32, [H]),
    "ob_video_frame_get_height": (c_uint32, [H]),
    "ob_depth_frame_get_value_scale": (c_float, [H]),
    "ob_points_frame_get_coordinate_value_scale": (c_float, [H]),
    "ob_point_cloud_frame_get_width": (c_uint32, [H]),
    "ob_point_cloud_frame_get_height": (c_uint32, [H]),
    "ob_frameset_get_depth_frame": (H, [H]),
    "ob_frameset_get_color_frame": (H, [H]),
    "ob_frameset_get_points_frame": (H, [H]),
    # filters
    "ob_create_filter": (H, [c_char_p]),
    "ob_delete_filter": (None, [H]),
    "ob_filter_get_name": (c_char_p, [H]),
    "ob_filter_process": (H, [H, H]),
    "ob_filter_reset": (None, [H]),
    "ob_filter_get_config_value": (c_double, [H, c_char_p]),
    "ob_filter_set_config_value": (None, [H, c_char_p, c_double]),
    "ob_filter_get_config_schema_list": (H, [H]),
    "ob_filter_config_schema_list_get_count": (c_uint32, [H]),
    "ob_filter_config_schema_list_get_item": (OBFilterConfigSchemaItem, [H, c_uint32]),
    "ob_delete_filter_config_schema_list": (None, [H]),
    "ob_align_filter_set_align_to_stream_profile": (None, [H, H]),
    # logger
    "ob_set_logger_severity": (None, [c_int]),
    "ob_set_logger_to_file": (None, [c_int, c_char_p]),
    "ob_set_logger_to_console": (None, [c_int]),
    "ob_set_logger_to_callback": (None, [c_int, OB_LOG_CALLBACK, c_void_p]),
}

_ERROR_ACCESSORS = {
    "ob_error_get_message": (c_char_p, [H]),
    "ob_error_get_function": (c_char_p, [H]),
    "ob_error_get_args": (c_char_p, [H]),
    "ob_error_get_exception_type": (c_int, [H]),
    "ob_delete_error": (None, [H]),
}


def _default_library_names() -> List[str]:
    if sys.platform.startswith("win"):
        names = ["OrbbecSDK.dll"]
    elif sys.platform == "darwin":
        names = ["libOrbbecSDK.dylib"]
    else:
        names = ["libOrbbecSDK.so"]
    found = ctypes.util.find_library("OrbbecSDK")
    if found:
        names.insert(0, found)
    return names


def _decode(value: Any) -> Any:
    return value.decode("utf-8", errors="replace") if isinstance(value, bytes) else value


def _encode(value: Any) -> Any:
    return value.encode("utf-8") if isinstance(value, str) else value


class NativeLibraryBackend(NativeBackend):
    """Backend that forwards every call to ``libOrbbecSDK`` through ctypes."""

    name = "native"

    def __init__(self, library: str | os.PathLike | None = None) -> None:
        self.logger = Logger.get_logger("orbbec.sys.native")
        self.lib = self._load(library)
        self._functions: Dict[str, Any] = {}
        for fn_name, (restype, argtypes) in _ERROR_ACCESSORS.items():
            func = getattr(self.lib, fn_name)
            func.restype = restype
            func.argtypes = argtypes
            self._functions[fn_name] = func

    def _load(self, library: str | os.PathLike | None) -> ctypes.CDLL:
        candidates = [str(library)] if library else []
        env = os.environ.get(LIBRARY_ENV)
        if env and not library:
            candidates.append(env)
        if not candidates:
            candidates = _default_library_names()
        errors = []
        for candidate in candidates:
            try:
                lib = ctypes.CDLL(candidate)
            except OSError as e:
                errors.append(f"{candidate}: {e}")
                continue
            self.logger.info(f"Loaded SDK library {candidate}")
            return lib
        raise SdkLibraryError("Cannot load Orbbec SDK library; " + "; ".join(errors))

    def _function(self, name: str) -> Any:
        func = self._functions.get(name)
        if func is None:
            if name not in PROTOTYPES:
                raise KeyError(f"No prototype declared for {name}")
            restype, argtypes = PROTOTYPES[name]
            func = getattr(self.lib, name)
            func.restype = restype
            func.argtypes = [*argtypes, POINTER(c_void_p)]
            self._functions[name] = func
        return func

    def _consume_error(self, err: c_void_p) -> ErrorRecord:
        f = self._functions
        raw_kind = f["ob_error_get_exception_type"](err)
        try:
            kind = ExceptionType(raw_kind)
        except ValueError:
            kind = ExceptionType.UNKNOWN
        record = ErrorRecord(
            kind=kind,
            message=_decode(f["ob_error_get_message"](err)) or "",
            function=_decode(f["ob_error_get_function"](err)) or "",
            arguments=_decode(f["ob_error_get_args"](err)) or "",
        )
        f["ob_delete_error"](err)
        return record

    def invoke(self, function: str, *args: Any) -> Tuple[Any, Optional[ErrorRecord]]:
        func = self._function(function)
        err = c_void_p()
        value = func(*(_encode(a) for a in args), byref(err))
        if err.value:
            return None, self._consume_error(err)
        if isinstance(value, Structure):
            value = {name: _decode(getattr(value, name)) for name, _ in value._fields_}
        return _decode(value), None

    def frame_callback(self, func: FrameCallback) -> Any:
        def _trampoline(frame: int, user_data: int) -> None:
            if frame:
                func(NativeHandle(self, frame, "ob_delete_frame"))

        return OB_FRAME_CALLBACK(_trampoline)

    def log_callback(self, func: LogCallback) -> Any:
        def _trampoline(severity: int, message: bytes, user_data: int) -> None:
            func(LogSeverity(severity), _decode(message) or "")

        return OB_LOG_CALLBACK(_trampoline)

    def read_bytes(self, pointer: Any, size: int) -> bytes:
        if not pointer or size == 0:
            return b""
        return ctypes.string_at(pointer, size)


__all__ = ["NativeLibraryBackend", "OBCameraIntrinsic", "LIBRARY_ENV", "PROTOTYPES"]
