"""Devices, their identity snapshot and the typed property table."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterator

from orbbec.device_property import DeviceProperty, PropertySetting, PropertyValue
from orbbec.enums import DeviceType, PermissionType
from orbbec.error import WrongAPICallSequenceError
from orbbec.sys import NativeHandle
from utils.logger import Logger

if TYPE_CHECKING:
    from orbbec.context import Context

logger = Logger.get_logger("orbbec.device")

_SETTERS = {
    bool: "ob_device_set_bool_property",
    int: "ob_device_set_int_property",
    float: "ob_device_set_float_property",
}
_GETTERS = {
    bool: "ob_device_get_bool_property",
    int: "ob_device_get_int_property",
    float: "ob_device_get_float_property",
}


@dataclass(frozen=True)
class DeviceInfo:
    """Immutable identity snapshot of one device."""

    name: str
    pid: int
    vid: int
    uid: str
    serial_number: str
    firmware_version: str
    hardware_version: str
    connection_type: str
    minimum_supported_sdk_version: str
    asic_name: str
    device_type: DeviceType

    @classmethod
    def _from_handle(cls, handle: NativeHandle) -> "DeviceInfo":
        with handle:
            return cls(
                name=handle.call("ob_device_info_get_name"),
                pid=handle.call("ob_device_info_get_pid"),
                vid=handle.call("ob_device_info_get_vid"),
                uid=handle.call("ob_device_info_get_uid"),
                serial_number=handle.call("ob_device_info_get_serial_number"),
                firmware_version=handle.call("ob_device_info_get_firmware_version"),
                hardware_version=handle.call("ob_device_info_get_hardware_version"),
                connection_type=handle.call("ob_device_info_get_connection_type"),
                minimum_supported_sdk_version=handle.call(
                    "ob_device_info_get_supported_min_sdk_version"
                ),
                asic_name=handle.call("ob_device_info_get_asicName"),
                device_type=DeviceType(handle.call("ob_device_info_get_device_type")),
            )

    def __str__(self) -> str:
        return (
            f"{self.name} (SN {self.serial_number}, VID 0x{self.vid:04x}, "
            f"PID 0x{self.pid:04x}, FW {self.firmware_version}, {self.connection_type})"
        )


class Device:
    """One physical camera."""

    def __init__(self, handle: NativeHandle) -> None:
        self._handle = handle

    @property
    def handle(self) -> NativeHandle:
        return self._handle

    def info(self) -> DeviceInfo:
        raw = self._handle.call("ob_device_get_device_info")
        return DeviceInfo._from_handle(
            NativeHandle(self._handle.backend, raw, "ob_delete_device_info")
        )

    def load_preset(self, name: str) -> None:
        """Load a vendor preset such as ``"High Accuracy"``."""
        self._handle.call("ob_device_load_preset", name)
        logger.debug(f"Preset '{name}' loaded")

    def is_property_supported(
        self, prop: DeviceProperty | PropertySetting, permission: PermissionType
    ) -> bool:
        if isinstance(prop, PropertySetting):
            prop = prop.property
        return bool(
            self._handle.call("ob_device_is_property_supported", prop.id, int(permission))
        )

    def set_property(self, setting: PropertySetting) -> None:
        """Write ``setting``; build it with ``DeviceProperty.X(value)``."""
        if not isinstance(setting, PropertySetting):
            raise TypeError(f"Expected PropertySetting, got {type(setting).__name__}")
        prop_id, value = setting.decompose()
        self._handle.call(_SETTERS[setting.property.kind], prop_id, value)

    def get_property(self, prop: DeviceProperty) -> PropertyValue:
        if not isinstance(prop, DeviceProperty):
            raise TypeError(f"Expected DeviceProperty, got {type(prop).__name__}")
        value = self._handle.call(_GETTERS[prop.kind], prop.id)
        return prop.kind(value)

    def close(self) -> None:
        self._handle.release()

    def __enter__(self) -> "Device":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()


class DeviceList:
    """Devices found by a :class:`Context`; only usable while it is open."""

    def __init__(self, context: "Context", handle: NativeHandle) -> None:
        self._context = context
        self._handle = handle

    def _check_context(self, function: str) -> None:
        if self._context.closed:
            raise WrongAPICallSequenceError(
                "DeviceList used after its Context was closed", function
            )

    def __len__(self) -> int:
        self._check_context("DeviceList::len")
        return int(self._handle.call("ob_device_list_get_count"))

    def get(self, index: int) -> Device:
        self._check_context("DeviceList::get")
        raw = self._handle.call("ob_device_list_get_device", index)
        return Device(NativeHandle(self._handle.backend, raw, "ob_delete_device"))

    __getitem__ = get

    def __iter__(self) -> Iterator[Device]:
        for index in range(len(self)):
            yield self.get(index)

    def close(self) -> None:
        self._handle.release()
