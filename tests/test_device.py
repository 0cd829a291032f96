import numpy as np
import pytest

from orbbec import DeviceProperty, PermissionType
from orbbec.device_property import PropertySetting
from orbbec.error import InvalidValueError, UnsupportedOperationError


def test_property_table_is_total_and_unique():
    ids = [p.id for p in DeviceProperty]
    assert len(ids) == len(set(ids))
    assert len(ids) >= 140
    for prop in DeviceProperty:
        assert prop.kind in (bool, int, float)
        assert DeviceProperty.from_id(prop.id) is prop


def test_setting_decomposes_to_id_and_value():
    setting = DeviceProperty.MinDepth(200)
    assert isinstance(setting, PropertySetting)
    assert setting.decompose() == (22, 200)
    assert repr(setting) == "DeviceProperty.MinDepth(200)"


def test_wrong_payload_kind_is_rejected():
    with pytest.raises(TypeError):
        DeviceProperty.MinDepth(True)
    with pytest.raises(TypeError):
        DeviceProperty.LDP(1)
    with pytest.raises(TypeError):
        DeviceProperty.LaserCurrent("high")
    assert DeviceProperty.LaserCurrent(3).value == 3.0
    assert DeviceProperty.LaserCurrent(0.1).value == float(np.float32(0.1))


@pytest.mark.parametrize(
    "setting",
    [
        DeviceProperty.LDP(False),
        DeviceProperty.MinDepth(250),
        DeviceProperty.LaserCurrent(300.25),
        DeviceProperty.LaserCurrent(0.1),
    ],
)
def test_property_round_trip(device, setting):
    device.set_property(setting)
    assert device.get_property(setting.property) == setting.value


def test_set_property_requires_setting(device):
    with pytest.raises(TypeError):
        device.set_property(DeviceProperty.LDP)


def test_unsupported_property(device):
    prop = DeviceProperty.HWNoiseRemoveFilterEnable
    assert not device.is_property_supported(prop, PermissionType.WRITE)
    with pytest.raises(UnsupportedOperationError):
        device.set_property(prop(True))
    with pytest.raises(UnsupportedOperationError):
        device.get_property(prop)


def test_read_only_property(device):
    prop = DeviceProperty.DeviceInRecoveryMode
    assert device.is_property_supported(prop, PermissionType.READ)
    assert not device.is_property_supported(prop, PermissionType.WRITE)
    assert device.get_property(prop) is False
    with pytest.raises(UnsupportedOperationError):
        device.set_property(prop(True))


def test_out_of_range_value(device):
    with pytest.raises(InvalidValueError):
        device.set_property(DeviceProperty.DepthGain(1000))


def test_load_preset(device):
    device.load_preset("High Accuracy")
    assert device.get_property(DeviceProperty.DepthPrecisionLevel) == 1
    assert device.get_property(DeviceProperty.DepthNoiseRemovalFilter) is True


def test_unknown_preset(device):
    with pytest.raises(InvalidValueError):
        device.load_preset("Nonexistent")
