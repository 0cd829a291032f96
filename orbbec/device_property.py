"""Typed device property table.

Each :class:`DeviceProperty` member is bound to one native property id and
exactly one payload kind (``bool``, ``int`` or ``float``). Calling a member
with a value builds a :class:`PropertySetting` for :meth:`Device.set_property`::

    device.set_property(DeviceProperty.LDP(True))
    device.get_property(DeviceProperty.MinDepth)  # -> int
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Tuple, Type, Union

import numpy as np

PropertyValue = Union[bool, int, float]


class DeviceProperty(Enum):
    # Depth module and laser
    LDP = (2, bool)
    Laser = (3, bool)
    LaserPulseWidth = (4, int)
    LaserCurrent = (5, float)
    Flood = (6, bool)
    FloodLevel = (7, int)
    TemperatureCompensation = (8, bool)
    DepthMirror = (14, bool)
    DepthFlip = (15, bool)
    DepthPostfilter = (16, bool)
    DepthHolefilter = (17, bool)
    IRMirror = (18, bool)
    IRFlip = (19, bool)
    MinDepth = (22, int)
    MaxDepth = (23, int)
    DepthNoiseRemovalFilter = (24, bool)
    LDPStatus = (32, bool)
    DepthNoiseRemovalFilterMaxDiff = (40, int)
    DepthNoiseRemovalFilterMaxSpeckleSize = (41, int)
    DepthAlignHardware = (42, bool)
    TimestampOffset = (43, int)
    HardwareDistortionSwitch = (61, bool)
    FanWorkMode = (62, int)
    DepthAlignHardwareMode = (63, int)
    AntiCollusionActivationStatus = (64, bool)
    DepthPrecisionLevel = (75, int)
    TofFilterRange = (76, int)
    LaserMode = (79, int)
    Rectify2 = (80, bool)
    ColorMirror = (81, bool)
    ColorFlip = (82, bool)
    IndicatorLight = (83, bool)
    DisparityToDepth = (85, bool)
    BRT = (86, bool)
    Watchdog = (87, bool)
    ExternalSignalReset = (88, bool)
    Heartbeat = (89, bool)
    DepthCroppingMode = (90, int)
    D2CPreprocess = (91, bool)
    GPM = (93, bool)
    RGBCustomCrop = (94, bool)
    DeviceWorkMode = (95, int)
    DeviceCommunicationType = (97, int)
    SwitchIRMode = (98, int)
    LaserPowerLevelControl = (99, int)
    LDPMeasureDistance = (100, int)
    TimerResetSignal = (104, bool)
    TimerResetTriggerOutEnable = (105, bool)
    TimerResetDelayUs = (106, int)
    CaptureImageSignal = (107, bool)
    IRRightMirror = (112, bool)
    CaptureImageFrameNumber = (113, int)
    IRRightFlip = (114, bool)
    ColorRotate = (115, int)
    IRRotate = (116, int)
    IRRightRotate = (117, int)
    DepthRotate = (118, int)
    LaserPowerActualLevel = (119, int)
    USBPowerState = (121, int)
    DCPowerState = (122, int)
    DeviceDevelopmentMode = (129, int)
    SyncSignalTriggerOut = (130, bool)
    RestoreFactorySettings = (131, bool)
    BootIntoRecoveryMode = (132, bool)
    DeviceInRecoveryMode = (133, bool)
    CaptureIntervalMode = (134, int)
    CaptureImageTimeInterval = (135, int)
    CaptureImageNumberInterval = (136, int)
    TimerResetEnable = (140, bool)
    DeviceUSB2RepeatIdentify = (141, bool)
    DeviceRebootDelay = (142, int)
    LaserOvercurrentProtectionStatus = (148, bool)
    LaserPulseWidthProtectionStatus = (149, bool)
    LaserAlwaysOn = (174, bool)
    LaserOnOffPattern = (175, int)
    DepthUnitFlexibleAdjustment = (176, float)
    LaserControl = (182, int)
    IRBrightness = (184, int)
    SlaveDeviceSyncStatus = (188, bool)
    ColorAEMaxExposure = (189, int)
    IRAEMaxExposure = (190, int)
    DispSearchRangeMode = (191, int)
    LaserHighTemperatureProtect = (193, bool)
    LowExposureLaserControl = (194, bool)
    CheckPPSSyncInSignal = (195, bool)
    DispSearchOffset = (196, int)
    DeviceRepower = (202, bool)
    FrameInterleaveConfigIndex = (204, int)
    FrameInterleaveEnable = (205, bool)
    FrameInterleaveLaserPatternSyncDelay = (206, int)
    OnChipCalibrationHealthCheck = (209, float)
    OnChipCalibrationEnable = (210, bool)
    HWNoiseRemoveFilterEnable = (211, bool)
    HWNoiseRemoveFilterThreshold = (212, float)
    DeviceAutoCaptureEnable = (216, bool)
    DeviceAutoCaptureIntervalTime = (217, int)
    DevicePTPClockSyncEnable = (223, bool)
    DepthWithConfidenceStreamEnable = (224, bool)
    ConfidenceStreamFilter = (226, bool)
    ConfidenceStreamFilterThreshold = (227, int)
    ConfidenceMirror = (229, bool)
    ConfidenceFlip = (230, bool)
    ConfidenceRotate = (231, int)
    # Color sensor
    ColorAutoExposure = (2000, bool)
    ColorExposure = (2001, int)
    ColorGain = (2002, int)
    ColorAutoWhiteBalance = (2003, bool)
    ColorWhiteBalance = (2004, int)
    ColorBrightness = (2005, int)
    ColorSharpness = (2006, int)
    ColorShutter = (2007, int)
    ColorSaturation = (2008, int)
    ColorContrast = (2009, int)
    ColorGamma = (2010, int)
    ColorRoll = (2011, int)
    ColorAutoExposurePriority = (2012, int)
    ColorBacklightCompensation = (2013, int)
    ColorHue = (2014, int)
    ColorPowerLineFrequency = (2015, int)
    # Depth and IR sensors
    DepthAutoExposure = (2016, bool)
    DepthExposure = (2017, int)
    DepthGain = (2018, int)
    IRAutoExposure = (2025, bool)
    IRExposure = (2026, int)
    IRGain = (2027, int)
    IRChannelDataSource = (2028, int)
    DepthRMFilter = (2029, bool)
    ColorMaximalGain = (2030, int)
    ColorMaximalShutter = (2031, int)
    IRShortExposure = (2032, bool)
    ColorHDR = (2034, bool)
    IRLongExposure = (2035, bool)
    SkipFrame = (2036, bool)
    HDRMerge = (2037, bool)
    ColorFocus = (2038, int)
    IRRectify = (2040, bool)
    DepthAutoExposurePriority = (2052, int)
    # Host side processing
    SDKDisparityToDepth = (3004, bool)
    SDKDepthFrameUnpack = (3007, bool)
    SDKIRFrameUnpack = (3008, bool)
    SDKAccelFrameTransformed = (3009, bool)
    SDKGyroFrameTransformed = (3010, bool)
    SDKIRLeftFrameUnpack = (3011, bool)
    SDKIRRightFrameUnpack = (3012, bool)
    NetworkBandwidthType = (3027, int)
    DevicePerformanceMode = (3028, int)
    RawDataCameraCalibJsonFile = (4029, int)
    DebugESGMConfidence = (5013, float)

    @property
    def id(self) -> int:
        return self.value[0]

    @property
    def kind(self) -> Type[PropertyValue]:
        return self.value[1]

    def decompose(self) -> Tuple[int, Type[PropertyValue]]:
        """Return the native id and the payload kind of this property."""
        return self.value

    def coerce(self, value: PropertyValue) -> PropertyValue:
        """Validate ``value`` against the payload kind.

        ``bool`` is rejected for int/float properties and ints are accepted for
        float properties. Floats cross the native boundary as 32-bit values,
        so they are rounded to float32 here.
        """
        kind = self.kind
        if kind is bool:
            if not isinstance(value, bool):
                raise TypeError(f"{self.name} expects bool, got {type(value).__name__}")
            return value
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise TypeError(f"{self.name} expects {kind.__name__}, got {type(value).__name__}")
        if kind is int:
            if isinstance(value, float) and not value.is_integer():
                raise TypeError(f"{self.name} expects int, got {value!r}")
            return int(value)
        return float(np.float32(value))

    def __call__(self, value: PropertyValue) -> "PropertySetting":
        return PropertySetting(self, self.coerce(value))

    @classmethod
    def from_id(cls, prop_id: int) -> "DeviceProperty":
        try:
            return _BY_ID[prop_id]
        except KeyError:
            raise ValueError(f"Unknown property id: {prop_id}") from None


_BY_ID = {member.id: member for member in DeviceProperty}


@dataclass(frozen=True)
class PropertySetting:
    """A property paired with a value of its payload kind."""

    property: DeviceProperty
    value: PropertyValue

    def decompose(self) -> Tuple[int, PropertyValue]:
        return self.property.id, self.value

    def __repr__(self) -> str:
        return f"DeviceProperty.{self.property.name}({self.value!r})"
