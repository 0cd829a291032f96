# cli/device_info.py
"""List connected devices and their stream profiles."""

from __future__ import annotations

import argparse

from orbbec import Context, DeviceProperty, PermissionType, Pipeline, SensorType
from orbbec.error import InvalidValueError
from utils.cli import add_backend_argument
from utils.logger import Logger

_REPORTED_PROPERTIES = (
    DeviceProperty.LDP,
    DeviceProperty.Laser,
    DeviceProperty.MinDepth,
    DeviceProperty.MaxDepth,
    DeviceProperty.DepthPrecisionLevel,
    DeviceProperty.ColorAutoExposure,
)


class DeviceInfoCLI:
    """Prints identity, profiles and a few properties of every device."""

    def __init__(self, backend=None, profiles=False, logger=None):
        self.backend = backend
        self.profiles = profiles
        self.logger = logger or Logger.get_logger("cli.device_info")

    def run(self) -> int:
        with Context(self.backend) as ctx:
            devices = ctx.query_device_list()
            self.logger.info(f"Found {len(devices)} device(s)")
            for index, device in enumerate(devices):
                info = device.info()
                self.logger.info(f"[{index}] {info}")
                self.logger.info(
                    f"    uid={info.uid} hw={info.hardware_version} "
                    f"asic={info.asic_name} type={info.device_type.name} "
                    f"min_sdk={info.minimum_supported_sdk_version}"
                )
                for prop in _REPORTED_PROPERTIES:
                    if device.is_property_supported(prop, PermissionType.READ):
                        self.logger.info(f"    {prop.name} = {device.get_property(prop)}")
                if self.profiles:
                    self._log_profiles(device)
            return len(devices)

    def _log_profiles(self, device) -> None:
        pipeline = Pipeline(device)
        try:
            for sensor in (SensorType.DEPTH, SensorType.COLOR, SensorType.IR_LEFT):
                try:
                    profiles = pipeline.get_stream_profiles(sensor)
                except InvalidValueError:
                    self.logger.debug(f"    no {sensor.name} sensor")
                    continue
                self.logger.info(f"    {sensor.name}: {profiles.describe()}")
        finally:
            pipeline.close()


def add_arguments(parser: argparse.ArgumentParser) -> None:
    add_backend_argument(parser)
    parser.add_argument("--profiles", action="store_true", help="Also list stream profiles")


def run(args: argparse.Namespace) -> None:
    DeviceInfoCLI(backend=args.backend, profiles=args.profiles).run()


def main():
    parser = argparse.ArgumentParser(description="List Orbbec devices")
    add_arguments(parser)
    run(parser.parse_args())


if __name__ == "__main__":
    main()
