# cli/pointcloud_capture.py
"""Capture point clouds from an aligned depth+colour stream."""

from __future__ import annotations

import argparse
from pathlib import Path

import numpy as np

from cli.session import CameraSession
from orbbec import AlignFilter, DeviceProperty, PermissionType, PointCloudFilter
from orbbec.error import OrbbecError
from utils.cli import add_common_arguments
from utils.config import Config
from utils.io import save_ply
from utils.logger import Logger
from utils.settings import CLOUD_EXT, paths


class PointCloudCaptureCLI:
    """Aligns each frameset to colour and writes it as a PLY point cloud."""

    def __init__(self, session=None, frames=1, out_dir=None, color=True, logger=None):
        self.session = session or CameraSession()
        self.frames = frames
        self.out_dir = Path(out_dir) if out_dir else paths.CLOUD_DIR
        self.color = color
        self.logger = logger or Logger.get_logger("cli.pointcloud_capture")

    def _prepare_device(self) -> None:
        device = self.session.device
        try:
            device.load_preset("High Accuracy")
        except OrbbecError as e:
            self.logger.warning(f"Preset not loaded (may not be supported): {e}")

        hw_noise = DeviceProperty.HWNoiseRemoveFilterEnable(True)
        if device.is_property_supported(hw_noise, PermissionType.WRITE):
            device.set_property(hw_noise)
            device.set_property(DeviceProperty.HWNoiseRemoveFilterThreshold(0.2))
            device.set_property(DeviceProperty.DepthNoiseRemovalFilter(False))
            self.logger.info("Using hardware depth noise filter")
        else:
            device.set_property(DeviceProperty.DepthNoiseRemovalFilter(True))
            device.set_property(DeviceProperty.DepthNoiseRemovalFilterMaxDiff(256))
            device.set_property(DeviceProperty.DepthNoiseRemovalFilterMaxSpeckleSize(80))
            self.logger.info("Using software depth noise filter")

    def run(self) -> list[Path]:
        self._prepare_device()
        depth_profile = self.session.depth_profile()
        color_profile = self.session.color_profile()
        align = AlignFilter(self.session.backend)
        align.set_align_to_stream_profile(color_profile)
        cloud = PointCloudFilter(self.session.backend)
        cloud.set_color(self.color)
        self.session.start(depth_profile, color_profile, frame_sync=True)

        written = []
        for frameset in self.session.framesets(self.frames, desc="clouds"):
            if frameset.get_color_frame() is None:
                self.logger.warning("No color frame found")
                continue
            if frameset.get_depth_frame() is None:
                self.logger.warning("No depth frame found")
                continue
            points_frame = cloud.process(align.process(frameset))
            points = points_frame.to_millimeters()
            valid = points[:, 2] > 0
            xyz = points[valid, :3] / 1000.0
            colors = None
            if points_frame.has_color():
                rgb = points[valid, 3:6]
                colors = np.clip(rgb / 255.0, 0.0, 1.0)
            path = self.out_dir / f"cloud_{points_frame.index:05d}{CLOUD_EXT}"
            save_ply(path, xyz, colors)
            self.logger.info(f"Saved {len(xyz)} points to {path}")
            written.append(path)
        self.session.pipeline.stop()
        cloud.close()
        align.close()
        return written


def add_arguments(parser: argparse.ArgumentParser) -> None:
    add_common_arguments(parser)
    parser.add_argument("--out_dir", default=None, help="Output directory for PLY files")
    parser.add_argument("--no-color", action="store_true", help="Geometry only")


def run(args: argparse.Namespace) -> None:
    frames = args.frames or 1
    out_dir = args.out_dir or Config.get("capture.cloud_dir", None)
    with CameraSession(args.backend, args.device) as session:
        PointCloudCaptureCLI(
            session, frames=frames, out_dir=out_dir, color=not args.no_color
        ).run()


def main():
    parser = argparse.ArgumentParser(description="Capture and save point clouds")
    add_arguments(parser)
    run(parser.parse_args())


if __name__ == "__main__":
    main()
