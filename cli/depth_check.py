# cli/depth_check.py
"""Stream depth and report the distance at the image centre."""

from __future__ import annotations

import argparse
from pathlib import Path

import cv2

from cli.session import CameraSession
from utils.cli import add_common_arguments
from utils.config import Config
from utils.io import colorize_depth, save_npy, write_image
from utils.logger import Logger
from utils.settings import DEPTH_EXT, IMAGE_EXT


class DepthCheckCLI:
    """Logs depth at the image centre for every frameset."""

    def __init__(self, session=None, frames=30, save_dir=None, logger=None):
        self.session = session or CameraSession()
        self.frames = frames
        self.save_dir = Path(save_dir) if save_dir else None
        self.logger = logger or Logger.get_logger("cli.depth_check")

    def run(self) -> list[float]:
        distances = []
        self.session.start(self.session.depth_profile())
        for frameset in self.session.framesets(self.frames, desc="depth"):
            depth = frameset.get_depth_frame()
            if depth is None:
                self.logger.warning("No depth frame in frameset")
                continue
            depth_mm = depth.to_millimeters()
            h, w = depth_mm.shape
            x, y = w // 2, h // 2
            distance = float(depth_mm[y, x])
            distances.append(distance)
            self.logger.info(f"Frame {depth.index}: centre distance {distance:.0f} mm")
            if self.save_dir is not None:
                vis = colorize_depth(depth_mm)
                cv2.circle(vis, (x, y), 5, (0, 0, 255), -1)
                cv2.putText(
                    vis,
                    f"{distance:.0f} mm",
                    (x + 10, y),
                    cv2.FONT_HERSHEY_SIMPLEX,
                    0.6,
                    (0, 0, 255),
                    2,
                )
                write_image(self.save_dir / f"depth_{depth.index:05d}{IMAGE_EXT}", vis)
                save_npy(self.save_dir / f"depth_{depth.index:05d}{DEPTH_EXT}", depth.to_numpy())
        self.session.pipeline.stop()
        return distances


def add_arguments(parser: argparse.ArgumentParser) -> None:
    add_common_arguments(parser)
    parser.add_argument("--save_dir", default=None, help="Save colour-mapped depth PNGs")


def run(args: argparse.Namespace) -> None:
    frames = args.frames or Config.get("capture.frames", 30)
    with CameraSession(args.backend, args.device) as session:
        DepthCheckCLI(session, frames=frames, save_dir=args.save_dir).run()


def main():
    parser = argparse.ArgumentParser(description="Depth centre distance check")
    add_arguments(parser)
    run(parser.parse_args())


if __name__ == "__main__":
    main()
