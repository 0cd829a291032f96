# cli/depth_aligned.py
"""Align depth to colour and save blended previews."""

from __future__ import annotations

import argparse
from pathlib import Path

from cli.session import CameraSession
from orbbec import AlignFilter, StreamType
from utils.cli import add_common_arguments
from utils.config import Config
from utils.io import blend_depth, write_image
from utils.logger import Logger
from utils.settings import IMAGE_EXT, paths


class DepthAlignedCLI:
    """Streams depth and colour in sync and aligns each frameset to colour."""

    def __init__(self, session=None, frames=30, out_dir=None, alpha=0.5, logger=None):
        self.session = session or CameraSession()
        self.frames = frames
        self.out_dir = Path(out_dir) if out_dir else paths.CAPTURES_DIR / "aligned"
        self.alpha = alpha
        self.logger = logger or Logger.get_logger("cli.depth_aligned")

    def run(self) -> int:
        depth_profile = self.session.depth_profile()
        color_profile = self.session.color_profile()
        align = AlignFilter(self.session.backend)
        align.set_align_to_stream_type(StreamType.COLOR)
        align.set_align_to_stream_profile(color_profile)
        self.session.start(depth_profile, color_profile, frame_sync=True)

        saved = 0
        for frameset in self.session.framesets(self.frames, desc="aligned"):
            if frameset.get_depth_frame() is None or frameset.get_color_frame() is None:
                self.logger.warning("Incomplete frameset, skipping")
                continue
            aligned = align.process(frameset)
            depth = aligned.get_depth_frame()
            color = aligned.get_color_frame()
            if depth is None or color is None:
                continue
            image = blend_depth(color.to_bgr(), depth.to_millimeters(), self.alpha)
            path = self.out_dir / f"aligned_{aligned.index:05d}{IMAGE_EXT}"
            write_image(path, image)
            saved += 1
        self.session.pipeline.stop()
        align.close()
        self.logger.info(f"Saved {saved} aligned previews to {self.out_dir}")
        return saved


def add_arguments(parser: argparse.ArgumentParser) -> None:
    add_common_arguments(parser)
    parser.add_argument("--out_dir", default=None, help="Output directory")
    parser.add_argument("--alpha", type=float, default=0.5, help="Depth overlay weight")


def run(args: argparse.Namespace) -> None:
    frames = args.frames or Config.get("capture.frames", 30)
    with CameraSession(args.backend, args.device) as session:
        DepthAlignedCLI(session, frames=frames, out_dir=args.out_dir, alpha=args.alpha).run()


def main():
    parser = argparse.ArgumentParser(description="Depth aligned to colour")
    add_arguments(parser)
    run(parser.parse_args())


if __name__ == "__main__":
    main()
