# cli/depth_filtered.py
"""Stream depth through the post-processing filter chain."""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import List

from cli.session import CameraSession
from orbbec import (
    DecimationFilter,
    DepthFrame,
    DeviceProperty,
    Filter,
    HoleFillingFilter,
    HoleFillMode,
    PermissionType,
    SpatialModerateFilter,
    TemporalFilter,
    ThresholdFilter,
)
from orbbec.error import NotImplementedFeatureError
from utils.cli import add_common_arguments
from utils.config import Config
from utils.io import colorize_depth, write_image
from utils.logger import Logger
from utils.settings import IMAGE_EXT, FilterCfg, filters


def build_filter_chain(cfg: FilterCfg, logger=None, backend=None) -> List[Filter]:
    """Decimation -> spatial -> temporal -> hole filling -> threshold.

    Optional filters missing from the runtime are left out of the chain.
    """
    logger = logger or Logger.get_logger("cli.depth_filtered")
    chain: List[Filter] = []

    decimation = DecimationFilter(backend)
    decimation.set_factor(cfg.decimation)
    chain.append(decimation)

    def optional(factory, configure):
        try:
            flt = factory(backend)
        except NotImplementedFeatureError as e:
            logger.warning(f"Skipping filter: {e}")
            return
        configure(flt)
        chain.append(flt)

    def spatial(flt: SpatialModerateFilter):
        flt.set_radius(cfg.spatial_radius)
        flt.set_magnitude(cfg.spatial_magnitude)
        flt.set_threshold(cfg.spatial_threshold)

    def temporal(flt: TemporalFilter):
        flt.set_threshold(cfg.temporal_threshold)
        flt.set_weight(cfg.temporal_weight)

    def hole_filling(flt: HoleFillingFilter):
        flt.set_mode(HoleFillMode[cfg.hole_filling.upper()])

    optional(SpatialModerateFilter, spatial)
    optional(TemporalFilter, temporal)
    optional(HoleFillingFilter, hole_filling)

    threshold = ThresholdFilter(backend)
    threshold.set_min_depth(cfg.min_depth)
    threshold.set_max_depth(cfg.max_depth)
    chain.append(threshold)
    return chain


def apply_chain(chain: List[Filter], depth: DepthFrame) -> DepthFrame:
    for flt in chain:
        depth = flt.process(depth)
    return depth


class DepthFilteredCLI:
    """Runs every depth frame through the configured filter chain."""

    def __init__(self, session=None, frames=30, save_dir=None, logger=None):
        self.session = session or CameraSession()
        self.frames = frames
        self.save_dir = Path(save_dir) if save_dir else None
        self.logger = logger or Logger.get_logger("cli.depth_filtered")
        self.cfg = Config.section("filters", filters)

    def _enable_noise_removal(self) -> None:
        device = self.session.device
        prop = DeviceProperty.DepthNoiseRemovalFilter
        if device.is_property_supported(prop, PermissionType.WRITE):
            device.set_property(prop(True))

    def run(self) -> int:
        self._enable_noise_removal()
        chain = build_filter_chain(self.cfg, self.logger, self.session.backend)
        self.logger.info("Filter chain: " + " -> ".join(f.name for f in chain))
        self.session.start(self.session.depth_profile())
        processed = 0
        for frameset in self.session.framesets(self.frames, desc="filtered"):
            depth = frameset.get_depth_frame()
            if depth is None:
                continue
            filtered = apply_chain(chain, depth)
            processed += 1
            if self.save_dir is not None:
                vis = colorize_depth(filtered.to_millimeters(), self.cfg.max_depth)
                write_image(self.save_dir / f"filtered_{filtered.index:05d}{IMAGE_EXT}", vis)
        self.session.pipeline.stop()
        for flt in chain:
            flt.close()
        self.logger.info(f"Filtered {processed} depth frames")
        return processed


def add_arguments(parser: argparse.ArgumentParser) -> None:
    add_common_arguments(parser)
    parser.add_argument("--save_dir", default=None, help="Save colour-mapped filtered depth")


def run(args: argparse.Namespace) -> None:
    frames = args.frames or Config.get("capture.frames", 30)
    with CameraSession(args.backend, args.device) as session:
        DepthFilteredCLI(session, frames=frames, save_dir=args.save_dir).run()


def main():
    parser = argparse.ArgumentParser(description="Filtered depth stream")
    add_arguments(parser)
    run(parser.parse_args())


if __name__ == "__main__":
    main()
