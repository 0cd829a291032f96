"""Command line entry point for the camera tools."""

from __future__ import annotations

from cli import depth_aligned, depth_check, depth_filtered, device_info, pointcloud_capture
from utils.cli import Command, CommandDispatcher
from utils.logger import Logger


def create_cli() -> CommandDispatcher:
    """Build the dispatcher with all camera commands."""
    return CommandDispatcher(
        "Orbbec camera tools",
        [
            Command("devices", device_info.run, device_info.add_arguments, "List devices"),
            Command("depth", depth_check.run, depth_check.add_arguments, "Centre depth check"),
            Command(
                "filtered",
                depth_filtered.run,
                depth_filtered.add_arguments,
                "Depth through the filter chain",
            ),
            Command(
                "aligned",
                depth_aligned.run,
                depth_aligned.add_arguments,
                "Depth aligned to colour",
            ),
            Command(
                "points",
                pointcloud_capture.run,
                pointcloud_capture.add_arguments,
                "Capture point clouds",
            ),
        ],
    )


def main() -> None:
    """Entry point for the ``orbbec-cli`` script."""
    logger = Logger.get_logger("main")
    raise SystemExit(create_cli().run(logger=logger))


if __name__ == "__main__":
    main()
