"""Shared helper modules used across the project.

The :mod:`utils` package contains lightweight helpers for logging,
configuration, CLI dispatching and frame I/O used by the binding and the
command line tools.
"""

from .logger import Logger, LoggerType
from .settings import (
    CLOUD_EXT,
    DEPTH_EXT,
    IMAGE_EXT,
    filters,
    logging,
    paths,
    sdk,
    stream,
)
from .io import (
    blend_depth,
    colorize_depth,
    load_npy,
    load_ply,
    read_image,
    save_npy,
    save_ply,
    write_image,
)

__all__ = [
    "Logger",
    "LoggerType",
    "CLOUD_EXT",
    "DEPTH_EXT",
    "IMAGE_EXT",
    "filters",
    "logging",
    "paths",
    "sdk",
    "stream",
    "blend_depth",
    "colorize_depth",
    "load_npy",
    "load_ply",
    "read_image",
    "save_npy",
    "save_ply",
    "write_image",
]
