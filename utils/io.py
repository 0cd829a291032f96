"""File I/O helpers for captured frames and point clouds."""

from __future__ import annotations

from pathlib import Path

import cv2
import numpy as np
import open3d as o3d


def read_image(path: str | Path) -> np.ndarray | None:
    """Return an image from ``path`` or ``None`` if loading fails."""
    return cv2.imread(str(path))


def write_image(path: str | Path, img: np.ndarray) -> None:
    """Save an image to disk, creating parent directories."""
    Path(path).parent.mkdir(parents=True, exist_ok=True)
    cv2.imwrite(str(path), img)


def colorize_depth(depth_mm: np.ndarray, max_depth: float | None = None) -> np.ndarray:
    """Map a depth image in millimetres to a BGR JET colour image."""
    depth = np.nan_to_num(depth_mm.astype(np.float32))
    upper = float(max_depth) if max_depth else float(depth.max())
    if upper <= 0:
        return np.zeros((*depth.shape, 3), dtype=np.uint8)
    scaled = np.clip(depth / upper * 255.0, 0, 255).astype(np.uint8)
    return cv2.applyColorMap(scaled, cv2.COLORMAP_JET)


def blend_depth(color: np.ndarray, depth_mm: np.ndarray, alpha: float = 0.5) -> np.ndarray:
    """Overlay the colour-mapped depth over a BGR image of the same size."""
    depth_vis = colorize_depth(depth_mm)
    if depth_vis.shape[:2] != color.shape[:2]:
        depth_vis = cv2.resize(depth_vis, (color.shape[1], color.shape[0]))
    return cv2.addWeighted(color, 1.0 - alpha, depth_vis, alpha, 0)


def load_npy(path: str | Path) -> np.ndarray:
    """Load an ``.npy`` array."""
    return np.load(path)


def save_npy(path: str | Path, arr: np.ndarray) -> None:
    """Save an array to an ``.npy`` file."""
    np.save(path, arr)


def save_ply(
    path: str | Path, points: np.ndarray, colors: np.ndarray | None = None
) -> None:
    """Write ``points`` (N, 3) and optional ``colors`` in [0, 1] as PLY."""
    pcd = o3d.geometry.PointCloud()
    pcd.points = o3d.utility.Vector3dVector(np.asarray(points, dtype=np.float64))
    if colors is not None:
        pcd.colors = o3d.utility.Vector3dVector(np.asarray(colors, dtype=np.float64))
    Path(path).parent.mkdir(parents=True, exist_ok=True)
    o3d.io.write_point_cloud(str(path), pcd)


def load_ply(path: str | Path) -> tuple[np.ndarray, np.ndarray | None]:
    pcd = o3d.io.read_point_cloud(str(path))
    points = np.asarray(pcd.points)
    colors = np.asarray(pcd.colors) if pcd.has_colors() else None
    return points, colors
