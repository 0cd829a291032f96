import numpy as np

from utils.io import (
    blend_depth,
    colorize_depth,
    load_npy,
    load_ply,
    read_image,
    save_npy,
    save_ply,
    write_image,
)


def test_colorize_depth_shape_and_zero_image():
    depth = np.tile(np.linspace(0, 4000, 64, dtype=np.float32), (32, 1))
    vis = colorize_depth(depth)
    assert vis.shape == (32, 64, 3)
    assert vis.dtype == np.uint8
    blank = colorize_depth(np.zeros((4, 4)))
    assert not blank.any()


def test_blend_depth_resizes_to_color():
    color = np.full((40, 60, 3), 100, dtype=np.uint8)
    depth = np.full((20, 30), 1000.0)
    out = blend_depth(color, depth, alpha=0.0)
    assert out.shape == color.shape
    assert np.array_equal(out, color)


def test_write_image_creates_parents(tmp_path):
    img = np.zeros((8, 8, 3), dtype=np.uint8)
    path = tmp_path / "a" / "b" / "img.png"
    write_image(path, img)
    assert np.array_equal(read_image(path), img)
    assert read_image(tmp_path / "missing.png") is None


def test_npy_round_trip(tmp_path):
    arr = np.arange(12, dtype=np.uint16).reshape(3, 4)
    save_npy(tmp_path / "depth.npy", arr)
    assert np.array_equal(load_npy(tmp_path / "depth.npy"), arr)


def test_ply_with_colors(tmp_path):
    points = np.array([[0.0, 0.0, 1.0], [0.1, 0.2, 1.5]])
    colors = np.array([[1.0, 0.0, 0.0], [0.0, 1.0, 0.0]])
    path = tmp_path / "clouds" / "cloud.ply"
    save_ply(path, points, colors)
    loaded, loaded_colors = load_ply(path)
    assert np.allclose(loaded, points)
    assert np.allclose(loaded_colors, colors, atol=1e-2)


def test_ply_without_colors(tmp_path):
    save_ply(tmp_path / "bare.ply", np.zeros((3, 3)))
    _, colors = load_ply(tmp_path / "bare.ply")
    assert colors is None
