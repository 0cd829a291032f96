import numpy as np

from orbbec import Config, Format, SensorType


def depth_config(pipeline, width=848, height=480, fps=15):
    config = Config()
    profiles = pipeline.get_stream_profiles(SensorType.DEPTH)
    config.enable_stream(profiles.match(width, height, Format.Y16, fps))
    return config


def depth_color_config(pipeline, color_format=Format.RGB, fps=15):
    config = Config()
    depth = pipeline.get_stream_profiles(SensorType.DEPTH).match(848, 480, Format.Y16, fps)
    color = pipeline.get_stream_profiles(SensorType.COLOR).match(1280, 720, color_format, fps)
    config.enable_stream(depth)
    config.enable_stream(color)
    return config


def depth_image(value=1000, width=848, height=480):
    return np.full((height, width), value, dtype=np.uint16)


def color_image(width=1280, height=720):
    img = np.zeros((height, width, 3), dtype=np.uint8)
    img[..., 0] = 10
    img[..., 1] = 20
    img[..., 2] = 30
    return img
