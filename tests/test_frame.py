import numpy as np
import pytest

from orbbec import (
    ColorFrame,
    Config,
    DepthFrame,
    Format,
    FrameAggregateOutputMode,
    FrameSet,
    FrameType,
    Pipeline,
    SensorType,
)
from tests.helpers import color_image, depth_color_config, depth_config, depth_image


def test_depth_frame_accessors(pipeline, sw_device):
    pipeline.start(depth_config(pipeline))
    image = depth_image(1234)
    assert sw_device.push_frame(SensorType.DEPTH, image, timestamp_us=5000)
    frameset = pipeline.wait_for_frameset(1000)
    assert isinstance(frameset, FrameSet)
    depth = frameset.get_depth_frame()
    assert isinstance(depth, DepthFrame)
    assert depth.frame_type == FrameType.DEPTH
    assert depth.format == Format.Y16
    assert (depth.width, depth.height) == (848, 480)
    assert depth.index == 0
    assert depth.timestamp_us == 5000
    assert depth.system_timestamp_us > 0
    assert depth.global_timestamp_us > 0
    assert depth.data_size == 848 * 480 * 2
    assert np.array_equal(depth.to_numpy(), image)


def test_depth_scale_gives_millimeters(runtime, context):
    dev = runtime.add_device(serial_number="SW0002", depth_scale=0.5)
    dev.add_profile(SensorType.DEPTH, 640, 400, Format.Y16, 15)
    pipe = Pipeline(context.query_device_list().get(1))
    pipe.start(depth_config(pipe, 640, 400))
    dev.push_frame(SensorType.DEPTH, depth_image(2000, 640, 400))
    depth = pipe.wait_for_frameset(1000).get_depth_frame()
    assert depth.depth_scale == 0.5
    assert np.allclose(depth.to_millimeters(), 1000.0)
    pipe.close()


def test_mjpg_color_frame_is_decoded(pipeline, sw_device):
    config = Config()
    profiles = pipeline.get_stream_profiles(SensorType.COLOR)
    config.enable_stream(profiles.match(1280, 720, Format.MJPG, 15))
    pipeline.start(config)
    sw_device.push_frame(SensorType.COLOR, color_image())
    color = pipeline.wait_for_frameset(1000).get_color_frame()
    assert isinstance(color, ColorFrame)
    assert color.format == Format.MJPG
    bgr = color.to_bgr()
    assert bgr.shape == (720, 1280, 3)
    assert abs(int(bgr[0, 0, 0]) - 10) < 4


def test_rgb_color_frame(pipeline, sw_device):
    config = Config()
    profiles = pipeline.get_stream_profiles(SensorType.COLOR)
    config.enable_stream(profiles.match(640, 480, Format.RGB, 30))
    pipeline.start(config)
    image = color_image(640, 480)
    sw_device.push_frame(SensorType.COLOR, image)
    color = pipeline.wait_for_frameset(1000).get_color_frame()
    assert np.array_equal(color.to_numpy(), image)
    assert np.array_equal(color.to_bgr()[..., 0], image[..., 2])


def test_frameset_with_only_color_has_no_depth(pipeline, sw_device):
    config = depth_color_config(pipeline)
    config.set_frame_aggregate_output_mode(FrameAggregateOutputMode.ANY_SITUATION)
    pipeline.set_frame_sync(True)
    pipeline.start(config)
    sw_device.push_frame(SensorType.COLOR, color_image())
    frameset = pipeline.wait_for_frameset(1000)
    assert frameset.get_depth_frame() is None
    assert frameset.get_color_frame() is not None
    assert frameset.get_points_frame() is None


def test_wrong_size_frame_is_rejected(pipeline, sw_device):
    pipeline.start(depth_config(pipeline))
    with pytest.raises(ValueError):
        sw_device.push_frame(SensorType.DEPTH, depth_image(1, 10, 10))


def test_push_without_running_pipeline_is_dropped(sw_device):
    assert not sw_device.push_frame(SensorType.DEPTH, depth_image())
