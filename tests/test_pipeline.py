import threading

import pytest
from loguru import logger as loguru_logger

from orbbec import (
    AlignMode,
    Config,
    Format,
    FrameAggregateOutputMode,
    LogSeverity,
    Pipeline,
    PipelineState,
    SdkLogger,
    SensorType,
)
from orbbec.error import CameraDisconnectedError, InvalidValueError, WrongAPICallSequenceError
from tests.helpers import color_image, depth_color_config, depth_config, depth_image


def _roles(frameset):
    roles = set()
    if frameset.get_depth_frame() is not None:
        roles.add("depth")
    if frameset.get_color_frame() is not None:
        roles.add("color")
    return roles


def test_state_transitions(pipeline):
    assert pipeline.state == PipelineState.CREATED
    pipeline.start(depth_config(pipeline))
    assert pipeline.state == PipelineState.STARTED
    pipeline.stop()
    assert pipeline.state == PipelineState.STOPPED
    pipeline.close()
    assert pipeline.state == PipelineState.CLOSED


def test_start_twice_is_wrong_sequence(pipeline):
    pipeline.start(depth_config(pipeline))
    with pytest.raises(WrongAPICallSequenceError):
        pipeline.start(depth_config(pipeline))


def test_start_without_streams_keeps_created(pipeline):
    with pytest.raises(InvalidValueError):
        pipeline.start(Config())
    assert pipeline.state == PipelineState.CREATED


def test_stop_is_idempotent_and_restart_works(pipeline, sw_device):
    pipeline.stop()
    pipeline.start(depth_config(pipeline))
    pipeline.stop()
    pipeline.stop()
    assert pipeline.state == PipelineState.STOPPED
    pipeline.start(depth_config(pipeline))
    assert sw_device.push_frame(SensorType.DEPTH, depth_image())
    assert pipeline.wait_for_frameset(1000) is not None


def test_wait_timeout_returns_none(pipeline):
    pipeline.start(depth_config(pipeline))
    assert pipeline.wait_for_frameset(0) is None
    assert pipeline.wait_for_frameset(10) is None


def test_wait_before_start_is_wrong_sequence(pipeline):
    with pytest.raises(WrongAPICallSequenceError):
        pipeline.wait_for_frameset(0)


def test_device_streams_in_one_pipeline_only(pipeline, context):
    pipeline.start(depth_config(pipeline))
    other = Pipeline(context.query_device_list().get(0))
    with pytest.raises(WrongAPICallSequenceError):
        other.start(depth_config(other))
    pipeline.stop()
    other.start(depth_config(other))
    other.close()


def test_get_device(pipeline):
    assert pipeline.get_device().info().serial_number == "SW0001"


def test_callback_receives_framesets(pipeline, sw_device):
    received = []
    done = threading.Event()

    def on_frameset(frameset):
        received.append(frameset.get_depth_frame().index)
        if len(received) == 3:
            done.set()

    pipeline.start_with_callback(depth_config(pipeline), on_frameset)
    for _ in range(3):
        sw_device.push_frame(SensorType.DEPTH, depth_image())
    assert done.wait(2.0)
    assert received == [0, 1, 2]
    with pytest.raises(WrongAPICallSequenceError):
        pipeline.wait_for_frameset(0)


def test_stop_ends_delivery(pipeline, sw_device):
    received = []
    pipeline.start_with_callback(depth_config(pipeline), received.append)
    pipeline.stop()
    count = len(received)
    assert not sw_device.push_frame(SensorType.DEPTH, depth_image())
    assert len(received) == count


def test_stop_from_inside_callback(pipeline, sw_device):
    done = threading.Event()

    def on_frameset(frameset):
        pipeline.stop()
        done.set()

    pipeline.start_with_callback(depth_config(pipeline), on_frameset)
    sw_device.push_frame(SensorType.DEPTH, depth_image())
    assert done.wait(2.0)
    assert pipeline.state == PipelineState.STOPPED


def test_callback_exception_is_logged(pipeline, sw_device):
    messages = []
    sink = loguru_logger.add(lambda m: messages.append(m.record["message"]), level="ERROR")
    raised = threading.Event()

    def on_frameset(frameset):
        raised.set()
        raise RuntimeError("boom")

    try:
        pipeline.start_with_callback(depth_config(pipeline), on_frameset)
        sw_device.push_frame(SensorType.DEPTH, depth_image())
        assert raised.wait(2.0)
        # stop joins the delivery thread, so the exception has been logged
        pipeline.stop()
    finally:
        loguru_logger.remove(sink)
    assert "Frameset callback raised" in messages


def test_callback_must_be_callable(pipeline):
    with pytest.raises(TypeError):
        pipeline.start_with_callback(depth_config(pipeline), "not callable")
    assert pipeline.state == PipelineState.CREATED


def test_sync_all_waits_for_every_stream(pipeline, sw_device):
    pipeline.set_frame_sync(True)
    pipeline.start(depth_color_config(pipeline))
    sw_device.push_frame(SensorType.DEPTH, depth_image(), timestamp_us=1000)
    assert pipeline.wait_for_frameset(0) is None
    sw_device.push_frame(SensorType.COLOR, color_image(), timestamp_us=1000)
    assert _roles(pipeline.wait_for_frameset(1000)) == {"depth", "color"}


def test_sync_drops_frames_outside_tolerance(pipeline, sw_device):
    pipeline.set_frame_sync(True)
    pipeline.start(depth_color_config(pipeline))
    sw_device.push_frame(SensorType.DEPTH, depth_image(), timestamp_us=0)
    sw_device.push_frame(SensorType.COLOR, color_image(), timestamp_us=1_000_000)
    assert pipeline.wait_for_frameset(0) is None
    sw_device.push_frame(SensorType.DEPTH, depth_image(), timestamp_us=1_000_000)
    frameset = pipeline.wait_for_frameset(1000)
    assert frameset.get_depth_frame().timestamp_us == 1_000_000


def test_color_required_mode(pipeline, sw_device):
    config = depth_color_config(pipeline)
    config.set_frame_aggregate_output_mode(FrameAggregateOutputMode.COLOR_FRAME_REQUIRE)
    pipeline.set_frame_sync(True)
    pipeline.start(config)
    sw_device.push_frame(SensorType.DEPTH, depth_image(), timestamp_us=1000)
    assert pipeline.wait_for_frameset(0) is None
    sw_device.push_frame(SensorType.COLOR, color_image(), timestamp_us=1000)
    assert _roles(pipeline.wait_for_frameset(1000)) == {"depth", "color"}
    # colour without depth is delivered alone once its window closes
    sw_device.push_frame(SensorType.COLOR, color_image(), timestamp_us=5_000_000)
    assert pipeline.wait_for_frameset(0) is None
    sw_device.push_frame(SensorType.DEPTH, depth_image(), timestamp_us=10_000_000)
    assert _roles(pipeline.wait_for_frameset(1000)) == {"color"}
    # a depth frame without colour is dropped
    sw_device.push_frame(SensorType.COLOR, color_image(), timestamp_us=15_000_000)
    assert pipeline.wait_for_frameset(0) is None


def test_color_required_mode_with_color_first(pipeline, sw_device):
    config = depth_color_config(pipeline)
    config.set_frame_aggregate_output_mode(FrameAggregateOutputMode.COLOR_FRAME_REQUIRE)
    pipeline.set_frame_sync(True)
    pipeline.start(config)
    for ts in (0, 66_666, 133_333):
        sw_device.push_frame(SensorType.COLOR, color_image(), timestamp_us=ts)
        sw_device.push_frame(SensorType.DEPTH, depth_image(), timestamp_us=ts)
    roles = [_roles(pipeline.wait_for_frameset(1000)) for _ in range(3)]
    assert roles == [{"depth", "color"}] * 3


def test_any_situation_mode(pipeline, sw_device):
    config = depth_color_config(pipeline)
    config.set_frame_aggregate_output_mode(FrameAggregateOutputMode.ANY_SITUATION)
    pipeline.set_frame_sync(True)
    pipeline.start(config)
    sw_device.push_frame(SensorType.DEPTH, depth_image(), timestamp_us=1000)
    sw_device.push_frame(SensorType.COLOR, color_image(), timestamp_us=1000)
    assert _roles(pipeline.wait_for_frameset(1000)) == {"depth", "color"}
    sw_device.push_frame(SensorType.DEPTH, depth_image(), timestamp_us=5_000_000)
    assert pipeline.wait_for_frameset(0) is None
    sw_device.push_frame(SensorType.COLOR, color_image(), timestamp_us=10_000_000)
    assert _roles(pipeline.wait_for_frameset(1000)) == {"depth"}


def test_without_sync_every_frame_is_its_own_frameset(pipeline, sw_device):
    pipeline.start(depth_color_config(pipeline))
    sw_device.push_frame(SensorType.DEPTH, depth_image(), timestamp_us=1000)
    sw_device.push_frame(SensorType.COLOR, color_image(), timestamp_us=1000)
    assert _roles(pipeline.wait_for_frameset(1000)) == {"depth"}
    assert _roles(pipeline.wait_for_frameset(1000)) == {"color"}


def test_disabled_stream_never_appears(pipeline, sw_device):
    pipeline.set_frame_sync(True)
    pipeline.start(depth_config(pipeline))
    assert not sw_device.push_frame(SensorType.COLOR, color_image())
    sw_device.push_frame(SensorType.DEPTH, depth_image())
    assert _roles(pipeline.wait_for_frameset(1000)) == {"depth"}
    assert pipeline.wait_for_frameset(0) is None


def test_slow_consumer_drops_oldest(pipeline, sw_device):
    pipeline.start(depth_config(pipeline))
    for _ in range(20):
        sw_device.push_frame(SensorType.DEPTH, depth_image())
    indexes = []
    frameset = pipeline.wait_for_frameset(0)
    while frameset is not None:
        indexes.append(frameset.get_depth_frame().index)
        frameset = pipeline.wait_for_frameset(0)
    assert indexes == list(range(4, 20))


def test_disconnect_fails_wait(pipeline, sw_device):
    pipeline.start(depth_config(pipeline))
    sw_device.disconnect()
    with pytest.raises(CameraDisconnectedError):
        pipeline.wait_for_frameset(100)
    pipeline.stop()
    assert pipeline.state == PipelineState.STOPPED


def test_disconnect_ends_callback_delivery(pipeline, sw_device):
    received = []
    delivered = threading.Event()
    errors = []

    def on_frameset(frameset):
        received.append(frameset.index)
        delivered.set()

    with SdkLogger.set_callback(LogSeverity.ERROR, lambda sev, msg: errors.append(msg)):
        pipeline.start_with_callback(depth_config(pipeline), on_frameset)
        sw_device.push_frame(SensorType.DEPTH, depth_image())
        assert delivered.wait(2.0)
        sw_device.disconnect()
        assert not sw_device.push_frame(SensorType.DEPTH, depth_image())
        pipeline.stop()
    assert len(received) == 1
    assert any("SW0001 disconnected" in msg for msg in errors)
    assert pipeline.state == PipelineState.STOPPED


def test_d2c_depth_profiles(pipeline):
    color = pipeline.get_stream_profiles(SensorType.COLOR).match(1280, 720, Format.MJPG, 15)
    depth_profiles = pipeline.get_d2c_depth_profiles(color, AlignMode.HW)
    assert len(depth_profiles) == 3
    assert all(p.fps == 15 for p in depth_profiles)
    with pytest.raises(InvalidValueError):
        pipeline.get_d2c_depth_profiles(color, AlignMode.DISABLE)


def test_aligned_start_needs_compatible_pair(pipeline):
    config = Config()
    config.enable_stream(pipeline.get_stream_profiles(SensorType.DEPTH).match(848, 480, Format.Y16, 30))
    config.enable_stream(pipeline.get_stream_profiles(SensorType.COLOR).match(1280, 720, Format.MJPG, 15))
    config.set_align_mode(AlignMode.HW)
    with pytest.raises(InvalidValueError):
        pipeline.start(config)


def test_aligned_start(pipeline, sw_device):
    config = depth_color_config(pipeline, Format.MJPG)
    config.set_align_mode(AlignMode.SW)
    config.set_depth_scale_after_align_require(True)
    pipeline.start(config)
    assert pipeline.state == PipelineState.STARTED
