import numpy as np
import pytest

from orbbec import Format, Pipeline, SensorType, StreamType
from orbbec.error import InvalidValueError


@pytest.fixture
def two_profile_list(runtime, context):
    dev = runtime.add_device(serial_number="SW0009")
    dev.add_profile(SensorType.DEPTH, 848, 480, Format.Y16, 15)
    dev.add_profile(SensorType.DEPTH, 1280, 720, Format.MJPG, 15)
    pipe = Pipeline(context.query_device_list().get(1))
    yield pipe.get_stream_profiles(SensorType.DEPTH)
    pipe.close()


def test_match_returns_first_profile(two_profile_list):
    profile = two_profile_list.match(848, 480, Format.Y16, 15)
    assert profile.key == (848, 480, Format.Y16, 15)
    assert profile.handle.raw is two_profile_list.get(0).handle.raw


def test_match_missing_profile_is_invalid_value(two_profile_list):
    with pytest.raises(InvalidValueError) as exc:
        two_profile_list.match(640, 480, Format.Y16, 30)
    assert "848x480 Y16" in exc.value.message


def test_match_every_listed_profile(pipeline):
    profiles = pipeline.get_stream_profiles(SensorType.COLOR)
    for profile in profiles:
        w, h, fmt, fps = profile.key
        assert profiles.match(w, h, fmt, fps).key == (w, h, fmt, fps)


def test_match_accepts_format_names(pipeline):
    profiles = pipeline.get_stream_profiles(SensorType.COLOR)
    assert profiles.match(1280, 720, "mjpg", 15).format == Format.MJPG


def test_duplicate_profiles_resolve_to_first(runtime, context):
    dev = runtime.add_device(serial_number="SW0010")
    first = dev.add_profile(SensorType.DEPTH, 640, 400, Format.Y16, 15)
    dev.add_profile(
        SensorType.DEPTH,
        640,
        400,
        Format.Y16,
        15,
        intrinsic={"fx": 1.0, "fy": 1.0, "cx": 0.0, "cy": 0.0, "width": 640, "height": 400},
    )
    pipe = Pipeline(context.query_device_list().get(1))
    profile = pipe.get_stream_profiles(SensorType.DEPTH).match(640, 400, Format.Y16, 15)
    assert profile.get_intrinsic().fx == pytest.approx(first.intrinsic["fx"])
    pipe.close()


def test_get_out_of_range_is_native_error(two_profile_list):
    with pytest.raises(InvalidValueError):
        two_profile_list.get(2)


def test_iteration_is_restartable(two_profile_list):
    first = [p.key for p in two_profile_list]
    second = [p.key for p in two_profile_list]
    assert first == second
    assert len(first) == len(two_profile_list) == 2


def test_describe_lists_profiles(two_profile_list):
    assert two_profile_list.describe() == "848x480 Y16 @15, 1280x720 MJPG @15"


def test_intrinsic_matrix(pipeline):
    profile = pipeline.get_stream_profiles(SensorType.DEPTH).match(848, 480, Format.Y16, 15)
    intr = profile.get_intrinsic()
    assert (intr.width, intr.height) == (848, 480)
    K = intr.as_matrix()
    assert K.shape == (3, 3)
    assert np.isclose(K[0, 0], intr.fx)
    assert np.isclose(K[1, 2], intr.cy)
    assert profile.stream_type == StreamType.DEPTH


def test_missing_sensor(runtime, context):
    runtime.add_device(serial_number="SW0011")
    pipe = Pipeline(context.query_device_list().get(1))
    with pytest.raises(InvalidValueError):
        pipe.get_stream_profiles(SensorType.COLOR)
    pipe.close()
