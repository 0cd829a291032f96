import numpy as np
import pytest

from orbbec import (
    AlignFilter,
    ColorFrame,
    Config,
    ConvertFormat,
    CoordinateSystem,
    DecimationFilter,
    DepthFrame,
    FilterConfigValueType,
    Format,
    FormatConvertFilter,
    FrameSet,
    HoleFillingFilter,
    HoleFillMode,
    PointCloudFilter,
    PointCloudFrame,
    SensorType,
    SpatialAdvancedFilter,
    SpatialFastFilter,
    SpatialModerateFilter,
    StreamType,
    TemporalFilter,
    ThresholdFilter,
)
from orbbec.error import InvalidValueError, NotImplementedFeatureError, UnsupportedOperationError
from tests.helpers import color_image, depth_color_config, depth_config, depth_image

ALL_FILTERS = [
    DecimationFilter,
    FormatConvertFilter,
    HoleFillingFilter,
    TemporalFilter,
    SpatialFastFilter,
    SpatialModerateFilter,
    SpatialAdvancedFilter,
    ThresholdFilter,
    AlignFilter,
    PointCloudFilter,
]


@pytest.fixture
def depth_frame(pipeline, sw_device):
    pipeline.start(depth_config(pipeline))
    ramp = np.tile(np.arange(848, dtype=np.uint16) + 500, (480, 1))
    sw_device.push_frame(SensorType.DEPTH, ramp)
    return pipeline.wait_for_frameset(1000).get_depth_frame()


@pytest.fixture
def aligned_set(pipeline, sw_device):
    pipeline.set_frame_sync(True)
    pipeline.start(depth_color_config(pipeline))
    sw_device.push_frame(SensorType.DEPTH, depth_image(1000), timestamp_us=1000)
    sw_device.push_frame(SensorType.COLOR, color_image(), timestamp_us=1000)
    return pipeline.wait_for_frameset(1000)


@pytest.mark.parametrize("cls", ALL_FILTERS)
def test_every_filter_constructs_with_its_name(backend, cls):
    flt = cls()
    assert flt.name == cls.NAME
    schema = flt.get_config_schema()
    assert schema
    for item in schema:
        assert item.min <= item.default <= item.max
        assert item.type in (
            FilterConfigValueType.INT,
            FilterConfigValueType.FLOAT,
            FilterConfigValueType.BOOL,
        )
    flt.close()


@pytest.mark.parametrize(
    "cls", [HoleFillingFilter, TemporalFilter, SpatialFastFilter, SpatialModerateFilter, SpatialAdvancedFilter]
)
def test_optional_filter_absent_is_not_implemented(backend, runtime, cls):
    runtime.remove_filter(cls.NAME)
    with pytest.raises(NotImplementedFeatureError) as exc:
        cls()
    assert cls.NAME in exc.value.message
    assert exc.value.function == f"{cls.NAME}::new"


@pytest.mark.parametrize("cls", [DecimationFilter, FormatConvertFilter, ThresholdFilter, AlignFilter])
def test_required_filter_absent_is_invariant_violation(backend, runtime, cls):
    runtime.remove_filter(cls.NAME)
    with pytest.raises(RuntimeError):
        cls()


def test_setters_write_through(backend):
    spatial = SpatialAdvancedFilter()
    spatial.set_alpha(0.3)
    spatial.set_threshold(200)
    spatial.set_radius(2)
    spatial.set_magnitude(4)
    assert spatial._get("alpha") == pytest.approx(0.3)
    assert spatial._get("disp_diff") == 200
    assert spatial._get("radius") == 2
    assert spatial._get("magnitude") == 4

    temporal = TemporalFilter()
    temporal.set_threshold(0.2)
    temporal.set_weight(0.5)
    assert temporal._get("diff_scale") == pytest.approx(0.2)
    assert temporal._get("weight") == pytest.approx(0.5)

    hole = HoleFillingFilter()
    hole.set_mode(HoleFillMode.NEAREST)
    assert hole._get("hole_filling_mode") == 1

    threshold = ThresholdFilter()
    threshold.set_min_depth(100)
    threshold.set_max_depth(3000)
    assert (threshold._get("min"), threshold._get("max")) == (100, 3000)

    align = AlignFilter()
    align.set_add_distortion(True)
    align.set_gap_fill(False)
    align.set_match_resolution(False)
    align.set_align_to_stream_type(StreamType.DEPTH)
    assert align._get("TargetDistortion") == 1
    assert align._get("GapFillCopy") == 0
    assert align._get("MatchTargetRes") == 0
    assert align._get("AlignType") == int(StreamType.DEPTH)


def test_unconfigured_filter_uses_defaults(backend):
    assert DecimationFilter()._get("decimate") == 1
    assert HoleFillingFilter()._get("hole_filling_mode") == int(HoleFillMode.FARTHEST)


def test_out_of_range_setting(backend):
    decimation = DecimationFilter()
    with pytest.raises(InvalidValueError):
        decimation.set_factor(9)
    spatial = SpatialModerateFilter()
    with pytest.raises(InvalidValueError):
        spatial.set_radius(1)


def test_wrong_python_types(backend):
    with pytest.raises(TypeError):
        DecimationFilter().set_factor(2.5)
    with pytest.raises(TypeError):
        TemporalFilter().set_weight("heavy")
    with pytest.raises(TypeError):
        AlignFilter().set_gap_fill(1)
    with pytest.raises(TypeError):
        HoleFillingFilter().set_mode(2)


def test_process_returns_new_frame_of_same_class(depth_frame):
    for cls in (DecimationFilter, SpatialFastFilter, TemporalFilter, HoleFillingFilter, ThresholdFilter):
        out = cls().process(depth_frame)
        assert type(out) is DepthFrame
        assert out.handle.raw is not depth_frame.handle.raw
        assert np.array_equal(out.to_numpy(), depth_frame.to_numpy())


def test_fresh_instances_agree(depth_frame):
    first = TemporalFilter().process(depth_frame).to_numpy()
    second = TemporalFilter().process(depth_frame).to_numpy()
    assert np.array_equal(first, second)


def test_filters_chain_explicitly(depth_frame):
    decimation = DecimationFilter()
    decimation.set_factor(2)
    threshold = ThresholdFilter()
    out = threshold.process(decimation.process(depth_frame))
    assert isinstance(out, DepthFrame)


def test_depth_filter_rejects_color(pipeline, sw_device):
    config = Config()
    config.enable_stream(pipeline.get_stream_profiles(SensorType.COLOR).match(640, 480, Format.RGB, 30))
    pipeline.start(config)
    sw_device.push_frame(SensorType.COLOR, color_image(640, 480))
    color = pipeline.wait_for_frameset(1000).get_color_frame()
    with pytest.raises(TypeError):
        ThresholdFilter().process(color)


def test_reset_clears_history(backend, depth_frame, runtime):
    temporal = TemporalFilter()
    temporal.process(depth_frame)
    temporal._handle.raw.state["previous"] = b"x"
    temporal.reset()
    assert temporal._handle.raw.state == {}


def test_custom_processor_is_used(backend, runtime, depth_frame):
    def halve(flt, frame):
        data = (frame.pixels() // 2).astype(np.uint16).tobytes()
        return frame.copy(data=data)

    runtime.register_filter("SpatialFastFilter", halve)
    out = SpatialFastFilter().process(depth_frame)
    assert np.array_equal(out.to_numpy(), depth_frame.to_numpy() // 2)


def test_format_converter_mjpg_to_rgb(pipeline, sw_device):
    config = Config()
    config.enable_stream(pipeline.get_stream_profiles(SensorType.COLOR).match(1280, 720, Format.MJPG, 15))
    pipeline.start(config)
    sw_device.push_frame(SensorType.COLOR, color_image())
    color = pipeline.wait_for_frameset(1000).get_color_frame()
    converter = FormatConvertFilter()
    converter.set_convert_type(ConvertFormat.MJPG_TO_RGB)
    rgb = converter.process(color)
    assert isinstance(rgb, ColorFrame)
    assert rgb.format == Format.RGB
    pixels = rgb.to_numpy()
    assert pixels.shape == (720, 1280, 3)
    assert abs(int(pixels[0, 0, 2]) - 10) < 4


def test_format_converter_wrong_source(depth_frame):
    converter = FormatConvertFilter()
    converter.set_convert_type(ConvertFormat.RGB_TO_BGR)
    with pytest.raises(InvalidValueError):
        converter.process(depth_frame)


def test_format_converter_unsupported(depth_frame):
    converter = FormatConvertFilter()
    converter.set_convert_type(ConvertFormat.MJPG_TO_NV12)
    with pytest.raises(UnsupportedOperationError):
        converter.process(depth_frame)


def test_align_frameset(aligned_set, pipeline):
    align = AlignFilter()
    color_profile = pipeline.get_stream_profiles(SensorType.COLOR).match(1280, 720, Format.RGB, 15)
    align.set_align_to_stream_profile(color_profile)
    out = align.process(aligned_set)
    assert isinstance(out, FrameSet)
    assert out.get_depth_frame() is not None
    assert out.get_color_frame() is not None


def test_point_cloud_from_depth(depth_frame, pipeline):
    cloud = PointCloudFilter()
    points_frame = cloud.process(depth_frame)
    assert isinstance(points_frame, PointCloudFrame)
    assert not points_frame.has_color()
    assert points_frame.format == Format.POINT
    points = points_frame.to_numpy()
    assert points.shape == (848 * 480, 3)
    assert np.allclose(points[:, 2], depth_frame.to_millimeters().reshape(-1))

    intr = pipeline.get_stream_profiles(SensorType.DEPTH).match(848, 480, Format.Y16, 15).get_intrinsic()
    centre_row = int(round(intr.cy))
    idx = centre_row * 848 + 100
    expected_x = (100 - intr.cx) * points[idx, 2] / intr.fx
    assert points[idx, 0] == pytest.approx(expected_x, rel=1e-4)


def test_point_cloud_coordinate_scale(depth_frame):
    cloud = PointCloudFilter()
    cloud.set_coordinate_scale(0.1)
    points_frame = cloud.process(depth_frame)
    assert points_frame.coordinate_scale == pytest.approx(10.0)
    assert np.allclose(
        points_frame.to_millimeters()[:, 2], depth_frame.to_millimeters().reshape(-1), rtol=1e-4
    )


def test_point_cloud_left_hand_flips_y(depth_frame):
    right = PointCloudFilter().process(depth_frame).to_numpy()
    cloud = PointCloudFilter()
    cloud.set_coordinate_system(CoordinateSystem.LEFT_HAND)
    left = cloud.process(depth_frame).to_numpy()
    assert np.allclose(left[:, 1], -right[:, 1])


def test_colored_point_cloud(aligned_set):
    cloud = PointCloudFilter()
    cloud.set_color(True)
    points_frame = cloud.process(aligned_set)
    assert points_frame.has_color()
    points = points_frame.to_numpy()
    assert points.shape == (848 * 480, 6)
    assert np.allclose(points[0, 3:], [10, 20, 30])


def test_colored_point_cloud_needs_color(depth_frame):
    cloud = PointCloudFilter()
    cloud.set_color(True)
    with pytest.raises(InvalidValueError):
        cloud.process(depth_frame)
