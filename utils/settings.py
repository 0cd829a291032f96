"""Project wide configuration dataclasses and default values."""

from dataclasses import dataclass
from pathlib import Path

# Root dir
BASE_DIR = Path(__file__).resolve().parent.parent

# Common file name extensions for saved frames
IMAGE_EXT = ".png"
DEPTH_EXT = ".npy"
CLOUD_EXT = ".ply"


@dataclass(frozen=True)
class Paths:
    """
    Dataclass aggregating all important filesystem paths used in the project.
    These paths are used for organizing captures, clouds, logs, etc.
    """

    CONF_DIR: Path = BASE_DIR / "conf"
    CAPTURES_DIR: Path = BASE_DIR / ".captures"
    CLOUD_DIR: Path = BASE_DIR / ".clouds"
    SDK_LOG_DIR: Path = BASE_DIR / ".logs" / "sdk"


paths = Paths()


@dataclass(frozen=True)
class LoggingCfg:
    """
    Logging configuration for the project.

    - level: Log level ("INFO", "DEBUG", etc.)
    - json: Enable/disable structured JSON logging.
    - log_dir: Directory where log files are stored.
    - log_format: Console log output format.
    - log_file_format: File log output format.
    - progress_bar_format: TQDM progress bar format.
    """

    level: str = "INFO"
    json: bool = True
    log_dir: Path = Path(".logs")
    log_format: str = (
        "<green>{time:MM-DD HH:mm:ss}</green>"
        "[<level>{level:.3}</level>]"
        "[<cyan>{extra[module]:.16}</cyan>:<cyan>{line:<3}</cyan>]"
        "<level>{message}</level>"
    )
    log_file_format: str = "{time:YYYY-MM-DD HH:mm:ss}[{level}][{file}:{line}]{message}"
    progress_bar_format: str = (
        "{l_bar}{bar}| {n_fmt}/{total_fmt} [{elapsed}<{remaining}]"
    )


logging = LoggingCfg()


@dataclass(frozen=True)
class SdkCfg:
    """
    Native SDK runtime selection.

    - backend: "native" loads the vendor library through ctypes,
      "software" uses the in-process software runtime.
    - library: Optional explicit path to ``libOrbbecSDK``.
    - wait_timeout_ms: Default timeout for ``Pipeline.wait_for_frameset``.
    - sdk_log_severity: Severity forwarded from the SDK into our logger.
    - sdk_file_severity: Severity written to ``OrbbecSDK.log.txt`` under
      ``paths.SDK_LOG_DIR``; "OFF" disables the file sink.
    """

    backend: str = "native"
    library: str | None = None
    wait_timeout_ms: int = 100
    sdk_log_severity: str = "WARN"
    sdk_file_severity: str = "OFF"


sdk = SdkCfg()


@dataclass(frozen=True)
class StreamCfg:
    """
    Default stream profiles used by the CLI tools:
    - depth/color frame size and pixel format
    - frame rate
    - alignment mode and frame synchronisation
    """

    depth_width: int = 848
    depth_height: int = 480
    depth_format: str = "Y16"
    color_width: int = 1280
    color_height: int = 720
    color_format: str = "MJPG"
    fps: int = 15
    align_mode: str = "Disable"
    frame_sync: bool = True


stream = StreamCfg()


@dataclass(frozen=True)
class FilterCfg:
    """
    Post-processing defaults for the depth filter chain.
    Values follow the vendor's recommended ranges.
    """

    decimation: int = 2
    spatial_radius: int = 5
    spatial_magnitude: int = 3
    spatial_threshold: int = 160
    temporal_threshold: float = 0.1
    temporal_weight: float = 0.4
    hole_filling: str = "Farthest"
    min_depth: int = 200  # mm
    max_depth: int = 4000  # mm


filters = FilterCfg()

__all__ = [
    "Paths",
    "LoggingCfg",
    "SdkCfg",
    "StreamCfg",
    "FilterCfg",
    "paths",
    "logging",
    "sdk",
    "stream",
    "filters",
    "IMAGE_EXT",
    "DEPTH_EXT",
    "CLOUD_EXT",
]
