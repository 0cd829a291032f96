from loguru import logger as loguru_logger

from utils.logger import Logger


def test_configure_writes_json_log(tmp_path):
    Logger.configure(level="DEBUG", log_dir=tmp_path, json_format=True)
    log = Logger.get_logger("tests.logger", serial="SW0001")
    log.info("capture started")
    loguru_logger.complete()
    path = Logger.log_file()
    assert path.parent == tmp_path
    text = path.read_text()
    assert "capture started" in text
    assert '"module": "tests.logger"' in text
    assert '"serial": "SW0001"' in text
    Logger.configure()


def test_bound_context_reaches_sinks():
    records = []
    sink = loguru_logger.add(lambda m: records.append(m.record["extra"]), level="INFO")
    try:
        Logger.get_logger("cli.depth_check", device="SW0001").info("frame")
        Logger.sdk_logger().warning("sdk line")
    finally:
        loguru_logger.remove(sink)
    assert records[0] == {"module": "cli.depth_check", "device": "SW0001"}
    assert records[1]["module"] == "sdk"
