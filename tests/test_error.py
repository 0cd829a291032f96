import pytest

from orbbec.enums import ExceptionType
from orbbec.error import (
    CameraDisconnectedError,
    ErrorRecord,
    InvalidValueError,
    IOExceptionError,
    MemoryExceptionError,
    NotImplementedFeatureError,
    OrbbecError,
    PlatformError,
    StdExceptionError,
    UnknownError,
    UnsupportedOperationError,
    WrongAPICallSequenceError,
)

EXPECTED = {
    ExceptionType.UNKNOWN: UnknownError,
    ExceptionType.STD_EXCEPTION: StdExceptionError,
    ExceptionType.CAMERA_DISCONNECTED: CameraDisconnectedError,
    ExceptionType.PLATFORM: PlatformError,
    ExceptionType.INVALID_VALUE: InvalidValueError,
    ExceptionType.WRONG_API_CALL_SEQUENCE: WrongAPICallSequenceError,
    ExceptionType.NOT_IMPLEMENTED: NotImplementedFeatureError,
    ExceptionType.IO: IOExceptionError,
    ExceptionType.MEMORY: MemoryExceptionError,
    ExceptionType.UNSUPPORTED_OPERATION: UnsupportedOperationError,
}


@pytest.mark.parametrize("kind", list(ExceptionType))
def test_record_maps_to_one_class_per_kind(kind):
    record = ErrorRecord(kind, "boom", "Pipeline::start", "timeout=100")
    err = OrbbecError.from_record(record)
    assert type(err) is EXPECTED[kind]
    assert err.kind == kind
    assert err.message == "boom"
    assert err.function == "Pipeline::start"
    assert err.arguments == "timeout=100"


def test_unknown_kind_value_becomes_unknown_error():
    record = ErrorRecord(42, "odd", "f")
    assert type(OrbbecError.from_record(record)) is UnknownError


def test_str_shows_label_and_message():
    err = InvalidValueError("No matched video stream profile found", "StreamProfileList::get")
    assert str(err) == "Invalid Value: No matched video stream profile found"
    assert "StreamProfileList::get" in repr(err)


def test_backend_call_raises_before_value_is_used(backend):
    with pytest.raises(NotImplementedFeatureError) as exc:
        backend.call("ob_no_such_function")
    assert exc.value.function == "ob_no_such_function"


def test_invoke_reports_error_record(backend):
    value, record = backend.invoke("ob_device_load_preset", backend.runtime.devices[0], "Nope")
    assert value is None
    assert record.kind == ExceptionType.INVALID_VALUE
    assert "Nope" in record.message
