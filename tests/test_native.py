import pytest

from orbbec.sys.native import LIBRARY_ENV, PROTOTYPES, NativeLibraryBackend
from orbbec.sys.software import SoftwareBackend
from utils.error_tracker import CameraConnectionError, SdkLibraryError


def test_missing_library_is_reported(monkeypatch, tmp_path):
    monkeypatch.delenv(LIBRARY_ENV, raising=False)
    with pytest.raises(SdkLibraryError) as exc:
        NativeLibraryBackend(tmp_path / "libOrbbecSDK.so")
    assert "libOrbbecSDK.so" in str(exc.value)
    assert isinstance(exc.value, CameraConnectionError)


def test_software_runtime_serves_every_prototype():
    missing = [name for name in PROTOTYPES if not hasattr(SoftwareBackend, name)]
    assert missing == []
