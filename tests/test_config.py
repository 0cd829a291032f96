from dataclasses import replace

import pytest

import orbbec.sys as sys_module
import utils.config as config_module
from orbbec.sys import get_backend, set_backend
from orbbec.sys.software import SoftwareBackend
from utils.config import Config, DictConfigLoader
from utils.settings import sdk, stream


@pytest.fixture
def fresh_backend():
    set_backend(None)
    yield
    set_backend(None)


def test_dict_loader_get():
    Config.set_loader(DictConfigLoader({"sdk": {"backend": "software", "wait_timeout_ms": 250}}))
    assert Config.get("sdk.backend") == "software"
    assert Config.get("sdk.wait_timeout_ms") == 250
    assert Config.get("sdk.library", "libOrbbecSDK.so") == "libOrbbecSDK.so"
    assert Config.get("missing.key") is None


def test_section_overrides_known_keys_only():
    Config.set_loader(DictConfigLoader({"stream": {"fps": 30, "color_format": "RGB", "bogus": 1}}))
    cfg = Config.section("stream", stream)
    assert cfg.fps == 30
    assert cfg.color_format == "RGB"
    assert cfg.depth_width == stream.depth_width
    assert not hasattr(cfg, "bogus")


def test_section_without_yaml_keeps_defaults():
    Config.set_loader(DictConfigLoader({}))
    assert Config.section("sdk", sdk) == sdk


def test_yaml_file_is_loaded(tmp_path):
    path = tmp_path / "app.yaml"
    path.write_text("sdk:\n  backend: software\n  wait_timeout_ms: 40\n")
    Config.load(path, force_reload=True)
    assert Config.get("sdk.wait_timeout_ms") == 40


def test_backend_from_config(fresh_backend):
    Config.set_loader(DictConfigLoader({"sdk": {"backend": "software"}}))
    backend = get_backend()
    assert isinstance(backend, SoftwareBackend)
    assert get_backend() is backend
    assert get_backend("software") is backend


def test_installed_backend_wins(fresh_backend):
    installed = SoftwareBackend()
    set_backend(installed)
    assert get_backend() is installed


def test_unknown_backend_name(fresh_backend):
    with pytest.raises(ValueError):
        get_backend("bogus")


def test_missing_default_file_uses_settings(monkeypatch, tmp_path, fresh_backend):
    monkeypatch.setattr(config_module, "DEFAULT_CONFIG_PATH", tmp_path / "app.yaml")
    monkeypatch.setattr(sys_module, "SDKCFG", replace(sdk, backend="software"))
    Config.reset()
    assert Config.get("sdk.backend") is None
    assert Config.section("sdk", sdk) == sdk
    assert isinstance(get_backend(), SoftwareBackend)


def test_missing_explicit_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        Config.load(tmp_path / "missing.yaml", force_reload=True)
