# utils/config.py
"""Configuration loader with YAML backend."""

from __future__ import annotations

from dataclasses import fields, replace
from pathlib import Path
from typing import Any, Dict, TypeVar, cast

from omegaconf import OmegaConf

from utils.logger import Logger
from utils.settings import paths

DEFAULT_CONFIG_PATH = paths.CONF_DIR / "app.yaml"

D = TypeVar("D")


class ConfigLoader:
    """Strategy interface for config loading."""

    def load(self, filename: str | Path) -> Dict[str, Any]:
        raise NotImplementedError


class YamlConfigLoader(ConfigLoader):
    def load(self, filename: str | Path) -> Dict[str, Any]:
        """Load YAML file and return plain ``dict`` data."""

        cfg = OmegaConf.load(filename)
        return cast(Dict[str, Any], OmegaConf.to_container(cfg, resolve=True))


class DictConfigLoader(ConfigLoader):
    """Serve a fixed mapping; handy for tests and embedded use."""

    def __init__(self, data: Dict[str, Any]) -> None:
        self.data = data

    def load(self, filename: str | Path) -> Dict[str, Any]:
        return cast(
            Dict[str, Any],
            OmegaConf.to_container(OmegaConf.create(self.data), resolve=True),
        )


class Config:
    _data: Dict[str, Any] | None = None
    _loader: ConfigLoader = YamlConfigLoader()
    _logger = Logger.get_logger("utils.config")

    @classmethod
    def load(
        cls, filename: Path | str | None = None, force_reload: bool = False
    ) -> None:
        """Load configuration from ``filename`` unless already loaded.

        Without ``filename`` the default ``conf/app.yaml`` is read; when that
        file is absent the settings dataclass defaults apply.
        """

        if cls._data is not None and not force_reload:
            return

        if filename is None:
            filename = DEFAULT_CONFIG_PATH
            if isinstance(cls._loader, YamlConfigLoader) and not filename.exists():
                cls._logger.warning(f"No config file at {filename}, using defaults")
                cls._data = {}
                return

        try:
            cls._data = cls._loader.load(filename)
            cls._logger.info(f"Config loaded from {filename}")
            logging_cfg = cls._data.get("logging", {})
            if logging_cfg:
                Logger.configure(
                    level=logging_cfg.get("level", "INFO"),
                    log_dir=logging_cfg.get("log_dir", ".logs"),
                    json_format=logging_cfg.get("json", True),
                )
        except Exception as e:
            cls._logger.error(f"Failed to load config: {e}")
            raise

    @classmethod
    def get(cls, path: str, default: Any | None = None) -> Any:
        """Retrieve value from dotted ``path`` or return ``default``."""
        if cls._data is None:
            cls.load()
        value = cls._data
        for key in path.split("."):
            if not isinstance(value, dict):
                cls._logger.debug(f"Key {key} not found in path {path}")
                return default
            value = value.get(key, None)
            if value is None:
                cls._logger.debug(f"Key {key} not found in path {path}")
                return default
        return value

    @classmethod
    def section(cls, name: str, base: D) -> D:
        """Return ``base`` (a frozen settings dataclass) with YAML overrides.

        Keys under ``name`` that are not fields of ``base`` are ignored with
        a warning.
        """
        overrides = cls.get(name, {}) or {}
        known = {f.name for f in fields(base)}
        unknown = sorted(set(overrides) - known)
        if unknown:
            cls._logger.warning(f"Unknown keys in section '{name}': {unknown}")
        return replace(base, **{k: v for k, v in overrides.items() if k in known})

    @classmethod
    def set_loader(cls, loader: ConfigLoader) -> None:
        """Replace the config loader strategy (useful for testing)."""

        cls._loader = loader
        cls._data = None
        cls._logger.info(f"Config loader set to {loader.__class__.__name__}")

    @classmethod
    def reset(cls) -> None:
        """Forget loaded data and restore the YAML loader."""
        cls._data = None
        cls._loader = YamlConfigLoader()
