"""Layered settings store.

Precedence (lowest to highest): built-in defaults, the YAML config file,
GEMSTALL_* environment variables, then explicit overrides (CLI ``--set``).
The store is read-only for the installer; only the CLI layer writes overrides
before a run starts.
"""
from __future__ import annotations

import logging
import os
from typing import Any, Dict, Mapping, Optional

import yaml

from constants import Constants
from common.errors import ConfigError

logger = logging.getLogger(__name__)

BOOLEAN_KEYS = ("frozen", "rvm", "assume_yes")

DEFAULTS: Dict[str, Any] = {
    "frozen": False,
    "bin": None,
    "path": None,
    "rvm": True,
    "ruby": None,
    "assume_yes": False,
}

_TRUE = ("1", "true", "yes", "on", "y")
_FALSE = ("0", "false", "no", "off", "n", "")


def coerce_bool(value: Any) -> bool:
    """Interpret config/env style boolean values."""
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    text = str(value).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ConfigError(f"Expected a boolean, got {value!r}")


def _flatten(data: Mapping[str, Any], prefix: str = "") -> Dict[str, Any]:
    """Flatten nested mappings to dot keys (``build: {x: ..}`` -> ``build.x``)."""
    flat: Dict[str, Any] = {}
    for key, value in data.items():
        dotted = f"{prefix}{key}"
        if isinstance(value, Mapping):
            flat.update(_flatten(value, dotted + "."))
        else:
            flat[dotted] = value
    return flat


def load_config_file(path: Optional[str]) -> Dict[str, Any]:
    """Load a YAML settings file into flat dot keys.

    A missing file yields an empty mapping; a malformed one raises ConfigError.
    """
    if not path or not os.path.isfile(path):
        return {}
    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Failed to load config {path}: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config {path} must contain a mapping")
    return _flatten(data)


def settings_from_env(environ: Optional[Mapping[str, str]] = None) -> Dict[str, Any]:
    """Collect GEMSTALL_* variables; ``__`` separates key segments."""
    environ = os.environ if environ is None else environ
    found: Dict[str, Any] = {}
    for name, value in environ.items():
        if not name.startswith(Constants.ENV_PREFIX) or name == Constants.ENV_LOG_LEVEL:
            continue
        if name == Constants.ENV_MANIFEST:
            continue
        key = name[len(Constants.ENV_PREFIX):].lower().replace("__", ".")
        if key:
            found[key] = value
    return found


class Settings:
    """Read access to merged settings plus the derived install paths."""

    def __init__(
        self,
        root: str,
        config: Optional[Mapping[str, Any]] = None,
        env: Optional[Mapping[str, Any]] = None,
        overrides: Optional[Mapping[str, Any]] = None,
    ):
        self.root = os.path.abspath(root)
        self._layers = [dict(DEFAULTS), dict(config or {}), dict(env or {}), dict(overrides or {})]

    @classmethod
    def load(
        cls,
        root: str,
        config_path: Optional[str] = None,
        overrides: Optional[Mapping[str, Any]] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> "Settings":
        """Build settings for ``root`` from the config file, env and overrides."""
        if config_path is None:
            config_path = os.path.join(root, Constants.APP_DIR, Constants.CONFIG_FILE)
        config = load_config_file(config_path)
        if config:
            logger.debug("Loaded settings from %s", config_path)
        return cls(root, config=config, env=settings_from_env(environ), overrides=overrides)

    def get(self, key: str, default: Any = None) -> Any:
        """Return the highest-precedence value for ``key``."""
        for layer in reversed(self._layers):
            if key in layer and layer[key] is not None:
                value = layer[key]
                if key in BOOLEAN_KEYS:
                    return coerce_bool(value)
                return value
        return default

    def __getitem__(self, key: str) -> Any:
        return self.get(key)

    def build_args_for(self, name: str) -> list:
        """Build arguments for one gem: the ``build.<name>`` setting, if any."""
        value = self.get(f"build.{name}")
        if value is None or value == "":
            return []
        return [str(value)]

    def _resolve(self, path: str) -> str:
        return os.path.abspath(os.path.join(self.root, os.path.expanduser(str(path))))

    @property
    def install_path(self) -> str:
        """Install root for gems built from source."""
        path = self.get("path")
        if path:
            return self._resolve(path)
        return os.path.join(self.root, Constants.APP_DIR, Constants.DEFAULT_INSTALL_DIR)

    @property
    def bin_path(self) -> str:
        """Directory receiving executable stubs."""
        value = self.get("bin")
        if isinstance(value, str) and value.strip().lower() not in _TRUE + _FALSE:
            return self._resolve(value)
        return os.path.join(self.root, Constants.DEFAULT_BIN_DIR)

    @property
    def stubs_enabled(self) -> bool:
        """True when the ``bin`` setting asks for executable stubs."""
        value = self.get("bin")
        if isinstance(value, str) and value.strip().lower() not in _TRUE + _FALSE:
            return True
        return coerce_bool(value)

    @property
    def tmp_path(self) -> str:
        """Scratch directory for source builds; wiped after each build."""
        return os.path.join(self.root, Constants.APP_DIR, Constants.TMP_DIR)

    @property
    def cache_path(self) -> str:
        """Download cache for fetched gem archives."""
        return os.path.join(self.install_path, Constants.CACHE_DIR)
