"""CLI configuration overrides for gemstall settings.

Kept out of gemstall.py to keep the entrypoint slim. Values given on the
command line form the highest-precedence settings layer.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, Optional

from constants import Constants
from common.errors import ConfigError
from common.settings import Settings

logger = logging.getLogger(__name__)


def parse_setting(item: str):
    """Split a ``KEY=VALUE`` override; the key is lower-cased and trimmed."""
    key, sep, value = item.partition("=")
    key = key.strip().lower()
    if not sep or not key:
        raise ConfigError(f"Invalid setting '{item}', expected KEY=VALUE")
    return key, value.strip()


def apply_setting_overrides(args) -> Dict[str, Any]:
    """Collect the settings layer contributed by CLI flags.

    Explicit flags win over ``--set`` entries for the same key.
    """
    overrides: Dict[str, Any] = {}
    for item in getattr(args, "SETTINGS", None) or []:
        key, value = parse_setting(item)
        overrides[key] = value

    if getattr(args, "INSTALL_PATH", None):
        overrides["path"] = args.INSTALL_PATH
    binstubs = getattr(args, "BINSTUBS", None)
    if binstubs is not None:
        overrides["bin"] = binstubs
    if getattr(args, "FROZEN", False):
        overrides["frozen"] = True
    if getattr(args, "ASSUME_YES", False):
        overrides["assume_yes"] = True
    return overrides


def manifest_path(args, environ=None) -> str:
    """Absolute manifest path: ``--gemfile``, then the environment, then the cwd."""
    environ = os.environ if environ is None else environ
    path: Optional[str] = getattr(args, "GEMFILE", None) or environ.get(Constants.ENV_MANIFEST)
    if not path:
        path = Constants.MANIFEST_FILE
    return os.path.abspath(os.path.expanduser(path))


def load_settings(args, root: str, environ=None) -> Settings:
    overrides = apply_setting_overrides(args)
    if overrides:
        logger.debug("CLI setting overrides: %s", ", ".join(sorted(overrides)))
    return Settings.load(
        root,
        config_path=getattr(args, "CONFIG", None),
        overrides=overrides,
        environ=environ,
    )
