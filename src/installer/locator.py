"""Locating prebuilt gems in an external RVM store.

The store belongs to RVM; this module only ever reads it. Every query scans
the disk again so the answer reflects the store's current state.
"""
from __future__ import annotations

import glob
import logging
import os
import re
import subprocess
from typing import Dict, Mapping, Optional, Protocol, Tuple

from constants import Constants
from common.errors import RuntimeProbeError

logger = logging.getLogger(__name__)

_PATCHLEVEL = re.compile(r"(p\d+)$")


class ArtifactLocator(Protocol):
    """Read-only view of a store of already-built gems."""

    def installed_gem_map(self) -> Dict[str, str]:
        """Map ``name-version`` to the artifact directory."""
        ...

    def find(self, spec) -> Optional[str]:
        ...

    def target_dirs(self) -> Tuple[str, str]:
        """(gem dir, specification dir) of the active environment."""
        ...


class NullArtifactLocator:
    """Locator for machines without an external store; nothing is ever found."""

    def installed_gem_map(self) -> Dict[str, str]:
        return {}

    def find(self, spec) -> Optional[str]:  # pylint: disable=unused-argument
        return None

    def target_dirs(self) -> Tuple[str, str]:
        raise RuntimeError("NullArtifactLocator has no target directories")


def normalize_ruby_version(output: str) -> str:
    """``ruby 1.9.2p0 (2010-08-18 ...)`` -> ``ruby-1.9.2-p0``."""
    tokens = output.split()[:2]
    return _PATCHLEVEL.sub(r"-\1", "-".join(tokens))


class RvmArtifactLocator:
    """Scans ``<rvm_path>/gems/<ruby-string>*/gems/*``."""

    def __init__(self, environ: Optional[Mapping[str, str]] = None, ruby_command: str = "ruby",
                 rvm_command: str = "rvm"):
        self.environ = os.environ if environ is None else environ
        self.ruby_command = ruby_command
        self.rvm_command = rvm_command

    @property
    def store_path(self) -> str:
        return os.path.expanduser(self.environ.get(Constants.ENV_RVM_PATH) or Constants.DEFAULT_RVM_PATH)

    def ruby_string(self) -> str:
        """Active runtime identifier; env first, else probed from ``ruby -v``."""
        value = (self.environ.get(Constants.ENV_RVM_RUBY_STRING) or "").strip()
        if value:
            return value
        try:
            result = subprocess.run(  # noqa: S603
                [self.ruby_command, "-v"], capture_output=True, text=True, check=True
            )
        except (OSError, subprocess.CalledProcessError) as exc:
            raise RuntimeProbeError(f"Could not determine the ruby version: {exc}") from exc
        return normalize_ruby_version(result.stdout)

    def gemset_name(self) -> str:
        """Active gemset, or an empty string for the default one."""
        if Constants.ENV_RVM_GEMSET in self.environ:
            return (self.environ.get(Constants.ENV_RVM_GEMSET) or "").strip()
        try:
            result = subprocess.run(  # noqa: S603
                [self.rvm_command, "gemset", "name"], capture_output=True, text=True, check=False
            )
        except OSError as exc:
            logger.debug("rvm not available for gemset lookup: %s", exc)
            return ""
        if result.returncode != 0:
            return ""
        return result.stdout.strip()

    def gem_sources(self):
        pattern = os.path.join(
            glob.escape(self.store_path), Constants.STORE_GEMS_DIR,
            glob.escape(self.ruby_string()) + "*", Constants.STORE_GEMS_DIR, "*",
        )
        return [path for path in glob.glob(pattern) if os.path.isdir(path)]

    def installed_gem_map(self) -> Dict[str, str]:
        installed: Dict[str, str] = {}
        for source in sorted(self.gem_sources()):
            installed.setdefault(os.path.basename(source), source)
        return installed

    def find(self, spec) -> Optional[str]:
        return self.installed_gem_map().get(spec.full_name)

    def gemset_dir(self) -> str:
        name = self.ruby_string()
        gemset = self.gemset_name()
        if gemset:
            name = f"{name}{Constants.GEMSET_SEPARATOR}{gemset}"
        return os.path.join(self.store_path, Constants.STORE_GEMS_DIR, name)

    def target_dirs(self) -> Tuple[str, str]:
        base = self.gemset_dir()
        return (
            os.path.join(base, Constants.STORE_GEMS_DIR),
            os.path.join(base, Constants.STORE_SPECS_DIR),
        )
