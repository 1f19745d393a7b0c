"""Gem source capabilities and the shared ``gem install`` invocation.

A ``Source`` can install a spec. A ``FetchableSource`` must additionally be
fetched first; the installer checks the capability through the class, never
by probing attributes.
"""
from __future__ import annotations

import logging
import os
import subprocess
from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Sequence

from constants import Constants
from common.errors import InstallError
from common.logging_utils import extra_context, is_debug_enabled, Timer

logger = logging.getLogger(__name__)

GEM_COMMAND = "gem"


class Source(ABC):
    """Where a spec comes from and how to install it."""

    kind = ""

    @abstractmethod
    def install(self, spec, *, build_args: Sequence[str], tmp_dir: str) -> Optional[str]:
        """Install ``spec``; return the location it was loaded from."""

    @abstractmethod
    def to_lock(self) -> Dict[str, str]:
        """Serializable identity written to the lock file."""

    def cached(self, spec) -> bool:  # pylint: disable=unused-argument
        """True when the spec can be installed without network access."""
        return True

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Source) and self.to_lock() == other.to_lock()

    def __hash__(self) -> int:
        return hash(tuple(sorted(self.to_lock().items())))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.to_lock()!r})"


class FetchableSource(Source):
    """A source whose specs must be fetched before they can be installed."""

    @abstractmethod
    def fetch(self, spec) -> None:
        """Make the spec's archive available locally."""


def gem_install(
    archive: str,
    spec,
    *,
    install_path: str,
    build_args: Sequence[str],
    tmp_dir: str,
    gem_command: str = GEM_COMMAND,
) -> str:
    """Build and install a ``.gem`` archive into ``install_path``.

    Build arguments go after ``--`` so they reach the extension build.
    Returns the installed gemspec path.
    """
    os.makedirs(tmp_dir, exist_ok=True)
    cmd: List[str] = [
        gem_command, "install", "--local", "--no-document", "--ignore-dependencies",
        "--install-dir", install_path,
        "--bindir", os.path.join(tmp_dir, "bin"),
        archive,
    ]
    if build_args:
        cmd += ["--"] + list(build_args)
    env = os.environ.copy()
    env["TMPDIR"] = tmp_dir

    with Timer() as t:
        try:
            result = subprocess.run(  # noqa: S603
                cmd, env=env, capture_output=True, text=True, check=False
            )
        except FileNotFoundError as exc:
            raise InstallError(f"'{gem_command}' command not found", spec.name) from exc
    if is_debug_enabled(logger):
        logger.debug(
            "gem install finished",
            extra=extra_context(
                event="subprocess_exit",
                component="sources",
                action="gem_install",
                target=spec.full_name,
                status_code=result.returncode,
                duration_ms=t.duration_ms(),
            ),
        )
    if result.returncode != 0:
        detail = (result.stderr or result.stdout or "").strip()
        raise InstallError(
            f"Installing {spec} failed (exit {result.returncode}): {detail}", spec.name
        )
    return os.path.join(
        install_path, Constants.STORE_SPECS_DIR, spec.full_name + Constants.GEMSPEC_SUFFIX
    )
