"""Remote gem server source (rubygems.org compatible)."""
from __future__ import annotations

import logging
import os
from typing import Dict, Optional, Sequence

from common.http_client import download, safe_url
from .base import GEM_COMMAND, FetchableSource, gem_install

logger = logging.getLogger(__name__)


class RemoteSource(FetchableSource):
    """Gems downloaded from ``<remote>/gems/<name>-<version>.gem``."""

    kind = "remote"

    def __init__(self, remote: str, *, cache_path: str = "", install_path: str = "",
                 gem_command: str = GEM_COMMAND):
        self.remote = remote.rstrip("/")
        self.cache_path = cache_path
        self.install_path = install_path
        self.gem_command = gem_command

    def archive_path(self, spec) -> str:
        """Location of the spec's ``.gem`` file in the download cache."""
        return os.path.join(self.cache_path, f"{spec.full_name}.gem")

    def archive_url(self, spec) -> str:
        return f"{self.remote}/gems/{spec.full_name}.gem"

    def cached(self, spec) -> bool:
        return os.path.isfile(self.archive_path(spec))

    def fetch(self, spec) -> None:
        if self.cached(spec):
            logger.debug("Using cached %s", self.archive_path(spec))
            return
        logger.info("Fetching %s from %s", spec, safe_url(self.remote))
        download(self.archive_url(spec), self.archive_path(spec), context=f"Fetch {spec.name}")

    def install(self, spec, *, build_args: Sequence[str], tmp_dir: str) -> Optional[str]:
        return gem_install(
            self.archive_path(spec), spec,
            install_path=self.install_path,
            build_args=build_args,
            tmp_dir=tmp_dir,
            gem_command=self.gem_command,
        )

    def to_lock(self) -> Dict[str, str]:
        return {"type": self.kind, "remote": self.remote}
