"""Local path source: an unpacked gem directory or a ``.gem`` archive on disk."""
from __future__ import annotations

import logging
import os
from typing import Dict, Optional, Sequence

from common.errors import InstallError
from .base import GEM_COMMAND, Source, gem_install

logger = logging.getLogger(__name__)


class PathSource(Source):
    """Gem that already lives on the local filesystem.

    Directories are used in place; archives are built into the install root.
    Nothing needs fetching, so this source never touches the network.
    """

    kind = "path"

    def __init__(self, path: str, *, root: str = ".", install_path: str = "",
                 gem_command: str = GEM_COMMAND):
        self.path = path
        self.root = root
        self.install_path = install_path
        self.gem_command = gem_command

    @property
    def expanded_path(self) -> str:
        return os.path.abspath(os.path.join(self.root, os.path.expanduser(self.path)))

    def install(self, spec, *, build_args: Sequence[str], tmp_dir: str) -> Optional[str]:
        location = self.expanded_path
        if os.path.isdir(location):
            if build_args:
                logger.debug("Ignoring build args for in-place gem %s", spec.name)
            return location
        if os.path.isfile(location):
            return gem_install(
                location, spec,
                install_path=self.install_path,
                build_args=build_args,
                tmp_dir=tmp_dir,
                gem_command=self.gem_command,
            )
        raise InstallError(f"The path `{location}` does not exist.", spec.name)

    def to_lock(self) -> Dict[str, str]:
        return {"type": self.kind, "path": self.path}
