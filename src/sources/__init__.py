"""Gem sources.

- base.py: Source / FetchableSource capabilities and the ``gem install`` call
- path.py: local directories and archives
- remote.py: gem servers reached over HTTP
"""

from typing import Any, Mapping

from common.errors import LockfileError
from .base import FetchableSource, Source, gem_install
from .path import PathSource
from .remote import RemoteSource


def build_source(data: Mapping[str, Any], settings) -> Source:
    """Create a source from its lock/manifest identity, bound to ``settings`` paths."""
    kind = data.get("type")
    gem_command = settings.get("gem") or "gem"
    if kind == RemoteSource.kind and data.get("remote"):
        return RemoteSource(
            str(data["remote"]),
            cache_path=settings.cache_path,
            install_path=settings.install_path,
            gem_command=gem_command,
        )
    if kind == PathSource.kind and data.get("path"):
        return PathSource(
            str(data["path"]),
            root=settings.root,
            install_path=settings.install_path,
            gem_command=gem_command,
        )
    raise LockfileError(f"Unknown gem source {dict(data)!r}")


__all__ = [
    "Source",
    "FetchableSource",
    "PathSource",
    "RemoteSource",
    "build_source",
    "gem_install",
]
