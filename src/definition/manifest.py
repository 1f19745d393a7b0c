"""Manifest (gemstall.yml) loading.

Example::

    platforms: [ruby]
    sources: [https://rubygems.org]
    dependencies:
      rake: "~> 13.0"
      rack: "2.2.8"
      mylib: {path: vendor/mylib, version: "0.1.0"}
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import List

import yaml

from constants import Constants
from common.errors import ManifestError
from sources import build_source
from .models import Dependency
from .requirement import ANY_REQUIREMENT, normalize_requirement

logger = logging.getLogger(__name__)


@dataclass
class Manifest:
    """Parsed manifest contents, dependencies in declaration order."""
    path: str
    platforms: List[str] = field(default_factory=lambda: [Constants.DEFAULT_PLATFORM])
    sources: List[str] = field(default_factory=lambda: [Constants.DEFAULT_REMOTE])
    dependencies: List[Dependency] = field(default_factory=list)


def _string_list(value, key: str, path: str) -> List[str]:
    if isinstance(value, str):
        return [value]
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ManifestError(f"{path}: '{key}' must be a list of strings")
    return list(value)


def _parse_dependency(name: str, entry, settings, path: str) -> Dependency:
    if isinstance(entry, bool):
        raise ManifestError(f"{path}: dependency '{name}' has a boolean where a version was expected")
    if entry is None or isinstance(entry, (str, int, float)):
        requirement = ANY_REQUIREMENT if entry is None else str(entry)
        return Dependency(name, normalize_requirement(requirement))
    if not isinstance(entry, dict):
        raise ManifestError(f"{path}: dependency '{name}' has an invalid entry")
    if isinstance(entry.get("version"), bool):
        raise ManifestError(f"{path}: dependency '{name}' has a boolean where a version was expected")
    requirement = normalize_requirement(str(entry.get("version") or ANY_REQUIREMENT))
    if entry.get("path"):
        source = build_source({"type": "path", "path": entry["path"]}, settings)
    elif entry.get("source"):
        source = build_source({"type": "remote", "remote": entry["source"]}, settings)
    else:
        source = None
    return Dependency(name, requirement, source)


def load_manifest(path: str, settings) -> Manifest:
    """Read and validate the manifest at ``path``."""
    if not os.path.isfile(path):
        raise ManifestError(f"Could not locate manifest {path}")
    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ManifestError(f"Failed to read manifest {path}: {e}") from e
    if not isinstance(data, dict):
        raise ManifestError(f"{path}: manifest must be a mapping")

    manifest = Manifest(path=os.path.abspath(path))
    if "platforms" in data:
        manifest.platforms = _string_list(data["platforms"], "platforms", path)
    if "sources" in data:
        manifest.sources = _string_list(data["sources"], "sources", path)
    deps = data.get("dependencies") or {}
    if not isinstance(deps, dict):
        raise ManifestError(f"{path}: 'dependencies' must be a mapping")
    for name, entry in deps.items():
        manifest.dependencies.append(
            _parse_dependency(str(name), entry, settings, path)
        )
    logger.debug("Loaded %d dependencies from %s", len(manifest.dependencies), path)
    return manifest
