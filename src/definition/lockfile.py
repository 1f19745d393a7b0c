"""Lock file (gemstall.lock) parsing and writing.

The lock is a TOML file in the uv.lock / poetry.lock style: top level
``platforms`` and ``dependencies`` plus one ``[[package]]`` table per spec,
listed in install order.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Dict, List

import tomli_w

from common.errors import GemstallError, LockfileError
from sources import build_source
from .models import Spec

logger = logging.getLogger(__name__)


@dataclass
class LockContents:
    """Everything recorded by a previous successful install."""
    platforms: List[str] = field(default_factory=list)
    dependencies: Dict[str, str] = field(default_factory=dict)
    specs: List[Spec] = field(default_factory=list)


def _load_toml(lockfile_path: str) -> dict:
    try:
        import tomllib as toml  # type: ignore
    except Exception:  # pylint: disable=broad-exception-caught
        import tomli as toml  # type: ignore

    with open(lockfile_path, "rb") as f:
        return toml.load(f) or {}


def _spec_from_table(pkg: dict, settings) -> Spec:
    if not isinstance(pkg, dict) or not pkg.get("name") or not pkg.get("version"):
        raise LockfileError(f"Invalid [[package]] entry: {pkg!r}")
    source_data = pkg.get("source")
    if not isinstance(source_data, dict):
        raise LockfileError(f"Package {pkg['name']} has no source")
    try:
        source = build_source(source_data, settings)
    except GemstallError as e:
        raise LockfileError(f"Package {pkg['name']}: {e}") from e
    return Spec(
        name=str(pkg["name"]),
        version=str(pkg["version"]),
        source=source,
        executables=tuple(str(e) for e in pkg.get("executables", []) or []),
        dependencies=tuple(str(d) for d in pkg.get("dependencies", []) or []),
    )


def parse_lockfile(lockfile_path: str, settings) -> LockContents:
    """Read a lock file into LockContents, preserving package order.

    Args:
        lockfile_path: Path to gemstall.lock
        settings: Settings used to bind sources to install paths

    Returns:
        LockContents; raises LockfileError when the file cannot be trusted at all
    """
    try:
        data = _load_toml(lockfile_path)
    except FileNotFoundError as e:
        raise LockfileError(f"Lock file not found: {lockfile_path}") from e
    except IOError as e:
        raise LockfileError(f"Failed to read lock file: {e}") from e
    except ValueError as e:  # TOMLDecodeError subclasses ValueError
        raise LockfileError(f"Failed to parse lock file (invalid format): {e}") from e

    contents = LockContents()
    platforms = data.get("platforms", [])
    if isinstance(platforms, list):
        contents.platforms = [str(p) for p in platforms]
    deps = data.get("dependencies", {})
    if isinstance(deps, dict):
        contents.dependencies = {str(k): str(v) for k, v in deps.items()}

    package_list = data.get("package", [])
    if not isinstance(package_list, list):
        raise LockfileError("Lock file 'package' must be an array of tables")
    for pkg in package_list:
        contents.specs.append(_spec_from_table(pkg, settings))

    logger.debug("Parsed %d locked specs from %s", len(contents.specs), lockfile_path)
    return contents


def write_lockfile(lockfile_path: str, contents: LockContents) -> None:
    """Write ``contents`` atomically to ``lockfile_path``."""
    packages = []
    for spec in contents.specs:
        table = {"name": spec.name, "version": spec.version, "source": spec.source.to_lock()}
        if spec.executables:
            table["executables"] = list(spec.executables)
        if spec.dependencies:
            table["dependencies"] = list(spec.dependencies)
        packages.append(table)
    document = {
        "platforms": list(contents.platforms),
        "dependencies": dict(contents.dependencies),
        "package": packages,
    }
    tmp_path = lockfile_path + ".tmp"
    try:
        with open(tmp_path, "wb") as f:
            tomli_w.dump(document, f)
        os.replace(tmp_path, lockfile_path)
    except OSError as e:
        raise LockfileError(f"Lock file couldn't be written to disk: {e}") from e
    logger.debug("Wrote %d specs to %s", len(packages), lockfile_path)
