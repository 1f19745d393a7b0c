"""Definition: the manifest, the previous lock and the resolved spec list."""
from __future__ import annotations

import logging
import os
from typing import Dict, List, Optional

from common.errors import ProductionError
from common.settings import Settings
from .lockfile import LockContents, parse_lockfile, write_lockfile
from .manifest import Manifest, load_manifest
from .models import Dependency, Spec
from .requirement import ANY_REQUIREMENT, normalize_requirement
from .resolver import PinnedResolver, Resolver, locked_match

logger = logging.getLogger(__name__)


class Definition:
    """Binds a manifest to its lock and resolves the specs to install.

    ``unlock=True`` ignores the lock for resolution (an update); the lock is
    still read so equivalence checks can report what changed.
    """

    def __init__(
        self,
        manifest: Manifest,
        lock: Optional[LockContents],
        resolver: Resolver,
        unlock: bool = False,
    ):
        self.manifest = manifest
        self.locked = lock or LockContents()
        self.has_lock = lock is not None
        self.resolver = resolver
        self.unlock = unlock
        self._specs: Optional[List[Spec]] = None

    @classmethod
    def build(
        cls,
        manifest_path: str,
        lock_path: Optional[str],
        unlock: Optional[bool] = None,
        *,
        settings: Optional[Settings] = None,
        resolver: Optional[Resolver] = None,
    ) -> "Definition":
        """Load manifest and (when present) lock from disk. Never touches the network."""
        if settings is None:
            settings = Settings.load(os.path.dirname(os.path.abspath(manifest_path)))
        manifest = load_manifest(manifest_path, settings)
        lock = None
        if lock_path and os.path.exists(lock_path):
            lock = parse_lockfile(lock_path, settings)
        if resolver is None:
            resolver = PinnedResolver(settings, *manifest.sources[:1])
        return cls(manifest, lock, resolver, unlock=bool(unlock))

    @property
    def dependencies(self) -> List[Dependency]:
        return self.manifest.dependencies

    @property
    def platforms(self) -> List[str]:
        return self.manifest.platforms

    def _locked_by_name(self) -> Dict[str, Spec]:
        return {spec.name: spec for spec in self.locked.specs}

    def new_platform(self) -> bool:
        """True when the manifest targets a platform the lock never saw."""
        return any(p not in self.locked.platforms for p in self.platforms)

    def missing_specs(self) -> List[Dependency]:
        """Dependencies the lock alone cannot satisfy."""
        by_name = self._locked_by_name()
        missing = [dep for dep in self.dependencies if not locked_match(dep, by_name.get(dep.name))]
        seen = {dep.name for dep in missing}
        for spec in self.locked.specs:
            for name in spec.dependencies:
                if name not in by_name and name not in seen:
                    seen.add(name)
                    missing.append(Dependency(name, ANY_REQUIREMENT))
        return missing

    def ensure_equivalent_manifest_and_lockfile(self) -> None:
        """Raise ProductionError unless the manifest matches the lock exactly."""
        manifest_deps = {dep.name: normalize_requirement(dep.requirement) for dep in self.dependencies}
        locked_deps = {name: normalize_requirement(req) for name, req in self.locked.dependencies.items()}
        added = sorted(set(manifest_deps) - set(locked_deps))
        deleted = sorted(set(locked_deps) - set(manifest_deps))
        changed = sorted(
            name for name in set(manifest_deps) & set(locked_deps)
            if manifest_deps[name] != locked_deps[name]
        )
        problems = []
        if not self.has_lock:
            problems.append("The lock file is missing")
        if added:
            problems.append("You have added to the manifest: " + ", ".join(added))
        if deleted:
            problems.append("You have deleted from the manifest: " + ", ".join(deleted))
        if changed:
            problems.append("You have changed in the manifest: " + ", ".join(changed))
        new_platforms = [p for p in self.platforms if p not in self.locked.platforms]
        if self.has_lock and new_platforms:
            problems.append("You have added platforms: " + ", ".join(new_platforms))
        if problems:
            raise ProductionError(
                "You are trying to install in frozen mode after changing your manifest.\n"
                + "\n".join(problems)
            )

    def _resolve(self, remote: bool) -> List[Spec]:
        locked = [] if self.unlock else self.locked.specs
        self._specs = self.resolver.resolve(self.dependencies, locked, remote=remote)
        return self._specs

    def resolve_with_cache(self) -> List[Spec]:
        """Resolve using only gems that are installable without network access."""
        return self._resolve(remote=False)

    def resolve_remotely(self) -> List[Spec]:
        """Resolve allowing specs to be fetched from their remotes."""
        return self._resolve(remote=True)

    @property
    def specs(self) -> List[Spec]:
        """Resolved specs; falls back to the lock when no resolution ran."""
        if self._specs is None:
            self._specs = self.resolver.resolve(self.dependencies, self.locked.specs, remote=True)
        return list(self._specs)

    def to_lock(self) -> LockContents:
        return LockContents(
            platforms=list(self.platforms),
            dependencies={dep.name: normalize_requirement(dep.requirement) for dep in self.dependencies},
            specs=self.specs,
        )

    def lock(self, lock_path: str) -> None:
        """Persist the resolved state."""
        write_lockfile(lock_path, self.to_lock())
        logger.debug("Lock written to %s", lock_path)
