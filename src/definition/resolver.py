"""Resolver interface and the lock-first pinned resolver.

Dependency solving itself is outside this project. ``PinnedResolver`` only
keeps locked specs that still satisfy the manifest and accepts exact pins
for everything else; anything that would need a search raises GemNotFound.
"""
from __future__ import annotations

import logging
from typing import Dict, List, Optional, Protocol, Sequence, Set

from constants import Constants
from common.errors import GemNotFound
from sources import FetchableSource, build_source
from .models import Dependency, Spec
from .requirement import is_exact, parse_requirement, satisfies

logger = logging.getLogger(__name__)


class Resolver(Protocol):
    """Turns manifest dependencies into an ordered spec list."""

    def resolve(
        self,
        dependencies: Sequence[Dependency],
        locked_specs: Sequence[Spec],
        *,
        remote: bool,
    ) -> List[Spec]:
        ...


def locked_match(dep: Dependency, locked: Optional[Spec]) -> bool:
    """True when a locked spec still satisfies the manifest dependency."""
    if locked is None:
        return False
    if dep.source is not None and dep.source != locked.source:
        return False
    return satisfies(locked.version, dep.requirement)


class PinnedResolver:
    """Lock-first resolution with exact pins as the only way to add a gem."""

    def __init__(self, settings, default_remote: str = Constants.DEFAULT_REMOTE):
        self.settings = settings
        self.default_remote = default_remote

    def _default_source(self):
        return build_source({"type": "remote", "remote": self.default_remote}, self.settings)

    @staticmethod
    def _closure(roots: Sequence[str], by_name: Dict[str, Spec]) -> Set[str]:
        keep: Set[str] = set()
        pending = list(roots)
        while pending:
            name = pending.pop()
            if name in keep or name not in by_name:
                continue
            keep.add(name)
            pending.extend(by_name[name].dependencies)
        return keep

    def resolve(
        self,
        dependencies: Sequence[Dependency],
        locked_specs: Sequence[Spec],
        *,
        remote: bool,
    ) -> List[Spec]:
        by_name = {spec.name: spec for spec in locked_specs}
        kept_roots: List[str] = []
        pinned: List[Spec] = []

        for dep in dependencies:
            if locked_match(dep, by_name.get(dep.name)):
                kept_roots.append(dep.name)
                continue
            if is_exact(dep.requirement):
                version = parse_requirement(dep.requirement)[0][1]
                pinned.append(Spec(dep.name, version, dep.source or self._default_source()))
                continue
            raise GemNotFound(
                f"Could not find gem '{dep.name} ({dep.requirement})' in the lock. "
                "Pin an exact version to add it."
            )

        keep = self._closure(kept_roots, by_name)
        pinned_names = {spec.name for spec in pinned}
        specs = [
            spec for spec in locked_specs
            if spec.name in keep and spec.name not in pinned_names
        ]
        specs.extend(pinned)

        if not remote:
            for spec in specs:
                if isinstance(spec.source, FetchableSource) and not spec.source.cached(spec):
                    raise GemNotFound(
                        f"Could not find {spec.full_name} in the local cache. "
                        "Run without --local to fetch it."
                    )
        logger.debug("Resolved %d specs (remote=%s)", len(specs), remote)
        return specs
