"""Per-spec choice between reusing a store artifact and building from source."""
from __future__ import annotations

import logging
from typing import Optional, Tuple

from .copier import ArtifactCopier
from .locator import ArtifactLocator
from .models import CopyOutcome, InstallMethod
from .source_installer import SourceInstaller

logger = logging.getLogger(__name__)


class StrategySelector:
    """Copy when the store holds the exact ``name-version``, else build."""

    def __init__(self, locator: ArtifactLocator, copier: ArtifactCopier,
                 source_installer: SourceInstaller):
        self.locator = locator
        self.copier = copier
        self.source_installer = source_installer

    def install_spec(self, spec) -> Tuple[InstallMethod, Optional[str]]:
        """Install one spec by the cheapest available route.

        Args:
            spec: Resolved spec to install

        Returns:
            (method, loaded_from): how the spec was installed and where it now
            lives. ``loaded_from`` is None when the install was declined.

        Raises:
            InstallError: the source install (or its fallback) failed
        """
        located = self.locator.find(spec)
        if located is None:
            return InstallMethod.SOURCE, self.source_installer.install_from_source(spec)

        outcome = self.copier.copy(spec, located)
        if outcome == CopyOutcome.COPIED:
            return InstallMethod.COPIED, self.copier.target_for(located)
        if outcome == CopyOutcome.ALREADY_PRESENT:
            return InstallMethod.ALREADY_PRESENT, located
        if outcome == CopyOutcome.DECLINED:
            return InstallMethod.DECLINED, None

        logger.warning("Falling back to installing %s from its source", spec)
        return InstallMethod.SOURCE, self.source_installer.install_from_source(spec)
