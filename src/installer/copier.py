"""Copying prebuilt gems from the external store into the active gemset."""
from __future__ import annotations

import logging
import os
import shutil
import sys
from typing import Callable, Optional, Protocol, TextIO

from constants import Constants
from .locator import ArtifactLocator
from .models import CopyOutcome

logger = logging.getLogger(__name__)


class ProvisioningPolicy(Protocol):
    """Decides whether a missing target directory may be created."""

    def confirm(self, directory: str) -> bool:
        ...


class AssumeYesPolicy:
    def confirm(self, directory: str) -> bool:  # pylint: disable=unused-argument
        return True


class AssumeNoPolicy:
    def confirm(self, directory: str) -> bool:  # pylint: disable=unused-argument
        return False


class InteractivePolicy:
    """Asks on the terminal; any answer starting with ``y`` confirms."""

    def __init__(self, stdin: Optional[TextIO] = None, stdout: Optional[TextIO] = None):
        self.stdin = stdin
        self.stdout = stdout

    def confirm(self, directory: str) -> bool:
        out = self.stdout or sys.stdout
        out.write(f"Make directory {directory}? ")
        out.flush()
        answer = (self.stdin or sys.stdin).readline()
        return answer.strip().lower().startswith("y")


class ArtifactCopier:
    """Copies a located gem directory (and its gemspec) into the active gemset."""

    def __init__(self, locator: ArtifactLocator, policy: ProvisioningPolicy,
                 copytree: Callable[..., object] = shutil.copytree):
        self.locator = locator
        self.policy = policy
        self._copytree = copytree

    def _provision(self, directories) -> bool:
        for directory in directories:
            if os.path.exists(directory):
                continue
            if not self.policy.confirm(directory):
                logger.info("Not creating %s; stopping installation", directory)
                return False
            os.makedirs(directory, exist_ok=True)
        return True

    @staticmethod
    def _gemspec_for(source_path: str) -> str:
        store = os.path.dirname(os.path.dirname(source_path))
        return os.path.join(
            store, Constants.STORE_SPECS_DIR,
            os.path.basename(source_path) + Constants.GEMSPEC_SUFFIX,
        )

    def target_for(self, source_path: str) -> str:
        """Directory in the active gemset that receives ``source_path``."""
        gem_dir, _ = self.locator.target_dirs()
        return os.path.join(gem_dir, os.path.basename(source_path))

    def copy(self, spec, source_path: str) -> CopyOutcome:
        """Copy a located gem directory and its gemspec into the active gemset.

        Missing target directories are created only if the provisioning
        policy agrees. The store artifact itself is never modified.

        Args:
            spec: Spec being installed, used for log messages
            source_path: Gem directory found in the store

        Returns:
            CopyOutcome: COPIED, ALREADY_PRESENT when the artifact already is
            the target, DECLINED when directory creation was refused, or FAILED
            when the copy raised (the caller falls back to a source install)
        """
        gem_dir, spec_dir = self.locator.target_dirs()
        if not self._provision((gem_dir, spec_dir)):
            return CopyOutcome.DECLINED

        target = self.target_for(source_path)
        if os.path.realpath(target) == os.path.realpath(source_path):
            logger.info("Using %s from the active gemset", spec)
            return CopyOutcome.ALREADY_PRESENT

        logger.info("Copying %s from %s", spec, source_path)
        try:
            self._copytree(source_path, target, symlinks=True, dirs_exist_ok=True)
            gemspec = self._gemspec_for(source_path)
            if os.path.isfile(gemspec):
                shutil.copy2(gemspec, spec_dir)
        except (OSError, shutil.Error) as exc:
            logger.warning("Copying %s from %s failed: %s", spec, source_path, exc)
            return CopyOutcome.FAILED
        return CopyOutcome.COPIED
