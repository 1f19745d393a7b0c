"""Installation orchestrator.

Decides whether the existing lock can be trusted, resolves when it cannot,
then installs every spec strictly in resolver order before writing the lock.
Specs are installed one at a time: a later gem may need an earlier one to
build, so the first failure stops the run.
"""
from __future__ import annotations

import logging
import os
from dataclasses import replace
from typing import Any, Callable, Mapping, Optional, Union

from constants import Constants, InstallStatus
from common.errors import GemstallError
from common.logging_utils import extra_context, is_debug_enabled
from common.settings import Settings
from definition import Definition
from .copier import ArtifactCopier, AssumeYesPolicy, InteractivePolicy, ProvisioningPolicy
from .locator import ArtifactLocator, NullArtifactLocator, RvmArtifactLocator
from .models import InstallMethod, InstallOptions, InstallResult
from .source_installer import SourceInstaller
from .strategy import StrategySelector
from .stubs import StubGenerator

logger = logging.getLogger(__name__)

Options = Union[InstallOptions, Mapping[str, Any], None]


def default_locator(settings: Settings, environ: Optional[Mapping[str, str]] = None) -> ArtifactLocator:
    """RVM locator when RVM is active and enabled, otherwise a locator that finds nothing."""
    environ = os.environ if environ is None else environ
    if settings["rvm"] and environ.get(Constants.ENV_RVM_PATH):
        return RvmArtifactLocator(environ, ruby_command=settings.get("ruby") or "ruby")
    return NullArtifactLocator()


def default_policy(settings: Settings) -> ProvisioningPolicy:
    if settings["assume_yes"]:
        return AssumeYesPolicy()
    return InteractivePolicy()


class Installer:
    """Installs a definition's specs into the environment rooted at ``root``."""

    def __init__(
        self,
        root: str,
        definition: Definition,
        *,
        settings: Optional[Settings] = None,
        locator: Optional[ArtifactLocator] = None,
        policy: Optional[ProvisioningPolicy] = None,
        selector: Optional[StrategySelector] = None,
        lock_path: Optional[str] = None,
        definition_builder: Callable[..., Definition] = Definition.build,
    ):
        self.root = os.path.abspath(root)
        self.definition = definition
        self.settings = settings or Settings.load(self.root)
        self.manifest_path = definition.manifest.path
        self.lock_path = lock_path or os.path.join(
            os.path.dirname(self.manifest_path), Constants.LOCK_FILE
        )
        self.definition_builder = definition_builder
        if selector is None:
            locator = locator or default_locator(self.settings)
            copier = ArtifactCopier(locator, policy or default_policy(self.settings))
            stubs = StubGenerator(self.settings, self.manifest_path)
            selector = StrategySelector(locator, copier, SourceInstaller(self.settings, stubs))
        self.selector = selector
        self.result: Optional[InstallResult] = None

    @classmethod
    def install(cls, root: str, definition: Definition, options: Options = None, **kwargs) -> "Installer":
        installer = cls(root, definition, **kwargs)
        installer.result = installer.run(options)
        return installer

    def lock_is_trusted(self, options: InstallOptions) -> bool:
        """True when the lock alone still satisfies the manifest for this run."""
        if options.update or not os.path.exists(self.lock_path):
            return False
        try:
            trial = self.definition_builder(self.manifest_path, self.lock_path, None, settings=self.settings)
            trusted = not trial.new_platform() and not trial.missing_specs()
        except GemstallError as exc:
            logger.debug("Lock not trusted, resolving again: %s", exc)
            return False
        if is_debug_enabled(logger):
            logger.debug(
                "Lock trust decision",
                extra=extra_context(event="decision", component="installer",
                                    action="trust_lock", outcome=trusted),
            )
        return trusted

    def run(self, options: Options = None) -> InstallResult:
        """Install every resolved spec, then write the lock.

        Args:
            options: InstallOptions or a mapping with ``update`` / ``local``

        Returns:
            InstallResult: INSTALLED with the (spec, method) entries, SKIPPED
            when the manifest is empty, or CANCELLED when provisioning was
            declined. The lock is only written for INSTALLED.

        Raises:
            ProductionError: frozen mode and the manifest no longer matches the lock
            GemNotFound: resolution failed
            InstallError: a spec failed to install; later specs are not attempted
        """
        options = InstallOptions.coerce(options)

        if self.settings["frozen"]:
            self.definition.ensure_equivalent_manifest_and_lockfile()

        if not self.definition.dependencies:
            logger.warning("The manifest specifies no dependencies")
            return InstallResult(InstallStatus.SKIPPED)

        trusted = self.lock_is_trusted(options)
        if not trusted:
            if options.local:
                self.definition.resolve_with_cache()
            else:
                self.definition.resolve_remotely()

        os.makedirs(self.settings.install_path, exist_ok=True)

        result = InstallResult(InstallStatus.INSTALLED, trusted_lock=trusted)
        for spec in self.definition.specs:
            method, loaded_from = self.selector.install_spec(spec)
            if method == InstallMethod.DECLINED:
                logger.info("Installation cancelled before %s", spec)
                result.status = InstallStatus.CANCELLED
                return result
            result.installed.append((replace(spec, loaded_from=loaded_from), method))

        self.lock()
        return result

    def lock(self) -> None:
        self.definition.lock(self.lock_path)
