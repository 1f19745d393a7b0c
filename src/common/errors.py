"""Exception hierarchy for gemstall.

Each error carries the exit code the CLI terminates with when it reaches
``main``.
"""

from typing import Optional

from constants import ExitCodes


class GemstallError(Exception):
    """Base error for all expected failures."""

    status_code = ExitCodes.FILE_ERROR


class ConfigError(GemstallError):
    """Settings file or override could not be read."""


class ManifestError(GemstallError):
    """Manifest is missing or malformed."""


class LockfileError(GemstallError):
    """Lock file is malformed."""


class ProductionError(GemstallError):
    """Frozen mode is on and the manifest no longer matches the lock."""

    status_code = ExitCodes.FROZEN_ERROR


class GemNotFound(GemstallError):
    """A dependency could not be pinned to a concrete spec."""

    status_code = ExitCodes.RESOLVE_ERROR


class InstallError(GemstallError):
    """Installing a spec from its source failed."""

    status_code = ExitCodes.INSTALL_ERROR

    def __init__(self, message: str, spec_name: Optional[str] = None):
        self.spec_name = spec_name
        super().__init__(message)


class FetchError(InstallError):
    """Downloading a spec from its remote failed."""


class RuntimeProbeError(InstallError):
    """The active ruby runtime could not be identified."""
