"""gemstall installer package.

Installs resolved specs into the target environment, reusing gems already
built in an external RVM store where possible.
"""

from .copier import ArtifactCopier, AssumeNoPolicy, AssumeYesPolicy, InteractivePolicy
from .locator import NullArtifactLocator, RvmArtifactLocator
from .models import CopyOutcome, InstallMethod, InstallOptions, InstallResult
from .orchestrator import Installer
from .source_installer import SourceInstaller
from .strategy import StrategySelector
from .stubs import StubGenerator

__all__ = [
    "ArtifactCopier",
    "AssumeNoPolicy",
    "AssumeYesPolicy",
    "CopyOutcome",
    "InstallMethod",
    "InstallOptions",
    "InstallResult",
    "Installer",
    "InteractivePolicy",
    "NullArtifactLocator",
    "RvmArtifactLocator",
    "SourceInstaller",
    "StrategySelector",
    "StubGenerator",
]
