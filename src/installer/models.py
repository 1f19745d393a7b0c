"""Data models for installer runs and per-spec outcomes."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Mapping, Union

from constants import InstallStatus


class CopyOutcome(Enum):
    """Result of copying a located artifact into the active gem store."""
    COPIED = "copied"
    ALREADY_PRESENT = "already_present"
    DECLINED = "declined"
    FAILED = "failed"


class InstallMethod(Enum):
    """How a single spec ended up installed."""
    COPIED = "copied"
    ALREADY_PRESENT = "already_present"
    SOURCE = "source"
    DECLINED = "declined"


@dataclass
class InstallOptions:
    """Caller options for one run."""
    update: bool = False
    local: bool = False

    @classmethod
    def coerce(cls, options: Union["InstallOptions", Mapping[str, Any], None]) -> "InstallOptions":
        if isinstance(options, InstallOptions):
            return options
        options = options or {}
        return cls(update=bool(options.get("update")), local=bool(options.get("local")))


@dataclass
class InstallResult:
    """Summary of an installer run."""
    status: InstallStatus
    installed: List[Any] = field(default_factory=list)  # (Spec with loaded_from, InstallMethod) pairs
    trusted_lock: bool = False

    @property
    def cancelled(self) -> bool:
        return self.status == InstallStatus.CANCELLED
