"""Data models for manifest dependencies and resolved specs."""

from dataclasses import dataclass, field
from typing import Any, Optional, Tuple

from constants import Constants


@dataclass(frozen=True)
class Dependency:
    """A manifest entry: a gem name and the requirement it must satisfy."""
    name: str
    requirement: str  # RubyGems style, e.g. ">= 1.0, < 2" ; ">= 0" means any
    source: Optional[Any] = None  # explicit Source for path/remote pinned deps


@dataclass(frozen=True)
class Spec:
    """A single resolved gem ready to be installed."""
    name: str
    version: str  # kept verbatim; the name-version key must match byte for byte
    source: Any
    executables: Tuple[str, ...] = ()
    dependencies: Tuple[str, ...] = ()
    loaded_from: Optional[str] = field(default=None, compare=False)

    @property
    def full_name(self) -> str:
        """``name-version`` key used by gem stores."""
        return f"{self.name}{Constants.NAME_VERSION_SEPARATOR}{self.version}"

    def __str__(self) -> str:
        return f"{self.name} ({self.version})"
