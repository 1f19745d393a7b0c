"""Manifest, lock file and resolution collaborators of the installer."""

from .definition import Definition
from .lockfile import LockContents, parse_lockfile, write_lockfile
from .manifest import Manifest, load_manifest
from .models import Dependency, Spec
from .resolver import PinnedResolver, Resolver

__all__ = [
    "Definition",
    "Dependency",
    "LockContents",
    "Manifest",
    "PinnedResolver",
    "Resolver",
    "Spec",
    "load_manifest",
    "parse_lockfile",
    "write_lockfile",
]
