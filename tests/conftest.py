"""Shared fixtures for gemstall tests."""

import os
import textwrap

import pytest

from common.settings import Settings


@pytest.fixture
def project(tmp_path):
    """Empty project root with no config file and an empty environment."""
    root = tmp_path / "app"
    root.mkdir()
    return root


@pytest.fixture
def settings(project):
    return Settings.load(str(project), environ={})


@pytest.fixture
def write_manifest(project):
    def _write(body: str, name: str = "gemstall.yml") -> str:
        path = project / name
        path.write_text(textwrap.dedent(body), encoding="utf-8")
        return str(path)
    return _write


@pytest.fixture
def write_lock(project):
    def _write(body: str, name: str = "gemstall.lock") -> str:
        path = project / name
        path.write_text(textwrap.dedent(body), encoding="utf-8")
        return str(path)
    return _write


def make_store(store, ruby_string, gems, gemset=None):
    """Create ``<store>/gems/<ruby>[@gemset]/{gems,specifications}`` with ``gems`` dirs."""
    name = ruby_string if not gemset else f"{ruby_string}@{gemset}"
    base = os.path.join(str(store), "gems", name)
    os.makedirs(os.path.join(base, "specifications"), exist_ok=True)
    for full_name in gems:
        gem_dir = os.path.join(base, "gems", full_name)
        os.makedirs(os.path.join(gem_dir, "lib"), exist_ok=True)
        with open(os.path.join(gem_dir, "lib", "main.rb"), "w", encoding="utf-8") as fh:
            fh.write("# gem code\n")
        with open(os.path.join(base, "specifications", full_name + ".gemspec"), "w",
                  encoding="utf-8") as fh:
            fh.write("# spec\n")
    return base
