"""Tests for the lock-first pinned resolver."""

import os

import pytest

from common.errors import GemNotFound
from definition import Dependency, PinnedResolver, Spec
from sources import PathSource, RemoteSource


@pytest.fixture
def remote(settings):
    return RemoteSource("https://rubygems.org", cache_path=settings.cache_path,
                        install_path=settings.install_path)


class TestPinnedResolver:
    """Test resolution from the lock plus exact pins."""

    def test_keeps_locked_specs_in_lock_order(self, settings, remote):
        locked = [
            Spec("rack", "2.2.8", remote),
            Spec("rake", "13.0.6", remote),
            Spec("unused", "1.0", remote),
        ]
        deps = [Dependency("rake", "~> 13.0"), Dependency("rack", ">= 2")]
        specs = PinnedResolver(settings).resolve(deps, locked, remote=True)
        assert [s.name for s in specs] == ["rack", "rake"]

    def test_transitive_locked_dependencies_kept(self, settings, remote):
        locked = [
            Spec("rack", "2.2.8", remote),
            Spec("rack-test", "2.1.0", remote, dependencies=("rack",)),
        ]
        specs = PinnedResolver(settings).resolve(
            [Dependency("rack-test", ">= 0")], locked, remote=True
        )
        assert [s.name for s in specs] == ["rack", "rack-test"]

    def test_exact_pin_added_after_locked(self, settings, remote):
        locked = [Spec("rack", "2.2.8", remote)]
        deps = [Dependency("thor", "= 1.3.0"), Dependency("rack", "~> 2.2")]
        specs = PinnedResolver(settings).resolve(deps, locked, remote=True)
        assert [s.full_name for s in specs] == ["rack-2.2.8", "thor-1.3.0"]
        assert specs[1].source == remote

    def test_changed_requirement_replaced_by_pin(self, settings, remote):
        locked = [Spec("rack", "2.2.8", remote)]
        specs = PinnedResolver(settings).resolve(
            [Dependency("rack", "= 3.0.0")], locked, remote=True
        )
        assert [s.full_name for s in specs] == ["rack-3.0.0"]

    def test_range_without_lock_entry_raises(self, settings):
        with pytest.raises(GemNotFound, match="rack"):
            PinnedResolver(settings).resolve([Dependency("rack", "~> 2.2")], [], remote=True)

    def test_source_change_invalidates_lock_entry(self, settings, remote):
        locked = [Spec("mylib", "0.1.0", remote)]
        path = PathSource("vendor/mylib", root=settings.root)
        with pytest.raises(GemNotFound):
            PinnedResolver(settings).resolve([Dependency("mylib", ">= 0", path)], locked, remote=True)

    def test_local_requires_cached_archives(self, settings, remote, tmp_path):
        locked = [Spec("rack", "2.2.8", remote)]
        deps = [Dependency("rack", ">= 0")]
        with pytest.raises(GemNotFound, match="local cache"):
            PinnedResolver(settings).resolve(deps, locked, remote=False)

        archive = remote.archive_path(locked[0])
        os.makedirs(os.path.dirname(archive))
        with open(archive, "wb") as fh:
            fh.write(b"gem")
        specs = PinnedResolver(settings).resolve(deps, locked, remote=False)
        assert specs == locked

    def test_path_sources_are_always_local(self, settings):
        path = PathSource("vendor/mylib", root=settings.root)
        specs = PinnedResolver(settings).resolve(
            [Dependency("mylib", "= 0.1.0", path)], [], remote=False
        )
        assert specs[0].source is path
