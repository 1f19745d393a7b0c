"""Tests for the installation orchestrator."""

import os
from unittest.mock import MagicMock, patch

import pytest

from common.errors import InstallError, LockfileError, ProductionError
from common.settings import Settings
from constants import InstallStatus
from definition import Definition, parse_lockfile
from installer import AssumeYesPolicy, Installer, InstallMethod, RvmArtifactLocator
from conftest import make_store

MANIFEST = """\
dependencies:
  rack: "2.2.8"
  rake: "13.0.6"
"""

LOCK = """\
platforms = ["ruby"]

[dependencies]
rack = "= 2.2.8"
rake = "= 13.0.6"

[[package]]
name = "rake"
version = "13.0.6"
source = { type = "remote", remote = "https://rubygems.org" }

[[package]]
name = "rack"
version = "2.2.8"
source = { type = "remote", remote = "https://rubygems.org" }
"""


def _selector(*methods):
    selector = MagicMock()
    if methods:
        selector.install_spec.side_effect = [
            m if isinstance(m, Exception) else (m, f"/loaded/{m.value}") for m in methods
        ]
    else:
        selector.install_spec.return_value = (InstallMethod.SOURCE, "/loaded/source")
    return selector


def _installer(project, manifest, settings=None, selector=None, **kwargs):
    settings = settings or Settings.load(str(project), environ={})
    lock_path = str(project / "gemstall.lock")
    definition = Definition.build(manifest, lock_path, None, settings=settings)
    installer = Installer(str(project), definition, settings=settings,
                          selector=selector or _selector(), lock_path=lock_path, **kwargs)
    return installer


class TestInstallerRun:
    """Test Installer.run."""

    def test_installs_in_resolved_order_then_locks(self, project, write_manifest, write_lock):
        write_lock(LOCK)
        installer = _installer(project, write_manifest(MANIFEST))
        seen = []
        installer.selector.install_spec.side_effect = (
            lambda spec: seen.append((spec.name, os.path.exists(installer.settings.install_path)))
            or (InstallMethod.SOURCE, None)
        )
        with patch.object(installer.definition, "lock", wraps=installer.definition.lock) as lock:
            result = installer.run()

        assert result.status == InstallStatus.INSTALLED
        assert seen == [("rake", True), ("rack", True)]
        lock.assert_called_once_with(str(project / "gemstall.lock"))

    def test_first_failure_aborts_without_lock(self, project, write_manifest):
        selector = _selector(InstallMethod.SOURCE, InstallError("build failed", "rake"))
        installer = _installer(project, write_manifest(MANIFEST + '  thor: "1.3.0"\n'),
                               selector=selector)
        with pytest.raises(InstallError):
            installer.run()
        assert selector.install_spec.call_count == 2
        assert not (project / "gemstall.lock").exists()

    def test_empty_manifest_skips(self, project, write_manifest, caplog):
        selector = _selector()
        installer = _installer(project, write_manifest("dependencies: {}\n"), selector=selector)
        result = installer.run()
        assert result.status == InstallStatus.SKIPPED
        assert "no dependencies" in caplog.text
        selector.install_spec.assert_not_called()
        assert not os.path.exists(installer.settings.install_path)
        assert not (project / "gemstall.lock").exists()

    def test_frozen_mismatch_aborts_before_install(self, project, write_manifest, write_lock):
        write_lock(LOCK)
        settings = Settings(str(project), overrides={"frozen": True})
        selector = _selector()
        installer = _installer(project, write_manifest(MANIFEST + '  thor: "1.3.0"\n'),
                               settings=settings, selector=selector)
        with pytest.raises(ProductionError, match="thor"):
            installer.run()
        selector.install_spec.assert_not_called()
        assert not os.path.exists(settings.install_path)

    def test_frozen_match_installs(self, project, write_manifest, write_lock):
        write_lock(LOCK)
        settings = Settings(str(project), overrides={"frozen": True})
        result = _installer(project, write_manifest(MANIFEST), settings=settings).run()
        assert result.status == InstallStatus.INSTALLED
        assert result.trusted_lock is True

    def test_cancel_stops_without_lock(self, project, write_manifest):
        selector = _selector(InstallMethod.COPIED, InstallMethod.DECLINED, InstallMethod.SOURCE)
        installer = _installer(project, write_manifest(MANIFEST + '  thor: "1.3.0"\n'),
                               selector=selector)
        result = installer.run()
        assert result.cancelled
        assert selector.install_spec.call_count == 2
        assert [spec.name for spec, _ in result.installed] == ["rack"]
        assert result.installed[0][0].loaded_from == "/loaded/copied"
        assert not (project / "gemstall.lock").exists()

    def test_install_classmethod_keeps_result(self, project, write_manifest):
        settings = Settings.load(str(project), environ={})
        lock_path = str(project / "gemstall.lock")
        definition = Definition.build(write_manifest(MANIFEST), lock_path, settings=settings)
        installer = Installer.install(str(project), definition, {"local": False},
                                      settings=settings, selector=_selector(), lock_path=lock_path)
        assert installer.result.status == InstallStatus.INSTALLED
        assert os.path.exists(lock_path)


class TestLockTrust:
    """Test whether the existing lock is reused or resolution runs."""

    def test_trusted_lock_skips_resolution(self, project, write_manifest, write_lock):
        write_lock(LOCK)
        installer = _installer(project, write_manifest(MANIFEST))
        with patch.object(installer.definition, "resolve_remotely") as remote, \
                patch.object(installer.definition, "resolve_with_cache") as cache:
            result = installer.run()
        remote.assert_not_called()
        cache.assert_not_called()
        assert result.trusted_lock is True

    def test_missing_lock_resolves_remotely(self, project, write_manifest):
        installer = _installer(project, write_manifest(MANIFEST))
        with patch.object(installer.definition, "resolve_remotely",
                          wraps=installer.definition.resolve_remotely) as remote:
            result = installer.run()
        remote.assert_called_once_with()
        assert result.trusted_lock is False

    def test_local_resolves_with_cache(self, project, write_manifest):
        installer = _installer(project, write_manifest(MANIFEST))
        with patch.object(installer.definition, "resolve_with_cache", return_value=[]) as cache, \
                patch.object(installer.definition, "resolve_remotely") as remote:
            installer.run({"local": True})
        cache.assert_called_once_with()
        remote.assert_not_called()

    def test_update_ignores_trusted_lock(self, project, write_manifest, write_lock):
        write_lock(LOCK)
        installer = _installer(project, write_manifest(MANIFEST))
        with patch.object(installer.definition, "resolve_remotely",
                          wraps=installer.definition.resolve_remotely) as remote:
            installer.run({"update": True})
        remote.assert_called_once_with()

    def test_changed_manifest_not_trusted(self, project, write_manifest, write_lock):
        write_lock(LOCK)
        installer = _installer(project, write_manifest(MANIFEST + '  thor: "1.3.0"\n'))
        result = installer.run()
        assert result.trusted_lock is False
        locked = parse_lockfile(str(project / "gemstall.lock"), installer.settings)
        assert [s.name for s in locked.specs] == ["rake", "rack", "thor"]

    def test_trial_build_error_means_untrusted(self, project, write_manifest, write_lock):
        write_lock(LOCK)
        builder = MagicMock(side_effect=LockfileError("corrupt"))
        installer = _installer(project, write_manifest(MANIFEST), definition_builder=builder)
        result = installer.run()
        assert result.status == InstallStatus.INSTALLED
        assert result.trusted_lock is False
        builder.assert_called_once()


class TestInstallScenario:
    """Store copy plus source build in a single run."""

    def test_copy_from_store_and_build_the_rest(self, project, write_manifest, tmp_path):
        store = tmp_path / "rvm"
        make_store(store, "ruby-3.2.2", ["rack-2.2.8"], gemset="shared")
        environ = {"rvm_path": str(store), "rvm_ruby_string": "ruby-3.2.2", "rvm_gemset_name": "app"}
        settings = Settings.load(str(project), environ={})
        lock_path = str(project / "gemstall.lock")
        definition = Definition.build(write_manifest(MANIFEST), lock_path, settings=settings)
        installer = Installer(str(project), definition, settings=settings, lock_path=lock_path,
                              locator=RvmArtifactLocator(environ), policy=AssumeYesPolicy())

        with patch("sources.remote.download") as download, \
                patch("sources.remote.gem_install", return_value="/spec") as gem_install:
            result = installer.run()

        assert result.status == InstallStatus.INSTALLED
        methods = {spec.name: method for spec, method in result.installed}
        assert methods == {"rack": InstallMethod.COPIED, "rake": InstallMethod.SOURCE}
        download.assert_called_once()
        assert gem_install.call_args[0][1].name == "rake"
        copied = store / "gems" / "ruby-3.2.2@app" / "gems" / "rack-2.2.8"
        assert copied.is_dir()
        loaded = {spec.name: spec.loaded_from for spec, _ in result.installed}
        assert loaded == {"rack": str(copied), "rake": "/spec"}
        assert os.path.exists(lock_path)
        assert not os.path.exists(settings.tmp_path)
