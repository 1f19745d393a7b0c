"""Tests for copying store artifacts into the active gemset."""

import io
import os
import shutil
from unittest.mock import MagicMock

from definition import Spec
from installer.copier import ArtifactCopier, AssumeNoPolicy, AssumeYesPolicy, InteractivePolicy
from installer.locator import RvmArtifactLocator
from installer.models import CopyOutcome
from conftest import make_store

SPEC = Spec("rack", "2.2.8", source=None)


def _locator(store, gemset="app"):
    return RvmArtifactLocator({
        "rvm_path": str(store),
        "rvm_ruby_string": "ruby-3.2.2",
        "rvm_gemset_name": gemset,
    })


class TestArtifactCopier:
    """Test ArtifactCopier.copy outcomes."""

    def test_copies_directory_and_gemspec(self, tmp_path):
        make_store(tmp_path, "ruby-3.2.2", ["rack-2.2.8"], gemset="other")
        locator = _locator(tmp_path)
        source = locator.find(SPEC)

        outcome = ArtifactCopier(locator, AssumeYesPolicy()).copy(SPEC, source)

        assert outcome == CopyOutcome.COPIED
        gems, specs = locator.target_dirs()
        assert os.path.isfile(os.path.join(gems, "rack-2.2.8", "lib", "main.rb"))
        assert os.path.isfile(os.path.join(specs, "rack-2.2.8.gemspec"))

    def test_declined_when_target_missing(self, tmp_path):
        make_store(tmp_path, "ruby-3.2.2", ["rack-2.2.8"], gemset="other")
        locator = _locator(tmp_path)
        outcome = ArtifactCopier(locator, AssumeNoPolicy()).copy(SPEC, locator.find(SPEC))
        assert outcome == CopyOutcome.DECLINED
        assert not os.path.exists(locator.gemset_dir())

    def test_existing_targets_need_no_confirmation(self, tmp_path):
        make_store(tmp_path, "ruby-3.2.2", ["rack-2.2.8"], gemset="other")
        make_store(tmp_path, "ruby-3.2.2", [], gemset="app")
        os.makedirs(os.path.join(str(tmp_path), "gems", "ruby-3.2.2@app", "gems"))
        locator = _locator(tmp_path)
        outcome = ArtifactCopier(locator, AssumeNoPolicy()).copy(SPEC, locator.find(SPEC))
        assert outcome == CopyOutcome.COPIED

    def test_already_present(self, tmp_path):
        make_store(tmp_path, "ruby-3.2.2", ["rack-2.2.8"], gemset="app")
        locator = _locator(tmp_path)
        copytree = MagicMock()
        outcome = ArtifactCopier(locator, AssumeYesPolicy(), copytree=copytree).copy(
            SPEC, locator.find(SPEC))
        assert outcome == CopyOutcome.ALREADY_PRESENT
        copytree.assert_not_called()

    def test_copy_failure_reports_failed(self, tmp_path, caplog):
        make_store(tmp_path, "ruby-3.2.2", ["rack-2.2.8"], gemset="other")
        locator = _locator(tmp_path)
        copytree = MagicMock(side_effect=shutil.Error([("a", "b", "denied")]))
        outcome = ArtifactCopier(locator, AssumeYesPolicy(), copytree=copytree).copy(
            SPEC, locator.find(SPEC))
        assert outcome == CopyOutcome.FAILED
        assert "failed" in caplog.text

    def test_store_artifact_untouched(self, tmp_path):
        make_store(tmp_path, "ruby-3.2.2", ["rack-2.2.8"], gemset="other")
        locator = _locator(tmp_path)
        source = locator.find(SPEC)
        before = sorted(os.listdir(source))
        ArtifactCopier(locator, AssumeYesPolicy()).copy(SPEC, source)
        assert sorted(os.listdir(source)) == before


class TestInteractivePolicy:
    """Test the terminal prompt."""

    def test_yes(self):
        out = io.StringIO()
        assert InteractivePolicy(io.StringIO("Yes\n"), out).confirm("/x") is True
        assert out.getvalue() == "Make directory /x? "

    def test_anything_else_is_no(self):
        assert InteractivePolicy(io.StringIO("nope\n"), io.StringIO()).confirm("/x") is False
        assert InteractivePolicy(io.StringIO(""), io.StringIO()).confirm("/x") is False
