"""Installing a spec by fetching and building it from its declared source."""
from __future__ import annotations

import logging
import shutil
from typing import Optional

from sources import FetchableSource
from .stubs import StubGenerator

logger = logging.getLogger(__name__)


class SourceInstaller:
    """Fetch, build with the per-gem build args, write stubs, clean up."""

    def __init__(self, settings, stub_generator: Optional[StubGenerator] = None):
        self.settings = settings
        self.stub_generator = stub_generator

    def install_from_source(self, spec) -> Optional[str]:
        """Fetch (when the source needs it), build and install one spec.

        Args:
            spec: Resolved spec to install

        Returns:
            The location the installed gem was loaded from
        """
        logger.info("Installing %s", spec)
        try:
            if isinstance(spec.source, FetchableSource):
                spec.source.fetch(spec)

            build_args = self.settings.build_args_for(spec.name)
            loaded_from = spec.source.install(
                spec, build_args=list(build_args), tmp_dir=self.settings.tmp_path
            )
            logger.debug("  %s from %s", spec.name, loaded_from)

            if self.settings.stubs_enabled and self.stub_generator is not None:
                self.stub_generator.generate(spec)
            return loaded_from
        finally:
            shutil.rmtree(self.settings.tmp_path, ignore_errors=True)
