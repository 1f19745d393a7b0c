"""Executable launcher stubs for installed gems."""
from __future__ import annotations

import logging
import os
import shutil
from typing import List

from jinja2 import Environment, StrictUndefined

from constants import Constants

logger = logging.getLogger(__name__)

_EXECUTABLE_TEMPLATE = """\
#!{{ ruby_command }}
#
# This file was generated by gemstall.
#
# The application '{{ executable }}' is installed as part of a gem, and
# this file is here to facilitate running it.
#

require 'pathname'
ENV['GEMSTALL_GEMFILE'] ||= File.expand_path("../{{ relative_manifest_path }}",
  Pathname.new(__FILE__).realpath)

require 'rubygems'

load Gem.bin_path('{{ spec.name }}', '{{ executable }}')
"""

_template = Environment(
    undefined=StrictUndefined, keep_trailing_newline=True, autoescape=False
).from_string(_EXECUTABLE_TEMPLATE)


def ruby_command(settings) -> str:
    """Interpreter path written into the stub shebang."""
    return settings.get("ruby") or shutil.which("ruby") or "ruby"


class StubGenerator:
    """Writes one launcher per executable into the bin directory."""

    def __init__(self, settings, manifest_path: str):
        self.settings = settings
        self.manifest_path = manifest_path

    def render(self, spec, executable: str, bin_path: str) -> str:
        relative = os.path.relpath(os.path.abspath(self.manifest_path), bin_path)
        return _template.render(
            ruby_command=ruby_command(self.settings),
            relative_manifest_path=relative,
            spec=spec,
            executable=executable,
        )

    def generate(self, spec) -> List[str]:
        """Write stubs for ``spec``; existing files are overwritten."""
        bin_path = self.settings.bin_path
        written: List[str] = []
        for executable in spec.executables:
            if executable == Constants.RESERVED_EXECUTABLE:
                continue
            os.makedirs(bin_path, exist_ok=True)
            path = os.path.join(bin_path, executable)
            with open(path, "w", encoding="utf-8") as fh:
                fh.write(self.render(spec, executable, bin_path))
            os.chmod(path, Constants.STUB_MODE)
            written.append(path)
        if written:
            logger.debug("Generated stubs for %s: %s", spec.name, ", ".join(written))
        return written
