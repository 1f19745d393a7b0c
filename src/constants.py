"""Constants used in the project."""

from enum import Enum


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    FILE_ERROR = 1
    CONNECTION_ERROR = 2
    RESOLVE_ERROR = 6
    INSTALL_ERROR = 5
    FROZEN_ERROR = 16


class InstallStatus(Enum):
    """Overall outcome of an installer run.

    Args:
        Enum (string): Outcome of the run.
    """

    INSTALLED = "installed"
    SKIPPED = "skipped"
    CANCELLED = "cancelled"


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    MANIFEST_FILE = "gemstall.yml"
    LOCK_FILE = "gemstall.lock"
    APP_DIR = ".gemstall"
    CONFIG_FILE = "config.yml"
    DEFAULT_INSTALL_DIR = "gems"
    DEFAULT_BIN_DIR = "bin"
    TMP_DIR = "tmp"
    CACHE_DIR = "cache"
    DEFAULT_PLATFORM = "ruby"
    DEFAULT_REMOTE = "https://rubygems.org"

    # Executable owned by the bundle tool itself; never stubbed for a gem
    RESERVED_EXECUTABLE = "bundle"
    NAME_VERSION_SEPARATOR = "-"
    GEMSET_SEPARATOR = "@"

    # External RVM store
    ENV_RVM_PATH = "rvm_path"
    ENV_RVM_RUBY_STRING = "rvm_ruby_string"
    ENV_RVM_GEMSET = "rvm_gemset_name"
    DEFAULT_RVM_PATH = "~/.rvm"
    STORE_GEMS_DIR = "gems"
    STORE_SPECS_DIR = "specifications"
    GEMSPEC_SUFFIX = ".gemspec"

    ENV_PREFIX = "GEMSTALL_"
    ENV_LOG_LEVEL = "GEMSTALL_LOG_LEVEL"
    ENV_MANIFEST = "GEMSTALL_GEMFILE"
    LOG_FORMAT = "[%(levelname)s] %(message)s"
    REQUEST_TIMEOUT = 30  # Timeout in seconds for all HTTP requests
    DOWNLOAD_CHUNK_SIZE = 64 * 1024
    STUB_MODE = 0o755
