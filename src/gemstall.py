"""gemstall - install a project's gems from its manifest and lock.

Usage: gemstall install [--gemfile PATH] [--path DIR] [--binstubs [DIR]]
                        [--local] [--update] [--frozen] [--yes | --no]
"""

import logging
import os
import sys

from args import parse_args
from cli_config import load_settings, manifest_path
from constants import Constants, ExitCodes, InstallStatus
from common.errors import GemstallError, LockfileError
from common.logging_utils import configure_logging, extra_context, is_debug_enabled, Timer
from definition import Definition
from installer import AssumeNoPolicy, Installer, InstallMethod

logger = logging.getLogger(__name__)


def _setup_logging(args) -> None:
    configure_logging(getattr(args, "LOG_LEVEL", None))

    log_file = getattr(args, "LOG_FILE", None)
    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s")
        )
        logging.getLogger().addHandler(file_handler)
        logger.info("Logging to file: %s", log_file)


def _summarize(result) -> None:
    copied = sum(1 for _, method in result.installed if method == InstallMethod.COPIED)
    built = sum(1 for _, method in result.installed if method == InstallMethod.SOURCE)
    logger.info(
        "Your bundle is complete! %d gem(s) installed (%d copied, %d built from source).",
        len(result.installed), copied, built,
    )


def run_install(args) -> InstallStatus:
    """Run ``gemstall install``; returns the final status."""
    manifest = manifest_path(args)
    root = os.path.dirname(manifest)
    settings = load_settings(args, root)
    lock_path = os.path.join(root, Constants.LOCK_FILE)

    try:
        definition = Definition.build(manifest, lock_path, None, settings=settings)
    except LockfileError as e:
        # An unreadable lock is never trusted; resolve as if it were absent.
        logger.warning("Ignoring unreadable lock file %s: %s", lock_path, e)
        definition = Definition.build(manifest, None, None, settings=settings)
    options = {"update": bool(args.UPDATE), "local": bool(args.LOCAL)}
    kwargs = {"settings": settings, "lock_path": lock_path}
    if getattr(args, "ASSUME_NO", False):
        kwargs["policy"] = AssumeNoPolicy()

    with Timer() as timer:
        installer = Installer.install(root, definition, options, **kwargs)
    result = installer.result

    if is_debug_enabled(logger):
        logger.debug(
            "Install finished",
            extra=extra_context(event="function_exit", component="cli", action="install",
                                outcome=result.status.value, duration_ms=timer.duration_ms()),
        )
    if result.status == InstallStatus.INSTALLED:
        _summarize(result)
    elif result.status == InstallStatus.CANCELLED:
        logger.info("Installation cancelled; the lock was not written.")
    return result.status


def main(argv=None):
    """Main function of the program."""
    args = parse_args(argv)
    _setup_logging(args)

    if args.command == "install":
        try:
            run_install(args)
        except GemstallError as e:
            logging.error("%s", e)
            sys.exit(e.status_code.value)
        except OSError as e:
            logging.error("File error: %s, aborting", e)
            sys.exit(ExitCodes.FILE_ERROR.value)
    sys.exit(ExitCodes.SUCCESS.value)


if __name__ == "__main__":
    main()
