"""Argument parsing functionality for gemstall."""

import argparse
from constants import Constants

LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']


def _add_install_parser(subparsers):
    parser = subparsers.add_parser(
        "install",
        help="Install the gems named in the manifest and write the lock",
        description="Install the gems named in the manifest and write the lock.",
    )
    parser.add_argument("--gemfile",
                        dest="GEMFILE",
                        help=f"Path to the manifest (default: ./{Constants.MANIFEST_FILE}, "
                             f"or ${Constants.ENV_MANIFEST})",
                        action="store",
                        type=str)
    parser.add_argument("--path",
                        dest="INSTALL_PATH",
                        help="Install gems built from source into this directory",
                        action="store",
                        type=str)
    parser.add_argument("--binstubs",
                        dest="BINSTUBS",
                        help=f"Generate executable stubs, optionally into DIR "
                             f"(default: ./{Constants.DEFAULT_BIN_DIR})",
                        nargs="?",
                        const=True,
                        metavar="DIR")
    parser.add_argument("--local",
                        dest="LOCAL",
                        help="Resolve from locally cached gems only, never the network",
                        action="store_true")
    parser.add_argument("--update",
                        dest="UPDATE",
                        help="Ignore a trusted lock and resolve again",
                        action="store_true")
    parser.add_argument("--frozen",
                        dest="FROZEN",
                        help="Fail if the manifest and lock disagree",
                        action="store_true")

    prompt_group = parser.add_mutually_exclusive_group()
    prompt_group.add_argument("-y", "--yes",
                              dest="ASSUME_YES",
                              help="Create missing store directories without asking",
                              action="store_true")
    prompt_group.add_argument("-n", "--no",
                              dest="ASSUME_NO",
                              help="Never create store directories; cancel instead",
                              action="store_true")

    parser.add_argument("-c", "--config",
                        dest="CONFIG",
                        help=f"Settings file (default: <root>/{Constants.APP_DIR}/{Constants.CONFIG_FILE})",
                        action="store",
                        type=str)
    parser.add_argument("--set",
                        dest="SETTINGS",
                        help="Override a setting, e.g. --set build.nokogiri=--use-system-libraries",
                        action="append",
                        metavar="KEY=VALUE",
                        default=[])
    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level",
                        action="store",
                        type=str.upper,
                        choices=LOG_LEVELS,
                        default='INFO')
    parser.add_argument("--logfile",
                        dest="LOG_FILE",
                        help="Log output file",
                        action="store",
                        type=str)
    return parser


def parse_args(argv=None):
    """Parses the arguments passed to the program."""
    parser = argparse.ArgumentParser(
        prog="gemstall",
        description="gemstall - install a project's gems from its manifest and lock",
        add_help=True,
    )
    subparsers = parser.add_subparsers(dest="command", metavar="<command>")
    subparsers.required = True
    _add_install_parser(subparsers)
    return parser.parse_args(argv)
