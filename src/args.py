"""Argument parsing functionality for upm."""

import argparse
from constants import Constants


def _add_output_format(parser):
    parser.add_argument("-f", "--format",
                        dest="OUTPUT_FORMAT",
                        help="Output format (default: table)",
                        action="store",
                        type=str.lower,
                        choices=Constants.OUTPUT_FORMATS,
                        default="table")


def _add_followups(parser, lock=True):
    if lock:
        parser.add_argument("--no-lock",
                            dest="NO_LOCK",
                            help="Do not update the lockfile afterwards.",
                            action="store_true")
    parser.add_argument("--no-install",
                        dest="NO_INSTALL",
                        help="Do not install packages afterwards.",
                        action="store_true")


def build_parser():
    """Build the top-level parser with one subcommand per verb."""
    parser = argparse.ArgumentParser(
        prog=Constants.PROG_NAME,
        description="upm - one package manager interface for every language",
        add_help=True,
    )

    parser.add_argument("-l", "--lang",
                        dest="LANGUAGE",
                        help="Language backend to use (default: autodetect)",
                        action="store",
                        type=str,
                        default="")
    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level",
                        action="store",
                        type=str.upper,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
                        default='INFO')
    parser.add_argument("--logfile",
                        dest="LOG_FILE",
                        help="Log output file",
                        action="store",
                        type=str)
    parser.add_argument("-q", "--quiet",
                        dest="QUIET",
                        help="Only report errors on the console.",
                        action="store_true")
    parser.add_argument("-c", "--config",
                        dest="CONFIG",
                        help="Path to configuration file (YAML)",
                        action="store",
                        type=str)

    sub = parser.add_subparsers(dest="action", metavar="COMMAND")
    sub.required = True

    sub.add_parser("which-language", help="Print the backend for this project")
    sub.add_parser("list-languages", help="List every available backend")

    p = sub.add_parser("search", help="Search for packages online")
    p.add_argument("QUERIES", nargs="+", help="Search terms")
    _add_output_format(p)

    p = sub.add_parser("info", help="Show package information from online registry")
    p.add_argument("PACKAGE", help="Package name")
    _add_output_format(p)

    p = sub.add_parser("add", help="Add packages to the specfile")
    p.add_argument("PACKAGES", nargs="+",
                   help='Package names, optionally with a spec: "name spec"')
    _add_followups(p)

    p = sub.add_parser("remove", help="Remove packages from the specfile")
    p.add_argument("PACKAGES", nargs="+", help="Package names")
    _add_followups(p)

    p = sub.add_parser("lock", help="Generate the lockfile from the specfile")
    _add_followups(p, lock=False)

    sub.add_parser("install", help="Install packages from the lockfile")

    p = sub.add_parser("list", help="List packages from the specfile (or lockfile)")
    p.add_argument("-a", "--all",
                   dest="ALL",
                   help="List the lockfile instead of the specfile",
                   action="store_true")
    _add_output_format(p)

    sub.add_parser("guess", help="Guess the packages the project's source needs")

    return parser


def parse_args(argv=None):
    """Parses the arguments passed to the program."""
    return build_parser().parse_args(argv)
