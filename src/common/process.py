"""Subprocess helpers used by the language backends.

Every external tool invocation goes through :func:`run_cmd` (interactive,
output shown to the user) or :func:`get_cmd_output` (output captured and
returned). A non-zero exit status is fatal in both cases.
"""
from __future__ import annotations

import logging
import shlex
import subprocess
from typing import List, Sequence

from common.errors import die
from common.logging_utils import Timer, extra_context, is_debug_enabled
from constants import ExitCodes

logger = logging.getLogger(__name__)


def _announce(argv: Sequence[str]) -> None:
    logger.info("--> %s", " ".join(shlex.quote(a) for a in argv))


def run_cmd(argv: List[str]) -> None:
    """Run a command with inherited stdio, dying if it fails."""
    _announce(argv)
    with Timer() as t:
        try:
            proc = subprocess.run(argv, check=False)
        except OSError as e:
            die("%s: %s", argv[0], e, code=ExitCodes.COMMAND_ERROR)
    if is_debug_enabled(logger):
        logger.debug(
            "Command finished",
            extra=extra_context(
                event="subprocess", command=argv[0],
                returncode=proc.returncode, duration_ms=t.duration_ms(),
            ),
        )
    if proc.returncode != 0:
        die("%s failed with exit status %d", argv[0], proc.returncode,
            code=ExitCodes.COMMAND_ERROR)


def get_cmd_output(argv: List[str]) -> str:
    """Run a command and return its standard output, dying if it fails.

    Standard error is passed through to the user's terminal.
    """
    logger.debug("Capturing output of %s", argv[0])
    with Timer() as t:
        try:
            proc = subprocess.run(
                argv, check=False, stdout=subprocess.PIPE, text=True,
            )
        except OSError as e:
            die("%s: %s", argv[0], e, code=ExitCodes.COMMAND_ERROR)
    if is_debug_enabled(logger):
        logger.debug(
            "Command finished",
            extra=extra_context(
                event="subprocess", command=argv[0],
                returncode=proc.returncode, duration_ms=t.duration_ms(),
            ),
        )
    if proc.returncode != 0:
        die("%s failed with exit status %d", argv[0], proc.returncode,
            code=ExitCodes.COMMAND_ERROR)
    return proc.stdout
