"""Error taxonomy shared by the CLI and the language backends.

Three kinds of failure exist:

* fatal, user-facing problems (bad files, failed commands, unknown language):
  reported with :func:`die`, which logs and terminates the process;
* programming mistakes in a backend definition: :class:`BackendContractError`,
  raised and never caught;
* operations a backend cannot support: :class:`BackendNotImplemented`, which
  callers catch to tell the user the operation is unsupported.
"""
from __future__ import annotations

import logging
import sys
from typing import NoReturn

from constants import ExitCodes

logger = logging.getLogger(__name__)


class BackendNotImplemented(NotImplementedError):
    """Raised by a backend operation the underlying tool cannot support."""

    def __init__(self, backend: str, operation: str):
        super().__init__(f"{operation} is not supported for {backend}")
        self.backend = backend
        self.operation = operation


class BackendContractError(RuntimeError):
    """A registered backend does not satisfy the backend contract."""


def die(msg: str, *args: object, code: ExitCodes = ExitCodes.FILE_ERROR) -> NoReturn:
    """Log a fatal error and terminate the process.

    Args:
        msg: printf-style message template.
        *args: Template arguments.
        code: Exit code to terminate with.
    """
    logger.error(msg, *args)
    sys.exit(code.value)
