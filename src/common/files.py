"""File helpers: existence checks and atomic replacement."""
from __future__ import annotations

import logging
import os
import tempfile
from typing import Union

from common.errors import die

logger = logging.getLogger(__name__)


def file_exists(path: str) -> bool:
    return os.path.isfile(path)


def read_text(path: str) -> str:
    """Read a UTF-8 file, dying with the file name on any error."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            return f.read()
    except OSError as e:
        die("%s: %s", path, e)


def write_atomic(path: str, contents: Union[str, bytes]) -> None:
    """Replace ``path`` with ``contents`` without ever exposing a partial file.

    The data goes to a temporary file in the same directory, which is then
    renamed over the target.
    """
    data = contents.encode("utf-8") if isinstance(contents, str) else contents
    directory = os.path.dirname(os.path.abspath(path))
    tmp_path = None
    replaced = False
    try:
        fd, tmp_path = tempfile.mkstemp(
            prefix="." + os.path.basename(path) + ".", suffix=".tmp", dir=directory,
        )
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        if os.path.exists(path):
            os.chmod(tmp_path, os.stat(path).st_mode & 0o777)
        else:
            os.chmod(tmp_path, 0o644)
        os.replace(tmp_path, path)
        replaced = True
    except OSError as e:
        die("%s: %s", path, e)
    finally:
        if not replaced and tmp_path and os.path.exists(tmp_path):
            os.unlink(tmp_path)
    logger.debug("Wrote %s (%d bytes)", path, len(data))
