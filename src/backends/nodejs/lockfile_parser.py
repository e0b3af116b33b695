"""Parser for Yarn v1 lockfiles.

There is no reliable structured reader for the yarn.lock format, so entries
are matched line-wise against the layout Yarn itself writes:

    "name@^1.0.0", name@^1.1.0:
      version "1.2.3"
      resolved "https://..."
"""

from __future__ import annotations

import logging
import re
from typing import Dict

logger = logging.getLogger(__name__)

# Entry header (optionally quoted, optionally scoped) directly followed by its
# version line.
YARN_ENTRY_RE = re.compile(
    r'^"?(@?[^@ \n"]+)[^\n]*:\n  version "?([^"\n]+)"?$',
    re.MULTILINE,
)


def parse_yarn_lock(content: str) -> Dict[str, str]:
    """Map each package name in a yarn.lock document to its resolved version.

    Args:
        content: The text of a yarn.lock file.

    Returns:
        Dict of package name to version. When several ranges of one package
        resolve differently, the last entry in the file wins.
    """
    packages: Dict[str, str] = {}
    for match in YARN_ENTRY_RE.finditer(content):
        packages[match.group(1)] = match.group(2)
    logger.debug("Parsed %d yarn.lock entries", len(packages))
    return packages
