"""Node.js language support.

- backend.py: the nodejs-yarn backend (package.json / yarn.lock)
- npm_client.py: npm registry search and package metadata
- lockfile_parser.py: yarn.lock line-oriented parser
"""

from .backend import NodejsYarnBackend  # noqa: F401

__all__ = ["NodejsYarnBackend"]
