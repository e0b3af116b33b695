"""Language backends.

Each subpackage implements the LanguageBackend contract for one ecosystem:

- python: python-poetry
- nodejs: nodejs-yarn
- elisp: elisp-cask

default_registry() returns them in detection order.
"""

from .base import (  # noqa: F401
    LanguageBackend,
    Lockable,
    PkgInfo,
    PkgName,
    PkgSpec,
    PkgVersion,
    Quirks,
    quirks_is_not_reproducible,
)
from .registry import BackendRegistry, check_backend  # noqa: F401
from .python import PythonPoetryBackend
from .nodejs import NodejsYarnBackend
from .elisp import ElispCaskBackend


def default_registry() -> BackendRegistry:
    """Build the registry of every supported backend, in detection order."""
    return BackendRegistry([
        PythonPoetryBackend(),
        NodejsYarnBackend(),
        ElispCaskBackend(),
    ])


__all__ = [
    "BackendRegistry",
    "ElispCaskBackend",
    "LanguageBackend",
    "Lockable",
    "NodejsYarnBackend",
    "PkgInfo",
    "PkgName",
    "PkgSpec",
    "PkgVersion",
    "PythonPoetryBackend",
    "Quirks",
    "check_backend",
    "default_registry",
    "quirks_is_not_reproducible",
]
