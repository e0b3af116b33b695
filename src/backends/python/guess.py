"""Guess PyPI distributions from the imports found in a project's sources."""
from __future__ import annotations

import ast
import logging
import os
import sys
from typing import Dict, Iterator, List, Optional, Set

from .pypi_map import lookup_override

logger = logging.getLogger(__name__)

SKIP_DIRS = {
    ".git", ".hg", ".svn", ".tox", ".nox", ".venv", "venv", "env",
    "__pycache__", "node_modules", ".mypy_cache", ".pytest_cache", "build", "dist",
}


def iter_python_files(root: str) -> Iterator[str]:
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(
            d for d in dirnames
            if d not in SKIP_DIRS and not d.endswith(".egg-info")
        )
        for filename in sorted(filenames):
            if filename.endswith(".py"):
                yield os.path.join(dirpath, filename)


def imported_modules(source: str, filename: str = "<unknown>") -> Set[str]:
    """Absolute module names imported by ``source``.

    Relative imports are ignored since they always refer to the project itself.
    """
    tree = ast.parse(source, filename=filename)
    modules: Set[str] = set()
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            for alias in node.names:
                modules.add(alias.name)
        elif isinstance(node, ast.ImportFrom):
            if node.level == 0 and node.module:
                modules.add(node.module)
    return modules


def local_module_names(root: str) -> Set[str]:
    """Top-level names importable from the project itself."""
    names: Set[str] = set()
    for base in (root, os.path.join(root, "src")):
        if not os.path.isdir(base):
            continue
        for entry in os.listdir(base):
            path = os.path.join(base, entry)
            if entry.endswith(".py"):
                names.add(entry[:-3])
            elif os.path.isdir(path) and entry not in SKIP_DIRS:
                names.add(entry)
    return names


def _installed_distributions() -> Dict[str, List[str]]:
    from importlib import metadata  # pylint: disable=import-outside-toplevel

    try:
        return dict(metadata.packages_distributions())
    except Exception as exc:  # pylint: disable=broad-exception-caught
        logger.debug("Could not read installed distributions: %s", exc)
        return {}


def module_to_distribution(
    module: str, installed: Optional[Dict[str, List[str]]] = None,
) -> str:
    """Map an importable module to the distribution that most likely provides it.

    The override table wins, then installed distributions, then the top-level
    module name itself.
    """
    override = lookup_override(module)
    if override:
        return override
    top = module.split(".", 1)[0]
    dists = (installed or {}).get(top)
    if dists:
        return dists[0]
    return top


def guess_packages(root: str = ".") -> Set[str]:
    stdlib = set(getattr(sys, "stdlib_module_names", ())) | set(sys.builtin_module_names)
    local = local_module_names(root)

    modules: Set[str] = set()
    for path in iter_python_files(root):
        try:
            with open(path, "r", encoding="utf-8") as f:
                modules |= imported_modules(f.read(), filename=path)
        except (OSError, SyntaxError, UnicodeDecodeError, ValueError) as e:
            logger.warning("Skipping %s: %s", path, e)

    installed = _installed_distributions()
    packages: Set[str] = set()
    for module in sorted(modules):
        top = module.split(".", 1)[0]
        if top in stdlib or top in local or top == "__future__":
            continue
        packages.add(module_to_distribution(module, installed))
    return packages
