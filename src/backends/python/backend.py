"""Python backend driving Poetry."""
from __future__ import annotations

import logging
import sys
from typing import Any, Dict, List, Optional, Set

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from common.errors import die
from common.files import file_exists
from common.process import run_cmd

from ..base import LanguageBackend, PkgInfo, PkgName, PkgSpec, PkgVersion, Quirks
from . import guess as guess_mod
from . import pypi_client

logger = logging.getLogger(__name__)

RUNTIME_PACKAGE = "python"


def _load_toml(path: str) -> Dict[str, Any]:
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        die("%s: %s", path, e)


def _render_spec(spec: Any) -> PkgSpec:
    """Flatten a Poetry dependency value into a single spec string.

    Plain strings are returned as-is. Tables report their version constraint
    or, for VCS/path/url dependencies, the location keys as a TOML inline table.
    """
    if isinstance(spec, str):
        return PkgSpec(spec)
    if isinstance(spec, list):
        # Multiple-constraint dependency: one table per marker set.
        return PkgSpec(" || ".join(_render_spec(s) for s in spec))
    if isinstance(spec, dict):
        if "version" in spec:
            return PkgSpec(str(spec["version"]))
        keys = [k for k in ("git", "branch", "tag", "rev", "path", "url") if k in spec]
        inner = ", ".join(f'{k} = "{spec[k]}"' for k in keys)
        return PkgSpec("{ " + inner + " }" if inner else "")
    return PkgSpec(str(spec))


def _add_argument(name: str, spec: str) -> str:
    """Build one ``poetry add`` argument.

    PEP 440 comparisons attach directly (``foo>=1.0``); any other constraint
    (``^1.0``, ``latest``, a bare version) uses Poetry's ``name@spec`` form.
    """
    spec = spec.strip()
    if not spec:
        return name
    if spec[0] in "<>=!~" or spec.startswith("["):
        return name + spec
    return f"{name}@{spec}"


class PythonPoetryBackend(LanguageBackend):
    """Poetry-managed projects: pyproject.toml + poetry.lock."""

    name = "python-poetry"
    specfile = "pyproject.toml"
    lockfile = "poetry.lock"
    quirks = Quirks.NONE

    def detect(self) -> bool:
        if not file_exists(self.specfile):
            return False
        try:
            with open(self.specfile, "rb") as f:
                cfg = tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError) as e:
            logger.debug("Not detecting %s: %s", self.name, e)
            return False
        tool = cfg.get("tool")
        return isinstance(tool, dict) and isinstance(tool.get("poetry"), dict)

    def search(self, queries: List[str]) -> List[PkgInfo]:
        return pypi_client.search(queries)

    def info(self, name: PkgName) -> Optional[PkgInfo]:
        return pypi_client.info(name)

    def add(self, pkgs: Dict[PkgName, PkgSpec]) -> None:
        if not file_exists(self.specfile):
            run_cmd(["poetry", "init", "--no-interaction"])
        cmd = ["poetry", "add"]
        for name, spec in pkgs.items():
            cmd.append(_add_argument(name, spec))
        run_cmd(cmd)

    def remove(self, pkgs: Set[PkgName]) -> None:
        if not file_exists(self.specfile):
            die("%s: no such file, nothing to remove", self.specfile)
        cmd = ["poetry", "remove"]
        cmd.extend(sorted(pkgs))
        run_cmd(cmd)

    def lock(self) -> None:
        run_cmd(["poetry", "lock"])

    def install(self) -> None:
        # Unfortunately, this doesn't necessarily uninstall packages that have
        # been removed from the lockfile, which happens for example if
        # 'poetry remove' is interrupted. See
        # <https://github.com/sdispater/poetry/issues/648>.
        run_cmd(["poetry", "install"])

    def list_specfile(self) -> Dict[PkgName, PkgSpec]:
        cfg = _load_toml(self.specfile)
        tool = cfg.get("tool", {})
        poetry = tool.get("poetry", {}) if isinstance(tool, dict) else None
        if not isinstance(poetry, dict):
            die("%s: [tool.poetry] is not a table", self.specfile)
        tables = [poetry.get("dependencies", {}), poetry.get("dev-dependencies", {})]
        groups = poetry.get("group") or {}
        if not isinstance(groups, dict):
            die("%s: [tool.poetry.group] is not a table", self.specfile)
        for group in groups.values():
            if isinstance(group, dict):
                tables.append(group.get("dependencies", {}))

        pkgs: Dict[PkgName, PkgSpec] = {}
        for table in tables:
            if not isinstance(table, dict):
                die("%s: dependency table is not a table", self.specfile)
            for name, spec in table.items():
                if name == RUNTIME_PACKAGE:
                    continue
                pkgs[PkgName(name)] = _render_spec(spec)
        return pkgs

    def list_lockfile(self) -> Dict[PkgName, PkgVersion]:
        cfg = _load_toml(self.lockfile)
        pkgs: Dict[PkgName, PkgVersion] = {}
        packages = cfg.get("package", [])
        if not isinstance(packages, list):
            die("%s: package is not an array of tables", self.lockfile)
        for pkg in packages:
            if not isinstance(pkg, dict) or "name" not in pkg or "version" not in pkg:
                die("%s: malformed [[package]] entry: %r", self.lockfile, pkg)
            pkgs[PkgName(pkg["name"])] = PkgVersion(pkg["version"])
        return pkgs

    def guess(self) -> Set[PkgName]:
        return {PkgName(p) for p in guess_mod.guess_packages(".")}
