"""Node.js backend driving Yarn (v1)."""
from __future__ import annotations

import json
import logging
from typing import Dict, List, Optional, Set

from common.errors import die
from common.files import file_exists, read_text
from common.process import run_cmd

from ..base import LanguageBackend, PkgInfo, PkgName, PkgSpec, PkgVersion, Quirks
from . import npm_client
from .lockfile_parser import parse_yarn_lock

logger = logging.getLogger(__name__)


class NodejsYarnBackend(LanguageBackend):
    """Yarn-managed projects: package.json + yarn.lock."""

    name = "nodejs-yarn"
    specfile = "package.json"
    lockfile = "yarn.lock"
    quirks = Quirks.NONE

    def detect(self) -> bool:
        return file_exists(self.specfile)

    def search(self, queries: List[str]) -> List[PkgInfo]:
        return npm_client.search(queries)

    def info(self, name: PkgName) -> Optional[PkgInfo]:
        return npm_client.info(name)

    def add(self, pkgs: Dict[PkgName, PkgSpec]) -> None:
        # yarn writes a fresh package.json itself when there is none.
        cmd = ["yarn", "add"]
        for name, spec in pkgs.items():
            cmd.append(f"{name}@{spec}" if spec else name)
        run_cmd(cmd)

    def remove(self, pkgs: Set[PkgName]) -> None:
        if not file_exists(self.specfile):
            die("%s: no such file, nothing to remove", self.specfile)
        cmd = ["yarn", "remove"]
        cmd.extend(sorted(pkgs))
        run_cmd(cmd)

    def lock(self) -> None:
        run_cmd(["yarn", "upgrade"])

    def install(self) -> None:
        run_cmd(["yarn", "install"])

    def list_specfile(self) -> Dict[PkgName, PkgSpec]:
        try:
            cfg = json.loads(read_text(self.specfile))
        except json.JSONDecodeError as e:
            die("%s: %s", self.specfile, e)
        if not isinstance(cfg, dict):
            die("%s: expected a JSON object", self.specfile)

        pkgs: Dict[PkgName, PkgSpec] = {}
        for section in ("dependencies", "devDependencies"):
            deps = cfg.get(section) or {}
            if not isinstance(deps, dict):
                die("%s: %s is not an object", self.specfile, section)
            for name, spec in deps.items():
                pkgs[PkgName(name)] = PkgSpec(spec)
        return pkgs

    def list_lockfile(self) -> Dict[PkgName, PkgVersion]:
        contents = read_text(self.lockfile)
        return {
            PkgName(name): PkgVersion(version)
            for name, version in parse_yarn_lock(contents).items()
        }

    def guess(self) -> Set[PkgName]:
        raise self.not_implemented("guess")
