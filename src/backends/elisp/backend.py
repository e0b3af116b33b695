"""Emacs Lisp backend driving Cask."""
from __future__ import annotations

import logging
from typing import Dict, List, Optional, Set

from constants import Constants
from common.errors import die
from common.files import file_exists, read_text, write_atomic
from common.process import get_cmd_output, run_cmd

from ..base import LanguageBackend, PkgInfo, PkgName, PkgSpec, PkgVersion, Quirks
from . import cask

logger = logging.getLogger(__name__)


class ElispCaskBackend(LanguageBackend):
    """Cask-managed Emacs packages: Cask + packages.txt.

    Cask cannot re-pin dependencies deterministically; the installed package
    directories are the lock state. packages.txt is a snapshot of them taken
    after each install, and there is no lock operation.
    """

    name = "elisp-cask"
    specfile = "Cask"
    lockfile = "packages.txt"
    quirks = Quirks.NOT_REPRODUCIBLE

    def detect(self) -> bool:
        return file_exists(self.specfile)

    def search(self, queries: List[str]) -> List[PkgInfo]:
        raise self.not_implemented("search")

    def info(self, name: PkgName) -> Optional[PkgInfo]:
        raise self.not_implemented("info")

    def add(self, pkgs: Dict[PkgName, PkgSpec]) -> None:
        if file_exists(self.specfile):
            contents = read_text(self.specfile)
        else:
            contents = cask.cask_template(Constants.CASK_DEFAULT_SOURCES)
        contents = cask.append_dependencies(contents, pkgs)
        logger.info("write %s", self.specfile)
        write_atomic(self.specfile, contents)

    def remove(self, pkgs: Set[PkgName]) -> None:
        if not file_exists(self.specfile):
            die("%s: no such file, nothing to remove", self.specfile)
        contents = cask.remove_dependencies(read_text(self.specfile), sorted(pkgs))
        logger.info("write %s", self.specfile)
        write_atomic(self.specfile, contents)

    def install(self) -> None:
        run_cmd(["cask", "install"])
        output = get_cmd_output(["cask", "eval", cask.ELISP_INSTALL_CODE])
        logger.info("write %s", self.lockfile)
        write_atomic(self.lockfile, output)

    def list_specfile(self) -> Dict[PkgName, PkgSpec]:
        output = get_cmd_output(["cask", "eval", cask.ELISP_LIST_SPECFILE_CODE])
        pkgs: Dict[PkgName, PkgSpec] = {}
        for fields in cask.parse_spec_lines(output):
            if len(fields) != 2:
                die("unexpected output: %s", fields[0])
            pkgs[PkgName(fields[0])] = PkgSpec(fields[1])
        return pkgs

    def list_lockfile(self) -> Dict[PkgName, PkgVersion]:
        contents = read_text(self.lockfile)
        return {
            PkgName(name): PkgVersion(version)
            for name, version in cask.parse_packages_txt(contents).items()
        }

    def guess(self) -> Set[PkgName]:
        raise self.not_implemented("guess")
