"""Value types, quirk flags and the contract every language backend implements."""
from __future__ import annotations

import enum
from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, NewType, Optional, Protocol, Set, runtime_checkable

from common.errors import BackendNotImplemented

PkgName = NewType("PkgName", str)
PkgSpec = NewType("PkgSpec", str)
PkgVersion = NewType("PkgVersion", str)


@dataclass
class PkgInfo:
    """Metadata about one package, as returned by search and info.

    Every field is best-effort; missing data is an empty string or list.
    """

    name: str = ""
    description: str = ""
    version: str = ""
    homepage_url: str = ""
    documentation_url: str = ""
    source_code_url: str = ""
    bug_tracker_url: str = ""
    author: str = ""
    license: str = ""
    dependencies: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class Quirks(enum.Flag):
    """Capability limitations of a backend.

    NOT_REPRODUCIBLE: the tool has no deterministic re-lock step (its installed
    package set is the lock state), so the backend must not implement lock.
    """

    NONE = 0
    NOT_REPRODUCIBLE = enum.auto()


def format_author(name: str, email: str) -> str:
    """Compose "Name <email>", leaving out whichever part is empty."""
    parts = []
    if name:
        parts.append(name)
    if email:
        parts.append(f"<{email}>")
    return " ".join(parts)


class LanguageBackend(ABC):
    """One ecosystem's implementation of the uniform package-manager verbs.

    Subclasses set ``name``, ``specfile``, ``lockfile`` and ``quirks`` and
    implement every abstract method. A method the underlying tool cannot
    support raises :class:`BackendNotImplemented` via :meth:`not_implemented`.
    Backends able to re-lock also implement :class:`Lockable`.
    """

    name: str = ""
    specfile: str = ""
    lockfile: str = ""
    quirks: Quirks = Quirks.NONE

    def not_implemented(self, operation: str) -> BackendNotImplemented:
        return BackendNotImplemented(self.name, operation)

    @abstractmethod
    def detect(self) -> bool:
        """Return True if the current directory belongs to this ecosystem.

        Must not prompt, write, or depend on the lockfile.
        """

    @abstractmethod
    def search(self, queries: List[str]) -> List[PkgInfo]:
        """Search the registry; an empty list means no matches."""

    @abstractmethod
    def info(self, name: PkgName) -> Optional[PkgInfo]:
        """Fetch metadata for one package, or None if it does not exist."""

    @abstractmethod
    def add(self, pkgs: Dict[PkgName, PkgSpec]) -> None:
        """Declare packages in the specfile, creating it if needed."""

    @abstractmethod
    def remove(self, pkgs: Set[PkgName]) -> None:
        """Remove package declarations; the specfile must exist."""

    @abstractmethod
    def install(self) -> None:
        """Install what the lockfile (or specfile) describes."""

    @abstractmethod
    def list_specfile(self) -> Dict[PkgName, PkgSpec]:
        """Declared dependencies, excluding the language runtime itself."""

    @abstractmethod
    def list_lockfile(self) -> Dict[PkgName, PkgVersion]:
        """Resolved dependencies and their pinned versions."""

    @abstractmethod
    def guess(self) -> Set[PkgName]:
        """Packages that the project's source appears to need."""


@runtime_checkable
class Lockable(Protocol):
    """Capability of backends whose tool can recompute the lockfile."""

    def lock(self) -> None: ...


def quirks_is_not_reproducible(backend: LanguageBackend) -> bool:
    return bool(backend.quirks & Quirks.NOT_REPRODUCIBLE)
