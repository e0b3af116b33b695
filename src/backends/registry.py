"""Backend registry: completeness check and backend resolution."""
from __future__ import annotations

import inspect
import logging
from typing import Iterable, List, Tuple

from common.errors import BackendContractError, die
from common.logging_utils import extra_context, is_debug_enabled

from .base import LanguageBackend, Lockable, quirks_is_not_reproducible

logger = logging.getLogger(__name__)

# Keep in sync with LanguageBackend.
CONTRACT_ATTRIBUTES = ("name", "specfile", "lockfile")
CONTRACT_METHODS = (
    "detect",
    "search",
    "info",
    "add",
    "remove",
    "install",
    "list_specfile",
    "list_lockfile",
    "guess",
)


def check_backend(backend: LanguageBackend) -> None:
    """Raise BackendContractError unless ``backend`` is complete.

    The lock method must be present if and only if builds are reproducible.
    """
    label = getattr(backend, "name", "") or type(backend).__name__
    for attr in CONTRACT_ATTRIBUTES:
        if not getattr(backend, attr, ""):
            raise BackendContractError(f"language backend {label} is incomplete: missing {attr}")
    for method in CONTRACT_METHODS:
        impl = getattr(backend, method, None)
        if not callable(impl) or getattr(impl, "__isabstractmethod__", False):
            raise BackendContractError(f"language backend {label} is incomplete: missing {method}")
    if inspect.isabstract(type(backend)):
        raise BackendContractError(f"language backend {label} is incomplete: abstract methods remain")
    if isinstance(backend, Lockable) == quirks_is_not_reproducible(backend):
        raise BackendContractError(
            f"language backend {label} is incomplete: lock must be implemented "
            "if and only if builds are reproducible"
        )


class BackendRegistry:
    """Ordered, immutable collection of language backends."""

    def __init__(self, backends: Iterable[LanguageBackend]):
        self._backends: Tuple[LanguageBackend, ...] = tuple(backends)

    def __iter__(self):
        return iter(self._backends)

    def __len__(self) -> int:
        return len(self._backends)

    def check(self) -> None:
        """Verify every registered backend satisfies the contract."""
        for backend in self._backends:
            check_backend(backend)

    def names(self) -> List[str]:
        return [b.name for b in self._backends]

    def get(self, language: str = "") -> LanguageBackend:
        """Resolve a backend by exact name, or by auto-detection when empty.

        Detection runs in registration order and the first match wins.
        """
        if language:
            for backend in self._backends:
                if backend.name == language:
                    return backend
            die("no such language: %s", language)

        for backend in self._backends:
            if backend.detect():
                if is_debug_enabled(logger):
                    logger.debug(
                        "Backend detected",
                        extra=extra_context(event="decision", component="registry",
                                            backend=backend.name),
                    )
                return backend
        die("could not autodetect a language for your project")
