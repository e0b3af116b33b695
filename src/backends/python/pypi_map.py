"""Manual module -> PyPI distribution overrides used when guessing dependencies."""
from __future__ import annotations

from typing import Optional

MODULE_TO_PYPI_PACKAGE_OVERRIDE = {
    "grpc_status": "grpcio-status",  # 2nd most popular
    "nvd3": "python-nvd3",  # 6th in popularity
    "requirements": "requirements-parser",  # rlbot depends on it but ships no requires_dist
    "base62": "pybase62",  # base-62 wins on name match but is far less popular
    "faiss": "faiss-cpu",
    "graphics": "graphics.py",  # module name differs from the distribution
    "replit.ai.modelfarm": "replit-ai-modelfarm",
    "replit.ai": "replit-ai",
}


def lookup_override(module: str) -> Optional[str]:
    """Return the override for ``module`` or its longest overridden dotted prefix."""
    parts = module.split(".")
    while parts:
        candidate = ".".join(parts)
        if candidate in MODULE_TO_PYPI_PACKAGE_OVERRIDE:
            return MODULE_TO_PYPI_PACKAGE_OVERRIDE[candidate]
        parts.pop()
    return None
