"""Python language support.

- backend.py: the python-poetry backend (pyproject.toml / poetry.lock)
- pypi_client.py: PyPI search and release metadata via embedded query scripts
- pypi_map.py: manual module -> distribution overrides
- guess.py: import scanning for the guess verb
"""

from .backend import PythonPoetryBackend  # noqa: F401

__all__ = ["PythonPoetryBackend"]
