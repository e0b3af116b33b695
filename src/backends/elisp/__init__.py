"""Emacs Lisp language support.

- backend.py: the elisp-cask backend (Cask / packages.txt)
- cask.py: Cask file editing and the elisp snippets run through ``cask eval``
"""

from .backend import ElispCaskBackend  # noqa: F401

__all__ = ["ElispCaskBackend"]
