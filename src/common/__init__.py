"""Shared helpers: errors, logging, files, subprocesses and HTTP."""
