"""Shared fixtures for backend tests."""

import pytest


class CommandRecorder:
    """Stand-in for run_cmd / get_cmd_output that records every argv."""

    def __init__(self, outputs=None):
        self.calls = []
        self._outputs = list(outputs or [])

    def run(self, argv):
        self.calls.append(list(argv))

    def output(self, argv):
        self.calls.append(list(argv))
        return self._outputs.pop(0) if self._outputs else ""


@pytest.fixture
def in_tmp(tmp_path, monkeypatch):
    """Run the test with an empty temporary directory as the working directory."""
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def recorder():
    return CommandRecorder()
