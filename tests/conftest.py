"""Shared fixtures: stub engine command lines and bridge cleanup."""

import sys
from pathlib import Path

import pytest

from timecalc.bridge import EvaluationBridge

STUB_ENGINE = Path(__file__).parent / "stub_engine.py"


@pytest.fixture
def stub_command():
    """Build an argv that runs the stub engine in the given mode."""

    def _command(mode, *args):
        return [sys.executable, "-u", str(STUB_ENGINE), mode, *args]

    return _command


@pytest.fixture
def make_bridge(stub_command):
    """Start bridges against the stub engine and shut them all down afterwards."""
    bridges = []

    def _make(mode, *args, timeout=10.0):
        bridge = EvaluationBridge(stub_command(mode, *args), timeout=timeout)
        bridges.append(bridge)
        return bridge

    yield _make
    for bridge in bridges:
        bridge.shutdown()
