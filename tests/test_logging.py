"""Tests that package loggers follow the root configuration set up by the entry point."""

import os
import subprocess
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parent.parent

SCRIPT = """
import logging
import form_gateway.server
log = logging.getLogger("form_gateway.session_manager.gateway")
log.info("info-line")
log.debug("debug-line")
"""


def run_with_level(level):
    env = dict(os.environ, LOG_LEVEL=level, PYTHONPATH=str(ROOT))
    result = subprocess.run(
        [sys.executable, "-c", SCRIPT],
        cwd=ROOT,
        env=env,
        capture_output=True,
        text=True,
        timeout=60,
    )
    assert result.returncode == 0, result.stderr
    return result.stderr


class TestLogLevel:

    def test_each_line_emitted_once(self):
        stderr = run_with_level("INFO")
        assert stderr.count("info-line") == 1
        assert "debug-line" not in stderr

    def test_debug_level_shows_debug(self):
        stderr = run_with_level("DEBUG")
        assert stderr.count("info-line") == 1
        assert stderr.count("debug-line") == 1

    @pytest.mark.parametrize("level", ["WARNING", "ERROR"])
    def test_higher_level_silences_info(self, level):
        stderr = run_with_level(level)
        assert "info-line" not in stderr
        assert "debug-line" not in stderr

    def test_line_format(self):
        stderr = run_with_level("INFO")
        assert "[form_gateway.session_manager.gateway] INFO: info-line" in stderr
