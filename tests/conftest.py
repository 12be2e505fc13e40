from __future__ import annotations

import logging
import subprocess

import pytest

from notifyd_installer import logutil


@pytest.fixture(autouse=True)
def _reset_logging():
    yield
    logger = logging.getLogger(logutil.LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logutil._LOGGER_INITIALIZED = False


class FakeRun:
    """Records commands instead of executing them."""

    def __init__(self, codes: dict[str, int] | None = None, stdout: str = ""):
        self.codes = codes or {}
        self.stdout = stdout
        self.calls: list[list[str]] = []

    def __call__(self, cmd, *args, **kwargs):
        cmd = list(cmd)
        self.calls.append(cmd)
        rc = 0
        for marker, code in self.codes.items():
            if marker in cmd:
                rc = code
        return subprocess.CompletedProcess(cmd, rc, stdout=self.stdout)


@pytest.fixture
def fake_run(monkeypatch):
    runner = FakeRun()
    monkeypatch.setattr(subprocess, "run", runner)
    return runner


@pytest.fixture
def template(tmp_path):
    path = tmp_path / "headsetcontrol-notifyd.service"
    path.write_bytes(
        b"[Unit]\r\nDescription=notifyd for USER_NAME\r\n\r\n"
        b"[Service]\r\nUser=USER_NAME\r\nExecStart=/home/USER_NAME/bin/headsetcontrol-notifyd\r\n"
    )
    return path


@pytest.fixture
def unit_dir(tmp_path):
    path = tmp_path / "systemd-user"
    path.mkdir()
    return path
