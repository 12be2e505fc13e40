from __future__ import annotations

import logging
import os
import shutil
import subprocess
from pathlib import Path
from typing import Sequence

from ..errors import (
    InstallerError,
    InstallPermissionError,
    ServiceManagerUnavailableError,
    TemplateNotFoundError,
    UnitActivationError,
)

logger = logging.getLogger("notifyd_installer.system")

MISSING_BINARY_RC = 127


def substitute_placeholder(content: bytes, placeholder: str, user: str) -> tuple[bytes, int]:
    """Replace every ``placeholder`` in ``content`` with ``user``.

    Works on bytes so that everything outside the substitution sites is
    kept exactly as it was. Returns the new content and the number of
    replacements made.
    """
    token = placeholder.encode("utf-8")
    count = content.count(token)
    if not count:
        return content, 0
    return content.replace(token, user.encode("utf-8")), count


def read_template(path: Path) -> bytes:
    try:
        return path.read_bytes()
    except FileNotFoundError as exc:
        raise TemplateNotFoundError(f"Unit template not found: {path}") from exc


def render_template(path: Path, placeholder: str, user: str) -> int:
    """Rewrite the template at ``path`` in place. Returns the number of replacements."""
    rendered, count = substitute_placeholder(read_template(path), placeholder, user)
    if count:
        path.write_bytes(rendered)
    return count


def _sudo_prefix(noninteractive: bool) -> list[str]:
    return ["sudo", "-n"] if noninteractive else ["sudo"]


def _can_write(directory: Path) -> bool:
    if os.geteuid() == 0:
        return True
    return directory.is_dir() and os.access(directory, os.W_OK)


def _run(cmd: Sequence[str]) -> int:
    # output is left attached to the terminal so the tool's own diagnostics show
    logger.debug("run: %s", " ".join(cmd))
    return subprocess.run(list(cmd), check=False).returncode


def copy_unit(source: Path, destination: Path, *, use_sudo: bool = True,
              sudo_noninteractive: bool = False) -> None:
    """Copy ``source`` over ``destination``, elevating with sudo when needed."""
    if _can_write(destination.parent):
        try:
            shutil.copyfile(source, destination)
            return
        except PermissionError as exc:
            if not use_sudo:
                raise InstallPermissionError(f"Cannot write {destination}: {exc}") from exc
            logger.info("direct copy refused, retrying with sudo")
        except OSError as exc:
            raise InstallerError(f"Cannot write {destination}: {exc}") from exc
    elif not use_sudo:
        raise InstallPermissionError(
            f"{destination.parent} is not writable and sudo is disabled"
        )

    cmd = _sudo_prefix(sudo_noninteractive) + ["cp", str(source), str(destination)]
    try:
        rc = _run(cmd)
    except FileNotFoundError as exc:
        raise InstallPermissionError("sudo is not available", MISSING_BINARY_RC) from exc
    if rc != 0:
        raise InstallPermissionError(f"Privileged copy to {destination} failed (code={rc})", rc)


def remove_unit(destination: Path, *, use_sudo: bool = True,
                sudo_noninteractive: bool = False) -> bool:
    """Delete the installed unit file. Returns False when there was nothing to remove."""
    if not destination.exists():
        return False
    if _can_write(destination.parent):
        try:
            destination.unlink()
            return True
        except PermissionError as exc:
            if not use_sudo:
                raise InstallPermissionError(f"Cannot remove {destination}: {exc}") from exc
        except OSError as exc:
            raise InstallerError(f"Cannot remove {destination}: {exc}") from exc
    elif not use_sudo:
        raise InstallPermissionError(
            f"{destination.parent} is not writable and sudo is disabled"
        )

    cmd = _sudo_prefix(sudo_noninteractive) + ["rm", "-f", str(destination)]
    try:
        rc = _run(cmd)
    except FileNotFoundError as exc:
        raise InstallPermissionError("sudo is not available", MISSING_BINARY_RC) from exc
    if rc != 0:
        raise InstallPermissionError(f"Privileged removal of {destination} failed (code={rc})", rc)
    return True


class UserServiceManager:
    """Thin wrapper around ``systemctl --user``."""

    def __init__(self, *, sudo: bool = False, sudo_noninteractive: bool = False) -> None:
        self.sudo = sudo
        self.sudo_noninteractive = sudo_noninteractive

    def command(self, *args: str) -> list[str]:
        cmd = ["systemctl", "--user", *args]
        if self.sudo:
            cmd = _sudo_prefix(self.sudo_noninteractive) + cmd
        return cmd

    def _call(self, *args: str) -> int:
        cmd = self.command(*args)
        try:
            return _run(cmd)
        except FileNotFoundError as exc:
            raise ServiceManagerUnavailableError(
                f"{cmd[0]} not found; is systemd installed?", MISSING_BINARY_RC
            ) from exc

    def daemon_reload(self) -> None:
        rc = self._call("daemon-reload")
        if rc != 0:
            raise ServiceManagerUnavailableError(
                f"systemctl --user daemon-reload failed (code={rc})", rc
            )

    def enable_now(self, unit: str) -> None:
        rc = self._call("enable", "--now", unit)
        if rc != 0:
            raise UnitActivationError(f"Failed to enable and start {unit} (code={rc})", rc)

    def disable_now(self, unit: str) -> bool:
        return self._call("disable", "--now", unit) == 0
