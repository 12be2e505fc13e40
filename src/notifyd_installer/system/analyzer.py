from __future__ import annotations

from typing import TypedDict

class UnitStatus(TypedDict):
    unit: str
    installed: bool
    path: str
    enabled: str
    active: str

import subprocess

from ..config import InstallConfig
from .services import UserServiceManager

class SystemAnalyzer:
    @staticmethod
    def _cap(cmd: list[str]) -> str:
        try:
            return subprocess.run(cmd, text=True, stdout=subprocess.PIPE, stderr=subprocess.STDOUT,
                                  timeout=10, check=False).stdout.strip()
        except (OSError, subprocess.SubprocessError) as e:
            return f"<error: {e}>"

    def status(self, cfg: InstallConfig) -> UnitStatus:
        manager = UserServiceManager()
        dest = cfg.destination
        return {
            "unit": cfg.unit_name,
            "installed": dest.exists(),
            "path": str(dest),
            "enabled": self._cap(manager.command("is-enabled", cfg.unit_name)) or "unknown",
            "active": self._cap(manager.command("is-active", cfg.unit_name)) or "unknown",
        }

    @staticmethod
    def render_markdown(rep: UnitStatus) -> str:
        md = []
        md.append(f"**Unit**: {rep['unit']}")
        md.append(f"- Installed: {'yes' if rep['installed'] else 'no'} ({rep['path']})")
        md.append(f"- Enabled: {rep['enabled']}")
        md.append(f"- Active: {rep['active']}")
        return "\n".join(md)
