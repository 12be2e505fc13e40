from __future__ import annotations
from pydantic import BaseModel
from pathlib import Path
from typing import Any

from .settings import Settings, UNIT_NAME

ENV_FILE = Path(".env")

class InstallConfig(BaseModel):
    unit_name: str = UNIT_NAME
    template_path: Path = Path(f"./{UNIT_NAME}")
    unit_dir: Path = Path("/etc/systemd/user")
    placeholder: str = "USER_NAME"
    user: str | None = None          # None -> resolve from the environment
    # privileges
    use_sudo: bool = True
    sudo_noninteractive: bool = False
    systemctl_sudo: bool = False
    dry_run: bool = False
    # logging
    log_level: str = "INFO"            # DEBUG|INFO|WARNING|ERROR
    log_file: str | None = None        # e.g., notifyd-install.log
    log_console: bool = True

    @property
    def destination(self) -> Path:
        return self.unit_dir / self.unit_name

    @classmethod
    def from_settings(cls, s: Settings, **overrides: Any) -> "InstallConfig":
        data: dict[str, Any] = s.model_dump(include=set(cls.model_fields))
        data.update({k: v for k, v in overrides.items() if v is not None})
        data["log_level"] = str(data.get("log_level", "INFO")).upper()
        return cls(**data)

def _flag(value: bool) -> str:
    return "true" if value else "false"

def save_to_env(cfg: InstallConfig, path: str | None = None) -> Path:
    p = Path(path) if path else ENV_FILE
    lines: list[str] = []
    lines.append(f"NOTIFYD_UNIT_NAME={cfg.unit_name}")
    lines.append(f"NOTIFYD_TEMPLATE_PATH={cfg.template_path}")
    lines.append(f"NOTIFYD_UNIT_DIR={cfg.unit_dir}")
    lines.append(f"NOTIFYD_PLACEHOLDER={cfg.placeholder}")
    if cfg.user:
        lines.append(f"NOTIFYD_USER={cfg.user}")
    # privileges
    lines.append(f"NOTIFYD_USE_SUDO={_flag(cfg.use_sudo)}")
    lines.append(f"NOTIFYD_SUDO_NONINTERACTIVE={_flag(cfg.sudo_noninteractive)}")
    lines.append(f"NOTIFYD_SYSTEMCTL_SUDO={_flag(cfg.systemctl_sudo)}")
    # logging
    lines.append(f"NOTIFYD_LOG_LEVEL={cfg.log_level}")
    if cfg.log_file:
        lines.append(f"NOTIFYD_LOG_FILE={cfg.log_file}")
    lines.append(f"NOTIFYD_LOG_CONSOLE={_flag(cfg.log_console)}")
    p.write_text("\n".join(lines) + "\n")
    return p
