from __future__ import annotations

import getpass
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional, TypeVar

from .config import InstallConfig
from .errors import InstallerError, UserLookupError
from .run_logger import NullStepLogger
from .system.services import (
    UserServiceManager,
    copy_unit,
    read_template,
    remove_unit,
    render_template,
    substitute_placeholder,
)

logger = logging.getLogger("notifyd_installer.installer")

T = TypeVar("T")


@dataclass
class InstallResult:
    user: str
    template: Path
    destination: Path
    replacements: int = 0
    steps: List[str] = field(default_factory=list)


def resolve_user(cfg: InstallConfig) -> str:
    """Login name to substitute: the configured override or the invoking user."""
    if cfg.user:
        return cfg.user
    try:
        return getpass.getuser()
    except (KeyError, OSError) as exc:
        # no login variable set and the uid has no passwd entry
        raise UserLookupError(f"Cannot determine the current user name: {exc}") from exc


class Installer:
    """Installs the unit template as a systemd user service.

    The sequence is strictly ordered and has no rollback: once a step has
    completed, a later failure leaves its effect in place.
    """

    def __init__(
        self,
        cfg: InstallConfig,
        *,
        step_logger: Optional[NullStepLogger] = None,
        manager: Optional[UserServiceManager] = None,
    ) -> None:
        self.cfg = cfg
        self.step_logger = step_logger or NullStepLogger()
        self.manager = manager or UserServiceManager(
            sudo=cfg.systemctl_sudo,
            sudo_noninteractive=cfg.sudo_noninteractive,
        )

    def _step(self, result: InstallResult, name: str, detail: str, action: Callable[[], T]) -> T:
        self.step_logger.on_step(name, detail)
        logger.info("%s: %s", name, detail)
        if self.cfg.dry_run and name != "resolve_user":
            logger.info("%s skipped (dry run)", name)
            self.step_logger.on_step_done(name, "skipped (dry run)")
            return None  # type: ignore[return-value]
        try:
            value = action()
        except InstallerError as exc:
            logger.error("%s failed: %s", name, exc)
            self.step_logger.on_error(name, exc)
            raise
        result.steps.append(name)
        self.step_logger.on_step_done(name)
        return value

    def render_preview(self, user: str | None = None) -> str:
        content = read_template(self.cfg.template_path)
        rendered, _ = substitute_placeholder(content, self.cfg.placeholder, user or resolve_user(self.cfg))
        return rendered.decode("utf-8", errors="replace")

    def install(self) -> InstallResult:
        cfg = self.cfg
        self.step_logger.on_start("install", cfg)
        result = InstallResult(user="", template=cfg.template_path, destination=cfg.destination)

        result.user = self._step(result, "resolve_user", "whoami", lambda: resolve_user(cfg))
        if cfg.dry_run:
            # still fail early on a missing template
            _, result.replacements = substitute_placeholder(
                read_template(cfg.template_path), cfg.placeholder, result.user
            )
        replaced = self._step(
            result,
            "render",
            f"replace {cfg.placeholder} with {result.user} in {cfg.template_path}",
            lambda: render_template(cfg.template_path, cfg.placeholder, result.user),
        )
        if not cfg.dry_run:
            result.replacements = replaced
        if not replaced and not cfg.dry_run:
            logger.info("no %s placeholder left in %s; template already rendered", cfg.placeholder, cfg.template_path)
        self._step(
            result,
            "copy",
            f"{cfg.template_path} → {cfg.destination}",
            lambda: copy_unit(
                cfg.template_path,
                cfg.destination,
                use_sudo=cfg.use_sudo,
                sudo_noninteractive=cfg.sudo_noninteractive,
            ),
        )
        self._step(result, "reload", " ".join(self.manager.command("daemon-reload")), self.manager.daemon_reload)
        self._step(
            result,
            "enable",
            " ".join(self.manager.command("enable", "--now", cfg.unit_name)),
            lambda: self.manager.enable_now(cfg.unit_name),
        )
        self.step_logger.on_final(result)
        return result

    def uninstall(self) -> InstallResult:
        cfg = self.cfg
        self.step_logger.on_start("uninstall", cfg)
        result = InstallResult(user=resolve_user(cfg), template=cfg.template_path, destination=cfg.destination)

        def _disable() -> None:
            if not self.manager.disable_now(cfg.unit_name):
                logger.warning("could not disable %s; continuing", cfg.unit_name)

        def _remove() -> None:
            removed = remove_unit(
                cfg.destination,
                use_sudo=cfg.use_sudo,
                sudo_noninteractive=cfg.sudo_noninteractive,
            )
            if not removed:
                logger.info("%s is not installed", cfg.destination)

        self._step(result, "disable", " ".join(self.manager.command("disable", "--now", cfg.unit_name)), _disable)
        self._step(result, "remove", str(cfg.destination), _remove)
        self._step(result, "reload", " ".join(self.manager.command("daemon-reload")), self.manager.daemon_reload)
        self.step_logger.on_final(result)
        return result


__all__ = ["Installer", "InstallResult", "resolve_user"]
