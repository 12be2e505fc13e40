from __future__ import annotations

import sys
from typing import Any

import click
from rich.console import Console

from .config import InstallConfig, save_to_env
from .errors import InstallerError
from .installer import Installer
from .logutil import init_logging
from .run_logger import NullStepLogger, StepLogger
from .settings import settings
from .system.analyzer import SystemAnalyzer

console = Console()


class InstallFailed(click.ClickException):
    """ClickException that exits with the status of the failing command."""

    def __init__(self, error: InstallerError) -> None:
        super().__init__(str(error))
        self.exit_code = error.returncode


def _build_config(ctx: click.Context, **overrides: Any) -> InstallConfig:
    base = dict(ctx.obj or {})
    base.update({k: v for k, v in overrides.items() if v is not None})
    cfg = InstallConfig.from_settings(settings, **base)
    init_logging(cfg)
    return cfg


@click.group()
@click.version_option(package_name="headsetcontrol-notifyd-installer")
@click.option("--unit", "unit_name", default=lambda: settings.unit_name, show_default=True,
              help="Unit file name installed under --unit-dir")
@click.option("--template", "template_path", default=lambda: settings.template_path, show_default=True,
              help="Unit template containing the user placeholder")
@click.option("--unit-dir", default=lambda: settings.unit_dir, show_default=True,
              help="systemd user unit directory")
@click.option("--user", default=lambda: settings.user, help="Login name to substitute (default: current user)")
@click.option("--log-level", default=lambda: settings.log_level,
              type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False))
@click.pass_context
def cli_main(
    ctx: click.Context,
    unit_name: str,
    template_path: str,
    unit_dir: str,
    user: str | None,
    log_level: str,
) -> None:
    """notifyd-install — install the headsetcontrol-notifyd user service."""
    ctx.ensure_object(dict)
    ctx.obj.update(
        unit_name=unit_name,
        template_path=template_path,
        unit_dir=unit_dir,
        user=user,
        log_level=log_level,
    )


@cli_main.command("install")
@click.option("--dry-run", is_flag=True, help="Show the steps without changing anything")
@click.option("--sudo/--no-sudo", "use_sudo", default=lambda: settings.use_sudo,
              help="Elevate the copy with sudo when the unit directory is not writable")
@click.option("--sudo-noninteractive/--sudo-interactive", default=lambda: settings.sudo_noninteractive,
              help="Pass -n to sudo instead of prompting for a password")
@click.option("--systemctl-sudo/--no-systemctl-sudo", default=lambda: settings.systemctl_sudo,
              help="Run `systemctl --user` through sudo (legacy behaviour)")
@click.option("--trace/--no-trace", default=True, help="Show step-by-step progress")
@click.pass_context
def install_cmd(
    ctx: click.Context,
    dry_run: bool,
    use_sudo: bool,
    sudo_noninteractive: bool,
    systemctl_sudo: bool,
    trace: bool,
) -> None:
    """Render the template, copy it and enable the unit."""
    cfg = _build_config(
        ctx,
        dry_run=dry_run,
        use_sudo=use_sudo,
        sudo_noninteractive=sudo_noninteractive,
        systemctl_sudo=systemctl_sudo,
    )
    step_logger = StepLogger(console) if trace else NullStepLogger()
    try:
        result = Installer(cfg, step_logger=step_logger).install()
    except InstallerError as exc:
        raise InstallFailed(exc) from exc

    if cfg.dry_run:
        console.print(f"[yellow]Dry run:[/] {result.replacements} placeholder(s) would be replaced, nothing changed")
    else:
        console.print(f"[green]Installed →[/green] {result.destination} (user={result.user})")


@cli_main.command("uninstall")
@click.option("--dry-run", is_flag=True, help="Show the steps without changing anything")
@click.option("--sudo/--no-sudo", "use_sudo", default=lambda: settings.use_sudo,
              help="Elevate the removal with sudo when the unit directory is not writable")
@click.option("--systemctl-sudo/--no-systemctl-sudo", default=lambda: settings.systemctl_sudo,
              help="Run `systemctl --user` through sudo (legacy behaviour)")
@click.option("--trace/--no-trace", default=True, help="Show step-by-step progress")
@click.pass_context
def uninstall_cmd(ctx: click.Context, dry_run: bool, use_sudo: bool, systemctl_sudo: bool, trace: bool) -> None:
    """Disable the unit and remove the installed file."""
    cfg = _build_config(ctx, dry_run=dry_run, use_sudo=use_sudo, systemctl_sudo=systemctl_sudo)
    step_logger = StepLogger(console) if trace else NullStepLogger()
    try:
        result = Installer(cfg, step_logger=step_logger).uninstall()
    except InstallerError as exc:
        raise InstallFailed(exc) from exc
    if not cfg.dry_run:
        console.print(f"[green]Removed →[/green] {result.destination}")


@cli_main.command("render")
@click.pass_context
def render_cmd(ctx: click.Context) -> None:
    """Print the rendered unit without touching any file."""
    cfg = _build_config(ctx)
    try:
        text = Installer(cfg).render_preview()
    except InstallerError as exc:
        raise InstallFailed(exc) from exc
    sys.stdout.write(text + ("\n" if not text.endswith("\n") else ""))


@cli_main.command("status")
@click.pass_context
def status_cmd(ctx: click.Context) -> None:
    """Show whether the unit is installed, enabled and running."""
    cfg = _build_config(ctx)
    rep = SystemAnalyzer().status(cfg)
    console.print(SystemAnalyzer.render_markdown(rep), markup=False, highlight=False)


@cli_main.group("config")
def config_cmd() -> None:
    """Inspect or persist the effective settings."""


@config_cmd.command("show")
@click.pass_context
def config_show_cmd(ctx: click.Context) -> None:
    cfg = _build_config(ctx)
    for key, value in cfg.model_dump().items():
        console.print(f"{key} = {value}", markup=False, highlight=False)
    console.print(f"destination = {cfg.destination}", markup=False, highlight=False)


@config_cmd.command("save")
@click.option("--path", "env_path", type=str, default=None, help="Target file (default: ./.env)")
@click.pass_context
def config_save_cmd(ctx: click.Context, env_path: str | None) -> None:
    cfg = _build_config(ctx)
    written = save_to_env(cfg, env_path)
    console.print(f"[green]Saved →[/green] {written}")


def main() -> None:
    cli_main(obj={})


if __name__ == "__main__":
    main()
