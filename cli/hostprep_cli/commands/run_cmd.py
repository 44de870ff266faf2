from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from pathlib import Path

import typer
from rich.prompt import Confirm
from rich.text import Text

from .. import console
from ..config import SetupConfig, load_config, resolve_docker_users
from ..docker_install import KEYRINGS_DIR, SOURCES_DIR, install_docker
from ..errors import HostprepError
from ..packages import update_system
from ..privilege import ensure_root, invoking_user
from ..report import print_summary, schedule_reboot
from ..runner import CommandRunner
from ..unattended import APT_CONF_DIR, configure_unattended_upgrades
from ..users import post_setup

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class RunOptions:
    docker_users: tuple[str, ...] = ()
    dry_run: bool = False
    reboot: bool = True
    assume_yes: bool = False
    apt_conf_dir: Path = APT_CONF_DIR
    keyrings_dir: Path = KEYRINGS_DIR
    sources_dir: Path = SOURCES_DIR


def run_setup(runner: CommandRunner, cfg: SetupConfig, options: RunOptions) -> None:
    """Provision the host: update, docker, unattended-upgrades, groups, reboot."""
    sudo_user = invoking_user()

    update_system(runner)
    version = install_docker(runner, keyrings_dir=options.keyrings_dir, sources_dir=options.sources_dir)
    configure_unattended_upgrades(runner, cfg, apt_conf_dir=options.apt_conf_dir)
    granted = post_setup(runner, invoking_user=sudo_user, extra_users=options.docker_users)

    print_summary(
        docker_version=version,
        auto_reboot_time=cfg.auto_reboot_time,
        invoking_user=sudo_user,
        extra_users=[name for name in granted if name != sudo_user],
    )
    if options.reboot:
        schedule_reboot(runner, delay_minutes=cfg.reboot_delay_minutes)
    else:
        console.warn("Reboot skipped (--no-reboot). Reboot the host to finish setup.")


def _is_interactive() -> bool:
    return sys.stdin.isatty()


def _confirm(options: RunOptions) -> None:
    if options.assume_yes or options.dry_run or not _is_interactive():
        return
    message = Text("Provision this host now? It will upgrade packages and reboot.", style="bold")
    if not Confirm.ask(message, default=True):
        console.err("Aborted by user.")
        raise typer.Exit(code=1)


def host_run(
        docker_user: list[str] = typer.Option(
            [],
            "--docker-user",
            "-u",
            help="Extra user to add to the docker group (repeatable).",
        ),
        config_file: str | None = typer.Option(None, "--config", help="Config file path."),
        dry_run: bool = typer.Option(False, "--dry-run", help="Print commands and file writes without running them."),
        no_reboot: bool = typer.Option(False, "--no-reboot", help="Do not schedule the final reboot."),
        assume_yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation."),
) -> None:
    """Provision this host in one pass.

    Examples:
      sudo hostprep run
      sudo hostprep run -u alice -u bob --no-reboot
    """
    console.rule("[bold]Host Setup[/]")
    if not dry_run:
        ensure_root()

    try:
        cfg = load_config(config_file)
    except HostprepError as exc:
        console.err(str(exc))
        raise typer.Exit(code=exc.exit_code)

    options = RunOptions(
        docker_users=tuple(resolve_docker_users(cfg, docker_user)),
        dry_run=dry_run,
        reboot=not no_reboot,
        assume_yes=assume_yes,
    )
    log.debug("options: %s", options)
    _confirm(options)

    runner = CommandRunner(dry_run=dry_run)
    try:
        run_setup(runner, cfg, options)
    except HostprepError as exc:
        console.err(str(exc))
        raise typer.Exit(code=exc.exit_code)
