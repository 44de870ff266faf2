from __future__ import annotations

import os

import typer

from .. import console
from ..config import config_path, default_config, load_config, save_config, split_users
from ..errors import ConfigError

app = typer.Typer(help="Manage the provisioning config (TOML).")


@app.command("path")
def show_path() -> None:
    console.console.print(config_path())


@app.command("show")
def show_config(
        config_file: str | None = typer.Option(None, "--config", help="Config file path."),
) -> None:
    try:
        cfg = load_config(config_file)
    except ConfigError as exc:
        console.err(str(exc))
        raise typer.Exit(code=2)
    users = " ".join(cfg.docker_users) or "(none)"
    mail = cfg.mail or "(disabled)"
    console.console.print(
        f"docker_users={users} reboot_delay_minutes={cfg.reboot_delay_minutes} "
        f"auto_reboot_time={cfg.auto_reboot_time} mail={mail} mail_report={cfg.mail_report}",
        markup=False,
    )


@app.command("init")
def init_config(
        force: bool = typer.Option(False, "--force", help="Overwrite existing config."),
        docker_users: str = typer.Option("", "--docker-users", help="Extra docker group users, e.g. 'alice bob'."),
        config_file: str | None = typer.Option(None, "--config", help="Config file path."),
) -> None:
    path = config_file or config_path()
    if os.path.exists(path) and not force:
        console.info(f"Config already exists: {path}")
        console.info("Use --force to overwrite.")
        return

    cfg = default_config()
    cfg.docker_users = split_users(docker_users)
    try:
        saved = save_config(cfg, path)
    except OSError as exc:
        console.err(f"Cannot write {path}: {exc}")
        raise typer.Exit(code=2)
    console.ok(f"Config written: {saved}")
