from __future__ import annotations

from enum import Enum

import typer

from .. import console
from ..config import load_config
from ..errors import ConfigError
from ..unattended import (
    AUTO_UPGRADES_NAME,
    UNATTENDED_UPGRADES_NAME,
    render_auto_upgrades,
    render_unattended_upgrades,
)


class PolicyFile(str, Enum):
    auto_upgrades = "auto-upgrades"
    unattended_upgrades = "unattended-upgrades"


def render_policy(
        which: PolicyFile | None = typer.Argument(None, help="Render only this file."),
        config_file: str | None = typer.Option(None, "--config", help="Config file path."),
) -> None:
    """Print the apt policy files a run would write."""
    try:
        cfg = load_config(config_file)
    except ConfigError as exc:
        console.err(str(exc))
        raise typer.Exit(code=2)

    outputs = []
    if which in (None, PolicyFile.auto_upgrades):
        outputs.append((AUTO_UPGRADES_NAME, render_auto_upgrades()))
    if which in (None, PolicyFile.unattended_upgrades):
        outputs.append((UNATTENDED_UPGRADES_NAME, render_unattended_upgrades(cfg)))

    for name, content in outputs:
        if which is None:
            console.rule(name)
        typer.echo(content, nl=False)
