from __future__ import annotations

from importlib import metadata

import typer

from . import console
from .commands import config_cmd
from .commands.render_cmd import render_policy
from .commands.run_cmd import host_run
from .logging_ import setup_logging


def cli_version() -> str:
    try:
        return metadata.version("hostprep")
    except metadata.PackageNotFoundError:
        return "0.0.0"


def _print_version(value: bool) -> None:
    if value:
        console.console.print(cli_version())
        raise typer.Exit(code=0)


def _build_app() -> typer.Typer:
    app = typer.Typer(
        name="hostprep",
        help="One-shot Ubuntu host provisioning: updates, Docker, unattended-upgrades, reboot.",
        no_args_is_help=True,
    )

    app.command("run")(host_run)
    app.command("render")(render_policy)
    app.add_typer(config_cmd.app, name="config")

    @app.callback()
    def _main(
            verbose: bool = typer.Option(False, "-v", "--verbose", help="Verbose logs."),
            version: bool = typer.Option(
                False,
                "--version",
                help="Show version and exit.",
                callback=_print_version,
                is_eager=True,
            ),
    ):
        setup_logging(verbose)

    return app


app = _build_app()
