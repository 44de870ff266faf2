from __future__ import annotations

from typing import Iterable

from rich.table import Table

from . import console
from .runner import CommandRunner

REBOOT_MESSAGE = "Setup complete - rebooting"


def print_summary(
        *,
        docker_version: str,
        auto_reboot_time: str,
        invoking_user: str | None,
        extra_users: Iterable[str],
) -> None:
    console.print("")
    console.rule("[bold green]Setup complete![/]", style="green")
    table = Table.grid(padding=(0, 2))
    table.add_column(style="bold")
    table.add_column()
    table.add_row("Docker:", docker_version)
    table.add_row("Unattended upgrades:", f"active (security only, reboot at {auto_reboot_time})")
    table.add_row("Docker group users:", " ".join([invoking_user or "root", *extra_users]))
    console.print(table)
    console.rule(style="green")
    console.print("")


def schedule_reboot(runner: CommandRunner, *, delay_minutes: int) -> None:
    unit = "minute" if delay_minutes == 1 else "minutes"
    console.warn(f"Rebooting in {delay_minutes} {unit}. Cancel with: sudo shutdown -c")
    runner.run(["shutdown", "-r", f"+{delay_minutes}", REBOOT_MESSAGE])
