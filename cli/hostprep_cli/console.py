from __future__ import annotations

from rich.console import Console
from rich.markup import escape

console = Console(highlight=False)


def info(msg: str) -> None:
    console.print(f"[green]\\[INFO][/]  {escape(msg)}")


def ok(msg: str) -> None:
    console.print(f"[bold green]OK[/] {escape(msg)}")


def warn(msg: str) -> None:
    console.print(f"[bold yellow]\\[WARN][/]  {escape(msg)}")


def err(msg: str) -> None:
    console.print(f"[bold red]\\[ERROR][/] {escape(msg)}")


def print(*args, **kwargs):
    """Proxy to underlying rich Console.print()."""
    console.print(*args, **kwargs)


def rule(*args, **kwargs):
    """Proxy to underlying rich Console.rule()."""
    console.rule(*args, **kwargs)
