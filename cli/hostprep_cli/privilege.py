from __future__ import annotations

import os

import typer

from . import console


def is_root() -> bool:
    return hasattr(os, "geteuid") and os.geteuid() == 0


def ensure_root() -> None:
    if not is_root():
        console.err("Run as root: sudo hostprep run")
        raise typer.Exit(code=1)


def invoking_user() -> str | None:
    """User that escalated through sudo, or None when run directly as root."""
    name = (os.getenv("SUDO_USER") or "").strip()
    if not name or name == "root":
        return None
    return name
