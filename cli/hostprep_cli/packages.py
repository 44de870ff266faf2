from __future__ import annotations

from typing import Iterable

from . import console
from .runner import CommandRunner

APT_GET = "apt-get"
NONINTERACTIVE_ENV = {"DEBIAN_FRONTEND": "noninteractive"}
# keep locally modified config files when a package ships a new default
KEEP_CONFIG_OPTIONS = (
    "-o",
    "Dpkg::Options::=--force-confdef",
    "-o",
    "Dpkg::Options::=--force-confold",
)


def update_index(runner: CommandRunner) -> None:
    runner.run([APT_GET, "update", "-y"])


def upgrade_all(runner: CommandRunner) -> None:
    runner.run([APT_GET, "upgrade", "-y", *KEEP_CONFIG_OPTIONS], env=NONINTERACTIVE_ENV)


def cleanup(runner: CommandRunner) -> None:
    runner.run([APT_GET, "autoremove", "-y"])
    runner.run([APT_GET, "autoclean", "-y"])


def install(runner: CommandRunner, packages: Iterable[str]) -> None:
    runner.run([APT_GET, "install", "-y", *packages], env=NONINTERACTIVE_ENV)


def remove_quietly(runner: CommandRunner, packages: Iterable[str]) -> None:
    """Remove each package on its own; failures are ignored."""
    for pkg in packages:
        runner.run([APT_GET, "remove", "-y", pkg], check=False, capture_output=True)


def update_system(runner: CommandRunner) -> None:
    console.info("Updating package lists...")
    update_index(runner)
    console.info("Upgrading installed packages...")
    upgrade_all(runner)
    console.info("Removing unused packages...")
    cleanup(runner)
