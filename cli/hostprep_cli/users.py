from __future__ import annotations

import pwd
from typing import Iterable

from . import console
from .docker_install import DOCKER_SERVICE
from .runner import CommandRunner
from .unattended import SERVICE as UNATTENDED_SERVICE

DOCKER_GROUP = "docker"


def user_exists(name: str) -> bool:
    try:
        pwd.getpwnam(name)
    except KeyError:
        return False
    return True


def add_to_docker_group(runner: CommandRunner, name: str) -> None:
    # -a keeps every existing supplementary group
    runner.run(["usermod", "-aG", DOCKER_GROUP, name])
    console.info(f"Added '{name}' to {DOCKER_GROUP} group.")


def grant_docker_access(
        runner: CommandRunner,
        *,
        invoking_user: str | None,
        extra_users: Iterable[str],
) -> list[str]:
    granted: list[str] = []
    if invoking_user:
        add_to_docker_group(runner, invoking_user)
        granted.append(invoking_user)

    for name in extra_users:
        if name in granted:
            continue
        if not user_exists(name):
            console.warn(f"User '{name}' does not exist - skipping.")
            continue
        add_to_docker_group(runner, name)
        granted.append(name)
    return granted


def restart_services(runner: CommandRunner) -> None:
    console.info("Restarting services...")
    runner.run(["systemctl", "daemon-reload"])
    runner.run(["systemctl", "restart", DOCKER_SERVICE])
    runner.run(["systemctl", "restart", UNATTENDED_SERVICE])
    console.info("Services restarted.")


def post_setup(
        runner: CommandRunner,
        *,
        invoking_user: str | None,
        extra_users: Iterable[str],
) -> list[str]:
    console.info("Running post-setup tasks...")
    granted = grant_docker_access(runner, invoking_user=invoking_user, extra_users=extra_users)
    restart_services(runner)
    return granted
