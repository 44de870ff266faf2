from __future__ import annotations

import logging
from pathlib import Path

import httpx

from . import console, packages
from .errors import DownloadError
from .runner import CommandRunner

log = logging.getLogger(__name__)

DOCKER_REPO_URL = "https://download.docker.com/linux/ubuntu"
DOCKER_GPG_URL = f"{DOCKER_REPO_URL}/gpg"
KEYRINGS_DIR = Path("/etc/apt/keyrings")
SOURCES_DIR = Path("/etc/apt/sources.list.d")
KEYRING_NAME = "docker.gpg"
SOURCE_LIST_NAME = "docker.list"
DOCKER_SERVICE = "docker"

LEGACY_PACKAGES = (
    "docker.io",
    "docker-doc",
    "docker-compose",
    "docker-compose-v2",
    "podman-docker",
    "containerd",
    "runc",
)
REPO_DEPENDENCIES = ("ca-certificates", "curl", "gnupg", "lsb-release")
DOCKER_PACKAGES = (
    "docker-ce",
    "docker-ce-cli",
    "containerd.io",
    "docker-buildx-plugin",
    "docker-compose-plugin",
)


def fetch_signing_key(url: str = DOCKER_GPG_URL, *, timeout_s: float = 30.0) -> str:
    try:
        resp = httpx.get(url, timeout=timeout_s, follow_redirects=True)
        resp.raise_for_status()
    except httpx.HTTPError as exc:
        raise DownloadError(f"Failed to download repository key from {url}: {exc}") from exc
    return resp.text


def render_source_list(arch: str, codename: str, keyring: Path) -> str:
    return f"deb [arch={arch} signed-by={keyring}] {DOCKER_REPO_URL} {codename} stable\n"


def add_repository(
        runner: CommandRunner,
        *,
        keyrings_dir: Path = KEYRINGS_DIR,
        sources_dir: Path = SOURCES_DIR,
) -> Path:
    runner.run(["install", "-m", "0755", "-d", str(keyrings_dir)])

    keyring = keyrings_dir / KEYRING_NAME
    armored = ""
    if not runner.dry_run:
        armored = fetch_signing_key()
        log.debug("fetched %d bytes of signing key", len(armored))
    runner.run(["gpg", "--batch", "--yes", "--dearmor", "-o", str(keyring)], input=armored)
    runner.run(["chmod", "a+r", str(keyring)])

    arch = runner.output(["dpkg", "--print-architecture"])
    codename = runner.output(["lsb_release", "-cs"])
    source = sources_dir / SOURCE_LIST_NAME
    runner.write_file(source, render_source_list(arch, codename, keyring))
    return source


def docker_version(runner: CommandRunner) -> str:
    return runner.output(["docker", "--version"])


def install_docker(
        runner: CommandRunner,
        *,
        keyrings_dir: Path = KEYRINGS_DIR,
        sources_dir: Path = SOURCES_DIR,
) -> str:
    console.info("Installing Docker (official method)...")
    packages.remove_quietly(runner, LEGACY_PACKAGES)
    packages.install(runner, REPO_DEPENDENCIES)
    add_repository(runner, keyrings_dir=keyrings_dir, sources_dir=sources_dir)

    packages.update_index(runner)
    packages.install(runner, DOCKER_PACKAGES)
    runner.run(["systemctl", "enable", "--now", DOCKER_SERVICE])

    version = docker_version(runner)
    console.info(f"Docker installed: {version}")
    return version
