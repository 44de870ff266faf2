import httpx
import pytest

from conftest import completed
from hostprep_cli import docker_install
from hostprep_cli.errors import CommandError, DownloadError


def test_add_repository_writes_signed_source_list(tmp_path, fake_runner, signing_key) -> None:
    keyrings = tmp_path / "keyrings"
    sources = tmp_path / "sources.list.d"

    source = docker_install.add_repository(fake_runner, keyrings_dir=keyrings, sources_dir=sources)

    assert source == sources / "docker.list"
    assert source.read_text(encoding="utf-8") == (
        f"deb [arch=amd64 signed-by={keyrings / 'docker.gpg'}] "
        "https://download.docker.com/linux/ubuntu noble stable\n"
    )
    assert ["install", "-m", "0755", "-d", str(keyrings)] in fake_runner.commands
    gpg_index = fake_runner.commands.index(
        ["gpg", "--batch", "--yes", "--dearmor", "-o", str(keyrings / "docker.gpg")]
    )
    assert "BEGIN PGP PUBLIC KEY BLOCK" in fake_runner.inputs[gpg_index]
    assert ["chmod", "a+r", str(keyrings / "docker.gpg")] in fake_runner.commands
    assert signing_key == [docker_install.DOCKER_GPG_URL]


def test_add_repository_twice_keeps_single_entry(tmp_path, fake_runner, signing_key) -> None:
    kwargs = {"keyrings_dir": tmp_path / "keyrings", "sources_dir": tmp_path / "sources"}
    docker_install.add_repository(fake_runner, **kwargs)
    source = docker_install.add_repository(fake_runner, **kwargs)
    assert len(source.read_text(encoding="utf-8").splitlines()) == 1


def test_install_docker_sequence(tmp_path, fake_runner, signing_key) -> None:
    version = docker_install.install_docker(
        fake_runner,
        keyrings_dir=tmp_path / "keyrings",
        sources_dir=tmp_path / "sources",
    )

    assert version == "Docker version 27.3.1, build ce12230"
    removed = [cmd[-1] for cmd in fake_runner.commands if cmd[:2] == ["apt-get", "remove"]]
    assert removed == list(docker_install.LEGACY_PACKAGES)
    installs = [cmd[3:] for cmd in fake_runner.commands if cmd[:2] == ["apt-get", "install"]]
    assert installs == [list(docker_install.REPO_DEPENDENCIES), list(docker_install.DOCKER_PACKAGES)]
    update_index = fake_runner.commands.index(["apt-get", "update", "-y"])
    engine_index = fake_runner.commands.index(["apt-get", "install", "-y", *docker_install.DOCKER_PACKAGES])
    assert update_index < engine_index
    assert fake_runner.commands[-2] == ["systemctl", "enable", "--now", "docker"]
    assert fake_runner.commands[-1] == ["docker", "--version"]


def test_legacy_removal_failures_are_tolerated(tmp_path, fake_runner, signing_key) -> None:
    fake_runner.results[("apt-get", "remove")] = completed(returncode=100, stderr="E: Unable to locate package")
    docker_install.install_docker(fake_runner, keyrings_dir=tmp_path / "k", sources_dir=tmp_path / "s")
    assert ["systemctl", "enable", "--now", "docker"] in fake_runner.commands


def test_engine_install_failure_is_fatal(tmp_path, fake_runner, signing_key) -> None:
    fake_runner.results[("apt-get", "install", "-y", "docker-ce")] = completed(returncode=100)
    with pytest.raises(CommandError) as exc:
        docker_install.install_docker(fake_runner, keyrings_dir=tmp_path / "k", sources_dir=tmp_path / "s")
    assert exc.value.returncode == 100
    assert ["systemctl", "enable", "--now", "docker"] not in fake_runner.commands


def test_fetch_signing_key_http_error(monkeypatch) -> None:
    def _fake_get(url, **_kwargs) -> httpx.Response:
        return httpx.Response(404, text="not found", request=httpx.Request("GET", url))

    monkeypatch.setattr(httpx, "get", _fake_get)
    with pytest.raises(DownloadError, match="Failed to download repository key"):
        docker_install.fetch_signing_key()


def test_fetch_signing_key_network_error(monkeypatch) -> None:
    def _fake_get(url, **_kwargs) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=httpx.Request("GET", url))

    monkeypatch.setattr(httpx, "get", _fake_get)
    with pytest.raises(DownloadError):
        docker_install.fetch_signing_key()


def test_fetch_signing_key_returns_armored_text(monkeypatch) -> None:
    armored = "-----BEGIN PGP PUBLIC KEY BLOCK-----\n...\n"

    def _fake_get(url, **_kwargs) -> httpx.Response:
        return httpx.Response(200, text=armored, request=httpx.Request("GET", url))

    monkeypatch.setattr(httpx, "get", _fake_get)
    assert docker_install.fetch_signing_key() == armored
