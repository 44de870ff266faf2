from __future__ import annotations

import subprocess

import pytest

from hostprep_cli.errors import CommandError
from hostprep_cli.runner import CommandRunner


class FakeRunner(CommandRunner):
    """Records commands; results are looked up by the longest matching argv prefix."""

    def __init__(self, results: dict[tuple[str, ...], subprocess.CompletedProcess] | None = None) -> None:
        super().__init__(dry_run=False)
        self.results = dict(results or {})
        self.inputs: list[str | None] = []
        self.envs: list[dict[str, str] | None] = []

    def _result_for(self, argv: list[str]) -> subprocess.CompletedProcess:
        best: tuple[str, ...] | None = None
        for prefix in self.results:
            if tuple(argv[: len(prefix)]) == prefix and (best is None or len(prefix) > len(best)):
                best = prefix
        if best is None:
            return subprocess.CompletedProcess(argv, 0, "", "")
        return self.results[best]

    def run(self, cmd, *, check=True, capture_output=False, merge_stderr=False, env=None, input=None):
        argv = [str(part) for part in cmd]
        self.commands.append(argv)
        self.inputs.append(input)
        self.envs.append(env)
        res = self._result_for(argv)
        if check and res.returncode != 0:
            raise CommandError(argv, res.returncode, res.stderr)
        return res


def completed(returncode: int = 0, stdout: str = "", stderr: str = "") -> subprocess.CompletedProcess:
    return subprocess.CompletedProcess([], returncode, stdout, stderr)


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner(
        {
            ("dpkg", "--print-architecture"): completed(stdout="amd64\n"),
            ("lsb_release", "-cs"): completed(stdout="noble\n"),
            ("docker", "--version"): completed(stdout="Docker version 27.3.1, build ce12230\n"),
        }
    )


@pytest.fixture
def signing_key(monkeypatch: pytest.MonkeyPatch) -> list[str]:
    from hostprep_cli import docker_install

    fetched: list[str] = []

    def _fake_fetch(url: str = docker_install.DOCKER_GPG_URL, *, timeout_s: float = 30.0) -> str:
        fetched.append(url)
        return "-----BEGIN PGP PUBLIC KEY BLOCK-----\nfake\n-----END PGP PUBLIC KEY BLOCK-----\n"

    monkeypatch.setattr(docker_install, "fetch_signing_key", _fake_fetch)
    return fetched
