from __future__ import annotations

import shlex
from typing import Sequence


class HostprepError(Exception):
    """Base provisioning error."""

    exit_code = 2


class ConfigError(HostprepError):
    """Config file is unreadable or holds invalid values."""


class DownloadError(HostprepError):
    """Fetching a remote artifact (repository signing key) failed."""


class CommandError(HostprepError):
    def __init__(self, cmd: Sequence[str], returncode: int, stderr: str | None = None):
        self.cmd = list(cmd)
        self.returncode = returncode
        self.stderr = (stderr or "").strip()
        message = f"Command failed with exit code {returncode}: {shlex.join(self.cmd)}"
        if self.stderr:
            message = f"{message}\n{self.stderr}"
        super().__init__(message)

    @property
    def exit_code(self) -> int:  # type: ignore[override]
        if self.returncode < 0:
            # killed by signal N: report 128+N like the shell
            return 128 - self.returncode
        return self.returncode or 1
