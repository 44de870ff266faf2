from __future__ import annotations

import logging
import os
import shlex
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Sequence

from . import console
from .errors import CommandError, HostprepError

log = logging.getLogger(__name__)

# stdout handed back for read-only queries when nothing is executed
DRY_RUN_OUTPUTS = {
    ("dpkg", "--print-architecture"): "amd64",
    ("lsb_release", "-cs"): "noble",
    ("docker", "--version"): "Docker version (dry-run)",
}


@dataclass
class CommandRunner:
    """Runs host commands one at a time and stops at the first unexpected failure."""

    dry_run: bool = False
    commands: list[list[str]] = field(default_factory=list, init=False, repr=False)

    def run(
            self,
            cmd: Sequence[str],
            *,
            check: bool = True,
            capture_output: bool = False,
            merge_stderr: bool = False,
            env: dict[str, str] | None = None,
            input: str | None = None,
    ) -> subprocess.CompletedProcess:
        argv = [str(part) for part in cmd]
        self.commands.append(argv)
        log.debug("run: %s", shlex.join(argv))
        if self.dry_run:
            console.info(f"[dry-run] {shlex.join(argv)}")
            stdout = DRY_RUN_OUTPUTS.get(tuple(argv), "") if capture_output or merge_stderr else None
            return subprocess.CompletedProcess(argv, 0, stdout, "")

        kwargs: dict = {"text": True, "input": input}
        if env:
            kwargs["env"] = {**os.environ, **env}
        if merge_stderr:
            kwargs["stdout"] = subprocess.PIPE
            kwargs["stderr"] = subprocess.STDOUT
        elif capture_output:
            kwargs["capture_output"] = True
        try:
            res = subprocess.run(argv, check=False, **kwargs)
        except OSError as exc:
            # 127 when missing, 126 when present but not runnable, as the shell reports
            code = 127 if isinstance(exc, FileNotFoundError) else 126
            reason = "command not found" if code == 127 else (exc.strerror or str(exc))
            if check:
                raise CommandError(argv, code, f"{argv[0]}: {reason}") from exc
            return subprocess.CompletedProcess(argv, code, "", f"{argv[0]}: {reason}")
        log.debug("exit %s: %s", res.returncode, argv[0])
        if check and res.returncode != 0:
            raise CommandError(argv, res.returncode, res.stderr if capture_output else None)
        return res

    def output(self, cmd: Sequence[str]) -> str:
        res = self.run(cmd, capture_output=True)
        return (res.stdout or "").strip()

    def write_file(self, path: Path, content: str, *, mode: int = 0o644) -> None:
        """Replace ``path`` with ``content``; never appends."""
        log.debug("write: %s (%d bytes)", path, len(content))
        if self.dry_run:
            console.info(f"[dry-run] write {path}")
            return
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
            os.chmod(path, mode)
        except OSError as exc:
            raise HostprepError(f"Cannot write {path}: {exc}") from exc
