from __future__ import annotations

import os
import re
import tomllib
from dataclasses import dataclass, field
from typing import Any, Iterable

import tomli_w
from platformdirs import site_config_dir

from .errors import ConfigError

APP_NAME = "hostprep"
CONFIG_FILENAME = "config.toml"
ENV_CONFIG_PATH = "HOSTPREP_CONFIG"
ENV_DOCKER_USERS = "HOSTPREP_DOCKER_USERS"

DEFAULT_AUTO_REBOOT_TIME = "03:00"
DEFAULT_REBOOT_DELAY_MINUTES = 1
DEFAULT_MAIL_REPORT = "on-change"

_TIME_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")
_MAIL_REPORTS = {"always", "only-on-error", "on-change"}
_UNSAFE_MAIL_RE = re.compile(r'["\';{}\\\r\n]')


@dataclass
class SetupConfig:
    docker_users: list[str] = field(default_factory=list)
    reboot_delay_minutes: int = DEFAULT_REBOOT_DELAY_MINUTES
    auto_reboot_time: str = DEFAULT_AUTO_REBOOT_TIME
    mail: str = ""
    mail_report: str = DEFAULT_MAIL_REPORT


def config_path() -> str:
    env_value = os.getenv(ENV_CONFIG_PATH, "").strip()
    if env_value:
        return env_value
    return f"{site_config_dir(APP_NAME)}/{CONFIG_FILENAME}"


def default_config() -> SetupConfig:
    return SetupConfig(
        docker_users=[],
        reboot_delay_minutes=DEFAULT_REBOOT_DELAY_MINUTES,
        auto_reboot_time=DEFAULT_AUTO_REBOOT_TIME,
        mail="",
        mail_report=DEFAULT_MAIL_REPORT,
    )


def ensure_parent_dir(path: str) -> None:
    parent = os.path.dirname(path)
    if parent:
        os.makedirs(parent, exist_ok=True)


def split_users(raw: str | None) -> list[str]:
    """Split a space or comma separated list of user names."""
    return [part for part in re.split(r"[\s,]+", raw or "") if part]


def merge_users(*groups: Iterable[str]) -> list[str]:
    merged: list[str] = []
    for group in groups:
        for name in group:
            name = name.strip()
            if name and name not in merged:
                merged.append(name)
    return merged


def to_toml(cfg: SetupConfig) -> dict[str, Any]:
    return {
        "docker_users": list(cfg.docker_users),
        "reboot_delay_minutes": cfg.reboot_delay_minutes,
        "unattended_upgrades": {
            "auto_reboot_time": cfg.auto_reboot_time,
            "mail": cfg.mail,
            "mail_report": cfg.mail_report,
        },
    }


def _str_option(table: dict[str, Any], key: str, default: str) -> str:
    value = table.get(key, default)
    if not isinstance(value, str):
        raise ConfigError(f"{key} must be a string, got {type(value).__name__}.")
    return value.strip()


def from_toml(data: dict[str, Any]) -> SetupConfig:
    cfg = default_config()

    users_raw = data.get("docker_users", [])
    if isinstance(users_raw, str):
        users_raw = split_users(users_raw)
    if not isinstance(users_raw, list) or not all(isinstance(u, str) for u in users_raw):
        raise ConfigError("docker_users must be a list of user names.")
    cfg.docker_users = merge_users(users_raw)

    delay = data.get("reboot_delay_minutes", DEFAULT_REBOOT_DELAY_MINUTES)
    if isinstance(delay, bool) or not isinstance(delay, int) or delay < 1:
        raise ConfigError("reboot_delay_minutes must be a positive integer.")
    cfg.reboot_delay_minutes = delay

    uu_raw = data.get("unattended_upgrades", {})
    if not isinstance(uu_raw, dict):
        raise ConfigError("[unattended_upgrades] must be a table.")

    reboot_time = _str_option(uu_raw, "auto_reboot_time", DEFAULT_AUTO_REBOOT_TIME)
    if not _TIME_RE.match(reboot_time):
        raise ConfigError(f"auto_reboot_time must be HH:MM, got {reboot_time!r}.")
    cfg.auto_reboot_time = reboot_time

    mail = _str_option(uu_raw, "mail", "")
    # the value is written inside a quoted apt directive
    if _UNSAFE_MAIL_RE.search(mail):
        raise ConfigError("mail must not contain quotes, semicolons, braces or line breaks.")
    cfg.mail = mail

    mail_report = _str_option(uu_raw, "mail_report", DEFAULT_MAIL_REPORT)
    if mail_report not in _MAIL_REPORTS:
        raise ConfigError(f"mail_report must be one of {', '.join(sorted(_MAIL_REPORTS))}.")
    cfg.mail_report = mail_report
    return cfg


def load_config(path: str | None = None) -> SetupConfig:
    path = path or config_path()
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except FileNotFoundError:
        return default_config()
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Invalid TOML in {path}: {exc}") from exc
    except OSError as exc:
        raise ConfigError(f"Cannot read {path}: {exc}") from exc
    return from_toml(data)


def resolve_docker_users(cfg: SetupConfig, cli_users: Iterable[str] = ()) -> list[str]:
    env_users = split_users(os.getenv(ENV_DOCKER_USERS))
    return merge_users(cfg.docker_users, env_users, cli_users)


def save_config(cfg: SetupConfig, path: str | None = None) -> str:
    path = path or config_path()
    ensure_parent_dir(path)
    with open(path, "wb") as f:
        f.write(tomli_w.dumps(to_toml(cfg)).encode("utf-8"))
    os.chmod(path, 0o644)
    return path
