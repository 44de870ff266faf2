from __future__ import annotations

from pathlib import Path

from . import console, packages
from .config import SetupConfig, default_config
from .docker_install import DOCKER_PACKAGES
from .runner import CommandRunner

APT_CONF_DIR = Path("/etc/apt/apt.conf.d")
AUTO_UPGRADES_NAME = "20auto-upgrades"
UNATTENDED_UPGRADES_NAME = "50unattended-upgrades"
SERVICE = "unattended-upgrades"
AGENT_PACKAGES = ("unattended-upgrades", "apt-listchanges")
SELF_CHECK_TAIL = 5

# ${...} placeholders are expanded by unattended-upgrades itself
ALLOWED_ORIGINS = (
    "${distro_id}:${distro_codename}",
    "${distro_id}:${distro_codename}-security",
    "${distro_id}ESMApps:${distro_codename}-apps-security",
    "${distro_id}ESM:${distro_codename}-infra-security",
)


def render_auto_upgrades() -> str:
    return "\n".join(
        [
            'APT::Periodic::Update-Package-Lists "1";',
            'APT::Periodic::Unattended-Upgrade "1";',
            'APT::Periodic::AutocleanInterval "7";',
            'APT::Periodic::Download-Upgradeable-Packages "1";',
            "",
        ]
    )


def _block(name: str, items: tuple[str, ...]) -> list[str]:
    return [f"Unattended-Upgrade::{name} {{", *[f'    "{item}";' for item in items], "};"]


def _mail_lines(cfg: SetupConfig) -> list[str]:
    if cfg.mail:
        return [
            f'Unattended-Upgrade::Mail "{cfg.mail}";',
            f'Unattended-Upgrade::MailReport "{cfg.mail_report}";',
        ]
    return [
        '// Unattended-Upgrade::Mail "you@example.com";',
        f'// Unattended-Upgrade::MailReport "{cfg.mail_report}";',
    ]


def render_unattended_upgrades(cfg: SetupConfig | None = None) -> str:
    cfg = cfg or default_config()
    lines = [
        *_block("Allowed-Origins", ALLOWED_ORIGINS),
        "",
        *_block("Package-Blacklist", DOCKER_PACKAGES),
        "",
        'Unattended-Upgrade::DevRelease "false";',
        'Unattended-Upgrade::Remove-Unused-Kernel-Packages "true";',
        'Unattended-Upgrade::Remove-New-Unused-Dependencies "true";',
        'Unattended-Upgrade::Remove-Unused-Dependencies "true";',
        'Unattended-Upgrade::AutoFixInterruptedDpkg "true";',
        'Unattended-Upgrade::MinimalSteps "true";',
        "",
        'Unattended-Upgrade::Automatic-Reboot "true";',
        'Unattended-Upgrade::Automatic-Reboot-WithUsers "false";',
        f'Unattended-Upgrade::Automatic-Reboot-Time "{cfg.auto_reboot_time}";',
        "",
        *_mail_lines(cfg),
        "",
        'Unattended-Upgrade::SyslogEnable "true";',
        'Unattended-Upgrade::Verbose "false";',
        "",
    ]
    return "\n".join(lines)


def write_policies(
        runner: CommandRunner,
        cfg: SetupConfig,
        *,
        apt_conf_dir: Path = APT_CONF_DIR,
) -> tuple[Path, Path]:
    auto_path = apt_conf_dir / AUTO_UPGRADES_NAME
    policy_path = apt_conf_dir / UNATTENDED_UPGRADES_NAME
    runner.write_file(auto_path, render_auto_upgrades())
    runner.write_file(policy_path, render_unattended_upgrades(cfg))
    return auto_path, policy_path


def self_check(runner: CommandRunner) -> list[str]:
    """Dry-run unattended-upgrades and echo the tail of its output. Exit status is ignored."""
    res = runner.run([SERVICE, "--dry-run", "--debug"], check=False, merge_stderr=True)
    tail = (res.stdout or "").splitlines()[-SELF_CHECK_TAIL:]
    for line in tail:
        console.print(f"  {line}", markup=False)
    return tail


def configure_unattended_upgrades(
        runner: CommandRunner,
        cfg: SetupConfig,
        *,
        apt_conf_dir: Path = APT_CONF_DIR,
) -> None:
    console.info("Configuring unattended-upgrades...")
    packages.install(runner, AGENT_PACKAGES)
    write_policies(runner, cfg, apt_conf_dir=apt_conf_dir)

    runner.run(["systemctl", "enable", SERVICE])
    runner.run(["systemctl", "restart", SERVICE])

    console.info("Verifying unattended-upgrades config (dry-run)...")
    self_check(runner)
