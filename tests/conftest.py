"""
Shared fixtures for kick tests.
"""

from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

import pytest

from kick.config import KickSettings, reset_settings
from kick.host import LocalHost


class FakeHost(LocalHost):
    """Real filesystem, fake identity and command runner."""

    def __init__(self, uid: int = 0, command_results: Optional[Dict[Tuple[str, ...], Tuple[bool, str, str]]] = None):
        self.uid = uid
        self.command_results = command_results or {}
        self.commands: List[Tuple[str, ...]] = []

    def current_uid(self) -> int:
        return self.uid

    def run_command(self, argv: Sequence[str], timeout: Optional[int] = None) -> Tuple[bool, str, str]:
        argv = tuple(argv)
        self.commands.append(argv)
        return self.command_results.get(argv, (True, "", ""))


SAMPLE_SSHD_CONFIG = """\
# This is the sshd server system-wide configuration file.

Include /etc/ssh/sshd_config.d/*.conf

#PermitRootLogin prohibit-password
PasswordAuthentication yes
KbdInteractiveAuthentication no
UsePAM yes

X11Forwarding yes
PrintMotd no
Subsystem	sftp	/usr/lib/openssh/sftp-server
"""

SAMPLE_KEY = "ssh-ed25519 AAAAC3NzaC1lZDI1NTE5AAAAIHk2YFzh0J5Yt9Pm8xYk2v9b7Q4p3r2s1t0u9v8w7x6y me@laptop"


@pytest.fixture(autouse=True)
def clean_settings():
    """Never let a cached KickSettings leak between tests."""
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def host():
    return FakeHost()


@pytest.fixture
def etc_ssh(tmp_path) -> Path:
    ssh_dir = tmp_path / "etc" / "ssh"
    (ssh_dir / "sshd_config.d").mkdir(parents=True)
    (ssh_dir / "sshd_config").write_text(SAMPLE_SSHD_CONFIG)
    return ssh_dir


@pytest.fixture
def home(tmp_path) -> Path:
    home_dir = tmp_path / "home" / "root"
    home_dir.mkdir(parents=True)
    return home_dir


@pytest.fixture
def settings(etc_ssh, home) -> KickSettings:
    return KickSettings(
        sshd_config_path=etc_ssh / "sshd_config",
        sshd_config_dir=etc_ssh / "sshd_config.d",
        home_dir=home,
    )
