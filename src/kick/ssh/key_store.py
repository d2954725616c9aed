"""
Authorized Keys handling for kick.
Validates a candidate public key and installs it into ~/.ssh/authorized_keys.
"""

import logging
from pathlib import Path
from typing import Optional, Union

from ..errors import DirCreateError, ReadError, ValidationError, WriteError
from ..host import LocalHost

logger = logging.getLogger(__name__)

ACCEPTED_KEY_PREFIXES = ("ssh-rsa", "ssh-ed25519", "ecdsa-sha2-")

SSH_DIR_MODE = 0o700
AUTHORIZED_KEYS_MODE = 0o600


def is_acceptable_public_key(candidate: str) -> bool:
    """
    Shallow format check of a public key line.

    Only the algorithm prefix is looked at; the base64 body and comment
    are not parsed.
    """
    if not candidate:
        return False
    candidate = candidate.strip()
    return bool(candidate) and candidate.startswith(ACCEPTED_KEY_PREFIXES)


def validate_public_key(candidate: str) -> str:
    """
    Return the trimmed key, or raise ValidationError if it is not acceptable.
    """
    if not is_acceptable_public_key(candidate):
        raise ValidationError(
            "Invalid public key format, it should start with "
            + ", ".join(ACCEPTED_KEY_PREFIXES)
        )
    return candidate.strip()


class AuthorizedKeysInstaller:
    """
    Appends a public key to <home>/.ssh/authorized_keys exactly once.

    The .ssh directory is created with mode 0700 when missing and the
    authorized_keys file always ends up with mode 0600.
    """

    def __init__(self, home_dir: Union[str, Path], host: Optional[LocalHost] = None):
        self._host = host or LocalHost()
        self._ssh_dir = Path(home_dir) / ".ssh"
        self._authorized_keys_path = self._ssh_dir / "authorized_keys"

    @property
    def ssh_dir(self) -> Path:
        return self._ssh_dir

    @property
    def authorized_keys_path(self) -> Path:
        """Path to authorized_keys file."""
        return self._authorized_keys_path

    def _ensure_ssh_dir(self):
        if self._host.exists(self._ssh_dir):
            return
        try:
            self._host.mkdir(self._ssh_dir, mode=SSH_DIR_MODE)
        except OSError as e:
            raise DirCreateError(f"Cannot create {self._ssh_dir}: {e}", self._ssh_dir) from e
        logger.info(f"Created {self._ssh_dir}")

    def _read_existing(self) -> str:
        if not self._host.exists(self._authorized_keys_path):
            return ""
        try:
            return self._host.read_text(self._authorized_keys_path)
        except OSError as e:
            raise ReadError(
                f"Cannot read {self._authorized_keys_path}: {e}", self._authorized_keys_path
            ) from e

    def install(self, public_key: str) -> bool:
        """
        Add a public key to authorized_keys.

        Args:
            public_key: Full public key line (ssh-ed25519 AAAA... comment)

        Returns:
            True if the file was written, False if the key was already there
        """
        self._ensure_ssh_dir()
        existing = self._read_existing()

        if public_key in existing:
            logger.info(f"Key already in {self._authorized_keys_path}")
            return False

        if existing and not existing.endswith("\n"):
            existing += "\n"
        content = existing + public_key + "\n"

        try:
            self._host.write_text(self._authorized_keys_path, content, mode=AUTHORIZED_KEYS_MODE)
            self._host.chmod(self._authorized_keys_path, AUTHORIZED_KEYS_MODE)
        except OSError as e:
            raise WriteError(
                f"Cannot write {self._authorized_keys_path}: {e}", self._authorized_keys_path
            ) from e

        logger.info(f"Added key to {self._authorized_keys_path}: {public_key[:50]}...")
        return True


def install_key(user_home: Union[str, Path], key: str, host: Optional[LocalHost] = None) -> bool:
    """Install `key` into `user_home`/.ssh/authorized_keys. See AuthorizedKeysInstaller.install."""
    return AuthorizedKeysInstaller(user_home, host=host).install(key)
