"""
SSH service restart.

Tries the restart command of each common init system in turn, for both
daemon names (ssh on Debian/Ubuntu, sshd elsewhere), until one succeeds.
"""

import logging
from typing import Optional, Sequence, Tuple

from ..errors import RestartError
from ..host import LocalHost

logger = logging.getLogger(__name__)

RESTART_COMMANDS: Tuple[Tuple[str, ...], ...] = (
    ("service", "ssh", "restart"),
    ("systemctl", "restart", "ssh"),
    ("systemctl", "restart", "sshd"),
    ("service", "sshd", "restart"),
)


class SSHServiceRestarter:
    """Restarts the SSH daemon with the first command that works."""

    def __init__(
        self,
        commands: Sequence[Sequence[str]] = RESTART_COMMANDS,
        host: Optional[LocalHost] = None,
        timeout: Optional[int] = None,
    ):
        self._commands = [tuple(cmd) for cmd in commands]
        self._host = host or LocalHost()
        self._timeout = timeout

    @property
    def commands(self):
        return list(self._commands)

    def restart(self) -> Tuple[str, ...]:
        """
        Restart the SSH service.

        Returns:
            The command that succeeded

        Raises:
            RestartError: every command failed (or there were none to try)
        """
        last_error = None
        for argv in self._commands:
            command = " ".join(argv)
            logger.debug(f"Trying: {command}")
            success, _, stderr = self._host.run_command(argv, timeout=self._timeout)
            if success:
                logger.info(f"SSH service restarted with '{command}'")
                return argv
            last_error = f"{command}: {stderr}"
            logger.warning(f"Restart attempt failed: {last_error}")

        if last_error is not None:
            raise RestartError(f"Unable to restart SSH service: {last_error}", last_error)
        raise RestartError("Unable to restart SSH service, please restart it manually")


def restart_service(
    host: Optional[LocalHost] = None,
    commands: Sequence[Sequence[str]] = RESTART_COMMANDS,
    timeout: Optional[int] = None,
) -> Tuple[str, ...]:
    """Restart sshd through the fallback list. See SSHServiceRestarter.restart."""
    return SSHServiceRestarter(commands, host=host, timeout=timeout).restart()
