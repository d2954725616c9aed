"""
SSH Module for kick.
Reconciles sshd configuration, installs authorized keys and restarts sshd.
"""

from .key_store import AuthorizedKeysInstaller, install_key, is_acceptable_public_key, validate_public_key
from .service import RESTART_COMMANDS, SSHServiceRestarter, restart_service
from .ssh_setup import SSHSetupManager
from .sshd_config import REQUIRED_DIRECTIVES, SSHDConfigReconciler, reconcile, reconcile_lines

__all__ = [
    "AuthorizedKeysInstaller",
    "install_key",
    "is_acceptable_public_key",
    "validate_public_key",
    "RESTART_COMMANDS",
    "SSHServiceRestarter",
    "restart_service",
    "SSHSetupManager",
    "REQUIRED_DIRECTIVES",
    "SSHDConfigReconciler",
    "reconcile",
    "reconcile_lines",
]
