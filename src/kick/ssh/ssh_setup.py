"""
SSH Setup Manager for kick.
Runs the key-based authentication setup stages in order for one public key.
"""

import logging
from typing import Any, Callable, Dict, Optional

from ..config import KickSettings, get_settings
from ..errors import KickError, PrivilegeError
from ..host import LocalHost, has_elevated_privilege
from .key_store import AuthorizedKeysInstaller, validate_public_key
from .service import SSHServiceRestarter
from .sshd_config import SSHDConfigReconciler

logger = logging.getLogger(__name__)


class SSHSetupManager:
    """
    Switches the local SSH server to key-only logins.

    Stages:
    1. Check for root
    2. Validate the public key
    3. Reconcile sshd_config and sshd_config.d
    4. Install the key into authorized_keys
    5. Restart the SSH service

    Each stage raises a KickError on failure and later stages are not run.
    Nothing is rolled back.
    """

    def __init__(self, settings: Optional[KickSettings] = None, host: Optional[LocalHost] = None):
        self._settings = settings or get_settings()
        self._host = host or LocalHost()
        self._progress_callback: Optional[Callable[[str], None]] = None

    def set_progress_callback(self, callback: Callable[[str], None]):
        """Set callback for progress updates"""
        self._progress_callback = callback

    def _emit_progress(self, message: str):
        """Emit progress message"""
        logger.info(message)
        if self._progress_callback:
            self._progress_callback(message)

    def check_privileges(self):
        if not has_elevated_privilege(self._host):
            raise PrivilegeError("This command requires root privileges, please run it with sudo")

    def validate_key(self, public_key: str) -> str:
        return validate_public_key(public_key)

    def update_sshd_config(self):
        self._emit_progress("Updating SSH configuration...")
        reconciler = SSHDConfigReconciler(
            self._settings.sshd_config_path,
            self._settings.sshd_config_dir,
            host=self._host,
        )
        return reconciler.reconcile()

    def install_public_key(self, public_key: str) -> bool:
        self._emit_progress("Adding public key to authorized_keys...")
        installer = AuthorizedKeysInstaller(self._settings.home_dir, host=self._host)
        return installer.install(public_key)

    def restart_sshd(self):
        self._emit_progress("Restarting SSH service...")
        restarter = SSHServiceRestarter(host=self._host, timeout=self._settings.restart_timeout)
        return restarter.restart()

    def run_full_setup(self, public_key: str) -> Dict[str, Any]:
        """
        Run complete key-based authentication setup.

        Args:
            public_key: Public key line to authorize

        Returns:
            Dictionary with setup results
        """
        results = {
            "success": True,
            "steps": [],
        }

        def step(name: str, func, *args):
            try:
                outcome = func(*args)
            except KickError as e:
                logger.error(f"Step {name} failed: {e}")
                results["steps"].append({"step": name, "success": False, "message": str(e)})
                results["success"] = False
                results["error"] = str(e)
                results["error_type"] = type(e).__name__
                raise
            results["steps"].append({"step": name, "success": True, "message": describe(name, outcome)})
            return outcome

        def describe(name: str, outcome) -> str:
            if name == "update_sshd_config":
                if not outcome.document_changed and not outcome.neutralized_fragments:
                    return "SSH configuration already up to date"
                return "SSH configuration updated"
            if name == "install_public_key":
                return "Key added" if outcome else "Key already registered"
            if name == "restart_sshd":
                return f"Restarted with '{' '.join(outcome)}'"
            return "OK"

        try:
            step("check_privileges", self.check_privileges)
            public_key = step("validate_key", self.validate_key, public_key)
            step("update_sshd_config", self.update_sshd_config)
            step("install_public_key", self.install_public_key, public_key)
            step("restart_sshd", self.restart_sshd)
        except KickError:
            return results

        logger.info(f"SSH setup complete: {results['success']}")
        return results
