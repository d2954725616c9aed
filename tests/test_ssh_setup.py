"""
Tests for the SSH setup pipeline.
"""

from kick.host import LocalHost, has_elevated_privilege
from kick.ssh.service import RESTART_COMMANDS
from kick.ssh.ssh_setup import SSHSetupManager

from conftest import SAMPLE_KEY, FakeHost


class TestPrivilegeGate:

    def test_root(self):
        assert has_elevated_privilege(FakeHost(uid=0))

    def test_regular_user(self):
        assert not has_elevated_privilege(FakeHost(uid=1000))

    def test_lookup_failure_fails_closed(self):
        class NoUidHost(LocalHost):
            def current_uid(self):
                raise AttributeError("module 'os' has no attribute 'getuid'")

        assert not has_elevated_privilege(NoUidHost())


def step_names(results):
    return [s["step"] for s in results["steps"]]


class TestSSHSetupManager:

    def test_full_setup(self, settings, host):
        messages = []
        manager = SSHSetupManager(settings=settings, host=host)
        manager.set_progress_callback(messages.append)

        results = manager.run_full_setup("  " + SAMPLE_KEY + "\n")

        assert results["success"]
        assert step_names(results) == [
            "check_privileges", "validate_key", "update_sshd_config",
            "install_public_key", "restart_sshd",
        ]
        assert "PasswordAuthentication no" in settings.sshd_config_path.read_text()
        assert (settings.home_dir / ".ssh" / "authorized_keys").read_text() == SAMPLE_KEY + "\n"
        assert host.commands == [RESTART_COMMANDS[0]]
        assert messages == [
            "Updating SSH configuration...",
            "Adding public key to authorized_keys...",
            "Restarting SSH service...",
        ]

    def test_rerun_reports_nothing_to_do(self, settings, host):
        manager = SSHSetupManager(settings=settings, host=host)
        manager.run_full_setup(SAMPLE_KEY)

        results = manager.run_full_setup(SAMPLE_KEY)

        messages = {s["step"]: s["message"] for s in results["steps"]}
        assert messages["update_sshd_config"] == "SSH configuration already up to date"
        assert messages["install_public_key"] == "Key already registered"

    def test_not_root_changes_nothing(self, settings):
        host = FakeHost(uid=1000)
        before = settings.sshd_config_path.read_text()

        results = SSHSetupManager(settings=settings, host=host).run_full_setup(SAMPLE_KEY)

        assert not results["success"]
        assert results["error_type"] == "PrivilegeError"
        assert step_names(results) == ["check_privileges"]
        assert settings.sshd_config_path.read_text() == before
        assert not (settings.home_dir / ".ssh").exists()
        assert host.commands == []

    def test_invalid_key_stops_before_config(self, settings, host):
        before = settings.sshd_config_path.read_text()

        results = SSHSetupManager(settings=settings, host=host).run_full_setup("not-a-key")

        assert results["error_type"] == "ValidationError"
        assert settings.sshd_config_path.read_text() == before

    def test_config_read_error_stops_pipeline(self, settings, host):
        settings.sshd_config_path.unlink()

        results = SSHSetupManager(settings=settings, host=host).run_full_setup(SAMPLE_KEY)

        assert results["error_type"] == "ReadError"
        assert step_names(results)[-1] == "update_sshd_config"
        assert not (settings.home_dir / ".ssh").exists()
        assert host.commands == []

    def test_restart_failure_keeps_changes(self, settings):
        host = FakeHost(command_results={cmd: (False, "", "failed") for cmd in RESTART_COMMANDS})

        results = SSHSetupManager(settings=settings, host=host).run_full_setup(SAMPLE_KEY)

        assert not results["success"]
        assert results["error_type"] == "RestartError"
        assert results["steps"][-1] == {
            "step": "restart_sshd",
            "success": False,
            "message": results["error"],
        }
        assert "PasswordAuthentication no" in settings.sshd_config_path.read_text()
        assert (settings.home_dir / ".ssh" / "authorized_keys").exists()

    def test_non_utf8_config_does_not_abort(self, settings, host):
        settings.sshd_config_path.write_bytes(b"# Ge\xe4ndert von admin\nPasswordAuthentication yes\n")

        results = SSHSetupManager(settings=settings, host=host).run_full_setup(SAMPLE_KEY)

        assert results["success"]
        assert b"PasswordAuthentication no" in settings.sshd_config_path.read_bytes()
