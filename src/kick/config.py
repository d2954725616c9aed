"""
kick configuration
"""

from pathlib import Path
from typing import Optional
from pydantic import Field
from pydantic_settings import BaseSettings


class KickSettings(BaseSettings):
    """kick configuration"""

    # SSH daemon
    sshd_config_path: Path = Field(
        default=Path("/etc/ssh/sshd_config"),
        description="Main sshd configuration file"
    )
    sshd_config_dir: Path = Field(
        default=Path("/etc/ssh/sshd_config.d"),
        description="Directory of sshd override fragments"
    )
    restart_timeout: Optional[int] = Field(
        default=None,
        description="Timeout for each restart command (seconds, unset waits forever)"
    )

    # Authorized keys
    home_dir: Path = Field(
        default_factory=Path.home,
        description="Home directory holding .ssh/authorized_keys"
    )
    max_key_length: int = Field(default=2048, description="Longest accepted public key line")

    # Build info, injected at packaging time
    build_commit: str = Field(default="none", description="Source commit")
    build_date: str = Field(default="unknown", description="Build timestamp")

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")

    model_config = {
        "env_prefix": "KICK_",
        "env_file": ".env",
        "extra": "ignore"
    }


def get_settings() -> KickSettings:
    """Get kick settings singleton"""
    if not hasattr(get_settings, '_settings'):
        get_settings._settings = KickSettings()
    return get_settings._settings


def reset_settings() -> None:
    """Drop the cached settings so the next get_settings() re-reads the environment."""
    if hasattr(get_settings, '_settings'):
        del get_settings._settings
