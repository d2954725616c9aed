"""
Errors raised by the kick setup stages.
"""

from pathlib import Path
from typing import Optional, Union


class KickError(Exception):
    """Base class for every stage failure."""


class PrivilegeError(KickError):
    """Not running with superuser rights. Nothing has been changed."""


class ValidationError(KickError):
    """Public key rejected by the prefix check."""


class _PathError(KickError):

    def __init__(self, message: str, path: Union[str, Path]):
        super().__init__(message)
        self.path = Path(path)


class ReadError(_PathError):
    """A host file could not be read."""


class WriteError(_PathError):
    """A host file could not be written."""


class DirCreateError(_PathError):
    """The credential directory could not be created."""


class RestartError(KickError):
    """
    Every SSH restart command failed.

    Configuration and key changes are already on disk at this point; the
    service has to be restarted by hand.
    """

    def __init__(self, message: str, last_error: Optional[str] = None):
        super().__init__(message)
        self.last_error = last_error
