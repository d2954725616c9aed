"""
Host access for kick.

Every file read/write, identity lookup and external command goes through
LocalHost so the setup stages can be exercised against a temporary
directory and a fake command runner.
"""

import os
import subprocess
import tempfile
import logging
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)


class LocalHost:
    """Direct access to the local machine's filesystem, identity and processes."""

    def read_text(self, path: Path) -> str:
        """
        Read a file as text without translating line endings.

        Bytes that are not valid UTF-8 come back as surrogates and are
        written out unchanged by write_text().
        """
        with open(path, encoding="utf-8", errors="surrogateescape", newline="") as f:
            return f.read()

    def write_text(self, path: Path, content: str, mode: Optional[int] = None) -> None:
        """
        Replace a file's content in one step.

        The new content is written to a temporary file in the same directory
        and moved over the target, so readers never observe a partial file.
        Symlinks are followed, so the link stays and its target is replaced.
        An existing file keeps its permission bits, owner and group; a new
        one gets `mode` (0o644 when not given).

        Args:
            path: File to replace
            content: Full new file content
            mode: Permission bits for a newly created file
        """
        path = Path(path).resolve()
        owner = None
        if path.exists():
            st = path.stat()
            mode = st.st_mode & 0o7777
            owner = (st.st_uid, st.st_gid)
        elif mode is None:
            mode = 0o644

        fd, tmp_name = tempfile.mkstemp(dir=str(path.parent), prefix=f".{path.name}.")
        try:
            with os.fdopen(fd, "w", encoding="utf-8", errors="surrogateescape", newline="") as f:
                f.write(content)
            if owner is not None and owner != (os.geteuid(), os.getegid()):
                os.chown(tmp_name, *owner)
            os.chmod(tmp_name, mode)
            os.replace(tmp_name, path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

    def exists(self, path: Path) -> bool:
        return Path(path).exists()

    def is_dir(self, path: Path) -> bool:
        return Path(path).is_dir()

    def list_dir(self, path: Path) -> List[Path]:
        """Regular files directly inside `path`, sorted by name."""
        return sorted(p for p in Path(path).iterdir() if p.is_file())

    def mkdir(self, path: Path, mode: int = 0o700) -> None:
        Path(path).mkdir(mode=mode)
        # mkdir() is subject to the umask
        os.chmod(path, mode)

    def chmod(self, path: Path, mode: int) -> None:
        os.chmod(path, mode)

    def current_uid(self) -> int:
        return os.getuid()

    def home_dir(self) -> Path:
        return Path.home()

    def run_command(self, argv: Sequence[str], timeout: Optional[int] = None) -> Tuple[bool, str, str]:
        """
        Run an external command and return (success, stdout, stderr).

        Args:
            argv: Program and arguments
            timeout: Seconds before the command is abandoned (None waits forever)

        Returns:
            (success, stdout, stderr)
        """
        try:
            result = subprocess.run(
                list(argv),
                capture_output=True,
                text=True,
                timeout=timeout
            )
        except subprocess.TimeoutExpired:
            return False, "", "Command timed out"
        except FileNotFoundError:
            return False, "", f"{argv[0]}: command not found"
        except OSError as e:
            return False, "", str(e)

        if result.returncode != 0:
            stderr = result.stderr.strip() or f"exit status {result.returncode}"
            return False, result.stdout.strip(), stderr
        return True, result.stdout.strip(), result.stderr.strip()


def has_elevated_privilege(host: Optional[LocalHost] = None) -> bool:
    """Check if running as the superuser (uid 0)."""
    host = host or LocalHost()
    try:
        return host.current_uid() == 0
    except (AttributeError, OSError) as e:
        # No uid concept on this platform, or the lookup failed
        logger.debug(f"Could not determine current uid: {e}")
        return False
