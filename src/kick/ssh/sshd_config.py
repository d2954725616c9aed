"""
sshd_config reconciliation.

Merges the directives kick requires into an existing sshd_config without
touching unrelated lines, and comments out `PasswordAuthentication yes` in
sshd_config.d fragments so they cannot re-enable password logins.
"""

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from ..errors import ReadError, WriteError
from ..host import LocalHost

logger = logging.getLogger(__name__)

REQUIRED_DIRECTIVES: Dict[str, str] = {
    "PubkeyAuthentication": "yes",
    "AuthorizedKeysFile": ".ssh/authorized_keys .ssh/authorized_keys2",
    "PasswordAuthentication": "no",
    "PermitRootLogin": "prohibit-password",
    "ClientAliveInterval": "60",
    "ClientAliveCountMax": "10",
}

INSECURE_LITERAL = "PasswordAuthentication yes"
NEUTRALIZED_LITERAL = "#PasswordAuthentication yes # disabled by kick"
FRAGMENT_SUFFIX = ".conf"

# Active occurrence only; an already commented line starts with '#'
_INSECURE_LINE_RE = re.compile(r"^([ \t]*)" + re.escape(INSECURE_LITERAL), re.MULTILINE)


def _is_directive_line(stripped: str, name: str) -> bool:
    return stripped.startswith(name + " ") or stripped.startswith(name + "\t")


def _merge_directives(lines: List[str], directives: Dict[str, str]) -> Tuple[List[str], List[str], List[str]]:
    """Returns (new lines, names rewritten in place, names appended)."""
    result = list(lines)
    satisfied = set()
    updated = []
    # CRLF documents keep their "\r" on rewritten and appended lines
    crlf = any(line.endswith("\r") for line in lines)

    for i, line in enumerate(result):
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue

        for name, value in directives.items():
            if name in satisfied:
                continue
            if _is_directive_line(stripped, name):
                wanted = f"{name} {value}" + ("\r" if line.endswith("\r") else "")
                if line != wanted:
                    result[i] = wanted
                    updated.append(name)
                satisfied.add(name)
                break

    appended = [name for name in directives if name not in satisfied]
    missing = [f"{name} {directives[name]}" + ("\r" if crlf else "") for name in appended]
    if missing:
        if result and result[-1] == "":
            result[-1:-1] = missing
        else:
            # No final newline: the break goes after the old last line
            if crlf:
                if not result[-1].endswith("\r"):
                    result[-1] += "\r"
                missing[-1] = missing[-1][:-1]
            result.extend(missing)
    return result, updated, appended


def reconcile_lines(lines: List[str], directives: Dict[str, str]) -> List[str]:
    """
    Return a copy of `lines` with every directive set to its required value.

    The first active line for each directive is replaced by `name value`;
    later lines for the same directive are left as they are. Directives that
    never appear are appended in `directives` order. A trailing empty element
    (file ending in a newline) stays last.

    Args:
        lines: Document split on "\\n"
        directives: Directive name -> required value

    Returns:
        New list of lines
    """
    return _merge_directives(lines, directives)[0]


def neutralize_fragment(content: str) -> str:
    """Comment out every active `PasswordAuthentication yes` line in a fragment."""
    return _INSECURE_LINE_RE.sub(lambda m: m.group(1) + NEUTRALIZED_LITERAL, content)


@dataclass
class ReconcileReport:
    """What a reconcile pass changed."""

    updated: List[str] = field(default_factory=list)
    appended: List[str] = field(default_factory=list)
    neutralized_fragments: List[Path] = field(default_factory=list)
    document_changed: bool = False


class SSHDConfigReconciler:
    """
    Applies REQUIRED_DIRECTIVES (or a caller supplied set) to sshd_config.

    Running reconcile() a second time makes no further changes.
    """

    def __init__(
        self,
        config_path: Union[str, Path],
        override_dir: Union[str, Path],
        directives: Optional[Dict[str, str]] = None,
        host: Optional[LocalHost] = None,
    ):
        self._config_path = Path(config_path)
        self._override_dir = Path(override_dir)
        self._directives = dict(REQUIRED_DIRECTIVES if directives is None else directives)
        self._host = host or LocalHost()

    @property
    def config_path(self) -> Path:
        return self._config_path

    @property
    def directives(self) -> Dict[str, str]:
        return dict(self._directives)

    def _read_document(self) -> str:
        try:
            return self._host.read_text(self._config_path)
        except OSError as e:
            raise ReadError(f"Cannot read {self._config_path}: {e}", self._config_path) from e

    def _neutralize_overrides(self) -> List[Path]:
        """
        Comment out password logins in the override directory.

        Unreadable fragments are skipped; a failed write raises WriteError.
        """
        if not self._host.is_dir(self._override_dir):
            logger.debug(f"No override directory at {self._override_dir}")
            return []

        try:
            fragments = self._host.list_dir(self._override_dir)
        except OSError as e:
            logger.warning(f"Could not list {self._override_dir}: {e}")
            return []

        neutralized = []
        for fragment in fragments:
            if not fragment.name.endswith(FRAGMENT_SUFFIX):
                continue
            try:
                content = self._host.read_text(fragment)
            except OSError as e:
                logger.warning(f"Skipping unreadable fragment {fragment}: {e}")
                continue

            new_content = neutralize_fragment(content)
            if new_content == content:
                continue

            try:
                self._host.write_text(fragment, new_content)
            except OSError as e:
                raise WriteError(f"Cannot modify config file {fragment}: {e}", fragment) from e

            logger.info(f"Disabled password authentication in {fragment}")
            neutralized.append(fragment)
        return neutralized

    def reconcile(self) -> ReconcileReport:
        """
        Bring sshd_config and its override fragments in line with the directives.

        Returns:
            ReconcileReport describing the changes

        Raises:
            ReadError: sshd_config could not be read
            WriteError: sshd_config or an override fragment could not be written
        """
        content = self._read_document()
        new_lines, updated, appended = _merge_directives(content.split("\n"), self._directives)

        report = ReconcileReport(updated=updated, appended=appended)
        report.neutralized_fragments = self._neutralize_overrides()

        new_content = "\n".join(new_lines)
        if new_content != content:
            try:
                self._host.write_text(self._config_path, new_content)
            except OSError as e:
                raise WriteError(f"Cannot write {self._config_path}: {e}", self._config_path) from e
            report.document_changed = True
            logger.info(
                f"Updated {self._config_path} "
                f"(updated: {report.updated or '-'}, appended: {report.appended or '-'})"
            )
        else:
            logger.info(f"{self._config_path} already up to date")

        return report


def reconcile(
    document_path: Union[str, Path],
    override_dir: Union[str, Path],
    directives: Optional[Dict[str, str]] = None,
    host: Optional[LocalHost] = None,
) -> ReconcileReport:
    """Reconcile `document_path` and the fragments in `override_dir`. See SSHDConfigReconciler."""
    return SSHDConfigReconciler(document_path, override_dir, directives, host=host).reconcile()
