"""
kick command line.

Usage:
    kick ssh                 # prompt for a public key
    kick ssh --key "ssh-ed25519 AAAA... me@laptop"
    kick --version
"""

import argparse
import logging
import sys
from typing import List, Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.theme import Theme

from . import __version__
from .config import get_settings
from .errors import RestartError, ValidationError
from .host import LocalHost, has_elevated_privilege
from .ssh import SSHSetupManager, validate_public_key

kick_theme = Theme(
    {
        "info": "cyan",
        "warning": "yellow",
        "danger": "bold red",
        "success": "bold green",
    }
)
console = Console(theme=kick_theme)

KEY_PROMPT = "Enter your public key (text starting with ssh-rsa):"


def version_string() -> str:
    settings = get_settings()
    return f"{__version__} (commit: {settings.build_commit}, built at: {settings.build_date})"


def prompt_for_key(console: Console, max_length: int) -> Optional[str]:
    """
    Ask for a public key until an acceptable one is entered.

    Returns:
        The trimmed key, or None if the operator cancelled (Ctrl-C / EOF)
    """
    console.print(f"[info]{KEY_PROMPT}[/info]")
    console.print("[info]Press Enter to continue, Ctrl-C to cancel[/info]")
    while True:
        try:
            raw = console.input("> ")
        except (KeyboardInterrupt, EOFError):
            console.print()
            return None

        candidate = raw.strip()
        if not candidate:
            continue
        if len(candidate) > max_length:
            console.print(f"[danger]Error: public key is longer than {max_length} characters[/danger]")
            continue
        try:
            return validate_public_key(candidate)
        except ValidationError as e:
            console.print(f"[danger]Error: {escape(str(e))}[/danger]")


def cmd_ssh(args, console: Console = console, host: Optional[LocalHost] = None) -> int:
    """Configure key-based SSH authentication"""
    settings = get_settings()
    host = host or LocalHost()

    if not has_elevated_privilege(host):
        console.print("[danger]This command requires root privileges, please run it with sudo[/danger]")
        return 1

    if args.key is not None:
        public_key = args.key.strip()
        if len(public_key) > settings.max_key_length:
            console.print(f"[danger]Error: public key is longer than {settings.max_key_length} characters[/danger]")
            return 1
    else:
        public_key = prompt_for_key(console, settings.max_key_length)
        if public_key is None:
            console.print("[warning]SSH configuration was not completed[/warning]")
            return 1

    manager = SSHSetupManager(settings=settings, host=host)
    manager.set_progress_callback(lambda message: console.print(f"[info]{message}[/info]"))
    results = manager.run_full_setup(public_key)

    if not results["success"]:
        console.print(f"[danger]Error: {escape(results['error'])}[/danger]")
        if results.get("error_type") == RestartError.__name__:
            console.print(
                "[warning]Configuration and key changes were saved. "
                "Restart the SSH service manually to apply them.[/warning]"
            )
        return 1

    console.print(Panel.fit("[success]SSH configuration completed successfully![/success]"))
    console.print(
        "[warning]Important: password authentication is now disabled. "
        "Before rebooting, make sure you can log in with your key "
        "to avoid being locked out of the system.[/warning]"
    )
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="kick",
        description="kick - automate common server setup tasks, including SSH setup",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    sudo kick ssh
    sudo kick ssh --key "ssh-ed25519 AAAA... me@laptop"
        """
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"kick {version_string()}"
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging for verbose output"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    ssh_parser = subparsers.add_parser(
        "ssh",
        help="Configure key-based SSH authentication",
        description="Configure the SSH server for key-based authentication and disable password logins."
    )
    ssh_parser.add_argument(
        "--key", "-k",
        metavar="PUBLIC_KEY",
        help="Public key to authorize (skips the interactive prompt)"
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for kick"""
    parser = build_parser()
    args = parser.parse_args(argv)

    level = logging.DEBUG if args.debug else getattr(logging, get_settings().log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    if args.command == "ssh":
        return cmd_ssh(args)

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
