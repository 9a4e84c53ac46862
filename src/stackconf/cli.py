"""CLI for stackconf - per-stack project configuration with encrypted secrets."""

import argparse
import getpass
import logging
import sys
from pathlib import Path

from rich.console import Console
from rich.markup import escape

from . import __version__
from .configuration import (
    delete_config,
    get_config,
    get_symmetric_crypter,
    get_symmetric_decrypter,
    list_config,
    set_config,
)
from .display import format_table
from .errors import StackconfError
from .keys import parse_key, pretty_key
from .log import setup_logging
from .project import Project, init_project
from .settings import PROJECT_FILE_NAME, get_log_level, get_project_file_override
from .values import Value
from .workspace import get_current_stack, select_stack

console = Console()
err_console = Console(stderr=True)

logger = logging.getLogger(__name__)


def _error(e: Exception) -> int:
    err_console.print(f"[red]Error:[/red] {escape(str(e))}")
    return 1


def _read_passphrase(confirm: bool) -> str:
    passphrase = getpass.getpass("Enter passphrase (hidden): ")

    if confirm:
        # New salt: every later secret depends on this passphrase
        if passphrase != getpass.getpass("Confirm passphrase (hidden): "):
            raise StackconfError("Passphrases don't match")

    return passphrase


def _decrypter_factory(project: Project):
    return lambda: get_symmetric_decrypter(project.store, _read_passphrase)


def _key(project: Project, raw: str):
    return parse_key(raw, lambda: project.store.name)


def cmd_init(args):
    """Create a new project file."""
    try:
        path = args.file or get_project_file_override() or Path.cwd() / PROJECT_FILE_NAME
        name = args.name or path.resolve().parent.name

        store = init_project(path, name, force=args.force)
        console.print(f"[green]Initialized:[/green] {store.name} ({path})")
        console.print("[dim]Add values with: stackconf config text <key> <value>[/dim]")
        return 0

    except StackconfError as e:
        return _error(e)


def cmd_config_ls(args):
    """
    List the effective configuration for a stack, or print one value.

    Secrets are blinded unless --show-secrets is given. A single key is
    always printed decrypted, for use in scripts.
    """
    project = Project(args.file)
    try:
        stack = args.stack or get_current_stack(project.path)

        if args.key:
            key = _key(project, args.key)
            value = get_config(project.store, stack, key, _decrypter_factory(project))
            # Raw value for piping
            print(value)
            return 0

        rows = list_config(project.store, stack, args.show_secrets, _decrypter_factory(project))
        if not rows:
            console.print("[dim]No configuration values set.[/dim]")
            return 0

        for line in format_table(rows):
            print(line)
        return 0

    except StackconfError as e:
        return _error(e)


def cmd_config_rm(args):
    """Remove a configuration value."""
    project = Project(args.file)
    try:
        key = _key(project, args.key)
        delete_config(project.store, args.stack, key, project.save)
        console.print(f"[green]Removed:[/green] {escape(pretty_key(str(key), project.store.name))}")
        return 0

    except StackconfError as e:
        return _error(e)


def cmd_config_text(args):
    """Set a plaintext configuration value."""
    project = Project(args.file)
    try:
        key = _key(project, args.key)
        set_config(project.store, args.stack, key, Value.plain(args.value), project.save)
        console.print(f"[green]Set:[/green] {escape(pretty_key(str(key), project.store.name))}")
        return 0

    except StackconfError as e:
        return _error(e)


def cmd_config_secret(args):
    """
    Set an encrypted configuration value.

    The value is read from:
    1. the positional argument (visible in shell history)
    2. an interactive hidden prompt (recommended)
    """
    project = Project(args.file)
    try:
        key = _key(project, args.key)
        crypter = get_symmetric_crypter(project.store, project.save, _read_passphrase)

        if args.value is not None:
            value = args.value
        else:
            console.print(f"[cyan]Setting secret:[/cyan] {escape(pretty_key(str(key), project.store.name))}")
            value = getpass.getpass("value: ")

        set_config(project.store, args.stack, key, Value.encrypted(crypter.encrypt(value)), project.save)
        console.print(f"[green]Set secret:[/green] {escape(pretty_key(str(key), project.store.name))}")
        return 0

    except StackconfError as e:
        return _error(e)


def cmd_stack_ls(args):
    """List the project's stacks, marking the current one."""
    project = Project(args.file)
    try:
        current = get_current_stack(project.path)
        stacks = sorted(project.store.stacks or {})

        if not stacks:
            console.print("[dim]No stacks configured.[/dim]")
            return 0

        for name in stacks:
            marker = "*" if name == current else " "
            print(f"{marker} {name}")
        return 0

    except StackconfError as e:
        return _error(e)


def cmd_stack_select(args):
    """Select the stack that `config ls` uses by default."""
    project = Project(args.file)
    try:
        if args.stack not in (project.store.stacks or {}):
            console.print(f"[yellow]Warning:[/yellow] Stack '{escape(args.stack)}' has no configuration yet")

        select_stack(project.path, args.stack)
        console.print(f"[green]Selected:[/green] {escape(args.stack)}")
        return 0

    except StackconfError as e:
        return _error(e)


def _add_stack_flag(parser):
    parser.add_argument(
        "-s", "--stack", default="",
        help="Target a specific stack instead of the project-wide configuration",
    )


def build_parser():
    parser = argparse.ArgumentParser(
        prog="stackconf",
        description="Per-stack project configuration with encrypted secrets",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  stackconf init --name myproject       # Create Stackconf.yaml
  stackconf config text region us-east  # Project-wide value
  stackconf config text region eu-west -s prod
  stackconf config secret token         # Encrypted, hidden input
  stackconf config ls -s prod           # Effective config, secrets blinded
  stackconf config ls token             # Single decrypted value

Environment:
  STACKCONF_PROJECT_FILE   Use this project file instead of searching
  STACKCONF_PASSPHRASE     Passphrase for secrets (otherwise prompted)
  STACKCONF_STACK          Default stack for 'config ls'
  STACKCONF_LOG_LEVEL      Log level (default: WARNING)
        """
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-f", "--file", type=Path, help=f"Project file (default: nearest {PROJECT_FILE_NAME})")
    parser.add_argument("-v", "--verbose", action="store_true", help="Show debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # init
    init_parser = subparsers.add_parser("init", help="Create a project file")
    init_parser.add_argument("--name", help="Project name (default: directory name)")
    init_parser.add_argument("--force", action="store_true", help="Overwrite existing file")

    # config
    config_parser = subparsers.add_parser("config", help="Manage configuration")
    config_sub = config_parser.add_subparsers(dest="config_command", help="Config commands")

    ls_parser = config_sub.add_parser("ls", help="List configuration for a stack")
    ls_parser.add_argument("key", nargs="?", help="Print only this key's value")
    _add_stack_flag(ls_parser)
    ls_parser.add_argument(
        "--show-secrets", action="store_true",
        help="Show secret values when listing config instead of displaying blinded values",
    )

    rm_parser = config_sub.add_parser("rm", help="Remove configuration value")
    rm_parser.add_argument("key", help="Configuration key")
    _add_stack_flag(rm_parser)

    text_parser = config_sub.add_parser("text", help="Set configuration value")
    text_parser.add_argument("key", help="Configuration key")
    text_parser.add_argument("value", help="Value")
    _add_stack_flag(text_parser)

    secret_parser = config_sub.add_parser("secret", help="Set an encrypted configuration value")
    secret_parser.add_argument("key", help="Configuration key")
    secret_parser.add_argument("value", nargs="?", help="Value (NOT recommended - visible in history)")
    _add_stack_flag(secret_parser)

    # stack
    stack_parser = subparsers.add_parser("stack", help="Manage stack selection")
    stack_sub = stack_parser.add_subparsers(dest="stack_command", help="Stack commands")
    stack_sub.add_parser("ls", help="List stacks")
    select_parser = stack_sub.add_parser("select", help="Select the current stack")
    select_parser.add_argument("stack", help="Stack name")

    return parser, config_parser, stack_parser


def main(argv=None):
    """Main entry point."""
    parser, config_parser, stack_parser = build_parser()
    args = parser.parse_args(argv)

    # Handle file path
    if args.file:
        args.file = Path(args.file).expanduser()

    setup_logging(get_log_level(args.verbose), err_console)

    if not args.command:
        parser.print_help()
        return 0

    logger.debug("Running %s command", args.command)

    if args.command == "init":
        return cmd_init(args)
    elif args.command == "config":
        if args.config_command == "ls":
            return cmd_config_ls(args)
        elif args.config_command == "rm":
            return cmd_config_rm(args)
        elif args.config_command == "text":
            return cmd_config_text(args)
        elif args.config_command == "secret":
            return cmd_config_secret(args)
        config_parser.print_help()
    elif args.command == "stack":
        if args.stack_command == "ls":
            return cmd_stack_ls(args)
        elif args.stack_command == "select":
            return cmd_stack_select(args)
        stack_parser.print_help()

    return 0


if __name__ == "__main__":
    sys.exit(main())
