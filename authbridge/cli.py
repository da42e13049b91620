"""Command-line authentication provider.

Reads a username and password, authenticates them with the configured backend
and prints the result in the format expected by Home Assistant's
``command_line`` auth provider::

    username = Jane Doe
    group = system-admin

Any failure exits non-zero with nothing on stdout.
"""

import argparse
import asyncio
import os
import sys
from typing import TextIO

import structlog

from .auth.facade import AuthenticationFacade
from .auth.models import LoginResult, Role
from .config import get_config_loader
from .errors import AuthBridgeError
from .logging import adjust_level, configure_logging, level_from_env

logger = structlog.get_logger()

EXIT_OK = 0
EXIT_FAILURE = 1

HOST_GROUPS = {
    Role.ADMIN: "system-admin",
    Role.USER: "system-users",
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="authbridge",
        description="Authenticate a user against an identity flow or an LDAP directory",
    )
    parser.add_argument(
        "username",
        nargs="?",
        default=os.getenv("username"),
        help="The username to login with (default: $username)",
    )
    parser.add_argument(
        "password",
        nargs="?",
        default=os.getenv("password"),
        help="The password to login with (default: $password)",
    )
    parser.add_argument(
        "-c",
        "--config-path",
        default=None,
        help="Path to the config file (default: $AUTHBRIDGE_CONFIG or config.toml)",
    )
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase log verbosity (repeatable)",
    )
    verbosity.add_argument(
        "-q", "--quiet", action="store_true", help="Only log critical errors"
    )
    return parser


def render(result: LoginResult, out: TextIO) -> None:
    """Write the success report for the host."""
    out.write(f"username = {result.display_name}\n")
    group = HOST_GROUPS.get(result.role)
    if group:
        out.write(f"group = {group}\n")


async def run(username: str, password: str, config_path: str | None) -> LoginResult | None:
    config = get_config_loader(config_path).load()
    facade = AuthenticationFacade.from_config(config)
    return await facade.login(username, password)


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the command-line provider."""
    args = build_parser().parse_args(argv)
    configure_logging(adjust_level(level_from_env(), args.verbose, args.quiet))

    if not args.username or args.password is None:
        logger.error("Username and password are required")
        return EXIT_FAILURE

    try:
        result = asyncio.run(run(args.username, args.password, args.config_path))
    except AuthBridgeError as e:
        logger.error(
            "Authentication attempt failed",
            username=args.username,
            error=str(e),
            error_type=type(e).__name__,
        )
        return EXIT_FAILURE

    if result is None:
        return EXIT_FAILURE

    render(result, sys.stdout)
    return EXIT_OK
