"""SocialFort CLI — inspect providers and start a login from the shell."""

import argparse
import logging
import sys

from socialfort.errors import SocialAuthError


def main(argv: list[str] | None = None) -> None:
    """Entry point for the ``socialfort`` console script."""
    parser = argparse.ArgumentParser(prog="socialfort", description="SocialFort CLI")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log provider requests")
    sub = parser.add_subparsers(dest="command")

    sub.add_parser("providers", help="List built-in providers")

    authorize_cmd = sub.add_parser(
        "authorize-url",
        help="Print an authorization URL for a provider configured via SOCIALFORT_* variables",
    )
    authorize_cmd.add_argument("provider", help='Provider name (e.g. "vkontakte")')

    args = parser.parse_args(argv)
    if args.command is None:
        parser.print_help()
        sys.exit(1)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        if args.command == "providers":
            _providers()
        elif args.command == "authorize-url":
            _authorize_url(args.provider)
    except SocialAuthError as e:
        print(f"error: {e.message} ({e.code})", file=sys.stderr)
        sys.exit(2)


def _providers() -> None:
    from socialfort.registry import PROVIDERS

    for name, profile in sorted(PROVIDERS.items()):
        print(f"{name}\t{profile.protocol.value}\t{profile.authorize_url}")


def _authorize_url(provider: str) -> None:
    """Start a login and print what the caller must keep for the callback."""
    from socialfort.core.tokens import TokenShape, encode_token
    from socialfort.registry import config_from_env, create_flow

    flow = create_flow(provider, config_from_env(provider))
    pending = flow.begin()
    print(pending.url)
    if pending.state is not None:
        print(f"state: {pending.state}")
    if pending.request_token is not None:
        print(f"request_token: {encode_token(pending.request_token, TokenShape.URLENCODED)}")
