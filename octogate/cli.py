"""Operator commands for inspecting and exercising a GitHub App setup.

Credentials are read from the standard environment variables (see
:mod:`octogate.credentials`). No command ever prints secret material.
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

from octogate.credentials import AppCredential, build_credential
from octogate.errors import OctogateError, SignatureError
from octogate.events.envelope import parse_webhook
from octogate.github.client import GitHubAPIConfig
from octogate.github.installations import InstallationResolver
from octogate.runtime import WebhookServerConfig
from octogate.runtime import main as serve_main

__all__ = ["build_parser", "main"]


def _read_body(path: Path) -> bytes:
    return sys.stdin.buffer.read() if str(path) == "-" else path.read_bytes()


def _show_config(_args: argparse.Namespace) -> int:
    credential = build_credential()
    server = WebhookServerConfig.from_env()
    api = GitHubAPIConfig.from_env()
    print(credential)
    print(f"  client_id: {credential.client_id or '-'}")
    print(f"  signing key: {'yes' if credential.has_signing_key else 'no'}")
    print(f"  webhook secret: {'yes' if credential.has_webhook_secret else 'no'}")
    print(f"server {server.host}:{server.port} adapter={server.adapter}")
    print(f"  webhook path: {server.webhook_path}")
    print(f"  max body bytes: {server.max_body_bytes}")
    print(f"github api {api.base_url} (timeout {api.timeout_s}s)")
    return 0


def _sign(args: argparse.Namespace) -> int:
    credential = build_credential()
    print(credential.sign_payload(_read_body(args.file)))
    return 0


def _verify(args: argparse.Namespace) -> int:
    credential = build_credential()
    try:
        credential.check_signature(_read_body(args.file), args.signature)
    except SignatureError as exc:
        print(f"signature invalid: {exc}")
        return 1
    print("signature valid")
    return 0


def _parse(args: argparse.Namespace) -> int:
    envelope = parse_webhook(_read_body(args.file), event_name=args.event)
    print(f"event: {envelope.event_name}")
    print(f"installation: {envelope.installation_id or '-'}")
    return 0


async def _list_installations(credential: AppCredential) -> int:
    resolver = InstallationResolver(credential, GitHubAPIConfig.from_env())
    installations = await resolver.discover_installations()
    for installation in installations:
        print(
            f"{installation.id}\t{installation.account_login or '-'}"
            f"\t{installation.target_type or '-'}"
            f"\t{installation.repository_selection or '-'}"
        )
    print(f"{len(installations)} installation(s)")
    return 0


def _installations(_args: argparse.Namespace) -> int:
    return asyncio.run(_list_installations(build_credential()))


def _serve(_args: argparse.Namespace) -> int:
    serve_main()
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Return the ``octogate`` argument parser."""
    parser = argparse.ArgumentParser(prog="octogate", description=__doc__)
    commands = parser.add_subparsers(dest="command", required=True)

    show = commands.add_parser("show-config", help="Print the resolved configuration")
    show.set_defaults(func=_show_config)

    sign = commands.add_parser("sign", help="Print the webhook signature for a file")
    sign.add_argument("file", type=Path, help="Payload file, or '-' for stdin")
    sign.set_defaults(func=_sign)

    verify = commands.add_parser("verify", help="Check a webhook signature")
    verify.add_argument("file", type=Path, help="Payload file, or '-' for stdin")
    verify.add_argument("signature", help="X-Hub-Signature-256 header value")
    verify.set_defaults(func=_verify)

    parse = commands.add_parser("parse", help="Identify the event in a payload file")
    parse.add_argument("file", type=Path, help="Payload file, or '-' for stdin")
    parse.add_argument(
        "--event",
        default=None,
        help="X-GitHub-Event name to decode as, skipping shape detection",
    )
    parse.set_defaults(func=_parse)

    installations = commands.add_parser(
        "installations", help="List the App's installations"
    )
    installations.set_defaults(func=_installations)

    serve = commands.add_parser("serve", help="Run the webhook server")
    serve.set_defaults(func=_serve)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Run an ``octogate`` command.

    Parameters
    ----------
    argv : list[str] | None, optional
        Command-line arguments. ``None`` defaults to ``sys.argv``.

    Returns
    -------
    int
        Exit code: 0 on success, 1 on failure or an invalid signature.

    """
    args = build_parser().parse_args(argv)
    try:
        return args.func(args)
    except OctogateError as exc:
        print(f"octogate: {exc}", file=sys.stderr)
        return 1
    except OSError as exc:
        print(f"octogate: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
