#!/usr/bin/env python3
from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from datetime import datetime

from .browser import ConsoleBrowser
from .errors import ConfigError
from .models import ClientConfig, OperationResult, TokenResponse
from .oauth import OAuth2Client


def build_config(args: argparse.Namespace) -> ClientConfig:
    return ClientConfig.from_env(
        client_id=args.client_id,
        client_secret=args.client_secret,
        authorization_url=args.authorization_url,
        token_url=args.token_url,
        redirect_uri=args.redirect_uri,
        scopes=args.scopes,
        revocation_url=args.revocation_url,
        use_pkce=False if args.no_pkce else None,
        timeout=args.timeout,
    )


def print_token(token: TokenResponse) -> None:
    print(json.dumps(token.to_dict(), indent=2))
    print(f"Token expires: {datetime.fromtimestamp(token.expires_at)}", file=sys.stderr)


def report(result: OperationResult) -> int:
    if result.success and result.token:
        print_token(result.token)
        return 0
    print(f"\033[31m{result.error}: {result.error_description}\033[0m", file=sys.stderr)
    return 1


def cmd_url(config: ClientConfig) -> int:
    async def run() -> int:
        async with OAuth2Client(config) as client:
            request = client.start_authorization()
        print(request.auth_url)
        print(f"state: {request.state}", file=sys.stderr)
        if request.code_verifier:
            print(f"code_verifier: {request.code_verifier}", file=sys.stderr)
        return 0

    return asyncio.run(run())


def cmd_login(config: ClientConfig) -> int:
    print("Starting OAuth flow...\n", file=sys.stderr)

    async def run() -> int:
        async with OAuth2Client(config, browser=ConsoleBrowser()) as client:
            return report(await client.authenticate())

    return asyncio.run(run())


def cmd_refresh(config: ClientConfig, refresh_token: str) -> int:
    async def run() -> int:
        async with OAuth2Client(config) as client:
            # Expired placeholder: only the refresh token is needed.
            client.set_token(TokenResponse(access_token="", refresh_token=refresh_token))
            return report(await client.refresh())

    return asyncio.run(run())


def cmd_revoke(config: ClientConfig, token: str) -> int:
    async def run() -> int:
        async with OAuth2Client(config) as client:
            return 0 if await client.revoke(token) else 1

    code = asyncio.run(run())
    print("Token revoked." if code == 0 else "Revocation failed.", file=sys.stderr)
    return code


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        description="OAuth 2.0 Authorization Code client",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Settings not given as flags are read from OAUTH2_* environment variables
(OAUTH2_CLIENT_ID, OAUTH2_TOKEN_URL, ...).

Examples:
  oauth2-client url
  oauth2-client login --scopes "openid profile"
  oauth2-client refresh --refresh-token R1
  oauth2-client revoke --token T1
""",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--client-id")
    parser.add_argument("--client-secret")
    parser.add_argument("--authorization-url")
    parser.add_argument("--token-url")
    parser.add_argument("--redirect-uri")
    parser.add_argument("--scopes", help="Space-delimited scopes")
    parser.add_argument("--revocation-url")
    parser.add_argument("--no-pkce", action="store_true", help="Disable PKCE")
    parser.add_argument("--timeout", type=float, help="Request timeout in seconds")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("url", help="Print an authorization URL with fresh state and PKCE values")
    subparsers.add_parser("login", help="Run the interactive authorization code flow")

    refresh_parser = subparsers.add_parser("refresh", help="Exchange a refresh token for a new token")
    refresh_parser.add_argument("--refresh-token", required=True)

    revoke_parser = subparsers.add_parser("revoke", help="Revoke a token")
    revoke_parser.add_argument("--token", required=True)

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if not args.command:
        parser.print_help()
        return

    try:
        config = build_config(args)
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(2)

    if args.command == "url":
        code = cmd_url(config)
    elif args.command == "login":
        code = cmd_login(config)
    elif args.command == "refresh":
        code = cmd_refresh(config, args.refresh_token)
    else:
        code = cmd_revoke(config, args.token)

    sys.exit(code)


if __name__ == "__main__":
    main()
