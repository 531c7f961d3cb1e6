"""Command-line interface for BlitzWare auth utilities.

Example:
    >>> # From terminal:
    >>> # blitzware-auth --version
    >>> # blitzware-auth discover [--base-url https://auth.example.com/api/auth]
    >>> # blitzware-auth inspect-token eyJhbGciOi...
    >>> # blitzware-auth check-config
"""

import asyncio
import json
import os
import time
from typing import Annotated, Optional

import typer

from blitzware_auth import __version__
from blitzware_auth.auth.discovery import DiscoveryResolver
from blitzware_auth.auth.jwt_inspector import is_expired_at, parse_exp, peek_claims
from blitzware_auth.config import (
    DEFAULT_BASE_URL,
    DEFAULT_HTTP_TIMEOUT_SECONDS,
    ENV_BASE_URL,
    AuthConfig,
)
from blitzware_auth.errors import ConfigurationError

app = typer.Typer(help="BlitzWare auth CLI.")


def _version_callback(value: bool) -> None:
    """Print the version and exit when requested."""
    if value:
        typer.echo(__version__)
        raise typer.Exit()


VERSION_OPTION = typer.Option(
    False,
    "--version",
    help="Show blitzware-auth version and exit.",
    callback=_version_callback,
    is_eager=True,
)


@app.callback()
def cli(version: bool = VERSION_OPTION) -> None:
    """BlitzWare auth CLI entrypoint."""


@app.command("discover")
def discover(
    base_url: Annotated[
        Optional[str],
        typer.Option(
            "--base-url",
            help=f"Authorization server base URL (default: ${ENV_BASE_URL} or {DEFAULT_BASE_URL}).",
        ),
    ] = None,
    timeout: Annotated[
        float,
        typer.Option("--timeout", min=0.1, help="HTTP timeout in seconds."),
    ] = DEFAULT_HTTP_TIMEOUT_SECONDS,
) -> None:
    """Resolve the discovery document and print it as JSON."""
    url = base_url or os.environ.get(ENV_BASE_URL) or DEFAULT_BASE_URL
    resolver = DiscoveryResolver(url, timeout=timeout)
    document = asyncio.run(resolver.resolve())
    typer.echo(document.model_dump_json(indent=2))


@app.command("inspect-token")
def inspect_token(
    token: Annotated[str, typer.Argument(help="Access token (compact JWT).")],
) -> None:
    """Print the unverified claims of a JWT and its local expiry status.

    The signature is NOT verified; use this for debugging only.
    """
    claims = peek_claims(token)
    if claims is None:
        typer.echo("Token is not a decodable JWT.", err=True)
        raise typer.Exit(1)

    exp = parse_exp(claims.get("exp"))
    report = {
        "claims": claims,
        "exp": exp,
        "expired": is_expired_at(exp, time.time()),
    }
    typer.echo(json.dumps(report, indent=2, default=str))


@app.command("check-config")
def check_config() -> None:
    """Validate BLITZWARE_* environment configuration."""
    try:
        config = AuthConfig.from_env()
    except ConfigurationError as exc:
        typer.echo("Configuration is invalid:", err=True)
        for problem in exc.problems:
            typer.echo(f"  - {problem}", err=True)
        raise typer.Exit(1) from exc

    typer.echo("Configuration OK")
    typer.echo(config.model_dump_json(indent=2))


def main() -> None:
    """Run the BlitzWare auth CLI."""
    app()


if __name__ == "__main__":
    main()
