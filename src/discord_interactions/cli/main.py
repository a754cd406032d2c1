"""discord-interactions CLI -- local tooling for interaction signatures.

Thin wrapper around the protocol and SDK modules using click.  Keys are
exchanged as hex, the same encoding the platform uses for public keys.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

import click

from discord_interactions.protocol.crypto import (
    deserialize_signing_key,
    generate_keypair,
    serialize_signing_key,
    serialize_verify_key,
    sign_interaction,
    verify_key,
)
from discord_interactions.sdk.probe import check_endpoint


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _error(msg: str) -> None:
    """Print an error message to stderr and exit 1."""
    click.echo(msg, err=True)
    raise SystemExit(1)


def _load_signing_key(private_key: str):
    try:
        return deserialize_signing_key(private_key)
    except ValueError as exc:
        _error(f"Invalid private key: {exc}")


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(package_name="discord-interactions")
def cli() -> None:
    """Sign, verify and probe Discord interaction requests."""


@cli.command()
def keygen() -> None:
    """Generate an Ed25519 keypair for local testing."""
    sk, vk = generate_keypair()
    click.echo(f"Public key:  {serialize_verify_key(vk)}")
    click.echo(f"Private key: {serialize_signing_key(sk)}")


@cli.command()
@click.argument("body_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--timestamp", "-t", required=True, help="X-Signature-Timestamp value.")
@click.option(
    "--private-key", "-k", required=True, envvar="DISCORD_PRIVATE_KEY",
    help="Hex signing key seed.",
)
def sign(body_file: Path, timestamp: str, private_key: str) -> None:
    """Print the X-Signature-Ed25519 value for BODY_FILE."""
    sk = _load_signing_key(private_key)
    click.echo(sign_interaction(body_file.read_bytes(), timestamp, sk))


@cli.command()
@click.argument("body_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--timestamp", "-t", required=True, help="X-Signature-Timestamp value.")
@click.option("--signature", "-s", required=True, help="X-Signature-Ed25519 value.")
@click.option(
    "--public-key", "-p", required=True, envvar="DISCORD_PUBLIC_KEY",
    help="Hex application public key.",
)
def verify(body_file: Path, timestamp: str, signature: str, public_key: str) -> None:
    """Check a signature over BODY_FILE exactly as the gate does."""
    if verify_key(body_file.read_bytes(), signature, timestamp, public_key):
        click.echo("valid")
    else:
        _error("invalid")


@cli.command("check-endpoint")
@click.argument("url")
@click.option(
    "--private-key", "-k", required=True, envvar="DISCORD_PRIVATE_KEY",
    help="Hex signing key whose public half the endpoint trusts.",
)
@click.option("--timeout", default=10.0, show_default=True, help="Request timeout (seconds).")
def check_endpoint_cmd(url: str, private_key: str, timeout: float) -> None:
    """Send a signed PING and a forged PING to URL and check both replies."""
    sk = _load_signing_key(private_key)
    result = asyncio.run(check_endpoint(url, sk, timeout=timeout))

    click.echo(f"PING answered with PONG:  {'yes' if result.ping_ok else 'no'}")
    click.echo(f"Bad signature rejected:   {'yes' if result.rejects_bad_signature else 'no'}")
    for err in result.errors:
        click.echo(f"  - {err}", err=True)
    if not result.ok:
        raise SystemExit(1)
