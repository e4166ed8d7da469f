"""Click CLI for running and inspecting the relay."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

import click

from polite_relay.audit.logger import validate_audit_chain
from polite_relay.conversation.messages import build_picker_message
from polite_relay.conversation.routing import normalize_text


@click.group()
@click.option("--log-level", default="INFO", help="Root logging level.")
def cli(log_level: str) -> None:
    """LINE politeness relay CLI."""
    logging.basicConfig(
        level=log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@cli.command()
@click.option("--host", default="0.0.0.0", help="Bind address.")
@click.option("--port", default=8000, type=int, help="Bind port.")
def serve(host: str, port: int) -> None:
    """Run the webhook server, configured from the environment."""
    import uvicorn

    uvicorn.run(
        "polite_relay.server.app:create_app_from_env",
        factory=True,
        host=host,
        port=port,
    )


@cli.command()
@click.argument("text")
def preview(text: str) -> None:
    """Print the register picker that TEXT would produce."""
    message = build_picker_message(normalize_text(text))
    click.echo(json.dumps(message.to_payload(), ensure_ascii=False, indent=2))


@cli.command("verify-audit")
@click.argument("log_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def verify_audit(log_path: Path) -> None:
    """Validate the hash chain of an audit log."""
    result = validate_audit_chain(log_path)
    if result.valid:
        click.echo("Audit chain intact")
        return
    click.echo(f"Audit chain broken at line {result.broken_at_line}", err=True)
    sys.exit(1)


if __name__ == "__main__":
    cli()
