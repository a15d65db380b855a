"""CLI for issuing orchestrated requests."""

import asyncio
import json
import logging
import sys
import uuid
from dataclasses import dataclass
from typing import Any

import click

from src.net.client import NetClient
from src.net.config import NetConfig, TimeoutConfig
from src.net.errors import NetError
from src.net.models import RequestOptions, ResultEnvelope
from src.observability.logging import (
    bind_request_context,
    clear_request_context,
    configure_logging,
    get_logger,
)
from src.settings.app import get_settings


logger = get_logger(__name__)

COMPONENT_CLI = "cli"


@dataclass
class CommandOptions:
    """Options shared by the request commands."""

    timeout: float | None
    prefix: str | None
    retries: int
    raw: bool
    throw: bool
    verbose: bool
    json_logs: bool | None


def log_notification(reason: str, args: Any) -> None:
    """Notification callback that writes lifecycle events to the log."""
    fields: dict[str, Any] = {"reason": reason}
    if isinstance(args, ResultEnvelope):
        fields["message"] = args.message
        fields["error"] = args.error
    logger.info("notification", component=COMPONENT_CLI, **fields)


def make_client(config: NetConfig) -> NetClient:
    """Create the client used by the commands."""
    return NetClient(config, notify=log_notification)


def _build_config(options: CommandOptions) -> NetConfig:
    base = NetConfig.from_settings()
    update: dict[str, Any] = {}
    if options.timeout is not None:
        update["timeouts"] = TimeoutConfig(http=options.timeout)
    if options.prefix is not None:
        update["prefix"] = options.prefix
    return base.model_copy(update=update) if update else base


def _to_json(result: Any) -> str:
    if isinstance(result, ResultEnvelope):
        result = result.model_dump()
    if isinstance(result, str):
        return result
    return json.dumps(result, indent=2, default=str)


async def _request(
    method: str,
    url: str,
    body: Any,
    options: CommandOptions,
) -> Any:
    config = _build_config(options)
    request_options = RequestOptions(
        method=method,
        body=body,
        retries=options.retries,
        raw=options.raw,
        throw=options.throw,
        log=options.verbose or None,
    )
    async with make_client(config) as client:
        return await client.fetch(url, request_options)


def _execute(method: str, url: str, body: Any, options: CommandOptions) -> None:
    json_logs = options.json_logs
    if json_logs is None:
        json_logs = get_settings().json_logs
    configure_logging(
        level=logging.DEBUG if options.verbose else logging.WARNING,
        json_format=json_logs,
    )
    bind_request_context(uuid.uuid4().hex[:12])
    try:
        result = asyncio.run(_request(method, url, body, options))
    except NetError as e:
        click.echo(f"Error: {e.message} (status {e.status})", err=True)
        sys.exit(1)
    finally:
        clear_request_context()
    click.echo(_to_json(result))


def _common_options(func: Any) -> Any:
    decorators = [
        click.option(
            "--timeout", type=float, default=None, help="Deadline in seconds."
        ),
        click.option("--prefix", default=None, help="Prefix for relative URLs."),
        click.option("--retries", type=int, default=1, show_default=True),
        click.option("--raw", is_flag=True, help="Print the full result envelope."),
        click.option(
            "--throw/--no-throw",
            default=True,
            help="Exit non-zero on request errors.",
        ),
        click.option("--verbose", "-v", is_flag=True, help="Trace requests."),
        click.option(
            "--json-logs/--console-logs",
            "json_logs",
            default=None,
            help="Log format (default from NET_JSON_LOGS).",
        ),
    ]
    for decorator in reversed(decorators):
        func = decorator(func)
    return func


@click.group()
@click.version_option(version="0.1.0")
def cli() -> None:
    """Orchestrated HTTP requests with deadlines and retries."""


@cli.command()
@click.argument("url")
@_common_options
def get(url: str, **kwargs: Any) -> None:
    """Issue a GET request to URL."""
    _execute("GET", url, None, CommandOptions(**kwargs))


@cli.command()
@click.argument("url")
@click.option("--body", default=None, help="JSON request body.")
@_common_options
def post(url: str, body: str | None, **kwargs: Any) -> None:
    """Issue a POST request to URL."""
    payload: Any = None
    if body is not None:
        try:
            payload = json.loads(body)
        except ValueError as e:
            click.echo(f"Error: --body is not valid JSON: {e}", err=True)
            sys.exit(2)
    _execute("POST", url, payload, CommandOptions(**kwargs))


if __name__ == "__main__":
    cli()
