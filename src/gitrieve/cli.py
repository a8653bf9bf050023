"""CLI for gitrieve."""

import asyncio
import sys
from contextlib import contextmanager
from typing import Iterator

import click
import structlog

from gitrieve.config.logging import configure_logging

logger = structlog.get_logger(__name__)


@contextmanager
def _service(ctx: click.Context) -> Iterator:
    """Build a sync service from the CLI context, closing the API client after."""
    from gitrieve.config import get_settings, load_config
    from gitrieve.core.exceptions import ConfigurationError
    from gitrieve.remote.github import GitHubClient
    from gitrieve.services.sync import SyncService

    settings = get_settings()
    config_path = ctx.obj.get("config_path") or settings.config_path
    try:
        config = load_config(config_path, github_token=settings.github_token)
    except ConfigurationError as e:
        click.echo(f"Error: {e.message}", err=True)
        sys.exit(1)

    client = GitHubClient(
        token=config.github_token,
        api_url=settings.github_api_url,
        graphql_url=settings.github_graphql_url,
        timeout=settings.http_timeout,
        page_size=settings.page_size,
        graphql_page_size=settings.graphql_page_size,
    )
    try:
        yield SyncService(config=config, client=client, work_dir=settings.work_dir), config
    finally:
        client.close()


def _run_kind(ctx: click.Context, kind_value: str, name: str, storage: str) -> None:
    from gitrieve.services.sync import SyncKind

    with _service(ctx) as (service, _):
        results = service.run(SyncKind(kind_value), name=name, storage_name=storage)
    failed = [repo for repo, ok in results.items() if not ok]
    click.echo(f"Done: {len(results) - len(failed)} succeeded, {len(failed)} failed")
    if failed:
        for repo in failed:
            click.echo(f"  - {repo}", err=True)


_name_argument = click.argument("name", default="")
_storage_option = click.option(
    "--storage", "-s", default="", help="Storage to use (default: the repository's storages)"
)


@click.group()
@click.option("--config", "-c", "config_path", default=None, help="Config file path")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.pass_context
def cli(ctx: click.Context, config_path: str | None, verbose: bool) -> None:
    """gitrieve: back up git repositories, issues, discussions and releases."""
    from gitrieve.config import get_settings

    settings = get_settings()
    log_level = "DEBUG" if verbose else settings.log_level
    configure_logging(log_level=log_level, json_logs=settings.json_logs)
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


@cli.command()
@_name_argument
@_storage_option
@click.pass_context
def code(ctx: click.Context, name: str, storage: str) -> None:
    """Sync the code of NAME (all repositories if omitted)."""
    _run_kind(ctx, "code", name, storage)


@cli.command()
@_name_argument
@_storage_option
@click.pass_context
def release(ctx: click.Context, name: str, storage: str) -> None:
    """Download release assets within the retention window and evict the rest."""
    _run_kind(ctx, "releases", name, storage)


@cli.command()
@_name_argument
@_storage_option
@click.pass_context
def issue(ctx: click.Context, name: str, storage: str) -> None:
    """Download issues updated since the last run."""
    _run_kind(ctx, "issues", name, storage)


@cli.command()
@_name_argument
@_storage_option
@click.pass_context
def wiki(ctx: click.Context, name: str, storage: str) -> None:
    """Sync the wiki repository."""
    _run_kind(ctx, "wiki", name, storage)


@cli.command()
@_name_argument
@_storage_option
@click.pass_context
def discussion(ctx: click.Context, name: str, storage: str) -> None:
    """Download discussions updated since the last run."""
    _run_kind(ctx, "discussions", name, storage)


@cli.command()
@_name_argument
@_storage_option
@click.pass_context
def rip(ctx: click.Context, name: str, storage: str) -> None:
    """Dump the full repository into a timestamped archive."""
    _run_kind(ctx, "dump", name, storage)


@cli.command()
@click.pass_context
def daemon(ctx: click.Context) -> None:
    """Run every repository on its cron schedule."""
    from gitrieve.scheduler import Daemon

    with _service(ctx) as (service, config):
        try:
            asyncio.run(Daemon(service, config.concurrency_num).run())
        except KeyboardInterrupt:
            click.echo("Daemon stopped")


if __name__ == "__main__":
    cli()
