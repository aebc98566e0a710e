"""Command-line interface for Crewboard.

This module provides the commands for viewing, adding, editing and
archiving crew department records, using the chat stream, and running
the polling dashboard in a terminal.
"""

import asyncio
from typing import Any, Awaitable, Callable, NoReturn

import click

from crewboard import __version__
from crewboard.application.dashboard_app import ActionResult, DashboardApp
from crewboard.application.views.table_view import TableRender
from crewboard.application.views.view_state import ChatRender, ViewError
from crewboard.core.config import Settings, get_settings
from crewboard.core.events import DashboardEvent
from crewboard.core.logging import configure_logging, get_logger
from crewboard.domain.services.dashboard_summarizer import SummaryView
from crewboard.domain.services.schema_registry import SchemaRegistry

EXIT_FAILED = 1
EXIT_NEEDS_RECONCILIATION = 2


def _parse_fields(
    ctx: click.Context, param: click.Parameter, values: tuple[str, ...]
) -> dict[str, str]:
    """Turn repeated NAME=VALUE options into a dict. Names may contain spaces."""
    fields: dict[str, str] = {}
    for item in values:
        name, sep, value = item.partition("=")
        if not sep or not name.strip():
            raise click.BadParameter(f"Expected NAME=VALUE, got {item!r}")
        fields[name.strip()] = value
    return fields


field_option = click.option(
    "-f",
    "--field",
    "fields",
    multiple=True,
    callback=_parse_fields,
    metavar="NAME=VALUE",
    help="Field value, repeatable (e.g. -f Title=Drill -f Date=2024-02-01)",
)


@click.group()
@click.version_option(version=__version__, prog_name="Crewboard")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]),
    default=None,
    help="Set log level (overrides CREWBOARD_LOG_LEVEL)",
)
@click.option("--username", envvar="CREWBOARD_USERNAME", default=None, help="Log in as this user")
@click.option(
    "--password", envvar="CREWBOARD_PASSWORD", default=None, help="Password for --username"
)
@click.pass_context
def cli(
    ctx: click.Context, log_level: str | None, username: str | None, password: str | None
) -> None:
    """Crewboard - crew department dashboard.

    Reads and writes the crew joining, arrival, update, memo, training and
    P&I collections of the record store configured by CREWBOARD_STORE_URL.
    """
    ctx.ensure_object(dict)
    ctx.obj.update(log_level=log_level, username=username, password=password)


def _load_settings(ctx: click.Context) -> Settings:
    settings = get_settings()
    log_level = ctx.obj.get("log_level")
    if log_level:
        settings = settings.model_copy(update={"log_level": log_level})
    configure_logging(settings)
    return settings


def _report(result: ActionResult) -> int:
    """Print an action outcome and return the exit code for it."""
    if result.success:
        click.echo(result.message)
        return 0
    click.echo(f"Error: {result.message}", err=True)
    return EXIT_NEEDS_RECONCILIATION if result.needs_reconciliation else EXIT_FAILED


def _run(
    ctx: click.Context,
    body: Callable[[DashboardApp], Awaitable[int]],
    confirm: Callable[[str], bool] | None = None,
) -> None:
    """Run ``body`` against a fresh DashboardApp, logging in first if asked."""
    settings = _load_settings(ctx)
    username = ctx.obj.get("username")
    password = ctx.obj.get("password")

    async def runner() -> int:
        async with DashboardApp(settings, confirm=confirm) as app:
            if username:
                login = await app.login(username, password or "")
                if not login.success:
                    return _report(login)
            return await body(app)

    exit_code = asyncio.run(runner())
    if exit_code:
        raise SystemExit(exit_code)


def _format_summary(summary: SummaryView | ViewError) -> str:
    if isinstance(summary, ViewError):
        return f"== {summary.entity_type} ==\nError: {summary.message}"
    lines = [f"== {summary.label} ({summary.total}) =="]
    if summary.is_empty:
        lines.append("No records yet")
    for item in summary.items:
        lines.append(f"{item.date or '-':<10}  {item.title}")
    return "\n".join(lines)


def _format_table(render: TableRender | ViewError | None) -> str:
    if render is None:
        return "Not loaded"
    if isinstance(render, ViewError):
        return f"== {render.entity_type} ==\nFailed to load: {render.message}"
    return render.as_text()


def _format_chat(render: ChatRender | ViewError | None) -> str:
    if render is None:
        return "Not loaded"
    if isinstance(render, ViewError):
        return f"Failed to load chat: {render.message}"
    return render.as_text()


@cli.command()
def entities() -> None:
    """List the record collections and their fields."""
    settings = get_settings()
    registry = SchemaRegistry(archive_prefix=settings.archive_prefix)
    for schema in registry:
        fields = ", ".join(
            f"{spec.name}{'*' if spec.required else ''} ({spec.kind.value})"
            for spec in schema.fields
        )
        click.echo(f"{schema.name:<12} {schema.label:<16} {fields}")


@cli.command()
@click.argument("entity")
@click.pass_context
def show(ctx: click.Context, entity: str) -> None:
    """Show one collection as a table, newest first."""

    async def body(app: DashboardApp) -> int:
        result = await app.open_view(entity)
        if not result.success:
            return _report(result)
        click.echo(_format_table(app.view_state.tables.get(entity)))
        return 0 if isinstance(app.view_state.tables.get(entity), TableRender) else EXIT_FAILED

    _run(ctx, body)


@cli.command()
@click.pass_context
def dashboard(ctx: click.Context) -> None:
    """Show the most recent records of every collection."""

    async def body(app: DashboardApp) -> int:
        result = await app.refresh()
        if not result.success:
            return _report(result)
        for entity_type in app.session.visible_entity_types():
            summary = app.view_state.summaries.get(entity_type)
            if summary is not None:
                click.echo(_format_summary(summary))
                click.echo("")
        return 0 if result.value.ok else EXIT_FAILED

    _run(ctx, body)


@cli.command()
@click.argument("entity")
@field_option
@click.pass_context
def add(ctx: click.Context, entity: str, fields: dict[str, str]) -> None:
    """Add a record to a collection."""

    async def body(app: DashboardApp) -> int:
        return _report(await app.add_record(entity, fields))

    _run(ctx, body)


@cli.command()
@click.argument("entity")
@click.argument("record_id")
@field_option
@click.pass_context
def edit(ctx: click.Context, entity: str, record_id: str, fields: dict[str, str]) -> None:
    """Change fields of one record. Fields not given keep their value."""

    async def body(app: DashboardApp) -> int:
        opened = await app.open_edit(entity, record_id)
        if not opened.success:
            return _report(opened)
        return _report(await app.submit_edit(fields))

    _run(ctx, body)


@cli.command()
@click.argument("entity")
@click.argument("record_id")
@click.option("--yes", is_flag=True, help="Skip the confirmation prompt")
@click.pass_context
def archive(ctx: click.Context, entity: str, record_id: str, yes: bool) -> None:
    """Move a record to its archive collection."""

    def confirm(message: str) -> bool:
        return yes or click.confirm(message, default=False)

    async def body(app: DashboardApp) -> int:
        return _report(await app.archive_record(entity, record_id))

    _run(ctx, body, confirm=confirm)


@cli.group()
def chat() -> None:
    """Read and post to the chat stream."""


@chat.command("list")
@click.pass_context
def chat_list(ctx: click.Context) -> None:
    """Show the chat stream, newest first."""

    async def body(app: DashboardApp) -> int:
        result = await app.refresh_chat()
        if not result.success:
            return _report(result)
        click.echo(_format_chat(result.value))
        return 0

    _run(ctx, body)


@chat.command("post")
@click.argument("text")
@click.option("--author", default=None, help="Display name (defaults to the logged-in user)")
@click.pass_context
def chat_post(ctx: click.Context, text: str, author: str | None) -> None:
    """Post a message to the chat stream."""

    async def body(app: DashboardApp) -> int:
        result = await app.post_message(text, author=author)
        exit_code = _report(result)
        if result.success:
            click.echo(_format_chat(app.view_state.chat))
        return exit_code

    _run(ctx, body)


@cli.command()
@click.option(
    "--interval-ms",
    type=click.IntRange(min=1000),
    default=None,
    help="Polling interval in ms, at least 1000 (overrides config)",
)
@click.option("--view", "views", multiple=True, help="Collection table to keep open, repeatable")
@click.option("--ticks", type=int, default=None, help="Stop after this many refresh ticks")
@click.pass_context
def watch(
    ctx: click.Context, interval_ms: int | None, views: tuple[str, ...], ticks: int | None
) -> None:
    """Keep the dashboard on screen, refreshing it on an interval."""
    logger = get_logger(__name__)

    async def body(app: DashboardApp) -> int:
        finished = asyncio.Event()
        seen = 0

        for entity_type in views:
            if entity_type not in app.schemas:
                click.echo(f"Error: Unknown entity type: {entity_type}", err=True)
                return EXIT_FAILED
            app.view_state.open_view(entity_type)

        def paint(event: str, data: dict[str, Any]) -> None:
            nonlocal seen
            seen += 1
            click.echo(f"--- refresh #{data['tick']} ---")
            for entity_type in app.session.visible_entity_types():
                summary = app.view_state.summaries.get(entity_type)
                if summary is not None:
                    click.echo(_format_summary(summary))
            for entity_type in app.view_state.open_views:
                click.echo(_format_table(app.view_state.tables.get(entity_type)))
            click.echo(_format_chat(app.view_state.chat))
            if ticks is not None and seen >= ticks:
                finished.set()

        app.events.register(DashboardEvent.REFRESH_AFTER_TICK, paint)
        app.start_polling(interval_ms)
        logger.info("Watching dashboard", views=list(views), ticks=ticks)
        await finished.wait()
        return 0

    try:
        _run(ctx, body)
    except KeyboardInterrupt:
        click.echo("Stopped.")


@cli.command()
def info() -> None:
    """Display Crewboard configuration."""
    settings = get_settings()

    click.echo(f"""
Crewboard v{settings.app_version}
{'=' * 40}

Configuration:
  Environment:  {settings.environment}
  Store URL:    {settings.store_url}
  Timeout:      {settings.request_timeout_seconds}s

Refresh:
  Interval:     {settings.refresh_interval_ms} ms
  On start:     {settings.refresh_on_start}
  After change: {settings.refresh_after_mutation}

Archive:
  Mode:         {settings.archive_mode}
  Prefix:       {settings.archive_prefix}

Logging:
  Level:        {settings.log_level}
  Format:       {settings.log_format}
""")


def main() -> NoReturn:
    """Main entry point for the ``crewboard`` command."""
    cli()


if __name__ == "__main__":
    main()
