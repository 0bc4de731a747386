"""
hfsnext Typer CLI Application

Command-line access to the gated, cached queries. Each command runs one
query against the HFS backend and prints the result as a table or JSON.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Annotated, Any, Optional

import typer
from rich.console import Console

from hfsnext.cli.error_handler import format_json_output, handle_cli_error
from hfsnext.cli.output import render_exam_table, to_json
from hfsnext.config.loader import load_settings
from hfsnext.config.models.settings import Settings
from hfsnext.services.cache import QueryResult
from hfsnext.services.client import create_hfs_client
from hfsnext.services.endpoints import EndpointRegistry
from hfsnext.services.queries import HFSQueries
from hfsnext.shared.constants import CLIDefaults, CLIHelp
from hfsnext.shared.errors import ErrorCode, create_cli_error
from hfsnext.shared.logging import setup_structured_logger

__version__ = CLIDefaults.VERSION


@dataclass
class CliContext:
    """Options shared by every command."""

    settings: Settings
    token: str | None = None
    json_output: bool = False


def version_callback(value: bool) -> None:
    """Print version information and exit."""
    if value:
        typer.echo(CLIHelp.VERSION_TEXT.format(version=__version__))
        raise typer.Exit


app = typer.Typer(
    name=CLIDefaults.APP_NAME,
    help=CLIHelp.APP_DESCRIPTION,
    add_completion=False,
    no_args_is_help=True,
)


@app.callback()
def main(
    ctx: typer.Context,
    token: Annotated[
        Optional[str],
        typer.Option("--token", envvar=CLIDefaults.TOKEN_ENV_VAR, help=CLIHelp.TOKEN_HELP),
    ] = None,
    json_output: Annotated[bool, typer.Option("--json", help=CLIHelp.JSON_HELP)] = False,
    log_level: Annotated[
        Optional[str],
        typer.Option("--log-level", help=CLIHelp.LOG_LEVEL_HELP),
    ] = None,
    config: Annotated[
        Optional[Path],
        typer.Option("--config", help=CLIHelp.CONFIG_HELP, exists=True, dir_okay=False),
    ] = None,
    version: Annotated[
        bool,
        typer.Option("--version", callback=version_callback, is_eager=True),
    ] = False,
) -> None:
    """Load settings, configure logging and store the shared options."""
    try:
        settings = load_settings(config)
        setup_structured_logger(
            level=log_level or settings.logging.level,
            log_file=settings.logging.file,
            use_rich_console=settings.logging.use_rich,
        )
    except Exception as e:
        exit_code = handle_cli_error(e, "main-callback", json_output=json_output)
        raise typer.Exit(exit_code) from e

    ctx.obj = CliContext(settings=settings, token=token, json_output=json_output)


def _run_query(
    ctx: typer.Context,
    command: str,
    query: Callable[[HFSQueries, str | None], Awaitable[QueryResult[Any]]],
) -> Any:
    """Run one query and return its data, exiting on idle or error results."""
    cli_ctx: CliContext = ctx.obj

    async def runner() -> QueryResult[Any]:
        async with create_hfs_client(cli_ctx.settings) as client:
            return await query(client.queries, cli_ctx.token)

    try:
        result = asyncio.run(runner())
        if result.is_idle:
            raise create_cli_error(
                message=CLIHelp.MISSING_TOKEN,
                command=command,
                exit_code=CLIDefaults.EXIT_MISSING_TOKEN,
                code=ErrorCode.MISSING_TOKEN,
            )
        return result.unwrap()
    except Exception as e:
        exit_code = handle_cli_error(e, command, json_output=cli_ctx.json_output)
        raise typer.Exit(exit_code) from e


def _print_payload(ctx: typer.Context, command: str, data: Any) -> None:
    cli_ctx: CliContext = ctx.obj
    if cli_ctx.json_output:
        typer.echo(format_json_output(command, success=True, data=data))
    else:
        typer.echo(to_json(data))


@app.command("exams", help=CLIHelp.EXAMS_HELP)
def exams_command(ctx: typer.Context) -> None:
    exams = _run_query(ctx, "exams", lambda q, token: q.exam_list(token))
    if ctx.obj.json_output:
        typer.echo(
            format_json_output(
                "exams",
                success=True,
                data=[exam.to_display_dict() for exam in exams],
            )
        )
    else:
        render_exam_table(exams, Console())


@app.command("snapshot", help=CLIHelp.SNAPSHOT_HELP)
def snapshot_command(ctx: typer.Context) -> None:
    data = _run_query(ctx, "snapshot", lambda q, token: q.user_snapshot(token))
    _print_payload(ctx, "snapshot", data)


@app.command("overview", help=CLIHelp.OVERVIEW_HELP)
def overview_command(
    ctx: typer.Context,
    exam_id: Annotated[str, typer.Argument(help="Exam ID")],
    v4: Annotated[bool, typer.Option("--v4", help=CLIHelp.OVERVIEW_V4_HELP)] = False,
) -> None:
    if v4:
        data = _run_query(ctx, "overview", lambda q, token: q.exam_overview_v4(token, exam_id))
    else:
        data = _run_query(ctx, "overview", lambda q, token: q.exam_overview(token, exam_id))
    _print_payload(ctx, "overview", data)


@app.command("last-exam", help=CLIHelp.LAST_EXAM_HELP)
def last_exam_command(ctx: typer.Context) -> None:
    data = _run_query(ctx, "last-exam", lambda q, token: q.last_exam_overview(token))
    _print_payload(ctx, "last-exam", data)


@app.command("rank", help=CLIHelp.RANK_HELP)
def rank_command(
    ctx: typer.Context,
    exam_id: Annotated[str, typer.Argument(help="Exam ID")],
) -> None:
    data = _run_query(ctx, "rank", lambda q, token: q.exam_rank_info(token, exam_id))
    _print_payload(ctx, "rank", data)


@app.command("paper-rank", help=CLIHelp.PAPER_RANK_HELP)
def paper_rank_command(
    ctx: typer.Context,
    exam_id: Annotated[str, typer.Argument(help="Exam ID")],
    paper_id: Annotated[str, typer.Argument(help="Paper ID")],
) -> None:
    data = _run_query(
        ctx,
        "paper-rank",
        lambda q, token: q.paper_rank_info(token, exam_id, paper_id),
    )
    _print_payload(ctx, "paper-rank", data)


@app.command("pictures", help=CLIHelp.PICTURES_HELP)
def pictures_command(
    ctx: typer.Context,
    exam_id: Annotated[str, typer.Argument(help="Exam ID")],
    paper_id: Annotated[str, typer.Argument(help="Paper ID")],
    pid: Annotated[str, typer.Argument(help="Student paper ID")],
) -> None:
    urls = _run_query(
        ctx,
        "pictures",
        lambda q, token: q.answer_pictures(token, exam_id, paper_id, pid),
    )
    if ctx.obj.json_output:
        typer.echo(format_json_output("pictures", success=True, data=urls))
    else:
        for url in urls:
            typer.echo(url)


@app.command("url", help=CLIHelp.URL_HELP)
def url_command(
    ctx: typer.Context,
    operation: Annotated[str, typer.Argument(help="Operation name, e.g. examOverview")],
    params: Annotated[
        Optional[list[str]],
        typer.Argument(help="Parameters as KEY=VALUE"),
    ] = None,
) -> None:
    cli_ctx: CliContext = ctx.obj
    try:
        values: dict[str, str] = {}
        for item in params or []:
            key, sep, value = item.partition("=")
            if not sep or not key:
                raise create_cli_error(
                    message=f"Invalid parameter '{item}', expected KEY=VALUE",
                    command="url",
                    exit_code=2,
                    code=ErrorCode.CLI_INVALID_ARGUMENTS,
                )
            values[key] = value

        registry = EndpointRegistry(cli_ctx.settings.api.base_url)
        url = registry.resolve(operation, values)
    except Exception as e:
        exit_code = handle_cli_error(e, "url", json_output=cli_ctx.json_output)
        raise typer.Exit(exit_code) from e

    if cli_ctx.json_output:
        typer.echo(format_json_output("url", success=True, data={"url": url}))
    else:
        typer.echo(url)
