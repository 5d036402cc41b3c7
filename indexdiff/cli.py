"""Command line interface for indexdiff."""

from __future__ import annotations

import asyncio

import typer
from rich.console import Console
from rich.markup import escape
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
)
from rich.table import Table

from . import __version__
from .api import run_comparison, run_stale_check
from .cache import APPS_PREFIX, INDICES_PREFIX, BlobCache
from .config import Config, load_config
from .errors import IndexDiffError
from .output import format_download_marker, format_index_names
from .services.download_service import DownloadOutcome, DownloadStatus
from .text import Messages, Styles

console = Console()

app = typer.Typer(
    help=Messages.APP_HELP,
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _styled(text: str, style: str) -> str:
    return f"[{style}]{text}[/{style}]"


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"indexdiff v{__version__}")
        raise typer.Exit()


def _load_config_or_exit() -> Config:
    try:
        return load_config()
    except IndexDiffError as exc:
        console.print(_styled(escape(str(exc)), Styles.ERROR))
        raise typer.Exit(code=1)


class DownloadProgress:
    """Rich progress bar advanced once per (index, account) pair."""

    def __init__(self, accounts: tuple[str, ...]) -> None:
        self._accounts = accounts
        self._progress = Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            TimeElapsedColumn(),
            console=console,
        )
        self._task: TaskID | None = None

    def start(self, divergent: list[str]) -> None:
        console.print(
            _styled(Messages.INFO_DIVERGENT_FOUND.format(count=len(divergent)), Styles.INFO)
        )
        if not divergent:
            return
        console.print(_styled(Messages.INFO_DOWNLOADING, Styles.INFO))
        self._progress.start()
        self._task = self._progress.add_task(
            "",
            total=len(divergent) * len(self._accounts),
        )

    def advance(self, outcome: DownloadOutcome) -> None:
        if self._task is None:
            return
        key = outcome.key
        if outcome.status == DownloadStatus.FAILED:
            description = Messages.PROGRESS_UNIT_FAILED.format(
                account=escape(key.account_name),
                index=escape(key.index_name),
                error=escape(outcome.error or ""),
            )
        else:
            description = Messages.PROGRESS_UNIT.format(
                account=escape(key.account_name),
                index=escape(key.index_name),
            )
        self._progress.update(self._task, advance=1, description=description)

    def stop(self) -> None:
        if self._task is not None:
            self._progress.stop()
            self._task = None


def _print_event(message: str) -> None:
    console.print(_styled(escape(message), Styles.INFO))


def _run_compare() -> None:
    config = _load_config_or_exit()
    progress = DownloadProgress(config.account_names)
    try:
        report = asyncio.run(
            run_comparison(
                config,
                on_event=_print_event,
                on_divergent=progress.start,
                on_progress=progress.advance,
            )
        )
    except IndexDiffError as exc:
        console.print(_styled(escape(str(exc)), Styles.ERROR))
        raise typer.Exit(code=1)
    finally:
        progress.stop()

    if report.divergent:
        failures = report.failures
        icon = format_download_marker(len(failures), console.encoding)
        console.print(
            f"{icon} "
            + _styled(Messages.INFO_DOWNLOAD_DONE.format(count=len(report.divergent)), Styles.SUCCESS)
        )
        if failures:
            console.print(
                _styled(
                    Messages.INFO_DOWNLOAD_FAILURES.format(count=len(failures)),
                    Styles.WARNING,
                )
            )
    if not report.differences:
        console.print(
            _styled(
                Messages.INFO_REPORT_EMPTY.format(source=report.source, target=report.target),
                Styles.SUCCESS,
            )
        )
        return
    console.print(
        _styled(
            Messages.INFO_REPORT_TITLE.format(source=report.source, target=report.target),
            Styles.TITLE,
        )
    )
    console.print(format_index_names(report.differences))


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """Compare indices across two apps; runs `compare` when no command is given."""
    if ctx.invoked_subcommand is None:
        _run_compare()


@app.command(help=Messages.HELP_COMPARE)
def compare() -> None:
    _run_compare()


@app.command(help=Messages.HELP_STALE)
def stale(
    account: str | None = typer.Option(
        None,
        "--account",
        "-a",
        help=Messages.HELP_STALE_ACCOUNT,
    ),
    days: int | None = typer.Option(
        None,
        "--days",
        "-d",
        min=1,
        help=Messages.HELP_STALE_DAYS,
    ),
) -> None:
    config = _load_config_or_exit()
    account_name = account or config.source
    effective_days = days or config.stale_days
    try:
        summaries = asyncio.run(
            run_stale_check(config, account_name, days=effective_days)
        )
    except IndexDiffError as exc:
        console.print(_styled(escape(str(exc)), Styles.ERROR))
        raise typer.Exit(code=1)
    if not summaries:
        console.print(
            _styled(
                Messages.INFO_STALE_EMPTY.format(account=account_name, days=effective_days),
                Styles.SUCCESS,
            )
        )
        return
    console.print(
        _styled(
            Messages.INFO_STALE_TITLE.format(account=account_name, days=effective_days),
            Styles.TITLE,
        )
    )
    table = Table(show_header=True, header_style=Styles.TABLE_HEADER)
    table.add_column(Messages.TABLE_HEADER_INDEX, overflow="fold")
    table.add_column(Messages.TABLE_HEADER_RECORDS, justify="right")
    table.add_column(Messages.TABLE_HEADER_LAST_UPDATE, no_wrap=True)
    for summary in summaries:
        table.add_row(
            escape(summary.name),
            str(summary.record_count),
            summary.last_update or "-",
        )
    console.print(table)


@app.command("clear-cache", help=Messages.HELP_CLEAR_CACHE)
def clear_cache(
    lists: bool = typer.Option(False, "--lists", help=Messages.HELP_CLEAR_LISTS),
    indices: bool = typer.Option(False, "--indices", help=Messages.HELP_CLEAR_INDICES),
) -> None:
    config = _load_config_or_exit()
    cache = BlobCache(config.cache_dir)
    prefixes = []
    if lists or not indices:
        prefixes.append(APPS_PREFIX)
    if indices or not lists:
        prefixes.append(INDICES_PREFIX)
    removed = sum(cache.clear(prefix) for prefix in prefixes)
    console.print(
        _styled(
            Messages.INFO_CACHE_CLEARED.format(
                count=removed,
                plural="" if removed == 1 else "s",
                path=cache.root,
            ),
            Styles.SUCCESS,
        )
    )


def run(argv: list[str] | None = None) -> None:
    """Entry point wrapper allowing optional argument override."""
    if argv is None:
        app(prog_name="indexdiff")
    else:
        app(args=list(argv), prog_name="indexdiff")
