"""
Main CLI application using Typer.
"""

import json
import logging
from pathlib import Path
from typing import Annotated, Any, Dict, List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from ..adapters.api_client import AttendanceApiClient
from ..adapters.json_record_store import JsonRecordStore
from ..config import AppConfig
from ..domain.exceptions import AttendanceWindowError
from ..domain.models import AttendanceRecord, DayWindow, DayWindowPolicy, QueryRange, ScheduledInterval
from ..domain.overlap import days_overlapped, interval_days, overlaps_range
from ..services.attendance_service import AttendanceService

app = typer.Typer(
    name="attendance-window",
    help="Check which calendar days scheduled shifts and attendance records are active on",
    add_completion=False
)

console = Console()

ConfigOption = Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml")]
PolicyOption = Annotated[Optional[str], typer.Option("--policy", "-p", help="Day boundaries: 'utc' (default) or 'local'")]
FileOption = Annotated[Optional[Path], typer.Option("--file", "-f", help="JSON file with attendance records")]
ApiOption = Annotated[bool, typer.Option("--api", help="Fetch records from the attendance API instead of a file")]


@app.callback()
def main(
    ctx: typer.Context,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log debug output")] = False,
):
    """
    Attendance day-overlap diagnostics.
    """
    ctx.obj = {"verbose": verbose}


def _configure_logging(level: str, verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else level,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _setup(ctx: typer.Context, config_file: Optional[Path]) -> AppConfig:
    """Load configuration and configure logging for a command."""
    config = AppConfig.load_or_default(config_file)
    verbose = bool(ctx.obj and ctx.obj.get("verbose"))
    _configure_logging(config.log_level, verbose)
    return config


def _resolve_policy(config: AppConfig, policy: Optional[str]) -> DayWindowPolicy:
    if policy is None:
        return config.policy
    return DayWindowPolicy.parse(policy)


def _build_record_source(config: AppConfig, records_file: Optional[Path], use_api: bool):
    if use_api:
        return AttendanceApiClient(
            base_url=config.api.base_url,
            token=config.api.token,
            timeout=config.api.timeout_seconds
        )

    path = records_file or config.records_file
    if path is None:
        raise typer.BadParameter("Pass --file, --api, or set records_file in the config file.")
    return JsonRecordStore(path)


def _query_params(
    date: Optional[str] = None,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    from_date: Optional[str] = None,
    to_date: Optional[str] = None,
    status: Optional[str] = None,
    worker_id: Optional[str] = None,
    job_id: Optional[str] = None,
    business_id: Optional[str] = None,
) -> Dict[str, str]:
    params = {
        "date": date,
        "startDate": start_date,
        "endDate": end_date,
        "from": from_date,
        "to": to_date,
        "status": status,
        "workerId": worker_id,
        "jobId": job_id,
        "businessId": business_id,
    }
    return {key: value for key, value in params.items() if value is not None}


def _json_default(value: Any) -> str:
    if hasattr(value, "to_iso8601_string"):
        return value.to_iso8601_string()
    return str(value)


def _fail(message: Any) -> None:
    console.print(f"[bold red]Error:[/bold red] {escape(str(message))}")
    raise typer.Exit(1)


def _records_table(title: str, records: List[AttendanceRecord]) -> Table:
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("ID", style="dim")
    table.add_column("Worker", style="bold yellow")
    table.add_column("Job")
    table.add_column("Status")
    table.add_column("Scheduled (UTC)")

    for record in records:
        summary = record.to_summary()
        table.add_row(
            summary["id"],
            summary["worker"],
            summary["job"] or "-",
            summary["status"],
            f"{summary['scheduledStart']} → {summary['scheduledEnd']}",
        )
    return table


@app.command()
def check(
    ctx: typer.Context,
    start: Annotated[str, typer.Argument(help="Scheduled start (ISO-8601, e.g. 2025-11-07T15:00:00Z)")],
    end: Annotated[str, typer.Argument(help="Scheduled end (ISO-8601)")],
    date: Annotated[Optional[str], typer.Option("--date", "-d", help="Single day (YYYY-MM-DD)")] = None,
    from_date: Annotated[Optional[str], typer.Option("--from", help="First day of the range (YYYY-MM-DD)")] = None,
    to_date: Annotated[Optional[str], typer.Option("--to", help="Last day of the range (YYYY-MM-DD)")] = None,
    policy: PolicyOption = None,
    config_file: ConfigOption = None,
):
    """
    Check whether a scheduled interval is active on a day or a range of days.

    Examples:

        attendance-window check 2025-11-07T15:00:00Z 2025-11-09T21:00:00Z --date 2025-11-08

        attendance-window check 2025-11-07T15:00:00Z 2025-11-09T21:00:00Z --from 2025-11-06 --to 2025-11-11
    """
    try:
        config = _setup(ctx, config_file)
        day_policy = _resolve_policy(config, policy)
        interval = ScheduledInterval.parse(start, end)

        if date:
            query_range = QueryRange.single(date, parameter="date")
        elif from_date and to_date:
            query_range = QueryRange.parse(from_date, to_date)
        else:
            _fail("Pass --date, or both --from and --to.")

        window = query_range.window(day_policy)
        verdict = overlaps_range(interval, query_range, day_policy)
        window_text = escape(f"[{window.start.to_iso8601_string()}, {window.end.to_iso8601_string()})")

        console.print(Panel.fit(
            f"[bold]Interval:[/bold] {interval}\n"
            f"[bold]Query:[/bold] {query_range} ({day_policy.value})\n"
            f"[bold]Window:[/bold] {window_text}\n\n"
            + ("[bold green]✓ Overlaps[/bold green]" if verdict else "[bold red]✗ No overlap[/bold red]"),
            title="Day overlap"
        ))

        table = Table(show_header=True, header_style="bold cyan")
        table.add_column("Date", style="bold")
        table.add_column("Day window")
        table.add_column("Active")

        active_days = set(days_overlapped(interval, query_range, day_policy))
        for day in query_range.days():
            day_window = DayWindow.for_date(day, day_policy)
            active = day in active_days
            table.add_row(
                day.to_date_string(),
                f"{day_window.start.to_iso8601_string()} → {day_window.end.to_iso8601_string()}",
                "[green]yes[/green]" if active else "[dim]no[/dim]",
            )

        console.print(table)

    except (AttendanceWindowError, FileNotFoundError, ValueError) as e:
        _fail(e)


@app.command()
def days(
    ctx: typer.Context,
    start: Annotated[str, typer.Argument(help="Scheduled start (ISO-8601)")],
    end: Annotated[str, typer.Argument(help="Scheduled end (ISO-8601)")],
    policy: PolicyOption = None,
    config_file: ConfigOption = None,
):
    """
    List every calendar day a scheduled interval touches.
    """
    try:
        config = _setup(ctx, config_file)
        day_policy = _resolve_policy(config, policy)
        interval = ScheduledInterval.parse(start, end)

        touched = interval_days(interval, day_policy)
        console.print(f"\n[bold]{interval}[/bold] ({day_policy.value}, {interval.duration_hours():.2f} h)")
        for day in touched:
            console.print(f"  {day.to_date_string()} ({day.format('dddd')})")
        console.print()

    except (AttendanceWindowError, FileNotFoundError, ValueError) as e:
        _fail(e)


@app.command()
def query(
    ctx: typer.Context,
    date: Annotated[Optional[str], typer.Option("--date", "-d", help="Single day (YYYY-MM-DD)")] = None,
    start_date: Annotated[Optional[str], typer.Option("--start-date", help="First day (YYYY-MM-DD)")] = None,
    end_date: Annotated[Optional[str], typer.Option("--end-date", help="Last day (YYYY-MM-DD)")] = None,
    from_date: Annotated[Optional[str], typer.Option("--from", help="First day, alias of --start-date")] = None,
    to_date: Annotated[Optional[str], typer.Option("--to", help="Last day, alias of --end-date")] = None,
    status: Annotated[Optional[str], typer.Option("--status", "-s", help="scheduled, clocked-in, completed, missed or all")] = None,
    worker_id: Annotated[Optional[str], typer.Option("--worker-id", help="Only records of this worker")] = None,
    job_id: Annotated[Optional[str], typer.Option("--job-id", help="Only records of this job")] = None,
    business_id: Annotated[Optional[str], typer.Option("--business-id", help="Only records of this business")] = None,
    show_filter: Annotated[bool, typer.Option("--show-filter", help="Print the storage filter document")] = False,
    records_file: FileOption = None,
    use_api: ApiOption = False,
    policy: PolicyOption = None,
    config_file: ConfigOption = None,
):
    """
    Run an attendance query against a record source.

    Examples:

        attendance-window query --file records.json --date 2025-11-09

        attendance-window query --api --start-date 2025-11-08 --end-date 2025-11-11 --show-filter

        attendance-window query --file records.json --from 2025-11-08 --to 2025-11-11 --job-id j1
    """
    try:
        config = _setup(ctx, config_file)
        service = AttendanceService(
            record_source=_build_record_source(config, records_file, use_api),
            policy=_resolve_policy(config, policy)
        )
        params = _query_params(
            date=date,
            start_date=start_date,
            end_date=end_date,
            from_date=from_date,
            to_date=to_date,
            status=status,
            worker_id=worker_id,
            job_id=job_id,
            business_id=business_id,
        )
        attendance_query = service.build_query(params)

        if show_filter:
            console.print("[bold cyan]Storage filter:[/bold cyan]")
            console.print_json(json.dumps(attendance_query.build_filter(), default=_json_default))

        records = attendance_query.apply(service.fetch(attendance_query))

        console.print()
        if not records:
            console.print(f"[yellow]⚠ No attendance records for {attendance_query.describe()}.[/yellow]")
        else:
            console.print(_records_table(f"{len(records)} record(s): {attendance_query.describe()}", records))
        console.print()

    except (AttendanceWindowError, FileNotFoundError, ValueError) as e:
        _fail(e)


@app.command()
def schedule(
    ctx: typer.Context,
    from_date: Annotated[str, typer.Option("--from", help="First day (YYYY-MM-DD)")],
    to_date: Annotated[str, typer.Option("--to", help="Last day (YYYY-MM-DD)")],
    status: Annotated[Optional[str], typer.Option("--status", "-s", help="Status filter")] = None,
    worker_id: Annotated[Optional[str], typer.Option("--worker-id", help="Only records of this worker")] = None,
    records_file: FileOption = None,
    use_api: ApiOption = False,
    policy: PolicyOption = None,
    config_file: ConfigOption = None,
):
    """
    Show records grouped per day; multi-day shifts appear on every day they cover.
    """
    try:
        config = _setup(ctx, config_file)
        service = AttendanceService(
            record_source=_build_record_source(config, records_file, use_api),
            policy=_resolve_policy(config, policy)
        )
        params = _query_params(from_date=from_date, to_date=to_date, status=status, worker_id=worker_id)
        schedule_days = service.find_schedule(params)

        console.print()
        if not schedule_days:
            console.print("[yellow]⚠ Nothing scheduled in this range.[/yellow]\n")
            return

        for schedule_day in schedule_days:
            marker = " [bold magenta](today)[/bold magenta]" if schedule_day.is_today else ""
            console.print(
                f"[bold]{schedule_day.date.to_date_string()} ({schedule_day.day_of_week})[/bold]{marker}"
                f" - {len(schedule_day.entries)} entr{'y' if len(schedule_day.entries) == 1 else 'ies'},"
                f" {schedule_day.scheduled_hours():.2f} h"
            )
            for entry in schedule_day.entries:
                console.print(
                    f"  • {entry.worker_name} | {entry.job_title or '-'} | {entry.status} | {entry.interval}"
                )
        console.print()

    except (AttendanceWindowError, FileNotFoundError, ValueError) as e:
        _fail(e)


@app.command()
def verify(
    ctx: typer.Context,
    dates: Annotated[List[str], typer.Argument(help="Days to query (YYYY-MM-DD)")],
    policy: PolicyOption = None,
    config_file: ConfigOption = None,
):
    """
    Query the attendance API day by day and flag records that do not belong to the day.
    """
    try:
        config = _setup(ctx, config_file)
        service = AttendanceService(
            record_source=_build_record_source(config, None, use_api=True),
            policy=_resolve_policy(config, policy)
        )

        failures = 0
        for day in dates:
            mismatches = service.find_mismatches({"date": day})
            if mismatches:
                failures += len(mismatches)
                console.print(_records_table(f"✗ {day}: {len(mismatches)} record(s) outside the day", mismatches))
            else:
                console.print(f"[green]✓ {day}: every returned record overlaps the day[/green]")

        if failures:
            raise typer.Exit(1)

    except (AttendanceWindowError, FileNotFoundError, ValueError) as e:
        _fail(e)


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]attendance-window[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
