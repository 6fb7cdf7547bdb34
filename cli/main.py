"""Unified CLI for the hearing conflict engine.

This module provides a single entry point for operator tasks over a CSV
schedule and a JSON override audit trail:
- Advisory conflict checks for a proposed hearing
- Daily conflict view with courtroom density warnings
- Authoritative submission, with optional override and reason
- Override audit summary
- Docket report generation
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Iterable, Optional

import typer
from rich.console import Console
from rich.table import Table

from cli import __version__

try:
    sys.stdout.reconfigure(encoding="utf-8")
    sys.stderr.reconfigure(encoding="utf-8")
except AttributeError:
    pass

# Initialize Typer app and console
app = typer.Typer(
    name="hearing-scheduler",
    help="Hearing scheduling conflict detection and override resolution",
    add_completion=False,
)
console = Console(legacy_windows=False)

EXIT_CONFLICT = 2

_SEVERITY_STYLE = {"high": "bold red", "medium": "yellow", "low": "dim"}


def _load_context(config: Optional[Path], schedule: Optional[Path]):
    """Load config and open the file-backed store behind a gateway."""
    from cli.config import load_engine_config
    from hearing_scheduler.control.gateway import SchedulingGateway
    from hearing_scheduler.data.clients import InMemoryClientRegistry
    from hearing_scheduler.data.file_store import FileHearingStore
    from hearing_scheduler.utils.log_setup import setup_logging

    cfg = load_engine_config(config)
    if schedule is not None:
        cfg = cfg.model_copy(update={"schedule": schedule})
    setup_logging(cfg.log_level)

    store = FileHearingStore(cfg.schedule, cfg.audit, lock_timeout=cfg.lock_timeout_seconds)
    registry = InMemoryClientRegistry(h.client_name for h in store.all_hearings())
    gateway = SchedulingGateway(
        store,
        detector=cfg.build_detector(),
        client_registry=registry,
        timezone_name=cfg.timezone,
        default_time=cfg.default_hearing_time,
        default_duration=cfg.default_duration_minutes,
    )
    return cfg, store, gateway


def _payload(
    hearing_id: Optional[str],
    case_number: str,
    client_name: str,
    court_name: str,
    hearing_date: str,
    hearing_time: Optional[str],
    opposing_party: Optional[str],
    judge_name: Optional[str],
    status: str,
    priority: str,
    duration: Optional[int],
) -> dict:
    return {
        "hearing_id": hearing_id,
        "case_number": case_number,
        "client_name": client_name,
        "court_name": court_name,
        "hearing_date": hearing_date,
        "hearing_time": hearing_time,
        "opposing_party": opposing_party,
        "judge_name": judge_name,
        "status": status,
        "priority": priority,
        "duration_minutes": duration,
    }


def _conflict_table(title: str, conflicts: Iterable) -> Table:
    table = Table(title=title)
    table.add_column("Severity")
    table.add_column("Type")
    table.add_column("Case")
    table.add_column("Date")
    table.add_column("Message")
    for c in conflicts:
        table.add_row(
            f"[{_SEVERITY_STYLE[c.severity.value]}]{c.severity.value.upper()}[/]",
            c.conflict_type.value,
            c.affected_case_number or c.affected_hearing_id,
            c.date.isoformat() if c.date else "-",
            c.message,
        )
    return table


def _print_conflicts(conflicts: list) -> None:
    from hearing_scheduler.core.conflict import partition_conflicts

    by_date, general = partition_conflicts(conflicts)
    for day, items in sorted(by_date.items()):
        console.print(_conflict_table(f"Scheduling conflicts on {day.isoformat()}", items))
    if general:
        console.print(_conflict_table("General conflicts", general))


def _print_errors(errors: list[str]) -> None:
    console.print("[bold red]Validation failed:[/bold red]")
    for error in errors:
        console.print(f"  - {error}")


@app.command()
def check(
    case_number: str = typer.Option(..., "--case", help="Case number"),
    client_name: str = typer.Option(..., "--client", help="Client name"),
    court_name: str = typer.Option(..., "--court", help="Court name"),
    hearing_date: str = typer.Option(..., "--date", help="Hearing date (YYYY-MM-DD)"),
    hearing_time: str = typer.Option(None, "--time", help="Hearing time (HH:MM or H:MM AM/PM)"),
    opposing_party: str = typer.Option(None, "--opposing", help="Opposing party"),
    judge_name: str = typer.Option(None, "--judge", help="Judge name"),
    status: str = typer.Option("active", "--status", help="Matter status"),
    priority: str = typer.Option("medium", "--priority", help="Matter priority"),
    hearing_id: str = typer.Option(None, "--hearing-id", help="Existing hearing id when checking an update"),
    schedule: Path = typer.Option(None, "--schedule", "-s", help="Schedule CSV (overrides config)"),
    config: Path = typer.Option(  # noqa: B008
        None, "--config", exists=True, dir_okay=False, readable=True,
        help="Path to config (.toml or .json)",
    ),
) -> None:
    """Advisory conflict check for a proposed hearing. Never writes."""
    from hearing_scheduler.core.errors import HearingStoreError, HearingValidationError

    try:
        _, _, gateway = _load_context(config, schedule)
        request = gateway.parse_request(_payload(
            hearing_id, case_number, client_name, court_name, hearing_date,
            hearing_time, opposing_party, judge_name, status, priority, None,
        ))
        conflicts = gateway.check(request.hearing)
    except HearingValidationError as e:
        _print_errors(e.errors)
        raise typer.Exit(code=1)
    except (HearingStoreError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(code=1)

    if not conflicts:
        console.print("[green]No conflicts detected[/green]")
        return
    console.print(f"[bold yellow]{len(conflicts)} potential conflict(s)[/bold yellow]")
    _print_conflicts(conflicts)


@app.command()
def day(
    on_date: str = typer.Option(..., "--date", help="Date to inspect (YYYY-MM-DD)"),
    schedule: Path = typer.Option(None, "--schedule", "-s", help="Schedule CSV (overrides config)"),
    config: Path = typer.Option(  # noqa: B008
        None, "--config", exists=True, dir_okay=False, readable=True,
        help="Path to config (.toml or .json)",
    ),
) -> None:
    """Show all time conflicts and courtroom density warnings for one date."""
    from hearing_scheduler.core.errors import HearingStoreError
    from hearing_scheduler.utils.timeparse import parse_hearing_date

    try:
        target = parse_hearing_date(on_date)
        _, store, gateway = _load_context(config, schedule)
        hearings = store.hearings_on(target)
    except (HearingStoreError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(code=1)

    console.print(f"[bold blue]{len(hearings)} hearing(s) on {target.isoformat()}[/bold blue]")

    conflicts = gateway.detector.detect_for_date(hearings, target)
    if conflicts:
        console.print(_conflict_table("Time conflicts", conflicts))
    else:
        console.print("[green]No time conflicts[/green]")

    warnings = gateway.detector.density_warnings(hearings, target)
    if warnings:
        table = Table(title="Courtroom density warnings")
        table.add_column("Court")
        table.add_column("Hearings")
        table.add_column("Gap (min)", justify="right")
        for w in warnings:
            table.add_row(w.court_name, w.label, str(w.gap_minutes))
        console.print(table)


@app.command()
def submit(
    case_number: str = typer.Option(..., "--case", help="Case number"),
    client_name: str = typer.Option(..., "--client", help="Client name"),
    court_name: str = typer.Option(..., "--court", help="Court name"),
    hearing_date: str = typer.Option(..., "--date", help="Hearing date (YYYY-MM-DD)"),
    hearing_time: str = typer.Option(None, "--time", help="Hearing time (HH:MM or H:MM AM/PM)"),
    opposing_party: str = typer.Option(None, "--opposing", help="Opposing party"),
    judge_name: str = typer.Option(None, "--judge", help="Judge name"),
    status: str = typer.Option("active", "--status", help="Matter status"),
    priority: str = typer.Option("medium", "--priority", help="Matter priority"),
    duration: int = typer.Option(None, "--duration", help="Duration in minutes"),
    hearing_id: str = typer.Option(None, "--hearing-id", help="Existing hearing id to update"),
    override: bool = typer.Option(False, "--override", help="Schedule despite detected conflicts"),
    reason: str = typer.Option(None, "--reason", help="Override reason (required with --override)"),
    actor: str = typer.Option(..., "--actor", envvar="HEARING_ACTOR", help="User performing the submission"),
    schedule: Path = typer.Option(None, "--schedule", "-s", help="Schedule CSV (overrides config)"),
    config: Path = typer.Option(  # noqa: B008
        None, "--config", exists=True, dir_okay=False, readable=True,
        help="Path to config (.toml or .json)",
    ),
) -> None:
    """Commit a hearing. Exits 2 with the conflict list if it is blocked."""
    from hearing_scheduler.core.errors import HearingStoreError, HearingValidationError

    payload = _payload(
        hearing_id, case_number, client_name, court_name, hearing_date,
        hearing_time, opposing_party, judge_name, status, priority, duration,
    )
    payload["override"] = override
    payload["override_reason"] = reason

    try:
        cfg, _, gateway = _load_context(config, schedule)
        result = gateway.submit_payload(payload, actor)
    except HearingValidationError as e:
        _print_errors(e.errors)
        raise typer.Exit(code=1)
    except (HearingStoreError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(code=1)

    if not result.accepted:
        console.print(
            f"[bold red]Hearing conflicts with {len(result.conflicts)} existing schedule(s)[/bold red]"
        )
        _print_conflicts(list(result.conflicts))
        console.print("Re-run with --override --reason \"...\" to schedule anyway.")
        raise typer.Exit(code=EXIT_CONFLICT)

    hearing = result.hearing
    action = "Scheduled" if result.created else "Updated"
    console.print(
        f"[green]{action}[/green] {hearing.case_number} on "
        f"{hearing.hearing_date.isoformat()} at {hearing.hearing_time:%H:%M} (id {hearing.hearing_id})"
    )
    if result.override_record is not None:
        console.print(
            f"[yellow]Override recorded[/yellow] {result.override_record.override_id}: "
            f"{len(result.override_record.conflicts)} conflict(s) overridden"
        )
    console.print(f"Schedule saved to: {cfg.schedule}")


@app.command()
def audit(
    actor: str = typer.Option(None, "--actor", help="Only show overrides by this user"),
    config: Path = typer.Option(  # noqa: B008
        None, "--config", exists=True, dir_okay=False, readable=True,
        help="Path to config (.toml or .json)",
    ),
) -> None:
    """Summarise the override audit trail."""
    from cli.config import load_engine_config
    from hearing_scheduler.control.overrides import load_audit_trail, summarize_overrides

    try:
        cfg = load_engine_config(config)
        records = load_audit_trail(cfg.audit)
    except ValueError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(code=1)

    if actor:
        records = [r for r in records if r.actor_id == actor]
    stats = summarize_overrides(records)
    console.print(f"[bold blue]{stats['total_overrides']} override(s)[/bold blue]")
    if not records:
        return

    table = Table(title="Overridden conflicts by type")
    table.add_column("Type")
    table.add_column("Count", justify="right")
    for conflict_type, count in sorted(stats["by_conflict_type"].items()):
        table.add_row(conflict_type, str(count))
    console.print(table)

    for record in sorted(records, key=lambda r: r.timestamp):
        console.print(record.to_readable_text())


@app.command()
def report(
    output_dir: Path = typer.Option(Path("reports/docket"), "--output", "-o", help="Output directory"),
    schedule: Path = typer.Option(None, "--schedule", "-s", help="Schedule CSV (overrides config)"),
    config: Path = typer.Option(  # noqa: B008
        None, "--config", exists=True, dir_okay=False, readable=True,
        help="Path to config (.toml or .json)",
    ),
) -> None:
    """Write the daily docket with conflict and density flags."""
    from hearing_scheduler.core.errors import HearingStoreError
    from hearing_scheduler.output.docket_report import DocketReportGenerator

    try:
        _, store, gateway = _load_context(config, schedule)
        path = DocketReportGenerator(store.all_hearings(), gateway.detector).generate(output_dir)
    except (HearingStoreError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(code=1)

    console.print(f"Docket saved to: {path}")


@app.command()
def version() -> None:
    """Show version information."""
    console.print(f"Hearing Scheduler CLI v{__version__}")


def main() -> None:
    """Entry point for CLI."""
    app()


if __name__ == "__main__":
    main()
