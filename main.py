"""CLI entry point for the fellowship call / night float scheduler."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path

import click

from fellowship_scheduler.io.csv_schedule import (
    build_schedule_csv,
    build_violations_csv,
    parse_schedule_table,
)
from fellowship_scheduler.io.excel_reader import ExcelReader, WorkbookError
from fellowship_scheduler.io.excel_writer import ExcelWriter
from fellowship_scheduler.models.assignments import DutySchedule, RotationSchedule, Vacation
from fellowship_scheduler.models.calendar import Block, compute_blocks
from fellowship_scheduler.models.constraints import SchedulerConfig
from fellowship_scheduler.models.fellow import Fellow, fellow_names, pgy_levels
from fellowship_scheduler.models.violation import RULE_LABELS, Violation
from fellowship_scheduler.phases.call_float import assign_call_and_float
from fellowship_scheduler.solver.suggester import SuggestionContext, generate_suggestions
from fellowship_scheduler.validation.assignment_audit import audit_assignments
from fellowship_scheduler.validation.conflicts import detect_coverage_gaps
from fellowship_scheduler.validation.report import generate_report
from fellowship_scheduler.validation.work_hours import check_work_hours


@dataclass
class WorkbookData:
    fellows: list[Fellow]
    blocks: list[Block]
    schedule: RotationSchedule
    vacations: list[Vacation] = field(default_factory=list)
    call_schedule: DutySchedule = field(default_factory=dict)
    float_schedule: DutySchedule = field(default_factory=dict)

    @property
    def names(self) -> list[str]:
        return fellow_names(self.fellows)

    @property
    def pgy_levels(self) -> dict[str, int]:
        return pgy_levels(self.fellows)


def _load(workbook: Path, year: int) -> WorkbookData:
    """Read everything the scheduler needs, converting edge errors for click."""
    try:
        with ExcelReader(workbook) as reader:
            if reader.has_sheet("Blocks"):
                blocks = reader.read_blocks()
            else:
                blocks = compute_blocks(date(year, 7, 1))
            data = WorkbookData(
                fellows=reader.read_roster(),
                blocks=blocks,
                schedule=reader.read_schedule(len(blocks)),
                vacations=reader.read_vacations(),
                call_schedule=reader.read_call_schedule(),
                float_schedule=reader.read_float_schedule(),
            )
    except WorkbookError as e:
        raise click.ClickException(str(e)) from e

    missing = [f for f in data.names if f not in data.schedule]
    if missing:
        raise click.ClickException(f"Schedule sheet has no rows for: {', '.join(missing)}")
    return data


def _writer(workbook: Path, output: Path | None) -> ExcelWriter:
    try:
        return ExcelWriter(workbook, output)
    except WorkbookError as e:
        raise click.ClickException(str(e)) from e


def _print_report(data: WorkbookData, config: SchedulerConfig,
                  assignment_violations: list[Violation]) -> list[Violation]:
    work_hour_violations = check_work_hours(
        data.names, data.schedule, data.call_schedule, data.float_schedule,
        data.blocks, data.vacations,
    )
    click.echo(generate_report(
        data.names,
        data.pgy_levels,
        data.call_schedule,
        data.float_schedule,
        assignment_violations,
        work_hour_violations,
        coverage_gaps=detect_coverage_gaps(data.schedule, data.names, data.blocks),
        config=config,
    ))
    return work_hour_violations


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Log per-slot decisions")
def cli(verbose: bool):
    """Cardiology fellowship call and night float scheduler."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@cli.command()
@click.argument("workbook", type=click.Path(exists=True, path_type=Path))
@click.option("--output", "-o", type=click.Path(path_type=Path), default=None,
              help="Output .xlsx file path (default: <input>_output.xlsx)")
@click.option("--seed", type=int, default=None, help="Random seed for reproducible runs")
@click.option("--attempts", type=int, default=None, help="Randomised fill attempts (default: 80)")
@click.option("--no-early-float", multiple=True,
              help="PGY-6 fellow barred from float in the first blocks (repeatable)")
@click.option("--year", "-y", type=int, default=2026,
              help="Academic year start, used when the workbook has no Blocks sheet")
@click.option("--dry-run", is_flag=True, help="Validate only, don't write to Excel")
def generate(workbook: Path, output: Path | None, seed: int | None, attempts: int | None,
             no_early_float: tuple[str, ...], year: int, dry_run: bool):
    """Assign weekend call and night float, then check compliance."""
    data = _load(workbook, year)
    click.echo(f"Loaded {len(data.fellows)} fellows, {len(data.blocks)} blocks")

    config = SchedulerConfig(n_blocks=len(data.blocks), pgy6_no_early_float=tuple(no_early_float))
    if attempts is not None:
        config.attempts = attempts

    # ── Assignment ────────────────────────────────────────────
    click.echo(f"\n--- Call / Night Float Assignment ({config.attempts} attempts) ---")
    result = assign_call_and_float(
        data.names, data.schedule, data.pgy_levels, config=config, seed=seed,
    )
    data.call_schedule = result.call_schedule
    data.float_schedule = result.float_schedule
    click.echo(f"Filled {len(result.call_schedule)} call and "
               f"{len(result.float_schedule)} float weekends")

    # ── Validation ────────────────────────────────────────────
    click.echo("\n--- Validation ---")
    work_hour_violations = _print_report(data, config, result.violations)

    # ── Write to Excel ────────────────────────────────────────
    if dry_run:
        click.echo("\n(Dry run, no Excel output written)")
        return
    with _writer(workbook, output) as writer:
        writer.write_call_schedule(result.call_schedule, config.n_blocks)
        writer.write_float_schedule(result.float_schedule, config.n_blocks)
        writer.write_violations(result.violations + work_hour_violations)
    click.echo(f"Schedule written to: {writer.output_path}")


@cli.command()
@click.argument("workbook", type=click.Path(exists=True, path_type=Path))
@click.option("--year", "-y", type=int, default=2026,
              help="Academic year start, used when the workbook has no Blocks sheet")
@click.option("--violations-csv", type=click.Path(path_type=Path), default=None,
              help="Also write all findings to this CSV file")
def check(workbook: Path, year: int, violations_csv: Path | None):
    """Check an existing call / night float schedule."""
    data = _load(workbook, year)
    config = SchedulerConfig(n_blocks=len(data.blocks))
    audit = audit_assignments(data.call_schedule, data.float_schedule, data.pgy_levels, config)
    work_hour_violations = _print_report(data, config, audit)

    if violations_csv is not None:
        violations_csv.write_text(build_violations_csv(audit + work_hour_violations) + "\n")
        click.echo(f"Violations written to: {violations_csv}")


@cli.command()
@click.argument("workbook", type=click.Path(exists=True, path_type=Path))
@click.option("--rule", required=True, type=click.Choice(sorted(RULE_LABELS)),
              help="Work-hour rule of the violation to fix")
@click.option("--fellow", required=True, help="Fellow named in the violation")
@click.option("--start", "start_date", type=click.DateTime(formats=["%Y-%m-%d"]), default=None,
              help="Violation start date (default: first matching violation)")
@click.option("--year", "-y", type=int, default=2026,
              help="Academic year start, used when the workbook has no Blocks sheet")
def suggest(workbook: Path, rule: str, fellow: str, start_date, year: int):
    """Suggest swaps or reassignments that clear one violation."""
    data = _load(workbook, year)
    context = SuggestionContext(
        fellows=data.names,
        schedule=data.schedule,
        call_schedule=data.call_schedule,
        float_schedule=data.float_schedule,
        blocks=data.blocks,
        vacations=data.vacations,
    )
    matching = [
        v for v in context.violations_for(data.names)
        if v.rule == rule and v.fellow == fellow
        and (start_date is None or v.start_date == start_date.date())
    ]
    if not matching:
        raise click.ClickException(f"No {RULE_LABELS[rule]} violation found for {fellow}")

    violation = matching[0]
    click.echo(f"{violation.rule_label}: {violation.detail}")
    suggestions = generate_suggestions(violation, context)
    if not suggestions:
        click.echo("  No suggestion clears this violation without adding others.")
        return
    for i, s in enumerate(suggestions, start=1):
        click.echo(f"  {i}. {s.description} (net change {s.net_change:+d})")


@cli.command("export-csv")
@click.argument("workbook", type=click.Path(exists=True, path_type=Path))
@click.option("--output", "-o", type=click.Path(path_type=Path), required=True,
              help="CSV file to write")
@click.option("--year", "-y", type=int, default=2026,
              help="Academic year start, used when the workbook has no Blocks sheet")
def export_csv(workbook: Path, output: Path, year: int):
    """Export the rotation schedule as CSV."""
    data = _load(workbook, year)
    output.write_text(build_schedule_csv(data.schedule, data.names, len(data.blocks)) + "\n")
    click.echo(f"Schedule for {len(data.fellows)} fellows written to: {output}")


@cli.command("import-csv")
@click.argument("workbook", type=click.Path(exists=True, path_type=Path))
@click.argument("csv_file", type=click.Path(exists=True, path_type=Path))
@click.option("--output", "-o", type=click.Path(path_type=Path), default=None,
              help="Output .xlsx file path (default: <input>_output.xlsx)")
@click.option("--year", "-y", type=int, default=2026,
              help="Academic year start, used when the workbook has no Blocks sheet")
def import_csv(workbook: Path, csv_file: Path, output: Path | None, year: int):
    """Replace the workbook's rotation schedule with a CSV/TSV table."""
    data = _load(workbook, year)
    result = parse_schedule_table(csv_file.read_text(), data.names, len(data.blocks))
    if not result.ok:
        raise click.ClickException(result.error)

    with _writer(workbook, output) as writer:
        writer.write_schedule(result.schedule, data.names, len(data.blocks))
    click.echo(f"Imported {len(result.schedule)} rows; written to: {writer.output_path}")


if __name__ == "__main__":
    cli()
