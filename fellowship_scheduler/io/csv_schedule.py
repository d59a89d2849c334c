"""Rotation schedule CSV/TSV import and export."""

from __future__ import annotations

import csv
import io
from dataclasses import dataclass, field

from fellowship_scheduler.models.assignments import RotationSchedule
from fellowship_scheduler.models.violation import Violation

VIOLATION_COLUMNS = ("type", "severity", "fellow", "block", "weekend", "rule", "detail")


@dataclass
class ImportResult:
    ok: bool
    schedule: RotationSchedule = field(default_factory=dict)
    error: str = ""


def _detect_delimiter(lines: list[str]) -> str:
    """Tab if the header line has one, else comma."""
    return "\t" if "\t" in lines[0] else ","


def _split(line: str, delimiter: str) -> list[str]:
    row = next(csv.reader([line], delimiter=delimiter), [])
    return [cell.strip() for cell in row]


def parse_schedule_table(
    text: str,
    fellows: list[str],
    n_blocks: int = 26,
) -> ImportResult:
    """Parse a pasted or uploaded schedule table.

    Expects a ``Fellow, Block 1, ..., Block N`` header and one row per
    fellow. Every fellow in ``fellows`` must have a row and no unknown
    names may appear. Problems come back as ``ImportResult(ok=False)``.
    """
    lines = [line.rstrip() for line in text.splitlines() if line.strip()]
    if len(lines) < 2:
        return ImportResult(ok=False, error="File has no data rows.")

    delimiter = _detect_delimiter(lines)
    header = _split(lines[0], delimiter)
    if len(header) < 2:
        return ImportResult(ok=False, error="Header row is invalid.")
    if header[0].lower() != "fellow":
        return ImportResult(ok=False, error='First header cell must be "Fellow".')

    for i in range(1, n_blocks + 1):
        expected = f"block {i}"
        got = header[i] if i < len(header) else ""
        if got.lower() != expected:
            return ImportResult(
                ok=False,
                error=f'Header mismatch at column {i + 1}. Expected "{expected}", got "{got}".',
            )

    known = set(fellows)
    schedule: RotationSchedule = {}
    unknown = []
    short_rows = []

    for line in lines[1:]:
        cells = _split(line, delimiter)
        name = cells[0] if cells else ""
        if not name:
            continue
        if name not in known:
            unknown.append(name)
            continue
        if len(cells) < n_blocks + 1:
            short_rows.append(f"{name} has {len(cells) - 1} blocks, expected {n_blocks}.")
        schedule[name] = [cells[i] if i < len(cells) else "" for i in range(1, n_blocks + 1)]

    if unknown:
        return ImportResult(ok=False, error=f"Unknown fellows in import: {', '.join(unknown)}")
    if short_rows:
        return ImportResult(ok=False, error="Block count issues:\n" + "\n".join(short_rows))

    missing = [f for f in fellows if f not in schedule]
    if missing:
        return ImportResult(ok=False, error=f"Missing rows for fellows: {', '.join(missing)}")

    return ImportResult(ok=True, schedule=schedule)


def _write_rows(rows: list[list]) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerows(rows)
    return buf.getvalue().rstrip("\n")


def build_schedule_csv(
    schedule: RotationSchedule,
    fellows: list[str],
    n_blocks: int = 26,
) -> str:
    header = ["Fellow"] + [f"Block {i + 1}" for i in range(n_blocks)]
    rows = [header]
    for fellow in fellows:
        rotations = schedule.get(fellow) or []
        rows.append([fellow] + [
            rotations[i] if i < len(rotations) and rotations[i] is not None else ""
            for i in range(n_blocks)
        ])
    return _write_rows(rows)


def build_violations_csv(violations: list[Violation]) -> str:
    rows = [list(VIOLATION_COLUMNS)]
    for v in violations:
        rows.append([
            v.kind,
            v.severity,
            v.fellow or "",
            "" if v.block is None else v.block,
            v.weekend or "",
            v.rule,
            v.detail,
        ])
    return _write_rows(rows)
