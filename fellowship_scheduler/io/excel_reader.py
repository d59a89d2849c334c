"""Read fellowship scheduling data from an .xlsx workbook.

Expected sheets:
  Roster       Fellow | PGY
  Blocks       Block | Start | End
  Schedule     Fellow | Block 1 | ... | Block N
  Vacations    Fellow | Start Block | End Block | Reason | Status   (optional)
  Call         Weekend | Fellow | Relaxed | Rule                    (optional)
  Night Float  Weekend | Fellow | Relaxed | Rule                    (optional)
"""

from __future__ import annotations

from datetime import date, datetime
from pathlib import Path

import openpyxl

from fellowship_scheduler.models.assignments import (
    APPROVED,
    VACATION_REASON,
    DutySchedule,
    RotationSchedule,
    Vacation,
    normalize_duty_schedule,
)
from fellowship_scheduler.models.calendar import Block, parse_weekend_key
from fellowship_scheduler.models.fellow import PGY_LEVELS, Fellow

ROSTER_SHEET = "Roster"
BLOCKS_SHEET = "Blocks"
SCHEDULE_SHEET = "Schedule"
VACATIONS_SHEET = "Vacations"
CALL_SHEET = "Call"
FLOAT_SHEET = "Night Float"


class WorkbookError(ValueError):
    """The workbook is missing a sheet or holds malformed rows."""


def _str(val) -> str:
    """Safely convert a cell value to string."""
    if val is None:
        return ""
    return str(val).strip()


def _int(val, what: str) -> int:
    try:
        return int(val)
    except (ValueError, TypeError):
        raise WorkbookError(f"Expected a number for {what}, got {val!r}") from None


def _date(val, what: str) -> date:
    if isinstance(val, datetime):
        return val.date()
    if isinstance(val, date):
        return val
    try:
        return date.fromisoformat(_str(val))
    except ValueError:
        raise WorkbookError(f"Expected a date for {what}, got {val!r}") from None


def _truthy(val) -> bool:
    if isinstance(val, bool):
        return val
    return _str(val).lower() in ("x", "yes", "true", "1")


class ExcelReader:
    """Reads roster, calendar and schedules from a fellowship workbook."""

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self._wb = openpyxl.load_workbook(str(self.path), read_only=True, data_only=True)

    def close(self):
        self._wb.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()

    def has_sheet(self, name: str) -> bool:
        return name in self._wb.sheetnames

    def _sheet(self, name: str):
        if not self.has_sheet(name):
            raise WorkbookError(f"Workbook {self.path.name} has no '{name}' sheet")
        return self._wb[name]

    def _rows(self, name: str):
        """Non-empty data rows below the header."""
        for row in self._sheet(name).iter_rows(min_row=2, values_only=True):
            if row and _str(row[0]):
                yield row

    # ── Roster ────────────────────────────────────────────────

    def read_roster(self) -> list[Fellow]:
        fellows = []
        for row in self._rows(ROSTER_SHEET):
            name = _str(row[0])
            pgy = _int(row[1] if len(row) > 1 else None, f"PGY of {name}")
            if pgy not in PGY_LEVELS:
                raise WorkbookError(f"{name} has PGY {pgy}; expected one of {PGY_LEVELS}")
            fellows.append(Fellow(name=name, pgy=pgy))
        if not fellows:
            raise WorkbookError("Roster sheet lists no fellows")
        return fellows

    # ── Calendar ──────────────────────────────────────────────

    def read_blocks(self) -> list[Block]:
        blocks = []
        for row in self._rows(BLOCKS_SHEET):
            number = _int(row[0], "block number")
            blocks.append(Block(
                number=number,
                start_date=_date(row[1] if len(row) > 1 else None, f"block {number} start"),
                end_date=_date(row[2] if len(row) > 2 else None, f"block {number} end"),
            ))
        blocks.sort(key=lambda b: b.number)
        return blocks

    # ── Rotation schedule ─────────────────────────────────────

    def read_schedule(self, n_blocks: int | None = None) -> RotationSchedule:
        """Rotation labels per fellow, padded or cut to ``n_blocks``."""
        schedule: RotationSchedule = {}
        for row in self._rows(SCHEDULE_SHEET):
            labels = [_str(v) for v in row[1:]]
            if n_blocks is not None:
                labels = (labels + [""] * n_blocks)[:n_blocks]
            schedule[_str(row[0])] = labels
        return schedule

    # ── Vacations ─────────────────────────────────────────────

    def read_vacations(self) -> list[Vacation]:
        if not self.has_sheet(VACATIONS_SHEET):
            return []
        vacations = []
        for row in self._rows(VACATIONS_SHEET):
            fellow = _str(row[0])
            start = _int(row[1] if len(row) > 1 else None, f"{fellow} vacation start block")
            end = row[2] if len(row) > 2 and row[2] is not None else start
            vacations.append(Vacation(
                fellow=fellow,
                start_block=start,
                end_block=_int(end, f"{fellow} vacation end block"),
                reason=_str(row[3]) if len(row) > 3 and row[3] else VACATION_REASON,
                status=_str(row[4]).lower() if len(row) > 4 and row[4] else APPROVED,
            ))
        return vacations

    # ── Call / night float ────────────────────────────────────

    def _read_duty(self, sheet: str) -> DutySchedule:
        if not self.has_sheet(sheet):
            return {}
        raw = {}
        for row in self._rows(sheet):
            key = _str(row[0])
            try:
                parse_weekend_key(key)
            except ValueError as e:
                raise WorkbookError(f"{sheet} sheet: {e}") from None
            raw[key] = {
                "name": _str(row[1]) if len(row) > 1 else "",
                "relaxed": _truthy(row[2]) if len(row) > 2 else False,
                "rule": (_str(row[3]) or None) if len(row) > 3 else None,
            }
        return normalize_duty_schedule(raw)

    def read_call_schedule(self) -> DutySchedule:
        return self._read_duty(CALL_SHEET)

    def read_float_schedule(self) -> DutySchedule:
        return self._read_duty(FLOAT_SHEET)
