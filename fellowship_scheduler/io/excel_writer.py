"""Write schedules and findings back to a copy of the fellowship workbook."""

from __future__ import annotations

import shutil
from pathlib import Path

import openpyxl
from openpyxl.styles import Font, PatternFill

from fellowship_scheduler.io.excel_reader import WorkbookError
from fellowship_scheduler.models.assignments import DutySchedule, RotationSchedule
from fellowship_scheduler.models.calendar import all_weekend_keys
from fellowship_scheduler.models.violation import Violation

SCHEDULE_SHEET = "Schedule"
CALL_SHEET = "Call"
FLOAT_SHEET = "Night Float"
VIOLATIONS_SHEET = "Violations"

_HEADER_FONT = Font(bold=True)
_RELAXED_FILL = PatternFill(start_color="FFF2CC", end_color="FFF2CC", fill_type="solid")
_ERROR_FILL = PatternFill(start_color="F8CBAD", end_color="F8CBAD", fill_type="solid")


class ExcelWriter:
    """Writes schedules to a copy of the source workbook.

    The source file is never modified; everything goes to ``output_path``
    (``<stem>_output.xlsx`` beside the source by default). An output path
    that resolves to the source raises ``WorkbookError``.
    """

    def __init__(self, source_path: str | Path, output_path: str | Path | None = None):
        self.source_path = Path(source_path)
        if output_path is None:
            stem = self.source_path.stem
            output_path = self.source_path.parent / f"{stem}_output.xlsx"
        self.output_path = Path(output_path)

        if self.output_path.resolve() == self.source_path.resolve():
            raise WorkbookError(f"Refusing to overwrite source workbook {self.source_path}")
        shutil.copy2(self.source_path, self.output_path)
        self._wb = openpyxl.load_workbook(str(self.output_path))

    def close(self):
        self._wb.close()

    def save(self):
        self._wb.save(str(self.output_path))

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.save()
        self.close()

    def _fresh_sheet(self, name: str, header: list[str]):
        """Replace ``name`` with an empty sheet holding only ``header``."""
        if name in self._wb.sheetnames:
            del self._wb[name]
        ws = self._wb.create_sheet(name)
        ws.append(header)
        for cell in ws[1]:
            cell.font = _HEADER_FONT
        return ws

    # ── Rotation schedule ─────────────────────────────────────

    def write_schedule(
        self,
        schedule: RotationSchedule,
        fellows: list[str],
        n_blocks: int = 26,
    ) -> None:
        ws = self._fresh_sheet(
            SCHEDULE_SHEET, ["Fellow"] + [f"Block {i + 1}" for i in range(n_blocks)]
        )
        for fellow in fellows:
            rotations = schedule.get(fellow) or []
            ws.append([fellow] + [
                rotations[i] if i < len(rotations) else "" for i in range(n_blocks)
            ])

    # ── Call / night float ────────────────────────────────────

    def write_duty_schedule(self, sheet_name: str, duty: DutySchedule, n_blocks: int = 26) -> None:
        """Write one row per weekend key; relaxed fills are highlighted."""
        ws = self._fresh_sheet(sheet_name, ["Weekend", "Fellow", "Relaxed", "Rule"])
        for key in all_weekend_keys(n_blocks):
            entry = duty.get(key)
            if entry is None:
                ws.append([key, "", "", ""])
                continue
            ws.append([key, entry.name or "", "x" if entry.relaxed else "", entry.rule or ""])
            if entry.relaxed:
                for cell in ws[ws.max_row]:
                    cell.fill = _RELAXED_FILL

    def write_call_schedule(self, duty: DutySchedule, n_blocks: int = 26) -> None:
        self.write_duty_schedule(CALL_SHEET, duty, n_blocks)

    def write_float_schedule(self, duty: DutySchedule, n_blocks: int = 26) -> None:
        self.write_duty_schedule(FLOAT_SHEET, duty, n_blocks)

    # ── Findings ──────────────────────────────────────────────

    def write_violations(self, violations: list[Violation]) -> None:
        ws = self._fresh_sheet(
            VIOLATIONS_SHEET,
            ["Type", "Severity", "Fellow", "Block", "Weekend", "Rule", "Start", "End", "Detail"],
        )
        for v in violations:
            ws.append([
                v.kind,
                v.severity,
                v.fellow or "",
                v.block,
                v.weekend or "",
                v.rule,
                v.start_date,
                v.end_date,
                v.detail,
            ])
            if v.is_error:
                ws.cell(row=ws.max_row, column=2).fill = _ERROR_FILL
