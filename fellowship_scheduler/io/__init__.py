from .csv_schedule import ImportResult, build_schedule_csv, build_violations_csv, parse_schedule_table
from .excel_reader import ExcelReader, WorkbookError
from .excel_writer import ExcelWriter

__all__ = [
    "ImportResult", "build_schedule_csv", "build_violations_csv", "parse_schedule_table",
    "ExcelReader", "WorkbookError",
    "ExcelWriter",
]
