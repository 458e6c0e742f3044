"""Report assembly package."""

from pagotrack.reports.assembler import (
    MISSED_LABEL,
    NO_NOTE_LABEL,
    build_monthly_report,
    build_total_report,
    report_file_name,
    slot_to_row,
)

__all__ = [
    "MISSED_LABEL",
    "NO_NOTE_LABEL",
    "build_monthly_report",
    "build_total_report",
    "report_file_name",
    "slot_to_row",
]
