# File: houselook/utils/csv_export.py
# Status: COMPLETE
# Report CSV generation for the admin dashboard downloads

from datetime import date
from typing import Any, Dict, List, Optional, Sequence

REPORT_TYPES = ("users", "properties", "transactions", "revenue")


def _cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    text = str(value)
    # Comma-bearing strings are quoted; embedded quotes are passed through as-is
    if isinstance(value, str) and "," in value:
        return f'"{text}"'
    return text


def convert_to_csv(rows: Sequence[Dict[str, Any]]) -> str:
    """
    Render rows as CSV. Columns are the keys of the first row, in order.

    Returns an empty string for no rows.
    """
    if not rows:
        return ""
    keys = list(rows[0].keys())
    lines = [",".join(keys)]
    for row in rows:
        lines.append(",".join(_cell(row.get(key)) for key in keys))
    return "\n".join(lines)


def entries_to_rows(entries: List[tuple]) -> List[Dict[str, Any]]:
    """Flatten (key, value) store entries into one row per entry."""
    rows = []
    for key, value in entries:
        if isinstance(value, dict):
            row = {"id": key}
            row.update(value)
        else:
            row = {"id": key, "value": value}
        rows.append(row)
    return rows


def report_filename(report_type: str, today: Optional[date] = None) -> str:
    today = today or date.today()
    return f"houselook_{report_type}_report_{today.isoformat()}.csv"
