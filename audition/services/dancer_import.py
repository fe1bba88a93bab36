"""
Dancer roster import from CSV
"""
import csv
import io
import logging
from typing import Any, Dict, List

from audition.core.store import Store
from audition.errors import ValidationError
from audition.services.sessions import add_dancers


logger = logging.getLogger(__name__)

NUMBER_COLUMNS = ("dancer_number", "number", "#")


def parse_dancer_csv(text: str) -> List[Dict[str, Any]]:
    """
    Parse a dancer roster

    CSV format:
        dancer_number,name,grade
        101,Ava Chen,10
        102,Liam Ortiz,
        103,"Smith, Jo",11

    "number" or "#" are accepted for the number column; grade is optional.

    Args:
        text: CSV file contents

    Returns:
        List of {"dancer_number", "name", "grade"} dicts, raw values (validated on insert)

    Raises:
        ValidationError: Missing header or required columns
    """
    reader = csv.DictReader(io.StringIO(text.strip()))
    if not reader.fieldnames:
        raise ValidationError("CSV is empty")

    headers = {h.strip().lower(): h for h in reader.fieldnames if h}
    number_col = next((headers[c] for c in NUMBER_COLUMNS if c in headers), None)
    name_col = headers.get("name")
    grade_col = headers.get("grade")
    if number_col is None or name_col is None:
        raise ValidationError("CSV needs a dancer_number and a name column")

    rows = []
    for row in reader:
        number = (row.get(number_col) or "").strip()
        name = (row.get(name_col) or "").strip()
        if not number and not name:
            continue  # blank line
        grade = (row.get(grade_col) or "").strip() if grade_col else ""
        rows.append({"dancer_number": number, "name": name, "grade": grade or None})

    return rows


def import_dancers_csv(store: Store, session_id: str, text: str) -> Dict[str, Any]:
    """
    Parse and insert a CSV roster

    Insertion stops at the first bad row; earlier rows stay imported and the
    failure reports its 1-based data row (header not counted).
    """
    rows = parse_dancer_csv(text)
    result = add_dancers(store, session_id, rows)
    if result["failed"] is not None:
        result["failed"]["row"] = result["failed"]["index"] + 1
    logger.info(
        f"📥 CSV import: {len(result['imported'])}/{len(rows)} dancers imported"
        + (f", stopped at row {result['failed']['row']}" if result["failed"] else "")
    )
    return result
