"""Flat roster input: rows of (student number, surname and initials).

Spreadsheet decoding happens upstream; this module only sees rows of cells,
or a CSV text stream.
"""

from __future__ import annotations

import csv
from typing import Iterable, Sequence, TextIO

from ..core.exceptions import ValidationError
from .model import StudentUpload


def _cell(row: Sequence, index: int) -> str:
    if index >= len(row) or row[index] is None:
        return ""
    return str(row[index]).strip()


def _is_numeric(value: str) -> bool:
    try:
        float(value)
    except ValueError:
        return False
    return True


def parse_student_rows(rows: Iterable[Sequence]) -> list[StudentUpload]:
    """Turn raw rows into uploads.

    A first row whose first cell is not a number is treated as the header.
    Blank rows are dropped; rows missing one cell are kept so the upload can
    count them as invalid.
    """

    out: list[StudentUpload] = []
    for i, row in enumerate(rows):
        student_no = _cell(row, 0)
        if i == 0 and not _is_numeric(student_no):
            continue
        surname_initials = _cell(row, 1)
        if student_no or surname_initials:
            out.append(StudentUpload(student_no=student_no, surname_initials=surname_initials))
    return out


def read_students_csv(stream: TextIO) -> list[StudentUpload]:
    try:
        return parse_student_rows(csv.reader(stream))
    except (UnicodeDecodeError, csv.Error) as e:
        raise ValidationError("Could not read file. Upload a UTF-8 CSV.") from e
