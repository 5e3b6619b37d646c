from __future__ import annotations

import io

import pandas as pd

from .matrix import AttendanceMatrix

NAME_COLUMN = "Student"


def matrix_to_frame(matrix: AttendanceMatrix) -> pd.DataFrame:
    """Rows = students in display order, columns = ISO session dates."""
    columns = [d.isoformat() for d in matrix.dates]
    data = []
    for student in matrix.students:
        row = {NAME_COLUMN: student.display_name}
        for d, col in zip(matrix.dates, columns):
            rec = matrix.get(student.student_id, d)
            row[col] = rec.status.value if rec else ""
        data.append(row)
    return pd.DataFrame(data, columns=[NAME_COLUMN, *columns])


def export_matrix_xlsx(matrix: AttendanceMatrix) -> bytes:
    out = io.BytesIO()
    df = matrix_to_frame(matrix)
    with pd.ExcelWriter(out, engine="openpyxl") as writer:
        df.to_excel(writer, index=False, sheet_name="Attendance")
    return out.getvalue()
