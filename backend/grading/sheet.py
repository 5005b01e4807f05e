"""
sheet.py - Score sheet ingestion.

Turns a class score sheet into StudentRecords:
- CSV or Excel (.xlsx) files
- Wide format (one row per student, one column per subject)
- Long format (one row per student-subject, with 'subject' and 'score' columns)
- Fuzzy column name mapping for student metadata
"""

import logging
from pathlib import Path
from typing import Dict, Iterable, List, Optional

import numpy as np
import pandas as pd

from grading.models import StudentRecord

logger = logging.getLogger(__name__)

# Common column name variations for auto-mapping
COLUMN_ALIASES = {
    "id": ["id", "student_id", "studentid", "student id", "adm_no", "admission_no", "index_no", "s/n"],
    "name": ["name", "student_name", "student name", "full_name", "full name", "pupil_name", "learner_name"],
    "age": ["age"],
    "attendance": ["attendance", "days_present", "days present"],
    "conduct": ["conduct", "behaviour", "behavior"],
    "interest": ["interest", "interests"],
    "promoted_to": ["promoted_to", "promoted to", "promotion", "promotedto"],
    "overall_remark": ["overall_remark", "overall remark", "class_teacher_remark", "teacher remark"],
    "final_remark": ["final_remark", "final remark", "head_remark", "headteacher remark"],
    "recommendation": ["recommendation", "recommendations"],
    "subject": ["subject", "subject_name", "subject name", "course"],
    "score": ["score", "marks", "mark", "total", "total_score", "raw_score"],
}
LONG_ONLY_FIELDS = ("subject", "score")


def read_score_sheet(file_path: str) -> pd.DataFrame:
    """Read the first non-empty sheet of a CSV or Excel file as strings."""
    path = Path(file_path)
    ext = path.suffix.lower()

    if ext == ".csv":
        return pd.read_csv(file_path, dtype=str)

    if ext == ".xlsx":
        xls = pd.ExcelFile(file_path, engine="openpyxl")
        for sheet_name in xls.sheet_names:
            df = pd.read_excel(xls, sheet_name=sheet_name, dtype=str)
            if not df.empty and len(df.columns) > 1:
                return df
        raise ValueError("No valid sheets found in the Excel file.")

    raise ValueError(f"Unsupported file type: {ext}")


def suggest_column_mapping(df: pd.DataFrame) -> Dict[str, Optional[str]]:
    """Map each known field to the first matching column, or None."""
    cols_lower = {str(c).lower().strip(): c for c in df.columns}
    mapping: Dict[str, Optional[str]] = {}
    for field, aliases in COLUMN_ALIASES.items():
        mapping[field] = next((cols_lower[a] for a in aliases if a in cols_lower), None)
    return mapping


def _clean_text(value) -> Optional[str]:
    if value is None or (isinstance(value, float) and np.isnan(value)):
        return None
    text = str(value).strip()
    return text if text and text.lower() != "nan" else None


def _to_score(value) -> Optional[float]:
    num = pd.to_numeric(pd.Series([value]), errors="coerce").iloc[0]
    return None if pd.isna(num) else float(num)


def _long_to_wide(df: pd.DataFrame, mapping: Dict[str, Optional[str]]) -> pd.DataFrame:
    key_col = mapping["id"] or mapping["name"]
    meta_cols = [c for f, c in mapping.items() if c and f not in LONG_ONLY_FIELDS]
    df = df.assign(**{mapping["score"]: pd.to_numeric(df[mapping["score"]], errors="coerce")})
    scores = df.pivot_table(
        index=key_col, columns=mapping["subject"], values=mapping["score"], aggfunc="last"
    )
    meta = df[meta_cols].drop_duplicates(subset=[key_col], keep="last").set_index(key_col)
    return meta.join(scores).reset_index()


def records_from_dataframe(df: pd.DataFrame, subject_list: Iterable[str]) -> List[StudentRecord]:
    """
    Build StudentRecords from a score sheet.

    Only subjects in subject_list are read; blank or non-numeric cells
    become missing scores. Non-numeric ids are replaced by row position.
    """
    subject_list = list(subject_list)
    mapping = suggest_column_mapping(df)
    if not (mapping["id"] or mapping["name"]):
        raise ValueError("Score sheet needs a student name or id column.")

    if mapping["subject"] and mapping["score"]:
        df = _long_to_wide(df, mapping)
        mapping = suggest_column_mapping(df)

    cols_lower = {str(c).lower().strip(): c for c in df.columns}
    subject_cols = {s: cols_lower.get(s.lower().strip()) for s in subject_list}
    absent = [s for s, col in subject_cols.items() if col is None]
    if absent:
        logger.info("Score sheet has no column for: %s", ", ".join(absent))

    records = []
    for position, (_, row) in enumerate(df.iterrows(), start=1):
        raw_id = _to_score(row[mapping["id"]]) if mapping["id"] else None
        fields = {
            f: _clean_text(row[c])
            for f, c in mapping.items()
            if c and f not in ("id", "name") + LONG_ONLY_FIELDS
        }
        records.append(
            StudentRecord(
                id=int(raw_id) if raw_id is not None else position,
                name=(_clean_text(row[mapping["name"]]) or "") if mapping["name"] else "",
                scores={s: _to_score(row[col]) for s, col in subject_cols.items() if col is not None},
                **fields,
            )
        )
    return records
