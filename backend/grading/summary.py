"""
summary.py - Class-level summary of a graded class (master sheet figures).

Computes:
- Class average best-six aggregate
- Count of students per promotion category
- Per-subject mean, std, min/max, grade distribution and credit passes
"""

from typing import Any, Dict, List, Optional, Sequence

import numpy as np
import pandas as pd

from grading.models import ClassStatistics, ProcessedStudent, empty_grade_counts
from grading.scales import CREDIT_GRADE_VALUE, FAILING_CATEGORY, PROMOTION_CATEGORIES


def _safe_float(val) -> Optional[float]:
    """Convert to float or return None."""
    try:
        v = float(val)
        return None if np.isnan(v) or np.isinf(v) else round(v, 2)
    except (TypeError, ValueError):
        return None


def _sanitize(obj):
    """Recursively coerce numpy/pandas scalars to JSON-safe Python types."""
    if isinstance(obj, dict):
        return {k: _sanitize(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_sanitize(v) for v in obj]
    if isinstance(obj, np.bool_):
        return bool(obj)
    if isinstance(obj, np.integer):
        return int(obj)
    if isinstance(obj, (np.floating, float)):
        v = float(obj)
        return None if (np.isnan(v) or np.isinf(v)) else v
    return obj


def results_frame(processed: Sequence[ProcessedStudent]) -> pd.DataFrame:
    """Long-format frame: one row per (student, subject) result."""
    rows = [
        {
            "student_id": student.id,
            "subject": result.subject,
            "score": result.score,
            "grade": result.grade,
            "grade_value": result.grade_value,
            "facilitator": result.facilitator,
        }
        for student in processed
        for result in student.subjects
    ]
    return pd.DataFrame(rows, columns=["student_id", "subject", "score", "grade", "grade_value", "facilitator"])


def class_average_aggregate(processed: Sequence[ProcessedStudent]) -> float:
    if not processed:
        return 0.0
    return float(np.mean([s.best_six_aggregate for s in processed]))


def compute_class_summary(
    processed: Sequence[ProcessedStudent],
    stats: Optional[ClassStatistics] = None,
) -> Dict[str, Any]:
    """Summarise a ranked class for the master sheet."""
    categories = [c for _, c in PROMOTION_CATEGORIES] + [FAILING_CATEGORY]
    category_counts = {c: 0 for c in categories}
    for student in processed:
        category_counts[student.category] = category_counts.get(student.category, 0) + 1

    df = results_frame(processed)
    subjects_data: List[Dict[str, Any]] = []
    for subj, group in df.groupby("subject", sort=False):
        scores = group["score"]
        grade_counts = empty_grade_counts()
        grade_counts.update({str(g): int(n) for g, n in group["grade"].value_counts().items()})
        subjects_data.append({
            "subject": str(subj),
            # population figures, matching the grading distribution
            "mean": _safe_float(stats.subject_means.get(subj) if stats else scores.mean()),
            "std": _safe_float(stats.subject_std_devs.get(subj) if stats else scores.std(ddof=0)),
            "min": _safe_float(scores.min()),
            "max": _safe_float(scores.max()),
            "average_grade_value": _safe_float(group["grade_value"].mean()),
            "grade_counts": grade_counts,
            "credit_passes": int((group["grade_value"] <= CREDIT_GRADE_VALUE).sum()),
            "count": len(group),
        })

    top = processed[0] if processed else None
    return _sanitize({
        "total_students": len(processed),
        "class_average_aggregate": _safe_float(class_average_aggregate(processed)),
        "category_counts": category_counts,
        "top_student": {"id": top.id, "name": top.name, "aggregate": top.best_six_aggregate} if top else None,
        "subjects": subjects_data,
    })
