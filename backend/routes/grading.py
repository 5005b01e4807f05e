"""
Grading routes — class distribution, grading/ranking and facilitator endpoints.

Every endpoint recomputes from the posted payload:
  {
    "students": [...],          # StudentRecord dicts, or
    "data": [...],              # score sheet rows (wide or long format)
    "subjects": [...],
    "settings": {...}           # facilitator_mapping, grading_remarks, staff_list, core_subjects
  }
"""

import logging
import os
from typing import List, Tuple

from fastapi import APIRouter, HTTPException
import pandas as pd

from grading.distribution import calculate_class_statistics
from grading.engine import process_student_data
from grading.facilitators import calculate_facilitator_stats
from grading.models import DEFAULT_CORE_SUBJECTS, GradingSettings, StudentRecord
from grading.scales import get_all_grade_thresholds
from grading.sheet import records_from_dataframe
from grading.summary import compute_class_summary

logger = logging.getLogger(__name__)

router = APIRouter()

raw_core = os.getenv("CORE_SUBJECTS", "")
CORE_SUBJECTS = frozenset(s.strip() for s in raw_core.split(",") if s.strip()) or DEFAULT_CORE_SUBJECTS


def _class_from_payload(payload: dict) -> Tuple[List[StudentRecord], List[str], GradingSettings]:
    """Extract students, subject list and settings from request payload."""
    subjects = payload.get("subjects")
    if not subjects:
        raise HTTPException(400, "No subjects provided.")
    subjects = [str(s) for s in subjects]

    try:
        if payload.get("students") is not None:
            students = [StudentRecord.from_dict(s) for s in payload["students"]]
        elif payload.get("data"):
            students = records_from_dataframe(pd.DataFrame(payload["data"]), subjects)
        else:
            raise HTTPException(400, "No student data provided.")
        settings = GradingSettings.from_dict(payload.get("settings") or {}, core_subjects=CORE_SUBJECTS)
    except (KeyError, TypeError, ValueError) as e:
        raise HTTPException(400, f"Invalid class payload: {str(e)}")
    return students, subjects, settings


def _grade_class(payload: dict):
    students, subjects, settings = _class_from_payload(payload)
    try:
        stats = calculate_class_statistics(students, subjects)
        processed = process_student_data(stats, students, subjects, settings)
    except (TypeError, ValueError) as e:
        raise HTTPException(400, f"Failed to grade class: {str(e)}")
    logger.info("Graded %d students across %d subjects", len(processed), len(subjects))
    return stats, processed


@router.post("/statistics")
async def statistics(payload: dict):
    """Per-subject class mean and population standard deviation."""
    students, subjects, _ = _class_from_payload(payload)
    try:
        stats = calculate_class_statistics(students, subjects)
    except (TypeError, ValueError) as e:
        raise HTTPException(400, f"Failed to compute statistics: {str(e)}")
    return stats.to_dict()


@router.post("/process")
async def process(payload: dict):
    """Graded, aggregated and ranked students."""
    stats, processed = _grade_class(payload)
    return {
        "statistics": stats.to_dict(),
        "students": [p.to_dict() for p in processed],
    }


@router.post("/facilitators")
async def facilitators(payload: dict):
    """Performance index per (facilitator, subject), best first."""
    _, processed = _grade_class(payload)
    return {"facilitators": [f.to_dict() for f in calculate_facilitator_stats(processed)]}


@router.post("/summary")
async def summary(payload: dict):
    """Master sheet figures: class average aggregate, categories, subject breakdown."""
    stats, processed = _grade_class(payload)
    return compute_class_summary(processed, stats)


@router.get("/grade-scale")
async def grade_scale():
    """Return the z-score grade scale and core subject set."""
    return {
        "grade_scale": get_all_grade_thresholds(),
        "core_subjects": sorted(CORE_SUBJECTS),
    }
