"""
distribution.py - Per-subject class distribution (mean, population std).

Students without a score for a subject contribute 0 to that subject.
"""

import logging
from typing import Iterable, Sequence

import numpy as np

from grading.models import ClassStatistics, StudentRecord

logger = logging.getLogger(__name__)


def subject_score(student: StudentRecord, subject: str) -> float:
    """Raw score for a subject; missing, blank or NaN counts as 0."""
    value = student.scores.get(subject)
    if value is None or value == "":
        return 0.0
    score = float(value)
    return 0.0 if np.isnan(score) else score


def calculate_mean(values: Sequence[float]) -> float:
    if len(values) == 0:
        return 0.0
    return float(np.mean(np.asarray(values, dtype=float)))


def calculate_std_dev(values: Sequence[float], mean: float) -> float:
    """Population standard deviation (divide by N) around a given mean."""
    if len(values) == 0:
        return 0.0
    arr = np.asarray(values, dtype=float)
    # identical scores must give exactly 0, not float residue
    if np.ptp(arr) == 0:
        return 0.0
    return float(np.sqrt(np.mean((arr - mean) ** 2)))


def calculate_class_statistics(
    students: Iterable[StudentRecord], subject_list: Iterable[str]
) -> ClassStatistics:
    """Mean and population standard deviation for every subject in the list."""
    students = list(students)
    means = {}
    std_devs = {}
    for subject in subject_list:
        scores = [subject_score(s, subject) for s in students]
        mean = calculate_mean(scores)
        means[subject] = mean
        std_devs[subject] = calculate_std_dev(scores, mean)

    flat = [subj for subj, std in std_devs.items() if std == 0]
    logger.debug(
        "Class distribution over %d students, %d subjects (%d without variance)",
        len(students), len(means), len(flat),
    )
    return ClassStatistics(subject_means=means, subject_std_devs=std_devs)
