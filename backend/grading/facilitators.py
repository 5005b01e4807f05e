"""
facilitators.py - Per (facilitator, subject) performance roll-up.

Performance percentage = (1 - total_grade_value / (students * 9)) * 100,
rounded to 2 decimal places, then mapped back onto the A1..F9 bands.
"""

import logging
from typing import Dict, Iterable, List, Tuple

from grading.models import FacilitatorStats, ProcessedStudent
from grading.scales import LOWEST_GRADE, get_performance_grade

logger = logging.getLogger(__name__)

WORST_GRADE_VALUE = LOWEST_GRADE[1]


def performance_percentage(total_grade_value: float, student_count: int) -> float:
    worst_total = student_count * WORST_GRADE_VALUE
    if worst_total <= 0:
        return 0.0
    return round((1 - total_grade_value / worst_total) * 100, 2)


def calculate_facilitator_stats(processed_students: Iterable[ProcessedStudent]) -> List[FacilitatorStats]:
    """One entry per (facilitator, subject), best performance first."""
    stats_map: Dict[Tuple[str, str], FacilitatorStats] = {}
    for student in processed_students:
        for result in student.subjects:
            key = (result.facilitator, result.subject)
            entry = stats_map.get(key)
            if entry is None:
                entry = stats_map[key] = FacilitatorStats(facilitator_name=result.facilitator, subject=result.subject)
            entry.student_count += 1
            entry.grade_counts[result.grade] = entry.grade_counts.get(result.grade, 0) + 1
            entry.total_grade_value += result.grade_value

    for entry in stats_map.values():
        if entry.student_count:
            entry.average_grade_value = entry.total_grade_value / entry.student_count
        entry.performance_percentage = performance_percentage(entry.total_grade_value, entry.student_count)
        entry.performance_grade = get_performance_grade(entry.performance_percentage)

    logger.debug("Aggregated %d facilitator/subject pairs", len(stats_map))
    return sorted(stats_map.values(), key=lambda e: e.performance_percentage, reverse=True)
