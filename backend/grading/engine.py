"""
engine.py - Student grading and aggregation.

For each student:
  1. Grade every subject against the class distribution (z-score bands)
  2. Pick the best 4 core and best 2 elective results
  3. Sum their grade values into the best-six aggregate
  4. Derive the promotion category, remarks and indicator ratings
Then rank the whole class by (aggregate asc, total score desc).
"""

import logging
from typing import Dict, FrozenSet, Iterable, List, Mapping, Optional, Sequence, Tuple

from grading.distribution import subject_score
from grading.models import (
    ClassStatistics,
    ComputedSubject,
    GradingSettings,
    ProcessedStudent,
    StaffMember,
    StudentRecord,
)
from grading.narrative import (
    DEFAULT_RECOMMENDATION,
    combine_remarks,
    narrate_overall_performance,
    narrate_weak_subjects,
)
from grading.scales import (
    WEAK_GRADE_VALUE,
    categorize_aggregate,
    compute_z_score,
    generate_subject_remark,
    get_grade_from_z_score,
    get_observation_rating,
    get_proficiency,
)

logger = logging.getLogger(__name__)

BEST_CORE_COUNT = 4
BEST_ELECTIVE_COUNT = 2
UNASSIGNED_FACILITATOR = "TBA"


# ── Per-subject grading ─────────────────────────────────────────────

def resolve_facilitator(
    subject: str,
    facilitator_mapping: Mapping[str, str],
    staff_list: Sequence[StaffMember] = (),
) -> str:
    """Roster assignment first, then the subject mapping, then 'TBA'."""
    for staff in staff_list:
        if staff.subjects and subject in staff.subjects:
            return staff.name
    return facilitator_mapping.get(subject) or UNASSIGNED_FACILITATOR


def grade_subject(
    subject: str,
    score: float,
    mean: float,
    std_dev: float,
    settings: GradingSettings,
) -> ComputedSubject:
    graded = get_grade_from_z_score(score, mean, std_dev, settings.grading_remarks)
    proficiency = get_proficiency(score)
    return ComputedSubject(
        subject=subject,
        score=score,
        grade=graded["grade"],
        grade_value=graded["value"],
        category=graded["category"],
        remark=generate_subject_remark(score),
        facilitator=resolve_facilitator(subject, settings.facilitator_mapping, settings.staff_list),
        z_score=compute_z_score(score, mean, std_dev),
        proficiency=proficiency["grade"],
        proficiency_remark=proficiency["remark"],
    )


# ── Best-six aggregate ──────────────────────────────────────────────

def _subject_sort_key(result: ComputedSubject) -> Tuple[int, float]:
    # grade value ascending, then raw score descending
    return (result.grade_value, -result.score)


def select_best_six(
    results: Iterable[ComputedSubject], core_subjects: FrozenSet[str]
) -> Tuple[List[ComputedSubject], List[ComputedSubject]]:
    """Return (best 4 core, best 2 electives); fewer when not offered."""
    cores = []
    electives = []
    for result in results:
        (cores if result.subject in core_subjects else electives).append(result)
    cores.sort(key=_subject_sort_key)
    electives.sort(key=_subject_sort_key)
    return cores[:BEST_CORE_COUNT], electives[:BEST_ELECTIVE_COUNT]


def compute_aggregate(best_cores: Iterable[ComputedSubject], best_electives: Iterable[ComputedSubject]) -> int:
    return sum(r.grade_value for r in best_cores) + sum(r.grade_value for r in best_electives)


# ── Remarks and indicators ──────────────────────────────────────────

def synthesize_remarks(
    student: StudentRecord, results: Iterable[ComputedSubject], category: str
) -> Tuple[str, str]:
    """
    Return (overall_remark, weakness_analysis).

    A manually entered final remark is used verbatim and suppresses
    the generated weakness analysis.
    """
    if student.final_remark and student.final_remark.strip():
        return student.final_remark, ""
    weak = [r.subject for r in results if r.grade_value >= WEAK_GRADE_VALUE]
    weakness = narrate_weak_subjects(weak)
    teacher_remark = student.overall_remark or narrate_overall_performance(category)
    return combine_remarks(weakness, teacher_remark), weakness


def merge_indicator_ratings(
    skills: Mapping[str, str], observation_scores: Mapping[str, Sequence[int]]
) -> Dict[str, str]:
    """Entered ratings win; observation points fill only the gaps."""
    merged = dict(skills)
    for indicator, points in observation_scores.items():
        if merged.get(indicator) or not points:
            continue
        rating = get_observation_rating(points)
        if rating:
            merged[indicator] = rating
    return merged


# ── Student and class processing ────────────────────────────────────

def process_student(
    student: StudentRecord,
    stats: ClassStatistics,
    subject_list: Sequence[str],
    settings: GradingSettings,
) -> ProcessedStudent:
    """Grade and aggregate one student. Rank is left at 0."""
    results = []
    total_score = 0.0
    for subject in subject_list:
        score = subject_score(student, subject)
        total_score += score
        results.append(
            grade_subject(
                subject,
                score,
                stats.subject_means.get(subject, 0.0),
                stats.subject_std_devs.get(subject, 0.0),
                settings,
            )
        )

    best_cores, best_electives = select_best_six(results, settings.core_subjects)
    aggregate = compute_aggregate(best_cores, best_electives)
    category = categorize_aggregate(aggregate)
    overall_remark, weakness = synthesize_remarks(student, results, category)

    return ProcessedStudent(
        id=student.id,
        name=student.name,
        subjects=results,
        total_score=total_score,
        best_six_aggregate=aggregate,
        best_core_subjects=best_cores,
        best_elective_subjects=best_electives,
        category=category,
        overall_remark=overall_remark,
        weakness_analysis=weakness,
        recommendation=student.recommendation or DEFAULT_RECOMMENDATION,
        attendance=student.attendance or "0",
        age=student.age,
        promoted_to=student.promoted_to,
        conduct=student.conduct,
        interest=student.interest,
        skills=merge_indicator_ratings(student.skills, student.observation_scores),
    )


def _rank_sort_key(student: ProcessedStudent) -> Tuple[int, float]:
    # aggregate ascending, then total raw score descending
    return (student.best_six_aggregate, -student.total_score)


def rank_students(processed: List[ProcessedStudent]) -> List[ProcessedStudent]:
    """Sort best-first and assign ranks 1..N in place."""
    processed.sort(key=_rank_sort_key)
    for position, student in enumerate(processed):
        student.rank = position + 1
    return processed


def process_student_data(
    stats: ClassStatistics,
    students: Iterable[StudentRecord],
    subject_list: Sequence[str],
    settings: Optional[GradingSettings] = None,
) -> List[ProcessedStudent]:
    """Grade, aggregate and rank a whole class."""
    settings = settings or GradingSettings()
    subject_list = list(subject_list)
    processed = [process_student(s, stats, subject_list, settings) for s in students]
    rank_students(processed)
    logger.debug("Ranked %d students over %d subjects", len(processed), len(subject_list))
    return processed
