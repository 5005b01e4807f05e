"""
scales.py - Fixed grading bands, ladders and legends.

Every threshold table the engine relies on lives here:
  - z-score bands (A1 .. F9) used for distribution-relative grading
  - absolute-score subject remark ladder
  - promotion categories from the best-six aggregate
  - facilitator performance bands
  - observation-point indicator ratings (A+, A, D)
  - early-childhood proficiency scale (G, S, B)
"""

from typing import Any, Dict, List, Mapping, Optional, Sequence

from scipy import stats as sp_stats


# z-score bands (min_sigma_multiple, grade, value), ordered best to worst.
# A score qualifies for the first band where (score - mean) >= multiple * std.
Z_SCORE_BANDS = [
    (1.645, "A1", 1),
    (1.036, "B2", 2),
    (0.524, "B3", 3),
    (0.0, "C4", 4),
    (-0.524, "C5", 5),
    (-1.036, "C6", 6),
    (-1.645, "D7", 7),
    (-2.326, "E8", 8),
]
LOWEST_GRADE = ("F9", 9)
NEUTRAL_GRADE = ("C4", 4)

GRADE_LETTERS = ["A1", "B2", "B3", "C4", "C5", "C6", "D7", "E8", "F9"]
GRADE_VALUES = {letter: idx + 1 for idx, letter in enumerate(GRADE_LETTERS)}

DEFAULT_GRADING_REMARKS: Dict[str, str] = {
    "A1": "Excellent",
    "B2": "Very Good",
    "B3": "Good",
    "C4": "Credit",
    "C5": "Credit",
    "C6": "Credit",
    "D7": "Pass",
    "E8": "Pass",
    "F9": "Fail",
}

# Grade values at or above this are flagged as weak in remarks.
WEAK_GRADE_VALUE = 7
# Grade values at or below this count as a credit pass in class summaries.
CREDIT_GRADE_VALUE = 6

SUBJECT_REMARKS = [
    (90, "Outstanding mastery of subject concepts."),
    (80, "Excellent performance, shows great potential."),
    (70, "Very Good. Consistent effort displayed."),
    (60, "Good. Capable of achieving higher grades."),
    (55, "Credit. Satisfactory understanding shown."),
    (50, "Pass. Needs more dedication to studies."),
    (40, "Weak Pass. Remedial support recommended."),
]
FAILING_SUBJECT_REMARK = "Critical Failure. Immediate intervention required."

# (max_aggregate, category); lower aggregate is better.
PROMOTION_CATEGORIES = [
    (10, "Distinction"),
    (20, "Merit"),
    (36, "Pass"),
]
FAILING_CATEGORY = "Fail"

# (min_percentage, grade) for facilitator performance.
PERFORMANCE_BANDS = [
    (80, "A1"),
    (70, "B2"),
    (60, "B3"),
    (50, "C4"),
    (45, "C5"),
    (40, "C6"),
    (35, "D7"),
    (30, "E8"),
]

# (min_average, rating, description) for 1-9 observation points.
OBSERVATION_RATINGS = [
    (7, "A+", "Advanced"),
    (4, "A", "Achieved"),
    (0, "D", "Developing"),
]

# Early-childhood proficiency scale on absolute scores.
PROFICIENCY_SCALE = [
    (70, "G", "High Level of Proficiency"),
    (40, "S", "Sufficient Level of Proficiency"),
    (0, "B", "Approaching Proficiency"),
]


def get_grade_from_z_score(
    score: float,
    mean: float,
    std_dev: float,
    remarks: Optional[Mapping[str, str]] = None,
) -> Dict[str, Any]:
    """
    Grade a score relative to its class distribution.

    Returns {"grade", "value", "category"}. A zero standard deviation
    grades everyone C4, since the class has no spread to band against.
    """
    remarks = remarks or {}
    if std_dev == 0:
        grade, value = NEUTRAL_GRADE
    else:
        diff = score - mean
        grade, value = LOWEST_GRADE
        for multiple, band_grade, band_value in Z_SCORE_BANDS:
            if diff >= multiple * std_dev:
                grade, value = band_grade, band_value
                break
    category = remarks.get(grade) or DEFAULT_GRADING_REMARKS[grade]
    return {"grade": grade, "value": value, "category": category}


def compute_z_score(score: float, mean: float, std_dev: float) -> float:
    if std_dev == 0:
        return 0.0
    return (score - mean) / std_dev


def generate_subject_remark(score: float) -> str:
    """Descriptive remark bucketed on the absolute score."""
    for min_score, remark in SUBJECT_REMARKS:
        if score >= min_score:
            return remark
    return FAILING_SUBJECT_REMARK


def categorize_aggregate(aggregate: float) -> str:
    for max_aggregate, category in PROMOTION_CATEGORIES:
        if aggregate <= max_aggregate:
            return category
    return FAILING_CATEGORY


def get_performance_grade(percentage: float) -> str:
    for min_pct, grade in PERFORMANCE_BANDS:
        if percentage >= min_pct:
            return grade
    return LOWEST_GRADE[0]


def get_observation_rating(points: Optional[Sequence[float]]) -> str:
    """Rate an indicator from its 1-9 observation points; '' when unobserved."""
    if not points:
        return ""
    average = sum(points) / len(points)
    for min_average, rating, _ in OBSERVATION_RATINGS:
        if average >= min_average:
            return rating
    return OBSERVATION_RATINGS[-1][1]


def get_proficiency(score: float) -> Dict[str, str]:
    """Early-childhood G/S/B proficiency for an absolute score."""
    for min_score, grade, remark in PROFICIENCY_SCALE:
        if score >= min_score:
            return {"grade": grade, "remark": remark}
    _, grade, remark = PROFICIENCY_SCALE[-1]
    return {"grade": grade, "remark": remark}


def get_all_grade_thresholds(remarks: Optional[Mapping[str, str]] = None) -> List[Dict[str, Any]]:
    """Return the full z-score scale for legend/reference."""
    remarks = remarks or {}
    thresholds = []
    bands = Z_SCORE_BANDS + [(None, LOWEST_GRADE[0], LOWEST_GRADE[1])]
    for idx, (multiple, grade, value) in enumerate(bands):
        upper = None if idx == 0 else bands[idx - 1][0]
        thresholds.append(
            {
                "grade": grade,
                "value": value,
                "min_z": multiple,
                "max_z": upper,
                # share of a normal population scoring below the band floor
                "percentile": None if multiple is None else round(float(sp_stats.norm.cdf(multiple)) * 100, 1),
                "description": remarks.get(grade) or DEFAULT_GRADING_REMARKS[grade],
            }
        )
    return thresholds
