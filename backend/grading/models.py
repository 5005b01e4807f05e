"""
models.py - Records flowing through the grading engine.

Inputs (StudentRecord, StaffMember, GradingSettings) are owned by the
caller and only read. Outputs are fresh objects built on every call.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, FrozenSet, List, Mapping, Optional, Tuple

from grading.scales import DEFAULT_GRADING_REMARKS, GRADE_LETTERS

DEFAULT_CORE_SUBJECTS: FrozenSet[str] = frozenset(
    {"English Language", "Mathematics", "Integrated Science", "Social Studies"}
)


@dataclass(frozen=True)
class StudentRecord:
    id: int
    name: str
    scores: Mapping[str, Optional[float]] = field(default_factory=dict)
    age: Optional[str] = None
    attendance: Optional[str] = None
    conduct: Optional[str] = None
    interest: Optional[str] = None
    promoted_to: Optional[str] = None
    overall_remark: Optional[str] = None
    final_remark: Optional[str] = None
    recommendation: Optional[str] = None
    skills: Mapping[str, str] = field(default_factory=dict)
    observation_scores: Mapping[str, List[int]] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "StudentRecord":
        """Build from a JSON-style dict; accepts camelCase keys too."""

        def pick(*keys):
            for k in keys:
                if data.get(k) not in (None, ""):
                    return data[k]
            return None

        def text(*keys):
            value = pick(*keys)
            return None if value is None else str(value)

        return cls(
            id=int(data["id"]),
            name=str(data.get("name", "")),
            scores=dict(data.get("scores") or {}),
            age=text("age"),
            attendance=text("attendance"),
            conduct=text("conduct"),
            interest=text("interest"),
            promoted_to=text("promoted_to", "promotedTo"),
            overall_remark=text("overall_remark", "overallRemark"),
            final_remark=text("final_remark", "finalRemark"),
            recommendation=text("recommendation"),
            skills=dict(pick("skills") or {}),
            observation_scores={
                k: list(v) for k, v in (pick("observation_scores", "observationScores") or {}).items()
            },
        )


@dataclass(frozen=True)
class StaffMember:
    name: str
    subjects: FrozenSet[str] = frozenset()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "StaffMember":
        return cls(name=str(data.get("name", "")), subjects=frozenset(data.get("subjects") or ()))


@dataclass(frozen=True)
class GradingSettings:
    """Per-call configuration for the grading engine."""

    facilitator_mapping: Mapping[str, str] = field(default_factory=dict)
    grading_remarks: Mapping[str, str] = field(default_factory=lambda: dict(DEFAULT_GRADING_REMARKS))
    staff_list: Tuple[StaffMember, ...] = ()
    core_subjects: FrozenSet[str] = DEFAULT_CORE_SUBJECTS

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], core_subjects: FrozenSet[str] = DEFAULT_CORE_SUBJECTS) -> "GradingSettings":
        remarks = dict(DEFAULT_GRADING_REMARKS)
        remarks.update(data.get("grading_remarks") or {})
        core = data.get("core_subjects")
        return cls(
            facilitator_mapping=dict(data.get("facilitator_mapping") or {}),
            grading_remarks=remarks,
            staff_list=tuple(StaffMember.from_dict(s) for s in data.get("staff_list") or ()),
            core_subjects=frozenset(core) if core else core_subjects,
        )


@dataclass(frozen=True)
class ClassStatistics:
    subject_means: Dict[str, float]
    subject_std_devs: Dict[str, float]

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class ComputedSubject:
    subject: str
    score: float
    grade: str
    grade_value: int
    category: str
    remark: str
    facilitator: str
    z_score: float
    proficiency: str
    proficiency_remark: str


@dataclass
class ProcessedStudent:
    id: int
    name: str
    subjects: List[ComputedSubject]
    total_score: float
    best_six_aggregate: int
    best_core_subjects: List[ComputedSubject]
    best_elective_subjects: List[ComputedSubject]
    category: str
    overall_remark: str
    weakness_analysis: str
    recommendation: str
    attendance: str = "0"
    age: Optional[str] = None
    promoted_to: Optional[str] = None
    conduct: Optional[str] = None
    interest: Optional[str] = None
    skills: Dict[str, str] = field(default_factory=dict)
    rank: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def empty_grade_counts() -> Dict[str, int]:
    return {letter: 0 for letter in GRADE_LETTERS}


@dataclass
class FacilitatorStats:
    facilitator_name: str
    subject: str
    student_count: int = 0
    grade_counts: Dict[str, int] = field(default_factory=empty_grade_counts)
    total_grade_value: int = 0
    average_grade_value: float = 0.0
    performance_percentage: float = 0.0
    performance_grade: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
