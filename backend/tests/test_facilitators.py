"""
Tests for grading/facilitators.py — per (facilitator, subject) performance.
"""

import os
import sys
import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from grading.distribution import calculate_class_statistics
from grading.engine import process_student_data
from grading.facilitators import calculate_facilitator_stats, performance_percentage
from grading.models import ComputedSubject, GradingSettings, ProcessedStudent, StudentRecord


def result(subject, grade, facilitator):
    return ComputedSubject(
        subject=subject, score=0.0, grade=grade, grade_value=int(grade[1]), category="",
        remark="", facilitator=facilitator, z_score=0.0, proficiency="", proficiency_remark="",
    )


def student(student_id, *results):
    return ProcessedStudent(
        id=student_id, name=str(student_id), subjects=list(results), total_score=0.0,
        best_six_aggregate=0, best_core_subjects=[], best_elective_subjects=[],
        category="", overall_remark="", weakness_analysis="", recommendation="",
    )


@pytest.fixture
def graded_class():
    return [
        student(1, result("Mathematics", "A1", "Mrs. Owusu"), result("French", "F9", "Mr. Diallo")),
        student(2, result("Mathematics", "A1", "Mrs. Owusu"), result("French", "F9", "Mr. Diallo")),
        student(3, result("Mathematics", "C4", "Mr. Boateng"), result("French", "F9", "Mr. Diallo")),
    ]


class TestPerformancePercentage:
    def test_all_a1(self):
        assert performance_percentage(3, 3) == pytest.approx(88.89)

    def test_all_f9(self):
        assert performance_percentage(27, 3) == 0.0

    def test_no_students(self):
        assert performance_percentage(0, 0) == 0.0

    def test_two_decimal_rounding(self):
        assert performance_percentage(13, 3) == 51.85


class TestCalculateFacilitatorStats:
    def test_one_entry_per_pair(self, graded_class):
        stats = calculate_facilitator_stats(graded_class)
        keys = {(s.facilitator_name, s.subject) for s in stats}
        assert keys == {
            ("Mrs. Owusu", "Mathematics"),
            ("Mr. Boateng", "Mathematics"),
            ("Mr. Diallo", "French"),
        }

    def test_counts(self, graded_class):
        stats = {(s.facilitator_name, s.subject): s for s in calculate_facilitator_stats(graded_class)}
        owusu = stats[("Mrs. Owusu", "Mathematics")]
        assert owusu.student_count == 2
        assert owusu.grade_counts["A1"] == 2
        assert sum(owusu.grade_counts.values()) == 2
        assert owusu.total_grade_value == 2
        assert owusu.average_grade_value == pytest.approx(1.0)
        diallo = stats[("Mr. Diallo", "French")]
        assert diallo.grade_counts["F9"] == 3
        assert diallo.performance_percentage == 0.0
        assert diallo.performance_grade == "F9"

    def test_sorted_best_first(self, graded_class):
        stats = calculate_facilitator_stats(graded_class)
        assert [s.facilitator_name for s in stats] == ["Mrs. Owusu", "Mr. Boateng", "Mr. Diallo"]
        pcts = [s.performance_percentage for s in stats]
        assert pcts == sorted(pcts, reverse=True)

    def test_performance_grade(self, graded_class):
        stats = {s.facilitator_name: s for s in calculate_facilitator_stats(graded_class)}
        assert stats["Mrs. Owusu"].performance_grade == "A1"
        # C4 -> (1 - 4/9) * 100 = 55.56
        assert stats["Mr. Boateng"].performance_percentage == pytest.approx(55.56)
        assert stats["Mr. Boateng"].performance_grade == "C4"

    def test_empty(self):
        assert calculate_facilitator_stats([]) == []

    def test_percentage_bounds_from_engine(self):
        subjects = ["Mathematics", "English Language", "French"]
        students = [
            StudentRecord(id=i, name=str(i), scores={s: (i * 17 + j * 29) % 100 for j, s in enumerate(subjects)})
            for i in range(1, 16)
        ]
        settings = GradingSettings(facilitator_mapping={"Mathematics": "Mrs. Owusu"})
        stats = calculate_class_statistics(students, subjects)
        processed = process_student_data(stats, students, subjects, settings)
        rows = calculate_facilitator_stats(processed)
        assert {(r.facilitator_name, r.subject) for r in rows} == {
            ("Mrs. Owusu", "Mathematics"), ("TBA", "English Language"), ("TBA", "French"),
        }
        for row in rows:
            assert row.student_count == 15
            assert 0 <= row.performance_percentage <= 100
