"""
Tests for grading/sheet.py — score sheet ingestion into StudentRecords.
"""

import os
import sys
import pytest
import pandas as pd

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from grading.sheet import read_score_sheet, records_from_dataframe, suggest_column_mapping

SUBJECTS = ["Mathematics", "English Language"]


@pytest.fixture
def wide_df():
    return pd.DataFrame([
        {"ID": "1", "Student Name": "Ama Mensah", "Mathematics": "78", "English Language": "64", "Conduct": "Respectful"},
        {"ID": "2", "Student Name": "Kofi Boateng", "Mathematics": "", "English Language": "55", "Conduct": None},
        {"ID": "3", "Student Name": "Esi Owusu", "Mathematics": "n/a", "English Language": "40", "Conduct": "Calm"},
    ])


@pytest.fixture
def long_df():
    return pd.DataFrame([
        {"student_id": "7", "name": "Ama", "subject": "Mathematics", "score": "81"},
        {"student_id": "7", "name": "Ama", "subject": "English Language", "score": "70"},
        {"student_id": "8", "name": "Yaw", "subject": "Mathematics", "score": "45"},
    ])


class TestColumnMapping:
    def test_matches_aliases_case_insensitively(self, wide_df):
        mapping = suggest_column_mapping(wide_df)
        assert mapping["id"] == "ID"
        assert mapping["name"] == "Student Name"
        assert mapping["conduct"] == "Conduct"
        assert mapping["subject"] is None


class TestRecordsFromDataFrame:
    def test_wide_format(self, wide_df):
        records = records_from_dataframe(wide_df, SUBJECTS)
        assert [r.id for r in records] == [1, 2, 3]
        assert records[0].name == "Ama Mensah"
        assert records[0].scores == {"Mathematics": 78.0, "English Language": 64.0}
        assert records[0].conduct == "Respectful"

    def test_blank_and_non_numeric_are_missing(self, wide_df):
        records = records_from_dataframe(wide_df, SUBJECTS)
        assert records[1].scores["Mathematics"] is None
        assert records[2].scores["Mathematics"] is None
        assert records[1].conduct is None

    def test_unlisted_subjects_ignored(self, wide_df):
        records = records_from_dataframe(wide_df, ["Mathematics", "French"])
        assert set(records[0].scores) == {"Mathematics"}

    def test_long_format(self, long_df):
        records = {r.id: r for r in records_from_dataframe(long_df, SUBJECTS)}
        assert records[7].name == "Ama"
        assert records[7].scores == {"Mathematics": 81.0, "English Language": 70.0}
        assert records[8].scores["Mathematics"] == 45.0
        assert records[8].scores["English Language"] is None

    def test_non_numeric_ids_use_position(self):
        df = pd.DataFrame([{"student_id": "S001", "name": "Ama", "Mathematics": "50"}])
        assert records_from_dataframe(df, SUBJECTS)[0].id == 1

    def test_requires_student_column(self):
        with pytest.raises(ValueError):
            records_from_dataframe(pd.DataFrame([{"Mathematics": "50"}]), SUBJECTS)


class TestReadScoreSheet:
    def test_csv(self, tmp_path, wide_df):
        path = tmp_path / "class.csv"
        wide_df.to_csv(path, index=False)
        df = read_score_sheet(str(path))
        assert list(df.columns) == list(wide_df.columns)
        assert len(df) == 3

    def test_unsupported_extension(self, tmp_path):
        with pytest.raises(ValueError):
            read_score_sheet(str(tmp_path / "class.txt"))
