"""
Unit Tests for Grade Analytics

Tests for:
- Chronological semester sort
- GPA trend table
- Grade distribution buckets
- Target progress table
- Overall stats
"""

import pandas as pd
import pytest

from conftest import make_course, make_semester
from grade_analytics import (
    gpa_trend,
    grade_distribution,
    overall_stats,
    sort_semesters,
    target_progress,
)


class TestSortSemesters:
    def test_year_then_term(self):
        summer = make_semester(year=1, term="Summer")
        b = make_semester(year=1, term="B")
        a2 = make_semester(year=2, term="A")
        a1 = make_semester(year=1, term="A")
        yearly = make_semester(year=1, term="Yearly")

        ordered = sort_semesters([summer, a2, yearly, b, a1])

        assert ordered == [a1, b, summer, yearly, a2]


class TestGPATrend:
    def test_trend(self, sample_snapshot):
        df = gpa_trend(sample_snapshot.semesters)

        assert list(df.columns) == ["semester", "semester_gpa", "cumulative_gpa", "credits"]
        assert list(df["semester"]) == [
            "שנה 1 - סמסטר א׳",
            "שנה 1 - סמסטר ב׳",
            "שנה 2 - סמסטר א׳",
        ]
        assert df["semester_gpa"][0] == pytest.approx(78.6)
        assert df["semester_gpa"][1] == pytest.approx(80.0)
        assert pd.isna(df["semester_gpa"][2])
        assert df["cumulative_gpa"][1] == pytest.approx(79.0)
        assert df["cumulative_gpa"][2] == pytest.approx(79.0)
        assert list(df["credits"]) == [7.0, 3.0, 7.0]

    def test_empty(self):
        df = gpa_trend([])

        assert df.empty
        assert "cumulative_gpa" in df.columns

    def test_yearly_display_name(self):
        df = gpa_trend([make_semester([make_course(85.0)], year=3, term="Yearly")])

        assert df["semester"][0] == "שנה 3"


class TestGradeDistribution:
    def test_buckets(self):
        semesters = [
            make_semester([make_course(95.0), make_course(90.0), make_course(59.5)]),
            make_semester([make_course(55.9), make_course(72.0), make_course(None)], term="B"),
        ]

        df = grade_distribution(semesters)

        assert list(df["range"]) == ["90-100", "70-79", "56-59", "0-55"]
        assert list(df["count"]) == [2, 1, 1, 1]

    def test_no_grades(self):
        assert grade_distribution([make_semester([make_course(None)])]).empty


class TestTargetProgress:
    def test_only_courses_with_targets(self, sample_snapshot):
        df = target_progress(sample_snapshot.semesters)

        assert len(df) == 1
        assert df["course"][0] == "Statistics"
        assert df["current"][0] == pytest.approx(80.0)
        assert df["target"][0] == pytest.approx(90.0)

    def test_long_names_truncated(self):
        course = make_course(None, name="Introduction to Algorithms", target_grade=85.0)

        df = target_progress([make_semester([course])])

        assert df["course"][0] == "Introduction to..."
        assert df["current"][0] == 0.0

    def test_limit(self):
        courses = [make_course(80.0, target_grade=90.0) for _ in range(8)]

        assert len(target_progress([make_semester(courses)])) == 6
        assert len(target_progress([make_semester(courses)], limit=3)) == 3


class TestOverallStats:
    def test_stats(self, sample_snapshot):
        stats = overall_stats(sample_snapshot)

        assert stats["degree_gpa"] == pytest.approx(77.7)
        assert stats["semesters"] == 3
        assert stats["total_courses"] == 5
        assert stats["total_credits"] == pytest.approx(17.0)
        assert stats["courses_with_targets"] == 1
