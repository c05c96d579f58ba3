"""
Pytest Configuration and Fixtures

Provides common fixtures for all tests including:
- Model factories (components, courses, semesters, snapshots)
- Settings with predictable defaults
- A CSV export written to a temporary directory
"""

from itertools import count
from pathlib import Path

import pandas as pd
import pytest

from data_models import Course, GradeComponent, Semester, UserSnapshot
from settings import Settings

_ids = count(1)


def make_component(name="Exam", weight=100.0, score=None, **kwargs) -> GradeComponent:
    """Build a GradeComponent with a fresh id"""
    return GradeComponent(id=f"gc{next(_ids)}", name=name, weight=weight, score=score, **kwargs)


def make_course(grade=None, credits=3.0, name=None, difficulty="medium", components=None, **kwargs) -> Course:
    """
    Build a Course

    grade: Single 100%-weight exam with this score (None = future course)
    components: Explicit component list, overrides grade
    """
    course_id = f"c{next(_ids)}"
    if components is None:
        components = [make_component("Final exam", 100.0, grade)]
    return Course(
        id=course_id,
        name=name or f"Course {course_id}",
        credits=credits,
        difficulty=difficulty,
        grade_components=components,
        **kwargs,
    )


def make_semester(courses=None, year=1, term="A", **kwargs) -> Semester:
    """Build a Semester holding the given courses"""
    return Semester(
        id=f"s{next(_ids)}",
        academic_year=year,
        term=term,
        courses=courses or [],
        **kwargs,
    )


@pytest.fixture
def test_settings():
    """Settings with defaults, isolated from any environment overrides"""
    return Settings(_env_file=None)


@pytest.fixture
def magen_course():
    """Exam 80 (70%), Magen quiz 40 (30%): Plan A 68, Plan B 80"""
    return make_course(
        components=[
            make_component("Final exam", 70.0, 80.0),
            make_component("Magen quiz", 30.0, 40.0, is_magen=True),
        ],
        credits=4.0,
        name="Calculus",
    )


@pytest.fixture
def sample_snapshot():
    """Two years of history with one future course and one in-progress course"""
    year1_a = make_semester(
        [
            make_course(90.0, credits=3.0, difficulty="easy", name="Intro"),
            make_course(70.0, credits=4.0, difficulty="hard", name="Physics"),
        ],
        year=1,
        term="A",
    )
    year1_b = make_semester(
        [make_course(80.0, credits=3.0, name="Statistics", target_grade=90.0)],
        year=1,
        term="B",
        legacy_credits=2.0,
        legacy_gpa=85.0,
        is_legacy_visible=True,
    )
    year2_a = make_semester(
        [
            make_course(None, credits=5.0, difficulty="hard", name="Algorithms"),
            make_course(
                components=[
                    make_component("Homework", 20.0, 95.0),
                    make_component("Final exam", 80.0, None),
                ],
                credits=2.0,
                name="Seminar",
            ),
        ],
        year=2,
        term="A",
    )
    return UserSnapshot(
        user_id="u1",
        academic_institution="Technion",
        legacy={"credits": 10.0, "gpa": 75.0},
        semesters=[year2_a, year1_b, year1_a],
    )


@pytest.fixture
def export_dir(tmp_path) -> Path:
    """
    Minimal CSV export for two users at the same institution

    u1: course 101 = exam 80 (70%) + Magen 40 (30%) -> 80, course 102 future
    u2: course 201 = 70
    """
    pd.DataFrame([
        {"id": "1", "user_id": "u1", "academic_year": "1", "term": "A",
         "legacy_credits": "", "legacy_gpa": "", "is_legacy_visible": ""},
        {"id": "2", "user_id": "u1", "academic_year": "1", "term": "summer",
         "legacy_credits": "2", "legacy_gpa": "90", "is_legacy_visible": "true"},
        {"id": "3", "user_id": "u2", "academic_year": "1", "term": "A",
         "legacy_credits": "", "legacy_gpa": "", "is_legacy_visible": ""},
    ]).to_csv(tmp_path / "semesters.csv", index=False)

    pd.DataFrame([
        {"id": "101", "semester_id": "1", "name": "Calculus", "credits": "4",
         "difficulty": "Hard", "target_grade": "85"},
        {"id": "102", "semester_id": "2", "name": "Linear Algebra", "credits": "3",
         "difficulty": "", "target_grade": ""},
        {"id": "201", "semester_id": "3", "name": "Calculus", "credits": "4",
         "difficulty": "hard", "target_grade": ""},
    ]).to_csv(tmp_path / "courses.csv", index=False)

    pd.DataFrame([
        {"id": "1001", "course_id": "101", "name": "Final exam", "weight": "70",
         "score": "80", "is_magen": "false"},
        {"id": "1002", "course_id": "101", "name": "Quiz", "weight": "30",
         "score": "40", "is_magen": "true"},
        {"id": "1003", "course_id": "102", "name": "Final exam", "weight": "100",
         "score": "", "is_magen": "false"},
        {"id": "2001", "course_id": "201", "name": "Final exam", "weight": "100",
         "score": "70", "is_magen": "false"},
    ]).to_csv(tmp_path / "grade_components.csv", index=False)

    pd.DataFrame([
        {"user_id": "u1", "academic_institution": "Technion",
         "legacy_credits": "", "legacy_gpa": ""},
        {"user_id": "u2", "academic_institution": "Technion",
         "legacy_credits": "", "legacy_gpa": ""},
    ]).to_csv(tmp_path / "users.csv", index=False)

    return tmp_path
