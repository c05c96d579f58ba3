#!/usr/bin/env python3
"""
GRADE ANALYTICS - Trend, distribution and target tables for the dashboard
All tables are pandas DataFrames; displayed GPAs are rounded to 1 decimal

TABLES:
✅ GPA Trend: Semester GPA and running cumulative GPA, chronological
✅ Grade Distribution: Graded courses per grade bucket
✅ Target Progress: Current grade vs. target for courses with a target
✅ Overall Stats: Degree GPA, semester/course/credit counts

Dependencies: pandas, gpa_calculator
"""

from typing import Dict, Iterable, List, Optional

import pandas as pd

from course_grade_calculator import course_grade
from data_models import Semester, UserSnapshot
from gpa_calculator import GPACalculator
from settings import Settings

# (label, lowest grade in bucket), highest bucket first
GRADE_BUCKETS = [
    ("90-100", 90),
    ("80-89", 80),
    ("70-79", 70),
    ("60-69", 60),
    ("56-59", 56),
    ("0-55", 0),
]

MAX_NAME_LENGTH = 15


def sort_semesters(semesters: Iterable[Semester]) -> List[Semester]:
    """Chronological order: academic year, then A, B, Summer, Yearly"""
    return sorted(semesters, key=lambda s: s.sort_key)


def _round(value: Optional[float]) -> Optional[float]:
    return None if value is None else round(value, 1)


def gpa_trend(semesters: Iterable[Semester], settings: Optional[Settings] = None) -> pd.DataFrame:
    """
    Semester-by-semester GPA with a running cumulative GPA

    The cumulative GPA weights each semester by its graded credits.
    """
    calculator = GPACalculator(settings)
    keywords = calculator.settings.final_exam_keywords

    records = []
    cumulative_points = 0.0
    cumulative_credits = 0.0
    for semester in sort_semesters(semesters):
        semester_gpa = calculator.semester_gpa(semester.courses)
        graded_credits = sum(
            c.credits for c in semester.courses if course_grade(c, keywords) is not None
        )
        if semester_gpa is not None:
            cumulative_points += semester_gpa * graded_credits
            cumulative_credits += graded_credits

        cumulative_gpa = cumulative_points / cumulative_credits if cumulative_credits > 0 else None

        records.append({
            "semester": semester.display_name,
            "semester_gpa": _round(semester_gpa),
            "cumulative_gpa": _round(cumulative_gpa),
            "credits": sum(c.credits for c in semester.courses),
        })

    return pd.DataFrame(records, columns=["semester", "semester_gpa", "cumulative_gpa", "credits"])


def grade_distribution(semesters: Iterable[Semester], settings: Optional[Settings] = None) -> pd.DataFrame:
    """Count of graded courses per bucket, empty buckets omitted"""
    keywords = settings.final_exam_keywords if settings else None
    counts: Dict[str, int] = {label: 0 for label, _ in GRADE_BUCKETS}

    for semester in semesters:
        for course in semester.courses:
            grade = course_grade(course, keywords)
            if grade is None:
                continue
            for label, lowest in GRADE_BUCKETS:
                if grade >= lowest:
                    counts[label] += 1
                    break

    records = [{"range": label, "count": count} for label, count in counts.items() if count > 0]
    return pd.DataFrame(records, columns=["range", "count"])


def target_progress(
    semesters: Iterable[Semester],
    limit: int = 6,
    settings: Optional[Settings] = None,
) -> pd.DataFrame:
    """Current grade against target for courses that set a target"""
    keywords = settings.final_exam_keywords if settings else None

    records = []
    for semester in semesters:
        for course in semester.courses:
            if course.target_grade is None:
                continue
            name = course.name
            if len(name) > MAX_NAME_LENGTH:
                name = name[:MAX_NAME_LENGTH] + "..."
            current = course_grade(course, keywords)
            records.append({
                "course": name,
                "current": round(current, 1) if current is not None else 0.0,
                "target": course.target_grade,
            })

    return pd.DataFrame(records[:limit], columns=["course", "current", "target"])


def overall_stats(snapshot: UserSnapshot, settings: Optional[Settings] = None) -> Dict:
    """Headline numbers for the analytics page"""
    calculator = GPACalculator(settings)
    courses = snapshot.all_courses
    degree_gpa = calculator.degree_gpa(
        snapshot.semesters, snapshot.legacy.credits, snapshot.legacy.gpa
    )
    return {
        "degree_gpa": _round(degree_gpa),
        "semesters": len(snapshot.semesters),
        "total_courses": len(courses),
        "total_credits": sum(c.credits for c in courses),
        "courses_with_targets": sum(1 for c in courses if c.target_grade is not None),
    }
