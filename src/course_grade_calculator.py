#!/usr/bin/env python3
"""
COURSE GRADE CALCULATOR - Final course grade from weighted components
Applies the Magen (waiver) rule used by Israeli institutions

MAGEN RULE:
A Magen component is a "protective" exam that only counts when it helps.
Two grades are computed and the higher one wins:

  Plan A: weighted average of ALL components
  Plan B: Magen components dropped, their combined weight moved onto the
          final exam component

Example: exam 80 (70%), Magen 40 (30%)
  Plan A = (80*70 + 40*30) / 100 = 68
  Plan B = (80*100) / 100        = 80   -> grade 80, Magen dropped

EDGE CASES HANDLED:
- Any ungraded component: course grade is None (never partial)
- Zero total weight: that plan counts as 0, never NaN
- No detectable final exam: Magen cannot be redistributed, Plan A only
- Several Magen components: all dropped together in Plan B

Priority: CRITICAL - Every GPA flows through this module
Dependencies: data_models.py for type definitions
"""

from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from data_models import Course, CourseGradeResult, CourseStatus, GradeComponent
from settings import settings


def weighted_average(pairs: Iterable[Tuple[float, float]]) -> Optional[float]:
    """
    Weighted average of (value, weight) pairs

    Returns:
        The average, or None when the total weight is not positive
    """
    total_weight = 0.0
    weighted_sum = 0.0
    for value, weight in pairs:
        weighted_sum += value * weight
        total_weight += weight

    if total_weight <= 0:
        return None
    return weighted_sum / total_weight


def _plan_grade(components: Sequence[GradeComponent], weight_overrides: Dict[str, float]) -> float:
    # Zero total weight counts as 0 so max(A, B) stays defined
    average = weighted_average(
        (c.score, weight_overrides.get(c.id, c.weight)) for c in components
    )
    return average if average is not None else 0.0


def find_final_exam_component(
    components: Sequence[GradeComponent],
    final_exam_keywords: Optional[Sequence[str]] = None,
) -> Optional[GradeComponent]:
    """
    Locate the component that absorbs the Magen weight

    An explicit is_final_exam=True flag wins. Otherwise the first component
    whose name contains one of the keywords (case-insensitive) is used.
    Components explicitly flagged is_final_exam=False are never picked.
    """
    for component in components:
        if component.is_final_exam:
            return component

    keywords = final_exam_keywords if final_exam_keywords is not None else settings.final_exam_keywords
    keywords = [k.lower() for k in keywords]

    for component in components:
        if component.is_final_exam is False:
            continue
        name = component.name.lower()
        if any(keyword in name for keyword in keywords):
            return component

    return None


def compute_course_grade(
    components: Sequence[GradeComponent],
    final_exam_keywords: Optional[Sequence[str]] = None,
) -> CourseGradeResult:
    """
    Calculate a course's final grade with the Magen rule

    Args:
        components: All grade components of one course
        final_exam_keywords: Name fragments identifying the final exam

    Returns:
        CourseGradeResult with grade (None if incomplete) and waiver_dropped
    """
    if not components or any(c.score is None for c in components):
        return CourseGradeResult(grade=None, waiver_dropped=False)

    waiver = [c for c in components if c.is_magen]
    non_waiver = [c for c in components if not c.is_magen]

    plan_a = _plan_grade(components, {})

    if not waiver:
        return CourseGradeResult(grade=plan_a, waiver_dropped=False)

    final_exam = find_final_exam_component(non_waiver, final_exam_keywords)
    if final_exam is None:
        return CourseGradeResult(grade=plan_a, waiver_dropped=False)

    waiver_weight = sum(c.weight for c in waiver)
    plan_b = _plan_grade(non_waiver, {final_exam.id: final_exam.weight + waiver_weight})

    return CourseGradeResult(grade=max(plan_a, plan_b), waiver_dropped=plan_b > plan_a)


def course_grade(course: Course, final_exam_keywords: Optional[Sequence[str]] = None) -> Optional[float]:
    """Shortcut for compute_course_grade(course.grade_components).grade"""
    return compute_course_grade(course.grade_components, final_exam_keywords).grade


def split_courses_by_status(courses: Iterable[Course]) -> Dict[CourseStatus, List[Course]]:
    """
    Three-way split used by the planner

    Partially graded courses land in IN_PROGRESS and are neither history
    nor planning material.
    """
    buckets: Dict[CourseStatus, List[Course]] = {status: [] for status in CourseStatus}
    for course in courses:
        buckets[course.status].append(course)
    return buckets


def get_future_courses(courses: Iterable[Course]) -> List[Course]:
    """Courses with no score on any component"""
    return split_courses_by_status(courses)[CourseStatus.FUTURE]


def get_completed_courses(courses: Iterable[Course]) -> List[Course]:
    """Courses where every component has a score"""
    return split_courses_by_status(courses)[CourseStatus.COMPLETED]
