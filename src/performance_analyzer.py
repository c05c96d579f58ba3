#!/usr/bin/env python3
"""
PERFORMANCE ANALYZER - Historical grades per difficulty tier
Learns how a student performs on easy, medium and hard courses

BIAS METHODOLOGY:
✅ Tier Average: Credit-weighted grade of completed courses in the tier
✅ Overall Average: Credit-weighted grade of all completed courses
✅ Personal Bias: tier average - overall average, clamped to +/-10
✅ Fallback: easy +2, medium 0, hard -2 when a tier has no history

Example: 95 on easy courses, 88 on hard, 91 overall
  easy bias = +4, hard bias = -3

Dependencies: course_grade_calculator.py for historical course grades
"""

from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from course_grade_calculator import compute_course_grade, weighted_average
from data_models import Course, Difficulty, DifficultyStats, TierStats
from settings import Settings, settings as default_settings


def analyze_history(
    completed_courses: Iterable[Course],
    final_exam_keywords: Optional[Sequence[str]] = None,
) -> DifficultyStats:
    """
    Average grade per difficulty tier and overall

    Args:
        completed_courses: Fully graded courses
        final_exam_keywords: Passed through to the course grade calculation

    Returns:
        DifficultyStats (overall_avg 0.0 and every tier None when empty)
    """
    graded: List[Tuple[Difficulty, float, float]] = []
    for course in completed_courses:
        grade = compute_course_grade(course.grade_components, final_exam_keywords).grade
        if grade is None or course.credits <= 0:
            continue
        graded.append((course.difficulty, grade, course.credits))

    if not graded:
        return DifficultyStats()

    tiers: Dict[str, Optional[TierStats]] = {}
    for tier in Difficulty:
        in_tier = [(grade, credits) for difficulty, grade, credits in graded if difficulty == tier]
        tiers[tier.value] = (
            TierStats(avg=weighted_average(in_tier), count=len(in_tier)) if in_tier else None
        )

    overall = weighted_average((grade, credits) for _, grade, credits in graded)
    return DifficultyStats(overall_avg=overall, **tiers)


def default_bias(tier: Difficulty, settings: Optional[Settings] = None) -> float:
    settings = settings or default_settings
    return {
        Difficulty.EASY: settings.easy_bias,
        Difficulty.MEDIUM: settings.medium_bias,
        Difficulty.HARD: settings.hard_bias,
    }[Difficulty(tier)]


def personal_bias(
    tier: Difficulty,
    stats: DifficultyStats,
    settings: Optional[Settings] = None,
) -> float:
    """
    Grade adjustment for a course of the given tier

    Args:
        tier: Difficulty of the course being planned
        stats: Output of analyze_history
        settings: Configuration override

    Returns:
        Bias in grade points, within [-max_bias, +max_bias]
    """
    settings = settings or default_settings
    tier_stats = stats.for_tier(tier)
    if tier_stats is None:
        return default_bias(tier, settings)

    bias = tier_stats.avg - stats.overall_avg
    return max(-settings.max_bias, min(settings.max_bias, bias))
