#!/usr/bin/env python3
"""
STRATEGY PLANNER - Target grades per future course for a desired degree GPA
"Smart Strategy": adaptive weighted spread

PLANNING STEPS:
1. Required future average = (target * all credits - current points) / future credits
2. Unreachable: needed points exceed max realistic grade on every course
3. Already achieved: required average is below the passing grade
4. Initial target per course = required average + personal difficulty bias,
   clamped to [passing grade, max realistic grade], rounded to whole points
5. Re-balance one point at a time until the plan hits the target (+/-0.5
   credit points), at most 100 iterations

TIE-BREAK ORDER:
Missing points go to easy courses first (easy -> medium -> hard).
Surplus points come off hard courses first (hard -> medium -> easy).
This is a pedagogical heuristic, not a mathematical optimum.

Example: historical 95 on easy, 88 on hard, required average 92
  easy ~97, medium ~92, hard ~86 before re-balancing

Dependencies: gpa_calculator.py (current standing), performance_analyzer.py (bias)
"""

import math
from typing import List, Optional

from course_grade_calculator import split_courses_by_status
from data_models import (
    Course,
    CourseStatus,
    CourseRecommendation,
    Difficulty,
    StrategyInput,
    StrategyResult,
    UserSnapshot,
)
from gpa_calculator import GPACalculator
from performance_analyzer import analyze_history, personal_bias
from settings import Settings, settings as default_settings

# Position in the queue when points must be ADDED (easy absorbs first)
ADD_ORDER = {Difficulty.EASY: 1, Difficulty.MEDIUM: 2, Difficulty.HARD: 3}

# Position in the queue when points must be REMOVED (hard gives up first)
REMOVE_ORDER = {Difficulty.HARD: 1, Difficulty.MEDIUM: 2, Difficulty.EASY: 3}


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


class StrategyPlanner:
    """Recommend a grade for every future course"""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or default_settings
        self.planning_log: List[str] = []

    def _invalid(self, message: str) -> StrategyResult:
        self.planning_log.append(f"❌ {message}")
        return StrategyResult(success=False, message=message, status="invalid", recommendations=[])

    def _uniform_plan(self, courses: List[Course], grade: float) -> List[CourseRecommendation]:
        return [
            CourseRecommendation(
                course_id=course.id,
                course_name=course.name,
                credits=course.credits,
                difficulty=course.difficulty,
                suggested_grade=grade,
            )
            for course in courses
        ]

    def _validate(self, strategy_input: StrategyInput) -> Optional[StrategyResult]:
        min_pass = self.settings.min_pass_grade

        if not 0 <= strategy_input.target_gpa <= 100:
            return self._invalid("Target GPA must be between 0 and 100")

        if not 0 <= strategy_input.max_realistic_grade <= 100:
            return self._invalid("Max realistic grade must be between 0 and 100")

        if strategy_input.max_realistic_grade < min_pass:
            return self._invalid(f"Max realistic grade must be at least {min_pass:g}")

        if not strategy_input.future_courses:
            return self._invalid("No future courses to plan")

        if sum(course.credits for course in strategy_input.future_courses) <= 0:
            return self._invalid("Future courses must carry more than 0 credits")

        return None

    def plan_strategy(self, strategy_input: StrategyInput) -> StrategyResult:
        """
        Build a per-course grade plan for the target GPA

        Args:
            strategy_input: Current standing, target, ceiling and courses

        Returns:
            StrategyResult; infeasible targets still carry a best-effort plan
        """
        self.planning_log = []

        invalid = self._validate(strategy_input)
        if invalid is not None:
            return invalid

        min_pass = self.settings.min_pass_grade
        ceiling = strategy_input.max_realistic_grade
        target = strategy_input.target_gpa
        future_courses = strategy_input.future_courses

        # Step 1: Required future average
        future_credits = sum(course.credits for course in future_courses)
        total_credits = strategy_input.total_credits_so_far + future_credits
        required_total_points = target * total_credits
        current_points = (strategy_input.current_gpa or 0.0) * strategy_input.total_credits_so_far
        needed_future_points = required_total_points - current_points
        required_future_average = needed_future_points / future_credits

        self.planning_log.append(
            f"🎯 Target {target:.1f} over {total_credits:g} credits: "
            f"need {required_future_average:.2f} average in {len(future_courses)} future courses"
        )

        if needed_future_points > ceiling * future_credits:
            message = (
                f"Target of {target:.1f} is out of reach. It needs an average of "
                f"{required_future_average:.1f} in future courses, but the max realistic "
                f"grade is {ceiling:g}. Lower the target or raise the max grade."
            )
            self.planning_log.append(f"⚠️ {message}")
            return StrategyResult(
                success=False,
                message=message,
                status="unreachable",
                recommendations=self._uniform_plan(future_courses, ceiling),
                required_future_average=required_future_average,
            )

        if required_future_average < min_pass:
            message = (
                f"Your current GPA is already above target! You only need an average of "
                f"{required_future_average:.1f} in future courses."
            )
            self.planning_log.append(f"✅ {message}")
            return StrategyResult(
                success=False,
                message=message,
                status="already_achieved",
                recommendations=self._uniform_plan(future_courses, min_pass),
                required_future_average=required_future_average,
            )

        # Step 2: Personal bias from history
        stats = analyze_history(strategy_input.completed_courses, self.settings.final_exam_keywords)
        if stats.is_empty:
            self.planning_log.append("ℹ️ No completed courses, using default difficulty bias")
        else:
            self.planning_log.append(
                f"🧠 Learned from {len(strategy_input.completed_courses)} completed courses "
                f"(overall {stats.overall_avg:.1f})"
            )

        recommendations = []
        for course in future_courses:
            bias = personal_bias(course.difficulty, stats, self.settings)
            initial_target = required_future_average + bias
            clamped = max(min_pass, min(ceiling, initial_target))
            recommendations.append(
                CourseRecommendation(
                    course_id=course.id,
                    course_name=course.name,
                    credits=course.credits,
                    difficulty=course.difficulty,
                    suggested_grade=self._bounded(_round_half_up(clamped), min_pass, ceiling),
                )
            )

        # Step 3: Re-balance
        iterations = self._rebalance(recommendations, needed_future_points, min_pass, ceiling)

        planned_points = sum(rec.suggested_grade * rec.credits for rec in recommendations)
        achieved_gpa = (current_points + planned_points) / total_credits

        self.planning_log.append(
            f"⚖️ Re-balanced in {iterations} iterations, gap "
            f"{needed_future_points - planned_points:+.2f} credit points"
        )

        return StrategyResult(
            success=True,
            message=(
                f"Balanced strategy! Expected GPA: {achieved_gpa:.2f} | Required: "
                f"{required_future_average:.1f} average in future courses"
            ),
            status="balanced",
            recommendations=recommendations,
            required_future_average=required_future_average,
            achieved_gpa=achieved_gpa,
        )

    @staticmethod
    def _bounded(grade: int, floor: float, ceiling: float) -> int:
        """Keep a rounded grade inside [floor, ceiling] for fractional bounds"""
        if grade > ceiling:
            return int(math.floor(ceiling))
        if grade < floor:
            return int(math.ceil(floor))
        return grade

    def _rebalance(
        self,
        recommendations: List[CourseRecommendation],
        needed_points: float,
        floor: float,
        ceiling: float,
    ) -> int:
        """
        Nudge suggested grades one point at a time toward needed_points

        Mutates recommendations in place and returns the iteration count.
        Stops early when no course can absorb or release a point.
        """
        tolerance = self.settings.rebalance_tolerance
        max_iterations = self.settings.rebalance_max_iterations

        # Zero-credit courses cannot move the gap
        movable = [rec for rec in recommendations if rec.credits > 0]
        add_queue = sorted(movable, key=lambda rec: ADD_ORDER[rec.difficulty])
        remove_queue = sorted(movable, key=lambda rec: REMOVE_ORDER[rec.difficulty])

        gap = needed_points - sum(rec.suggested_grade * rec.credits for rec in recommendations)
        iterations = 0

        while abs(gap) > tolerance and iterations < max_iterations:
            iterations += 1
            moved = False

            if gap > 0:
                for rec in add_queue:
                    if rec.suggested_grade < ceiling:
                        step = min(1, math.ceil(gap / rec.credits))
                        if rec.suggested_grade + step <= ceiling:
                            rec.suggested_grade += step
                            moved = True
                            break
            else:
                for rec in remove_queue:
                    if rec.suggested_grade > floor:
                        step = min(1, math.ceil(abs(gap) / rec.credits))
                        if rec.suggested_grade - step >= floor:
                            rec.suggested_grade -= step
                            moved = True
                            break

            if not moved:
                break

            gap = needed_points - sum(rec.suggested_grade * rec.credits for rec in recommendations)

        return iterations

    def get_planning_log(self) -> List[str]:
        return self.planning_log


def plan_strategy(strategy_input: StrategyInput, settings: Optional[Settings] = None) -> StrategyResult:
    """Plan with a throwaway StrategyPlanner"""
    return StrategyPlanner(settings).plan_strategy(strategy_input)


def build_strategy_input(
    snapshot: UserSnapshot,
    target_gpa: float,
    max_realistic_grade: float,
    settings: Optional[Settings] = None,
) -> StrategyInput:
    """
    Derive planner input from a user's snapshot

    Credits so far count all legacy credits plus every course that has at
    least one score. In-progress courses are neither history nor future.
    """
    calculator = GPACalculator(settings)
    current_gpa = calculator.degree_gpa(
        snapshot.semesters, snapshot.legacy.credits, snapshot.legacy.gpa
    )

    courses = snapshot.all_courses
    buckets = split_courses_by_status(courses)
    legacy_credits = snapshot.legacy.credits + sum(s.legacy_credits for s in snapshot.semesters)
    started_credits = sum(course.credits for course in courses if course.has_started)

    return StrategyInput(
        current_gpa=current_gpa,
        total_credits_so_far=legacy_credits + started_credits,
        target_gpa=target_gpa,
        future_courses=buckets[CourseStatus.FUTURE],
        completed_courses=buckets[CourseStatus.COMPLETED],
        max_realistic_grade=max_realistic_grade,
    )


def plan_for_snapshot(
    snapshot: UserSnapshot,
    target_gpa: float,
    max_realistic_grade: float,
    settings: Optional[Settings] = None,
) -> StrategyResult:
    """Plan straight from a user snapshot"""
    strategy_input = build_strategy_input(snapshot, target_gpa, max_realistic_grade, settings)
    return plan_strategy(strategy_input, settings)
