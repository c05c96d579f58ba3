#!/usr/bin/env python3
"""
GPA CALCULATOR - Credit-weighted GPA roll-ups with legacy credit support
Semester, year and degree GPAs on the 0-100 scale

CALCULATION TYPES:
✅ Semester GPA: Graded courses of one semester, weighted by credits
✅ Hybrid Semester GPA: Semester GPA blended with that semester's legacy block
✅ Year GPA: All semesters of one academic year (coursework only)
✅ Degree GPA: Every semester + per-semester legacy + global legacy block

LEGACY BLOCKS:
A legacy block is a (credits, GPA) pair describing grades earned before the
student started using the system. It is folded in as one synthetic, fully
graded course.

EDGE CASES HANDLED:
- Ungraded courses: Excluded from numerator AND denominator (not zero)
- Zero credit courses: Contribute nothing
- No graded credits at all: GPA is None, never NaN
- Rounding: Display only (format_gpa), calculations keep full precision

Priority: CRITICAL - Core academic calculations
Dependencies: course_grade_calculator.py for per-course grades
"""

from typing import Iterable, List, Optional, Tuple

from course_grade_calculator import compute_course_grade, weighted_average
from data_models import Course, GPACalculation, Semester, UserSnapshot
from settings import Settings, settings as default_settings


class GPACalculator:
    """Calculate semester, year and degree GPAs from course snapshots"""

    def __init__(self, settings: Optional[Settings] = None):
        """
        Initialize calculator

        Args:
            settings: Configuration override (defaults to process settings)
        """
        self.settings = settings or default_settings
        self.calculation_log: List[str] = []

    def _course_grade(self, course: Course) -> Optional[float]:
        return compute_course_grade(
            course.grade_components, self.settings.final_exam_keywords
        ).grade

    def _graded_pairs(self, courses: Iterable[Course]) -> List[Tuple[float, float]]:
        """(grade, credits) for every course with a defined grade"""
        pairs = []
        for course in courses:
            grade = self._course_grade(course)
            if grade is not None:
                pairs.append((grade, course.credits))
        return pairs

    def semester_gpa(self, courses: Iterable[Course]) -> Optional[float]:
        """
        Credit-weighted GPA over graded courses only

        Returns:
            GPA, or None if no course is graded
        """
        pairs = self._graded_pairs(courses)
        if not pairs:
            return None
        return weighted_average(pairs)

    def hybrid_semester_gpa(
        self,
        courses: Iterable[Course],
        legacy_credits: float = 0.0,
        legacy_gpa: float = 0.0,
    ) -> Optional[float]:
        """
        Semester GPA with a legacy block folded in as one extra course

        Returns:
            GPA, or None if there is neither legacy data nor a graded course
        """
        pairs = self._graded_pairs(courses)
        if legacy_credits > 0:
            pairs.append((legacy_gpa, legacy_credits))
        if not pairs:
            return None
        return weighted_average(pairs)

    def degree_gpa(
        self,
        semesters: Iterable[Semester],
        global_legacy_credits: float = 0.0,
        global_legacy_gpa: float = 0.0,
    ) -> Optional[float]:
        """
        Degree GPA across all semesters

        Per-semester legacy blocks always count toward the degree GPA
        (is_legacy_visible only affects the semester's own display).

        Args:
            semesters: All of the user's semesters
            global_legacy_credits: User-level legacy credits
            global_legacy_gpa: User-level legacy GPA

        Returns:
            GPA, or None if nothing contributes credits
        """
        pairs: List[Tuple[float, float]] = []
        if global_legacy_credits > 0:
            pairs.append((global_legacy_gpa, global_legacy_credits))

        for semester in semesters:
            pairs.extend(self._graded_pairs(semester.courses))
            if semester.legacy_credits > 0:
                pairs.append((semester.legacy_gpa, semester.legacy_credits))

        return weighted_average(pairs)

    def year_gpa(self, semesters: Iterable[Semester], year: int) -> Optional[float]:
        """Coursework-only GPA of one academic year (no legacy blending)"""
        courses = [
            course
            for semester in semesters
            if semester.academic_year == year
            for course in semester.courses
        ]
        return self.semester_gpa(courses)

    def displayed_semester_gpa(self, semester: Semester) -> Optional[float]:
        """Semester GPA as shown on the semester card"""
        if semester.is_legacy_visible:
            return self.hybrid_semester_gpa(
                semester.courses, semester.legacy_credits, semester.legacy_gpa
            )
        return self.semester_gpa(semester.courses)

    def calculate_user_gpa(self, snapshot: UserSnapshot) -> GPACalculation:
        """
        Calculate the complete GPA roll-up for one user

        Args:
            snapshot: The user's semesters and global legacy block

        Returns:
            GPACalculation with degree, semester and year GPAs
        """
        self.calculation_log = []
        self.calculation_log.append(f"📊 Calculating GPA for User ID: {snapshot.user_id}")

        semesters = sorted(snapshot.semesters, key=lambda s: s.sort_key)

        semester_gpas = {}
        for semester in semesters:
            key = f"{semester.academic_year}-{semester.term.value}"
            if key in semester_gpas:
                key = f"{key} ({semester.id})"
            semester_gpas[key] = self.displayed_semester_gpa(semester)

        year_gpas = {
            year: self.year_gpa(semesters, year)
            for year in sorted({s.academic_year for s in semesters})
        }

        graded_credits = 0.0
        graded_courses = 0
        waiver_dropped = 0
        for course in snapshot.all_courses:
            result = compute_course_grade(
                course.grade_components, self.settings.final_exam_keywords
            )
            if result.grade is None:
                continue
            graded_courses += 1
            graded_credits += course.credits
            if result.waiver_dropped:
                waiver_dropped += 1
                self.calculation_log.append(
                    f"🛡️ Magen dropped for {course.name} ({result.grade:.2f})"
                )

        legacy_credits = snapshot.legacy.credits + sum(s.legacy_credits for s in semesters)
        if legacy_credits > 0:
            self.calculation_log.append(f"📚 Including {legacy_credits:g} legacy credits")

        degree_gpa = self.degree_gpa(semesters, snapshot.legacy.credits, snapshot.legacy.gpa)

        result = GPACalculation(
            user_id=snapshot.user_id,
            degree_gpa=degree_gpa,
            semester_gpas=semester_gpas,
            year_gpas=year_gpas,
            graded_credits=graded_credits,
            legacy_credits=legacy_credits,
            total_courses=len(snapshot.all_courses),
            graded_courses=graded_courses,
            waiver_dropped_courses=waiver_dropped,
        )

        self.calculation_log.append("✅ Calculation complete:")
        self.calculation_log.append(f"   Degree GPA: {format_gpa(degree_gpa)}")
        self.calculation_log.append(
            f"   Graded Courses: {graded_courses} of {result.total_courses}"
        )
        self.calculation_log.append(f"   Graded Credits: {graded_credits:.1f}")

        return result

    def get_calculation_log(self) -> List[str]:
        """Get detailed calculation log for debugging"""
        return self.calculation_log


def format_gpa(gpa: Optional[float], decimals: int = 2) -> str:
    """Format a GPA for display, '—' when undefined"""
    if gpa is None:
        return "—"
    return f"{gpa:.{decimals}f}"
