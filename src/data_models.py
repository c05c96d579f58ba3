#!/usr/bin/env python3
"""
DATA MODELS - Pydantic schemas for semesters, courses and grade components
Type-safe snapshots of a student's record as exported by the persistence layer

COMPREHENSIVE DATA VALIDATION:
✅ Grade Components: Weighted contributors to a course grade (Magen flag)
✅ Courses: Credits, difficulty tier, optional target grade
✅ Semesters: Academic year, term, per-semester legacy block
✅ Results: Course grade, difficulty stats, strategy plan, GPA summary

VALIDATION RULES:
- Weights and credits must be non-negative
- Scores, targets and legacy GPAs must be 0-100 (None = ungraded)
- Difficulty must be easy/medium/hard (blank = medium)
- Term must be A/B/Summer/Yearly
- Identifiers are opaque strings

Priority: CRITICAL - Foundation for all grade calculations
Dependencies: Pydantic for validation
"""

from typing import Optional, List, Dict
from pydantic import BaseModel, ConfigDict, Field, field_validator
from datetime import datetime
from enum import Enum


class Difficulty(str, Enum):
    """Difficulty tier of a course, used only by the strategy planner"""
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class Term(str, Enum):
    """Semester term"""
    A = "A"
    B = "B"
    SUMMER = "Summer"
    YEARLY = "Yearly"

    @property
    def order(self) -> int:
        """Sort position within an academic year"""
        return TERM_ORDER[self]

    @property
    def hebrew_name(self) -> str:
        """Term name as shown to students"""
        return TERM_NAMES[self]


TERM_ORDER = {Term.A: 1, Term.B: 2, Term.SUMMER: 3, Term.YEARLY: 4}
TERM_NAMES = {Term.A: "א׳", Term.B: "ב׳", Term.SUMMER: "קיץ", Term.YEARLY: "שנתי"}


class CourseStatus(Enum):
    """
    Grading state of a course.

    COMPLETED: Every component has a score
    IN_PROGRESS: Some, but not all, components have a score
    FUTURE: No component has a score (including courses with no components)
    """
    COMPLETED = "completed"
    IN_PROGRESS = "in_progress"
    FUTURE = "future"


class GradeComponent(BaseModel):
    """One weighted contributor to a course grade"""

    id: str = Field(..., description="Component identifier")
    course_id: str = Field("", description="Owning course")
    name: str = Field(..., description="Display label (used to detect the final exam)")
    weight: float = Field(..., ge=0.0, description="Relative weight, need not sum to 100")
    score: Optional[float] = Field(None, ge=0.0, le=100.0, description="Score 0-100, None if ungraded")
    is_magen: bool = Field(False, description="Waivable protective component")
    is_final_exam: Optional[bool] = Field(None, description="Explicit final exam flag, None = detect by name")

    @field_validator("id", "course_id", mode="before")
    @classmethod
    def normalize_ids(cls, v):
        """Identifiers are opaque strings"""
        return v if v is None else str(v)

    @property
    def is_graded(self) -> bool:
        return self.score is not None


class Course(BaseModel):
    """A gradeable unit owning a set of grade components"""

    id: str = Field(..., description="Course identifier")
    semester_id: str = Field("", description="Owning semester")
    name: str = Field(..., description="Course name")
    credits: float = Field(..., ge=0.0, description="Credit points")
    difficulty: Difficulty = Field(Difficulty.MEDIUM, description="Difficulty tier")
    target_grade: Optional[float] = Field(None, ge=0.0, le=100.0, description="Student's aspiration")
    grade_components: List[GradeComponent] = Field(default_factory=list)

    @field_validator("id", "semester_id", mode="before")
    @classmethod
    def normalize_ids(cls, v):
        """Identifiers are opaque strings"""
        return v if v is None else str(v)

    @field_validator("difficulty", mode="before")
    @classmethod
    def parse_difficulty(cls, v):
        """Blank difficulty means medium; tags are case-insensitive"""
        if v is None or (isinstance(v, str) and not v.strip()):
            return Difficulty.MEDIUM
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @property
    def has_started(self) -> bool:
        """At least one component has a score"""
        return any(c.is_graded for c in self.grade_components)

    @property
    def is_completed(self) -> bool:
        """Has components and every one of them has a score"""
        return bool(self.grade_components) and all(c.is_graded for c in self.grade_components)

    @property
    def status(self) -> CourseStatus:
        if self.is_completed:
            return CourseStatus.COMPLETED
        if self.has_started:
            return CourseStatus.IN_PROGRESS
        return CourseStatus.FUTURE


class Semester(BaseModel):
    """A term's worth of courses for one user"""

    id: str = Field(..., description="Semester identifier")
    user_id: str = Field("", description="Owning user")
    academic_year: int = Field(..., ge=1, description="Year of study (1, 2, 3...)")
    term: Term = Field(..., description="A, B, Summer or Yearly")
    legacy_credits: float = Field(0.0, ge=0.0, description="Pre-system credits for this semester")
    legacy_gpa: float = Field(0.0, ge=0.0, le=100.0, description="Pre-system GPA for this semester")
    is_legacy_visible: bool = Field(False, description="Blend legacy block into the displayed semester GPA")
    courses: List[Course] = Field(default_factory=list)

    @field_validator("id", "user_id", mode="before")
    @classmethod
    def normalize_ids(cls, v):
        """Identifiers are opaque strings"""
        return v if v is None else str(v)

    @field_validator("term", mode="before")
    @classmethod
    def parse_term(cls, v):
        """Accept 'summer'/'yearly' in any case"""
        if isinstance(v, str):
            lookup = {t.value.lower(): t for t in Term}
            return lookup.get(v.strip().lower(), v)
        return v

    @property
    def sort_key(self):
        return (self.academic_year, self.term.order)

    @property
    def display_name(self) -> str:
        """Hebrew display name, e.g. 'שנה 2 - סמסטר א׳'"""
        if self.term == Term.YEARLY:
            return f"שנה {self.academic_year}"
        return f"שנה {self.academic_year} - סמסטר {self.term.hebrew_name}"


class LegacyBlock(BaseModel):
    """Credits/GPA pair predating system use"""

    credits: float = Field(0.0, ge=0.0, description="Legacy credit points")
    gpa: float = Field(0.0, ge=0.0, le=100.0, description="Legacy GPA")


class UserSnapshot(BaseModel):
    """Read-only snapshot of one user's record"""

    user_id: str = Field(..., description="User identifier")
    academic_institution: Optional[str] = Field(None, description="Institution name")
    legacy: LegacyBlock = Field(default_factory=LegacyBlock)
    semesters: List[Semester] = Field(default_factory=list)

    @field_validator("user_id", mode="before")
    @classmethod
    def normalize_ids(cls, v):
        """Identifiers are opaque strings"""
        return v if v is None else str(v)

    @property
    def all_courses(self) -> List[Course]:
        return [course for semester in self.semesters for course in semester.courses]


class CourseGradeResult(BaseModel):
    """Final grade of a course after the Magen rule"""

    grade: Optional[float] = Field(None, description="None while any component is ungraded")
    waiver_dropped: bool = Field(False, description="Dropping the Magen component raised the grade")

    model_config = ConfigDict(frozen=True)


class TierStats(BaseModel):
    avg: float
    count: int


class DifficultyStats(BaseModel):
    """Historical performance per difficulty tier"""

    easy: Optional[TierStats] = None
    medium: Optional[TierStats] = None
    hard: Optional[TierStats] = None
    overall_avg: float = 0.0

    def for_tier(self, tier: Difficulty) -> Optional[TierStats]:
        return getattr(self, Difficulty(tier).value)

    @property
    def is_empty(self) -> bool:
        return self.easy is None and self.medium is None and self.hard is None


class StrategyInput(BaseModel):
    """Inputs to the strategy planner (ranges are checked by the planner itself)"""

    current_gpa: Optional[float] = Field(None, description="Degree GPA so far, None if nothing graded")
    total_credits_so_far: float = Field(0.0, ge=0.0, description="Credits already counted in current_gpa")
    target_gpa: float = Field(..., description="Desired final degree GPA")
    future_courses: List[Course] = Field(default_factory=list)
    completed_courses: List[Course] = Field(default_factory=list)
    max_realistic_grade: float = Field(..., description="Personal ceiling per course")


class CourseRecommendation(BaseModel):
    course_id: str
    course_name: str
    credits: float
    difficulty: Difficulty
    suggested_grade: float


class StrategyResult(BaseModel):
    """Outcome of a strategy plan; infeasible plans still carry recommendations"""

    success: bool
    message: str
    status: str = Field(..., description="invalid, unreachable, already_achieved or balanced")
    recommendations: List[CourseRecommendation] = Field(default_factory=list)
    required_future_average: Optional[float] = None
    achieved_gpa: Optional[float] = None


class GPACalculation(BaseModel):
    """GPA roll-up for one user"""

    user_id: str = Field(..., description="User identifier")

    degree_gpa: Optional[float] = Field(None, description="Degree GPA including all legacy blocks")
    semester_gpas: Dict[str, Optional[float]] = Field(default_factory=dict, description="Semester display name -> GPA")
    year_gpas: Dict[int, Optional[float]] = Field(default_factory=dict, description="Academic year -> coursework GPA")

    graded_credits: float = Field(0.0, ge=0.0, description="Credits of fully graded courses")
    legacy_credits: float = Field(0.0, ge=0.0, description="Global plus per-semester legacy credits")

    total_courses: int = Field(0, ge=0)
    graded_courses: int = Field(0, ge=0)
    waiver_dropped_courses: int = Field(0, ge=0, description="Courses where the Magen component was dropped")

    calculation_date: datetime = Field(default_factory=datetime.now)


class InstitutionStats(BaseModel):
    """Where a user stands among peers at the same institution"""

    total_users: int
    user_rank: int
    percentile: int
    average_gpa: float


__all__ = [
    'Difficulty',
    'Term',
    'CourseStatus',
    'GradeComponent',
    'Course',
    'Semester',
    'LegacyBlock',
    'UserSnapshot',
    'CourseGradeResult',
    'TierStats',
    'DifficultyStats',
    'StrategyInput',
    'CourseRecommendation',
    'StrategyResult',
    'GPACalculation',
    'InstitutionStats',
]
