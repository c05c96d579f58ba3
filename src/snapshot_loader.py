#!/usr/bin/env python3
"""
SNAPSHOT LOADER - CSV export loading, validation, and user snapshot assembly
Load the read-only export of the persistence layer for grade calculations

DATA SOURCES:
✅ semesters.csv - id, user_id, academic_year, term, legacy block
✅ courses.csv - id, semester_id, name, credits, difficulty, target_grade
✅ grade_components.csv - id, course_id, name, weight, score, is_magen
✅ users.csv (optional) - user_id, academic_institution, legacy_credits, legacy_gpa

VALIDATION STRATEGY:
1. Schema Validation: Required columns must exist
2. Row Validation: Each row is parsed into a pydantic model; bad rows are skipped
3. Cross-Reference Validation: Orphan courses/components are reported and dropped

Priority: CRITICAL - Entry point for exported data
Dependencies: pandas, pydantic for type-safe validation
"""

import logging
from pathlib import Path
from typing import Dict, List, Optional

import pandas as pd
from pydantic import ValidationError

from data_models import Course, GradeComponent, LegacyBlock, Semester, UserSnapshot

logger = logging.getLogger(__name__)


REQUIRED_COLUMNS = {
    "semesters.csv": ["id", "user_id", "academic_year", "term"],
    "courses.csv": ["id", "semester_id", "name", "credits"],
    "grade_components.csv": ["id", "course_id", "name", "weight"],
    "users.csv": ["user_id"],
}


class SnapshotLoadError(Exception):
    """Raised when a snapshot cannot be served from the loaded export"""


def _row_values(row: pd.Series) -> Dict[str, str]:
    """Row as a dict without blank cells, so model defaults apply"""
    values = {}
    for column, value in row.items():
        if pd.isna(value):
            continue
        value = str(value).strip()
        if value:
            values[column] = value
    return values


class SnapshotLoader:
    """Load and validate a CSV export into UserSnapshot objects"""

    def __init__(self, data_dir: Path):
        """
        Initialize loader

        Args:
            data_dir: Directory holding the exported CSV files
        """
        self.data_dir = Path(data_dir)

        self.semesters_df: Optional[pd.DataFrame] = None
        self.courses_df: Optional[pd.DataFrame] = None
        self.components_df: Optional[pd.DataFrame] = None
        self.users_df: Optional[pd.DataFrame] = None

        self.semesters: Dict[str, Semester] = {}
        self.users: Dict[str, Dict] = {}

        self.validation_errors: List[str] = []
        self.validation_warnings: List[str] = []
        self.is_loaded = False

    def load_all_data(self) -> bool:
        """Load every export file and assemble the semester tree"""

        logger.info("🔍 LOADING GRADE SNAPSHOT EXPORT")
        logger.info("=" * 60)

        self.validation_errors = []
        self.validation_warnings = []
        self.semesters = {}
        self.users = {}

        self.semesters_df = self._load_table("semesters.csv")
        self.courses_df = self._load_table("courses.csv")
        self.components_df = self._load_table("grade_components.csv")
        self.users_df = self._load_table("users.csv", required=False)

        if self.semesters_df is None or self.courses_df is None or self.components_df is None:
            logger.error("❌ Data loading failed - check validation errors")
            self.is_loaded = False
            return False

        components = self._build_components()
        courses = self._build_courses(components)
        self.semesters = self._build_semesters(courses)
        self.users = self._build_users()

        self.is_loaded = True
        logger.info(
            f"✅ Loaded {len(self.semesters)} semesters for {len(self.get_all_user_ids())} users"
        )
        return True

    def _load_table(self, filename: str, required: bool = True) -> Optional[pd.DataFrame]:
        file_path = self.data_dir / filename

        if not file_path.exists():
            if required:
                self.validation_errors.append(f"Missing required file: {filename}")
                logger.error(f"  ❌ Missing required file: {file_path}")
            else:
                logger.info(f"  ℹ️  No {filename} found")
            return None

        try:
            logger.info(f"📊 Loading {filename} from: {file_path}")
            df = pd.read_csv(file_path, dtype=str)
        except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
            self.validation_errors.append(f"Failed to read {filename}: {e}")
            logger.error(f"  ❌ Failed to read {filename}: {e}")
            return None

        df.columns = [str(c).strip() for c in df.columns]
        missing = [c for c in REQUIRED_COLUMNS[filename] if c not in df.columns]
        if missing:
            self.validation_errors.append(f"{filename} missing columns: {', '.join(missing)}")
            logger.error(f"  ❌ {filename} missing columns: {missing}")
            return None

        logger.info(f"  ✅ Loaded {len(df)} rows")
        return df

    def _warn(self, message: str):
        self.validation_warnings.append(message)
        logger.warning(f"  ⚠️ {message}")

    def _build_components(self) -> Dict[str, List[GradeComponent]]:
        by_course: Dict[str, List[GradeComponent]] = {}
        for index, row in self.components_df.iterrows():
            try:
                component = GradeComponent(**_row_values(row))
            except ValidationError as e:
                self._warn(f"grade_components.csv row {index + 2} skipped: {e.errors()[0]['msg']}")
                continue
            by_course.setdefault(component.course_id, []).append(component)
        return by_course

    def _build_courses(self, components: Dict[str, List[GradeComponent]]) -> Dict[str, List[Course]]:
        by_semester: Dict[str, List[Course]] = {}
        course_ids = set()
        for index, row in self.courses_df.iterrows():
            values = _row_values(row)
            try:
                course = Course(**values, grade_components=components.get(values.get("id"), []))
            except ValidationError as e:
                self._warn(f"courses.csv row {index + 2} skipped: {e.errors()[0]['msg']}")
                continue
            course_ids.add(course.id)
            by_semester.setdefault(course.semester_id, []).append(course)

        for course_id in components:
            if course_id not in course_ids:
                self._warn(f"Components reference unknown course {course_id}")
        return by_semester

    def _build_semesters(self, courses: Dict[str, List[Course]]) -> Dict[str, Semester]:
        semesters: Dict[str, Semester] = {}
        for index, row in self.semesters_df.iterrows():
            values = _row_values(row)
            try:
                semester = Semester(**values, courses=courses.get(values.get("id"), []))
            except ValidationError as e:
                self._warn(f"semesters.csv row {index + 2} skipped: {e.errors()[0]['msg']}")
                continue
            semesters[semester.id] = semester

        for semester_id in courses:
            if semester_id not in semesters:
                self._warn(f"Courses reference unknown semester {semester_id}")
        return semesters

    def _build_users(self) -> Dict[str, Dict]:
        users: Dict[str, Dict] = {}
        if self.users_df is None:
            return users

        for index, row in self.users_df.iterrows():
            values = _row_values(row)
            if "user_id" not in values:
                self._warn(f"users.csv row {index + 2} skipped: missing user_id")
                continue
            try:
                legacy = LegacyBlock(
                    credits=values.get("legacy_credits", 0),
                    gpa=values.get("legacy_gpa", 0),
                )
            except ValidationError as e:
                self._warn(f"users.csv row {index + 2} skipped: {e.errors()[0]['msg']}")
                continue
            users[values["user_id"]] = {
                "academic_institution": values.get("academic_institution"),
                "legacy": legacy,
            }
        return users

    def get_all_user_ids(self) -> List[str]:
        """All users that own a semester or appear in users.csv"""
        user_ids = {s.user_id for s in self.semesters.values()} | set(self.users)
        return sorted(user_ids)

    def get_user_snapshot(self, user_id: str) -> UserSnapshot:
        """Assemble one user's snapshot"""
        if not self.is_loaded:
            raise SnapshotLoadError("Snapshot export not loaded - call load_all_data() first")

        user_id = str(user_id)
        if user_id not in self.get_all_user_ids():
            raise SnapshotLoadError(f"Unknown user: {user_id}")

        profile = self.users.get(user_id, {})
        return UserSnapshot(
            user_id=user_id,
            academic_institution=profile.get("academic_institution"),
            legacy=profile.get("legacy", LegacyBlock()),
            semesters=[s for s in self.semesters.values() if s.user_id == user_id],
        )

    def get_all_snapshots(self) -> List[UserSnapshot]:
        return [self.get_user_snapshot(user_id) for user_id in self.get_all_user_ids()]

    def generate_validation_report(self) -> str:
        """Human-readable summary of the last load"""
        lines = ["📋 SNAPSHOT VALIDATION REPORT", "=" * 60]
        lines.append(f"Semesters: {len(self.semesters)}")
        lines.append(f"Users: {len(self.get_all_user_ids())}")

        if self.validation_errors:
            lines.append(f"\n❌ Errors ({len(self.validation_errors)}):")
            lines.extend(f"  • {error}" for error in self.validation_errors)
        if self.validation_warnings:
            lines.append(f"\n⚠️ Warnings ({len(self.validation_warnings)}):")
            lines.extend(f"  • {warning}" for warning in self.validation_warnings)
        if not self.validation_errors and not self.validation_warnings:
            lines.append("\n✅ No issues found")

        return "\n".join(lines)
