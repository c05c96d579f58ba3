#!/usr/bin/env python3
"""
Print a grade report (and optionally a strategy plan) for one user
Usage: python3 generate_report.py <data_dir> <user_id> [target_gpa] [max_grade]
"""

import logging
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent / "src"))

from settings import settings

logging.basicConfig(level=settings.log_level, format="%(levelname)s %(name)s: %(message)s")

if len(sys.argv) < 3:
    print("ERROR: Missing arguments")
    print("Usage: python3 generate_report.py <data_dir> <user_id> [target_gpa] [max_grade]")
    sys.exit(1)

data_dir = Path(sys.argv[1]).expanduser()
user_id = sys.argv[2]

try:
    target_gpa = float(sys.argv[3]) if len(sys.argv) > 3 else None
    max_grade = float(sys.argv[4]) if len(sys.argv) > 4 else 100.0
except ValueError:
    print("ERROR: target_gpa and max_grade must be numbers")
    sys.exit(1)

# Import after adding to path
from grade_analytics import gpa_trend, grade_distribution, overall_stats, target_progress
from gpa_calculator import GPACalculator, format_gpa
from institution_rank_calculator import InstitutionRankCalculator
from snapshot_loader import SnapshotLoader, SnapshotLoadError
from strategy_planner import StrategyPlanner, build_strategy_input

print(f"Starting grade report...")
print(f"  Data Dir: {data_dir}")
print(f"  User ID:  {user_id}")

loader = SnapshotLoader(data_dir)
if not loader.load_all_data():
    print(loader.generate_validation_report())
    sys.exit(1)

try:
    snapshot = loader.get_user_snapshot(user_id)
except SnapshotLoadError as e:
    print(f"ERROR: {e}")
    sys.exit(1)

calculator = GPACalculator()
calculation = calculator.calculate_user_gpa(snapshot)

print("\n📊 GPA SUMMARY")
print("=" * 60)
for line in calculator.get_calculation_log():
    print(line)

print("\nSemesters:")
for key, gpa in calculation.semester_gpas.items():
    print(f"  {key:<20} {format_gpa(gpa)}")

print("\nYears:")
for year, gpa in calculation.year_gpas.items():
    print(f"  Year {year:<15} {format_gpa(gpa)}")

print("\n📈 ANALYTICS")
print("=" * 60)
for key, value in overall_stats(snapshot).items():
    print(f"  {key}: {value}")

trend = gpa_trend(snapshot.semesters)
if not trend.empty:
    print("\nGPA trend:")
    print(trend.to_string(index=False))

distribution = grade_distribution(snapshot.semesters)
if not distribution.empty:
    print("\nGrade distribution:")
    print(distribution.to_string(index=False))

progress = target_progress(snapshot.semesters)
if not progress.empty:
    print("\nTarget progress:")
    print(progress.to_string(index=False))

stats = InstitutionRankCalculator().institution_stats(snapshot, loader.get_all_snapshots())
if stats is not None:
    print(
        f"\n🏆 Rank {stats.user_rank} of {stats.total_users} at "
        f"{snapshot.academic_institution} (percentile {stats.percentile}, "
        f"average {stats.average_gpa:.1f})"
    )

if target_gpa is not None:
    print("\n🎯 SMART STRATEGY")
    print("=" * 60)
    planner = StrategyPlanner()
    result = planner.plan_strategy(build_strategy_input(snapshot, target_gpa, max_grade))
    print(result.message)
    for rec in result.recommendations:
        print(
            f"  {rec.course_name:<30} {rec.difficulty.value:<7} "
            f"{rec.credits:>4g} cr  -> {rec.suggested_grade:g}"
        )
    if result.status == "invalid":
        sys.exit(1)

print(f"\n✅ SUCCESS!")
