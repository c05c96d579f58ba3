"""
Unit Tests for Performance Analyzer

Tests for:
- Per-tier and overall credit-weighted averages
- Personal bias and its clamp
- Default bias fallback
"""

import pytest

from conftest import make_component, make_course
from data_models import Difficulty, DifficultyStats, TierStats
from performance_analyzer import analyze_history, default_bias, personal_bias
from settings import Settings


class TestAnalyzeHistory:
    """Tests for analyze_history"""

    def test_tier_and_overall_averages(self):
        courses = [
            make_course(95.0, credits=3.0, difficulty="easy"),
            make_course(85.0, credits=1.0, difficulty="easy"),
            make_course(88.0, credits=4.0, difficulty="hard"),
        ]

        stats = analyze_history(courses)

        assert stats.easy.avg == pytest.approx(92.5)
        assert stats.easy.count == 2
        assert stats.hard.avg == pytest.approx(88.0)
        assert stats.hard.count == 1
        assert stats.medium is None
        assert stats.overall_avg == pytest.approx(90.25)

    def test_empty_history(self):
        stats = analyze_history([])

        assert stats.is_empty
        assert stats.overall_avg == 0.0

    def test_magen_rule_applies_to_history(self):
        course = make_course(
            components=[
                make_component("Final exam", 70.0, 80.0),
                make_component("Magen", 30.0, 40.0, is_magen=True),
            ],
            difficulty="medium",
        )

        stats = analyze_history([course])

        assert stats.medium.avg == pytest.approx(80.0)

    def test_ungraded_and_zero_credit_courses_skipped(self):
        courses = [
            make_course(None, difficulty="hard"),
            make_course(100.0, credits=0.0, difficulty="easy"),
            make_course(70.0, credits=2.0, difficulty="medium"),
        ]

        stats = analyze_history(courses)

        assert stats.easy is None
        assert stats.hard is None
        assert stats.medium.avg == pytest.approx(70.0)
        assert stats.overall_avg == pytest.approx(70.0)


class TestPersonalBias:
    """Tests for personal_bias and default_bias"""

    def test_learned_bias(self, test_settings):
        """95 on easy, 88 on hard, equal credits: +3.5 / -3.5"""
        stats = analyze_history([
            make_course(95.0, credits=3.0, difficulty="easy"),
            make_course(88.0, credits=3.0, difficulty="hard"),
        ])

        assert personal_bias(Difficulty.EASY, stats, test_settings) == pytest.approx(3.5)
        assert personal_bias(Difficulty.HARD, stats, test_settings) == pytest.approx(-3.5)

    def test_missing_tier_falls_back_to_default(self, test_settings):
        stats = analyze_history([make_course(95.0, difficulty="easy")])

        assert personal_bias(Difficulty.MEDIUM, stats, test_settings) == 0.0
        assert personal_bias(Difficulty.HARD, stats, test_settings) == -2.0

    def test_empty_history_uses_defaults(self, test_settings):
        stats = DifficultyStats()

        assert personal_bias(Difficulty.EASY, stats, test_settings) == 2.0
        assert personal_bias(Difficulty.MEDIUM, stats, test_settings) == 0.0
        assert personal_bias(Difficulty.HARD, stats, test_settings) == -2.0

    def test_bias_clamped(self, test_settings):
        stats = DifficultyStats(
            easy=TierStats(avg=100.0, count=1),
            hard=TierStats(avg=40.0, count=1),
            overall_avg=70.0,
        )

        assert personal_bias(Difficulty.EASY, stats, test_settings) == 10.0
        assert personal_bias(Difficulty.HARD, stats, test_settings) == -10.0

    def test_configurable_defaults(self):
        custom = Settings(_env_file=None, easy_bias=5.0, max_bias=3.0)

        assert default_bias(Difficulty.EASY, custom) == 5.0
        stats = DifficultyStats(easy=TierStats(avg=99.0, count=1), overall_avg=90.0)
        assert personal_bias(Difficulty.EASY, stats, custom) == 3.0
