"""
Unit Tests for Institution Rank Calculator

Tests for:
- Competition ranking with ties
- Percentile calculation
- Institution stats and the minimum peer rule
- Ranking report
"""

import pandas as pd
import pytest

from conftest import make_course, make_semester
from data_models import UserSnapshot
from institution_rank_calculator import InstitutionRankCalculator


def make_user(user_id, grade=None, institution="Technion", **kwargs):
    courses = [make_course(grade, credits=3.0)] if grade is not None else []
    return UserSnapshot(
        user_id=user_id,
        academic_institution=institution,
        semesters=[make_semester(courses)],
        **kwargs,
    )


@pytest.fixture
def peers():
    return [
        make_user("a", 90.0),
        make_user("b", 80.0),
        make_user("c", 80.0),
        make_user("d", 70.0),
    ]


@pytest.fixture
def rank_calculator(test_settings):
    return InstitutionRankCalculator(test_settings)


class TestRankings:
    """Tests for calculate_rankings"""

    def test_ties_share_rank(self, rank_calculator, peers):
        rankings = rank_calculator.calculate_rankings(peers)

        assert rankings["a"].rank == 1
        assert rankings["b"].rank == 2
        assert rankings["c"].rank == 2
        assert rankings["d"].rank == 4

    def test_percentiles(self, rank_calculator, peers):
        rankings = rank_calculator.calculate_rankings(peers)

        assert rankings["a"].percentile == 100
        assert rankings["b"].percentile == 67
        assert rankings["d"].percentile == 0

    def test_users_without_gpa_not_ranked(self, rank_calculator, peers):
        newcomer = make_user("e", legacy={"credits": 30.0, "gpa": 95.0})

        rankings = rank_calculator.calculate_rankings(peers + [newcomer])

        assert "e" not in rankings
        assert rankings["a"].total_users == 4

    def test_rank_display(self, rank_calculator, peers):
        rankings = rank_calculator.calculate_rankings(peers)

        assert rankings["d"].rank_display == "4 of 4"

    def test_top_users(self, rank_calculator, peers):
        rank_calculator.calculate_rankings(peers)

        top = rank_calculator.get_top_users(2)

        assert [r.user_id for r in top] == ["a", "b"]


class TestInstitutionStats:
    """Tests for institution_stats"""

    def test_stats_for_user(self, rank_calculator, peers):
        stats = rank_calculator.institution_stats(peers[1], peers)

        assert stats.total_users == 4
        assert stats.user_rank == 2
        assert stats.percentile == 67
        assert stats.average_gpa == pytest.approx(80.0)

    def test_average_rounded_to_one_decimal(self, rank_calculator):
        users = [make_user("a", 90.0), make_user("b", 80.0), make_user("c", 81.15)]

        stats = rank_calculator.institution_stats(users[0], users)

        assert stats.average_gpa == pytest.approx(83.7)

    def test_no_institution(self, rank_calculator, peers):
        loner = make_user("x", 85.0, institution=None)

        assert rank_calculator.institution_stats(loner, peers + [loner]) is None

    def test_not_enough_peers(self, rank_calculator):
        solo = make_user("a", 90.0)
        elsewhere = make_user("b", 80.0, institution="Hebrew University")

        assert rank_calculator.institution_stats(solo, [solo, elsewhere]) is None

    def test_unranked_user_sits_at_bottom(self, rank_calculator, peers):
        newcomer = make_user("e")

        stats = rank_calculator.institution_stats(newcomer, peers + [newcomer])

        assert stats.total_users == 4
        assert stats.user_rank == 4
        assert stats.percentile == 0


class TestRankingReport:
    def test_report(self, rank_calculator, peers, tmp_path):
        rank_calculator.calculate_rankings(peers)
        output = tmp_path / "rankings.csv"

        df = rank_calculator.generate_ranking_report(output)

        assert list(df["User ID"]) == ["a", "b", "c", "d"]
        assert output.exists()
        assert len(pd.read_csv(output)) == 4

    def test_empty_report(self, rank_calculator):
        assert rank_calculator.generate_ranking_report().empty

    def test_ranking_log(self, rank_calculator, peers):
        rank_calculator.calculate_rankings(peers)

        assert "4 users" in rank_calculator.get_ranking_log()[0]
