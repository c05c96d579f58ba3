#!/usr/bin/env python3
"""
INSTITUTION RANK CALCULATOR - Where a student stands among peers
Rank users of the same academic institution by coursework GPA

RANKING METHODOLOGY:
✅ GPA: Credit-weighted coursework GPA with the Magen rule (legacy excluded)
✅ Primary Sort: GPA (descending)
✅ Tie Handling: Users with identical GPAs receive same rank
✅ Rank Gaps: After ties, next rank skips (e.g., two #1s, next is #3)
✅ Percentile: (total - rank) / (total - 1) * 100, higher is better
✅ Privacy: No stats below the minimum number of ranked peers

OUTPUT FORMATS:
- Numeric: "Rank 15 of 190"
- Percentile: 92
- Average: Institution average GPA, 1 decimal

Dependencies: pandas, gpa_calculator
"""

import logging
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Optional

import pandas as pd

from data_models import InstitutionStats, UserSnapshot
from gpa_calculator import GPACalculator
from settings import Settings, settings as default_settings

logger = logging.getLogger(__name__)


def _round_half_up(value: float, decimals: int = 0) -> float:
    factor = 10 ** decimals
    return math.floor(value * factor + 0.5) / factor


@dataclass
class InstitutionRankResult:
    """Rank of one user within an institution"""
    user_id: str
    gpa: float
    rank: int
    total_users: int
    percentile: int

    @property
    def rank_display(self) -> str:
        """Get formatted rank display"""
        return f"{self.rank} of {self.total_users}"


class InstitutionRankCalculator:
    """Calculate peer rankings from user snapshots"""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or default_settings
        self.gpa_calculator = GPACalculator(self.settings)
        self.rankings: Dict[str, InstitutionRankResult] = {}
        self.ranking_log: List[str] = []

    def calculate_rankings(self, snapshots: Iterable[UserSnapshot]) -> Dict[str, InstitutionRankResult]:
        """
        Rank every user that has a coursework GPA

        Args:
            snapshots: Snapshots of users at one institution

        Returns:
            Dictionary mapping user_id to InstitutionRankResult
        """
        user_gpas = []
        for snapshot in snapshots:
            gpa = self.gpa_calculator.semester_gpa(snapshot.all_courses)
            if gpa is not None:
                user_gpas.append((snapshot.user_id, gpa))

        self.ranking_log = [f"🏆 Calculating rankings for {len(user_gpas)} users with a GPA"]

        # Sort by GPA descending, user id keeps ties deterministic
        sorted_users = sorted(user_gpas, key=lambda x: (-x[1], x[0]))
        total = len(sorted_users)

        rankings = {}
        rank = 0
        previous_gpa = None
        for position, (user_id, gpa) in enumerate(sorted_users, start=1):
            if previous_gpa is None or abs(gpa - previous_gpa) >= 1e-9:
                rank = position
            previous_gpa = gpa

            percentile = int(_round_half_up((total - rank) / (total - 1) * 100)) if total > 1 else 100
            rankings[user_id] = InstitutionRankResult(
                user_id=user_id,
                gpa=gpa,
                rank=rank,
                total_users=total,
                percentile=percentile,
            )

        self.rankings = rankings
        if sorted_users:
            self.ranking_log.append(f"   Top GPA: {sorted_users[0][1]:.2f}")
            self.ranking_log.append(f"   Median GPA: {sorted_users[total // 2][1]:.2f}")
        return rankings

    def institution_stats(
        self,
        user: UserSnapshot,
        all_users: Iterable[UserSnapshot],
    ) -> Optional[InstitutionStats]:
        """
        Peer statistics for one user

        Args:
            user: The user asking
            all_users: Snapshots of every user (filtered to the user's institution)

        Returns:
            InstitutionStats, or None without an institution or enough peers
        """
        if not user.academic_institution:
            return None

        peers = [u for u in all_users if u.academic_institution == user.academic_institution]
        if len(peers) < self.settings.min_institution_peers:
            return None

        rankings = self.calculate_rankings(peers)
        total = len(rankings)
        if total < self.settings.min_institution_peers:
            return None

        result = rankings.get(user.user_id)
        # Users without a GPA sit at the bottom
        user_rank = result.rank if result else total
        percentile = result.percentile if result else 0
        average = sum(r.gpa for r in rankings.values()) / total

        return InstitutionStats(
            total_users=total,
            user_rank=user_rank,
            percentile=percentile,
            average_gpa=_round_half_up(average, 1),
        )

    def get_top_users(self, n: int = 10) -> List[InstitutionRankResult]:
        """Get top N users by rank"""
        return sorted(self.rankings.values(), key=lambda r: r.rank)[:n]

    def generate_ranking_report(self, output_path: Optional[Path] = None) -> pd.DataFrame:
        """
        Generate ranking report

        Args:
            output_path: Optional path to save CSV report

        Returns:
            DataFrame with all ranking information
        """
        if not self.rankings:
            logger.warning("No rankings calculated yet")
            return pd.DataFrame()

        records = []
        for result in self.rankings.values():
            records.append({
                'User ID': result.user_id,
                'GPA': round(result.gpa, 2),
                'Rank': result.rank,
                'Total Users': result.total_users,
                'Percentile': result.percentile,
                'Rank Display': result.rank_display,
            })

        df = pd.DataFrame(records).sort_values(['Rank', 'User ID']).reset_index(drop=True)

        if output_path:
            df.to_csv(output_path, index=False)
            logger.info(f"Ranking report saved to: {output_path}")

        return df

    def get_ranking_log(self) -> List[str]:
        """Get detailed ranking calculation log"""
        return self.ranking_log
