"""
SETTINGS - Process-wide configuration for the grade planner
Fixed defaults, overridable per deployment through GRADE_PLANNER_* env vars
or a local .env file.

Every calculator accepts an explicit Settings instance, so tests and
callers can override a single value without touching the environment.
"""

from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Lowest grade the strategy planner will ever suggest
    min_pass_grade: float = 60.0

    # Personal bias bounds and fallbacks when a tier has no history
    max_bias: float = 10.0
    easy_bias: float = 2.0
    medium_bias: float = 0.0
    hard_bias: float = -2.0

    # Re-balancing loop
    rebalance_tolerance: float = 0.5
    rebalance_max_iterations: int = 100

    # Name fragments that mark a component as the final exam
    final_exam_keywords: List[str] = ["מבחן", "בחינה", "exam", "final"]

    # Institution stats are hidden below this many ranked peers
    min_institution_peers: int = 2

    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="GRADE_PLANNER_",
        env_file=".env",
        extra="ignore",
    )


settings = Settings()
