"""Tests for flowlint.quality.ratings - A-E bands and debt arithmetic."""

from __future__ import annotations

import pytest

from flowlint.quality.ratings import (
    complexity_rating,
    debt_minutes,
    debt_ratio,
    development_minutes,
    file_complexity_rating,
    format_tech_debt,
    maintainability_rating,
    reliability_rating,
    security_rating,
)

# ---------------------------------------------------------------------------
# Rating bands (upper bound inclusive)
# ---------------------------------------------------------------------------


class TestComplexityRating:
    @pytest.mark.parametrize(
        ("average", "grade"),
        [
            (0, "A"),
            (5, "A"),
            (5.01, "B"),
            (10, "B"),
            (10.5, "C"),
            (15, "C"),
            (20, "D"),
            (20.01, "E"),
            (99, "E"),
        ],
    )
    def test_bands(self, average: float, grade: str) -> None:
        assert complexity_rating(average) == grade


class TestMaintainabilityRating:
    @pytest.mark.parametrize(
        ("ratio", "grade"),
        [(0, "A"), (5, "A"), (5.1, "B"), (10, "B"), (20, "C"), (20.1, "D"), (50, "D"), (166.7, "E")],
    )
    def test_bands(self, ratio: float, grade: str) -> None:
        assert maintainability_rating(ratio) == grade


class TestReliabilityRating:
    @pytest.mark.parametrize(
        ("bugs", "grade"),
        [(0, "A"), (1, "B"), (2, "B"), (3, "C"), (5, "C"), (6, "D"), (10, "D"), (11, "E")],
    )
    def test_bands(self, bugs: int, grade: str) -> None:
        assert reliability_rating(bugs) == grade


class TestSecurityRating:
    @pytest.mark.parametrize(
        ("vulnerabilities", "grade"),
        [(0, "A"), (1, "B"), (2, "C"), (3, "C"), (4, "D"), (5, "D"), (6, "E")],
    )
    def test_bands(self, vulnerabilities: int, grade: str) -> None:
        assert security_rating(vulnerabilities) == grade


class TestFileComplexityRating:
    @pytest.mark.parametrize(
        ("flows", "grade"),
        [(7, "A"), (8, "B"), (14, "B"), (21, "C"), (30, "D"), (31, "E")],
    )
    def test_bands(self, flows: int, grade: str) -> None:
        assert file_complexity_rating(flows) == grade


# ---------------------------------------------------------------------------
# Debt arithmetic
# ---------------------------------------------------------------------------


class TestDebt:
    def test_debt_minutes_weights(self) -> None:
        assert debt_minutes(code_smells=2, bugs=1, vulnerabilities=1) == 2 * 5 + 15 + 30

    def test_development_minutes_floor(self) -> None:
        assert development_minutes(2, 0) == 60
        assert development_minutes(5, 4) == 70

    def test_ratio(self) -> None:
        assert debt_ratio(100, 60) == pytest.approx(166.666, rel=1e-3)
        assert debt_ratio(10, 0) == 0.0

    @pytest.mark.parametrize(
        ("minutes", "text"),
        [(0, "0min"), (45, "45min"), (60, "1h"), (150, "2h 30m"), (480, "1d"), (600, "1d 2h")],
    )
    def test_format_tech_debt(self, minutes: int, text: str) -> None:
        assert format_tech_debt(minutes) == text
