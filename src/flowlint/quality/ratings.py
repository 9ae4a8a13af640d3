"""A-E rating functions and technical-debt arithmetic."""

from __future__ import annotations

# Upper bounds (inclusive) for grades A-D; anything above the last bound is E.
COMPLEXITY_BOUNDS: tuple[float, ...] = (5, 10, 15, 20)
MAINTAINABILITY_BOUNDS: tuple[float, ...] = (5, 10, 20, 50)
RELIABILITY_BOUNDS: tuple[float, ...] = (0, 2, 5, 10)
SECURITY_BOUNDS: tuple[float, ...] = (0, 1, 3, 5)
FILE_COMPLEXITY_BOUNDS: tuple[float, ...] = (7, 14, 21, 30)

GRADES: tuple[str, ...] = ("A", "B", "C", "D", "E")

CODE_SMELL_MINUTES = 5
BUG_MINUTES = 15
VULNERABILITY_MINUTES = 30
FLOW_MINUTES = 10
SUBFLOW_MINUTES = 5
MIN_DEVELOPMENT_MINUTES = 60
HOURS_PER_DAY = 8


def _grade(value: float, bounds: tuple[float, ...]) -> str:
    for grade, bound in zip(GRADES, bounds):
        if value <= bound:
            return grade
    return GRADES[-1]


def complexity_rating(average: float) -> str:
    """Average flow complexity: <=5 A, <=10 B, <=15 C, <=20 D, else E."""
    return _grade(average, COMPLEXITY_BOUNDS)


def maintainability_rating(debt_ratio: float) -> str:
    """Debt ratio in percent: <=5 A, <=10 B, <=20 C, <=50 D, else E."""
    return _grade(debt_ratio, MAINTAINABILITY_BOUNDS)


def reliability_rating(bugs: int) -> str:
    """Bug count: 0 A, <=2 B, <=5 C, <=10 D, else E."""
    return _grade(bugs, RELIABILITY_BOUNDS)


def security_rating(vulnerabilities: int) -> str:
    """Vulnerability count: 0 A, 1 B, <=3 C, <=5 D, else E. Hotspots do not count."""
    return _grade(vulnerabilities, SECURITY_BOUNDS)


def file_complexity_rating(flows: int) -> str:
    """Flows per file: <=7 A, <=14 B, <=21 C, <=30 D, else E."""
    return _grade(flows, FILE_COMPLEXITY_BOUNDS)


def debt_minutes(code_smells: int, bugs: int, vulnerabilities: int) -> int:
    return code_smells * CODE_SMELL_MINUTES + bugs * BUG_MINUTES + vulnerabilities * VULNERABILITY_MINUTES


def development_minutes(flows: int, sub_flows: int) -> int:
    """Estimated build effort, floored at one hour so tiny projects stay stable."""
    return max(flows * FLOW_MINUTES + sub_flows * SUBFLOW_MINUTES, MIN_DEVELOPMENT_MINUTES)


def debt_ratio(debt: float, development: float) -> float:
    """Debt as a percentage of development time (unrounded)."""
    if development <= 0:
        return 0.0
    return debt / development * 100


def format_tech_debt(minutes: int) -> str:
    """``45min``, ``2h 30m``, ``1d 2h`` (8-hour days)."""
    if minutes < 60:
        return f"{minutes}min"
    hours, mins = divmod(minutes, 60)
    if hours < HOURS_PER_DAY:
        return f"{hours}h {mins}m" if mins else f"{hours}h"
    days, rest = divmod(hours, HOURS_PER_DAY)
    return f"{days}d {rest}h" if rest else f"{days}d"
