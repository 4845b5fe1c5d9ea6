"""Letter grades and pass/fail from exam percentages."""

from typing import Optional, Tuple

from schoolms.core.enums import ResultStatus

PASS_PERCENTAGE = 33.0

# (minimum percentage, letter), highest first
GRADE_THRESHOLDS = (
    (90.0, "A+"),
    (80.0, "A"),
    (70.0, "B+"),
    (60.0, "B"),
    (50.0, "C+"),
    (40.0, "C"),
    (33.0, "D"),
)


def percentage(marks_obtained: float, total_marks: float) -> float:
    if total_marks <= 0:
        raise ValueError("total_marks must be positive")
    return round(marks_obtained / total_marks * 100, 2)


def letter_grade(pct: float) -> str:
    for minimum, letter in GRADE_THRESHOLDS:
        if pct >= minimum:
            return letter
    return "F"


def result_status(pct: float) -> ResultStatus:
    return ResultStatus.PASS if pct >= PASS_PERCENTAGE else ResultStatus.FAIL


def grade_result(
    marks_obtained: float,
    total_marks: float,
    grade: Optional[str] = None,
    status: Optional[str] = None,
) -> Tuple[float, str, str]:
    """(percentage, grade, status). A caller-supplied grade and status pair wins;
    'Passed' is accepted as Pass."""
    pct = percentage(marks_obtained, total_marks)
    if grade and status:
        resolved = ResultStatus.PASS if status in ("Pass", "Passed") else ResultStatus.FAIL
        return pct, grade, resolved.value
    return pct, letter_grade(pct), result_status(pct).value
