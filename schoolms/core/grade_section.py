"""
Grade/section label parsing.

Class and student records carry free-text labels in several historical formats:
"Grade 1 Section A", "Grade 1A", "Grade 1" + separate section, or a bare "1A".
These helpers turn them into a canonical grade ("Grade N") and section letter and
implement the fuzzy matching used to attach students to class sections.
"""

import re
from dataclasses import dataclass
from typing import Optional

GRADE_PATTERN = re.compile(r"grade\s+(\d+)", re.IGNORECASE)
SECTION_WORD_PATTERN = re.compile(r"\s*section\s*", re.IGNORECASE)
DIGITS_PATTERN = re.compile(r"\d+")


def extract_grade(class_name: Optional[str]) -> Optional[str]:
    """'Grade 10 Section B' -> 'Grade 10'; 'Math Lab' -> None."""
    if not class_name:
        return None
    match = GRADE_PATTERN.search(class_name)
    if not match:
        return None
    return f"Grade {match.group(1)}"


def extract_section(class_name: Optional[str], grade: Optional[str]) -> str:
    """Strip the grade prefix and the word 'Section'; the trimmed remainder is the section.

    An empty result means "all sections" wherever sections are matched.
    """
    remainder = class_name or ""
    number = grade_number(grade) if grade else None
    if number is not None:
        remainder = re.sub(
            rf"grade\s+0*{number}(?!\d)", "", remainder, count=1, flags=re.IGNORECASE
        )
    remainder = SECTION_WORD_PATTERN.sub(" ", remainder)
    return remainder.strip()


def normalize_grade(value: str) -> str:
    """Prefix 'Grade ' unless the label already starts with 'Grade'."""
    if value.startswith("Grade"):
        return value
    return f"Grade {value}"


def grade_sort_key(grade: Optional[str]) -> int:
    """First run of digits; labels without digits sort as 0 (ahead of Grade 1)."""
    match = DIGITS_PATTERN.search(grade or "")
    return int(match.group(0)) if match else 0


def grade_number(grade: Optional[str]) -> Optional[int]:
    """Number from a 'Grade N' label, or None when the label has no grade."""
    extracted = extract_grade(grade)
    if extracted is None:
        return None
    return int(DIGITS_PATTERN.search(extracted).group(0))


def sections_match(a: Optional[str], b: Optional[str]) -> bool:
    """Case-insensitive equality with containment in either direction as fallback."""
    left = (a or "").strip().lower()
    right = (b or "").strip().lower()
    return left == right or left in right or right in left


@dataclass(frozen=True)
class GradeSection:
    """Canonical (grade number, section) pair."""

    grade_number: int
    section: str = ""

    @property
    def grade(self) -> str:
        return f"Grade {self.grade_number}"

    @property
    def label(self) -> str:
        if self.section:
            return f"{self.grade} Section {self.section}"
        return self.grade

    @classmethod
    def parse(cls, label: Optional[str], section: Optional[str] = None) -> Optional["GradeSection"]:
        """Parse any known label format. An explicit section overrides the parsed one."""
        if not label or not label.strip():
            return None
        text = label.strip()
        grade = extract_grade(text)
        if grade is None:
            # Bare "1A" / "10 B"
            text = normalize_grade(text)
            grade = extract_grade(text)
            if grade is None:
                return None
        parsed_section = (section or "").strip() or extract_section(text, grade)
        return cls(grade_number=grade_number(grade), section=parsed_section.upper())

    def matches(self, other: "GradeSection") -> bool:
        return self.grade_number == other.grade_number and sections_match(self.section, other.section)


def student_in_class(
    student_class: Optional[str],
    student_section: Optional[str],
    class_grade: Optional[str],
    class_section: Optional[str],
) -> bool:
    """Whether a student's free-text class belongs to a class section.

    Grades compare by number, not by full string, so "Grade 1A" and
    "Grade 1 Section A" both land in Grade 1 / A. Sections compare with
    sections_match, and an empty section on either side matches everything.
    """
    student = GradeSection.parse(student_class, student_section)
    if student is None:
        return False
    number = grade_number(class_grade) if class_grade else None
    if number is None:
        parsed = GradeSection.parse(class_grade)
        if parsed is None:
            return False
        number = parsed.grade_number
    return student.matches(GradeSection(grade_number=number, section=(class_section or "").strip()))
