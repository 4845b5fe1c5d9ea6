import pytest

from schoolms.core.grade_section import (
    GradeSection,
    extract_grade,
    extract_section,
    grade_sort_key,
    normalize_grade,
    sections_match,
    student_in_class,
)


class TestExtractGrade:
    def test_full_label(self):
        assert extract_grade("Grade 10 Section B") == "Grade 10"

    def test_compact_label(self):
        assert extract_grade("Grade 2A") == "Grade 2"

    def test_case_insensitive(self):
        assert extract_grade("grade 3 section c") == "Grade 3"

    def test_no_grade(self):
        assert extract_grade("Math Lab") is None
        assert extract_grade("") is None
        assert extract_grade(None) is None

    @pytest.mark.parametrize("label", ["Grade 1", "Grade 7 Section A", "GRADE 12B", "Grade 4 - Blue"])
    def test_idempotent_on_own_output(self, label):
        grade = extract_grade(label)
        assert extract_grade(grade + " Section A") == grade

    @pytest.mark.parametrize("label", ["Grade 1", "Grade 7 Section A", "grade 12B"])
    def test_output_is_already_normalized(self, label):
        grade = extract_grade(label)
        assert normalize_grade(grade) == grade


class TestExtractSection:
    def test_section_word_removed(self):
        assert extract_section("Grade 10 Section B", "Grade 10") == "B"

    def test_compact(self):
        assert extract_section("Grade 2A", "Grade 2") == "A"

    def test_grade_only_means_all_sections(self):
        assert extract_section("Grade 5", "Grade 5") == ""

    def test_does_not_eat_longer_grade_number(self):
        assert extract_section("Grade 10 Section A", "Grade 1") != "A"


class TestHelpers:
    def test_normalize_grade(self):
        assert normalize_grade("3") == "Grade 3"
        assert normalize_grade("Grade 3") == "Grade 3"

    def test_grade_sort_key(self):
        assert grade_sort_key("Grade 10") == 10
        assert grade_sort_key("Grade 2") == 2
        assert grade_sort_key("Kindergarten") == 0

    def test_unparseable_grades_sort_first(self):
        labels = ["Grade 10", "Nursery", "Grade 2"]
        assert sorted(labels, key=grade_sort_key) == ["Nursery", "Grade 2", "Grade 10"]

    def test_sections_match_containment(self):
        assert sections_match("A", "a")
        assert sections_match("A ", "A")
        assert sections_match("A", "A-1")
        assert not sections_match("A", "B")


class TestGradeSection:
    def test_parse_formats(self):
        assert GradeSection.parse("Grade 1 Section A") == GradeSection(1, "A")
        assert GradeSection.parse("Grade 1A") == GradeSection(1, "A")
        assert GradeSection.parse("1a") == GradeSection(1, "A")
        assert GradeSection.parse("Grade 1", "b") == GradeSection(1, "B")

    def test_parse_unknown(self):
        assert GradeSection.parse("Library") is None
        assert GradeSection.parse("  ") is None

    def test_label(self):
        assert GradeSection(4, "C").label == "Grade 4 Section C"
        assert GradeSection(4).label == "Grade 4"

    def test_matches_compares_number_then_section(self):
        assert GradeSection.parse("Grade 1A").matches(GradeSection.parse("1 Section a"))
        assert GradeSection(2, "B").matches(GradeSection(2))
        assert not GradeSection(2, "B").matches(GradeSection(12, "B"))
        assert not GradeSection(2, "B").matches(GradeSection(2, "C"))


class TestStudentInClass:
    def test_mixed_formats_match(self):
        assert student_in_class("Grade 1A", None, "Grade 1", "A")
        assert student_in_class("Grade 1 Section A", None, "Grade 1", "A")
        assert student_in_class("Grade 1", "a", "Grade 1", "A")

    def test_grade_number_not_string_prefix(self):
        assert not student_in_class("Grade 10 Section A", None, "Grade 1", "A")

    def test_other_section(self):
        assert not student_in_class("Grade 1B", None, "Grade 1", "A")

    def test_empty_section_matches_all(self):
        assert student_in_class("Grade 1B", None, "Grade 1", "")
        assert student_in_class("Grade 1", None, "Grade 1", "A")
