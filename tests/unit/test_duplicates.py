"""Tests for the duplicate title heuristic."""

import uuid

import pytest

from app.domains.issues.duplicates import find_similar, normalize_title
from app.domains.issues.entities import Issue


def make_issue(title: str) -> Issue:
    return Issue(uuid=uuid.uuid4(), title=title, created_by="alice@example.com")


class TestNormalizeTitle:
    def test_trims_and_lowercases(self) -> None:
        assert normalize_title("  Fix Login Bug \n") == "fix login bug"


class TestFindSimilar:
    @pytest.mark.parametrize("candidate", ["", "   ", "a", "ab", "  ab  ", "\tAb\n"])
    def test_short_candidates_return_nothing(self, candidate: str) -> None:
        issues = [make_issue("ab"), make_issue("abc"), make_issue("Fix login bug")]

        assert find_similar(candidate, issues) == []

    @pytest.mark.parametrize("candidate", [None, 123, ["Fix login bug"]])
    def test_non_text_candidates_return_nothing(self, candidate) -> None:
        assert find_similar(candidate, [make_issue("Fix login bug")]) == []

    def test_empty_issue_set(self) -> None:
        assert find_similar("Fix login bug", []) == []

    def test_candidate_extends_existing_title(self) -> None:
        existing = make_issue("Fix login bug")

        assert find_similar("Fix login bug now", [existing]) == [existing]

    def test_candidate_shortens_existing_title(self) -> None:
        existing = make_issue("Fix login bug on mobile")

        assert find_similar("login bug", [existing]) == [existing]

    def test_unrelated_titles_are_excluded(self) -> None:
        issues = [make_issue("Fix login bug"), make_issue("Update footer copy")]

        assert find_similar("Dark mode toggle", issues) == []

    def test_partial_overlap_without_containment_is_excluded(self) -> None:
        existing = make_issue("Fix login bug")

        assert find_similar("login page crash", [existing]) == []

    def test_case_and_whitespace_insensitive_both_ways(self) -> None:
        first = make_issue("Fix Login Bug")
        second = make_issue("fix login bug ")

        assert find_similar(second.title, [first]) == [first]
        assert find_similar(first.title, [second]) == [second]

    def test_equal_titles_match(self) -> None:
        existing = make_issue("Checkout fails")

        assert find_similar("  CHECKOUT FAILS ", [existing]) == [existing]

    def test_preserves_input_order(self) -> None:
        issues = [
            make_issue("Login bug on Safari"),
            make_issue("Unrelated"),
            make_issue("login"),
            make_issue("Login bug"),
        ]

        result = find_similar("login bug", issues)

        assert [issue.title for issue in result] == ["Login bug on Safari", "login", "Login bug"]

    def test_whitespace_only_existing_title_is_ignored(self) -> None:
        assert find_similar("Fix login bug", [make_issue("   ")]) == []

    def test_custom_minimum_length(self) -> None:
        existing = make_issue("Fix login bug")

        assert find_similar("login", [existing], min_length=6) == []
        assert find_similar("login", [existing], min_length=5) == [existing]
