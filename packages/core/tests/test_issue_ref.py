"""Tests for issue-tracker references in pull request titles."""

import pytest

from prgate_core.utils.issue_ref import find_issue_reference, issue_link


@pytest.mark.parametrize(
    "title, expected",
    [
        ("Fixes bug: 100", "100"),
        ("Bug: 123 - crash on start", "123"),
        ("bug #456 null check", "456"),
        ("BUG 789", "789"),
        ("[321] Update docs", "321"),
        ("Update docs [654]", "654"),
    ],
)
def test_reference_found(title, expected):
    assert find_issue_reference(title) == expected


@pytest.mark.parametrize("title", ["no reference here", "Debug logging", "[abc] tidy", ""])
def test_no_reference(title):
    assert find_issue_reference(title) is None


def test_first_reference_wins():
    assert find_issue_reference("[1] and bug 2") == "1"


def test_issue_link():
    template = "https://bugs.{org}.org/bugs/show_bug.cgi?id={id}"
    assert issue_link(template, "eclipse", "100") == "https://bugs.eclipse.org/bugs/show_bug.cgi?id=100"
