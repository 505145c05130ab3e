"""Contains unit tests for the utils.jira module."""

import time

import pytest

from github_jira_sync.utils.jira import get_jira_id, update_sequence_id


@pytest.mark.parametrize(
    "name,expected",
    [
        pytest.param("main", "main", id="plain name"),
        pytest.param("feature_branch-1", "feature_branch-1", id="underscores and hyphens"),
        pytest.param("feature/ABC-1", "c" + "feature/ABC-1".encode("utf-8").hex(), id="slash encoded"),
        pytest.param("release 1.0", "c72656c6561736520312e30", id="space and dot encoded"),
        pytest.param("main\n", "c6d61696e0a", id="trailing newline encoded"),
    ],
)
def test_get_jira_id(name: str, expected: str) -> None:
    """Test converting GitHub names into Jira identifiers."""
    assert get_jira_id(name) == expected


def test_update_sequence_id_is_epoch_milliseconds() -> None:
    """Test that the update sequence ID is the current time in milliseconds."""
    before = int(time.time() * 1000)
    sequence_id = update_sequence_id()
    after = int(time.time() * 1000)
    assert before <= sequence_id <= after
