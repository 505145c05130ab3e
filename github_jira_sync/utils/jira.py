"""Contains utility functions for Jira interactions."""

import time

from github_jira_sync.utils.constants import JIRA_ID_ALLOWED_PATTERN


def get_jira_id(name: str) -> str:
    """Converts a GitHub name (such as a branch ref) into an identifier Jira accepts.

    Names made only of letters, digits, underscores and hyphens are returned unchanged.
    Anything else is hex encoded and prefixed with "c" so it stays stable and URL safe.
    """
    if JIRA_ID_ALLOWED_PATTERN.fullmatch(name):
        return name
    return "c" + name.encode("utf-8").hex()


def update_sequence_id() -> int:
    """Returns a monotonically increasing update sequence ID (epoch milliseconds)."""
    return int(time.time() * 1000)
