"""Utility modules for shared functionality."""

from .constants import (
    ISSUE_KEY_API_LIMIT,
    ISSUE_KEY_LIMIT_SYNC_WARNING,
    ISSUE_KEY_PATTERN,
)
from .jira import get_jira_id, update_sequence_id

__all__ = [
    "ISSUE_KEY_API_LIMIT",
    "ISSUE_KEY_LIMIT_SYNC_WARNING",
    "ISSUE_KEY_PATTERN",
    "get_jira_id",
    "update_sequence_id",
]
