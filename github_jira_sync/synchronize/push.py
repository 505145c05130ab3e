"""Prepares GitHub push events for synchronization to Jira."""

from typing import Any

import structlog

from github_jira_sync.synchronize.issue_keys import parse_issue_keys

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


def filter_push_payload(payload: dict[str, Any]) -> dict[str, Any] | None:
    """Keep only the commits of a push event whose message references a Jira issue.

    A push can carry any number of commits and each one needs further GitHub
    calls before it can be sent to Jira, so commits without issue keys are
    dropped up front.

    Args:
        payload: The GitHub push webhook payload.

    Returns:
        A payload with the repository, installation and the commits referencing
        issues, or None if no commit references an issue.
    """
    commits = [commit for commit in payload.get("commits") or [] if parse_issue_keys(commit.get("message"))]
    repository = payload.get("repository") or {}
    if not commits:
        logger.debug("Push has no commits referencing Jira issues", repository=repository.get("full_name"))
        return None

    logger.info(
        "Filtered push commits referencing Jira issues",
        repository=repository.get("full_name"),
        commit_count=len(commits),
        dropped_count=len(payload.get("commits") or []) - len(commits),
    )
    return {
        "repository": payload.get("repository"),
        "commits": commits,
        "installation": payload.get("installation"),
    }
