"""Utilities for shaping the issue keys of a devinfo repository payload.

Jira's bulk devinfo endpoint rejects commits, branches and branch last commits
that reference more than ISSUE_KEY_API_LIMIT issue keys. Repository payloads
are deduplicated before every sync and truncated when any resource still
exceeds the limit.
"""

from __future__ import annotations

from typing import Any, Callable, Iterable, Iterator, Sequence

import structlog

from github_jira_sync.utils.constants import ISSUE_KEY_API_LIMIT, ISSUE_KEY_PATTERN

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)

Resource = dict[str, Any]


def parse_issue_keys(text: str | None) -> list[str] | None:
    """Extract the Jira issue keys referenced in free text.

    Returns every match in order of appearance (duplicates included), or None
    when the text is empty or references no issue.
    """
    if not text:
        return None
    matches = ISSUE_KEY_PATTERN.findall(text)
    return matches or None


def dedup(issue_keys: Sequence[str]) -> list[str]:
    """Deduplicate issue keys, keeping the first occurrence of each."""
    return list(dict.fromkeys(issue_keys))


def truncate(issue_keys: Sequence[str], limit: int = ISSUE_KEY_API_LIMIT) -> list[str]:
    """Keep the first `limit` issue keys."""
    return list(issue_keys[:limit])


def _last_commits(branches: Iterable[Resource]) -> list[Resource]:
    return [branch["lastCommit"] for branch in branches if branch.get("lastCommit")]


def iter_issue_key_resources(repository: Resource) -> Iterator[Resource]:
    """Yield every commit, branch and branch last commit of a repository payload."""
    commits = repository.get("commits") or []
    branches = repository.get("branches") or []
    yield from commits
    yield from branches
    yield from _last_commits(branches)


def update_repository_issue_keys(repository: Resource, mutating_func: Callable[[Sequence[str]], list[str]]) -> None:
    """Run a mutating function on the issue keys of every resource in a repository payload."""
    for resource in iter_issue_key_resources(repository):
        if resource.get("issueKeys") is not None:
            resource["issueKeys"] = mutating_func(resource["issueKeys"])


def max_issue_key_count(resources: Iterable[Resource]) -> int:
    """Return the largest number of issue keys referenced by any resource (0 when there are none)."""
    return max((len(resource.get("issueKeys") or []) for resource in resources), default=0)


def within_issue_key_limit(repository: Resource, limit: int = ISSUE_KEY_API_LIMIT) -> bool:
    """Check that no commit, branch or branch last commit references more than `limit` issue keys.

    Commits, branches and last commits are checked as separate groups. An empty or
    missing group never violates the limit.
    """
    branches = repository.get("branches") or []
    groups = (repository.get("commits") or [], branches, _last_commits(branches))
    return all(max_issue_key_count(group) <= limit for group in groups)


def shape_repository_issue_keys(repository: Resource, limit: int = ISSUE_KEY_API_LIMIT) -> bool:
    """Deduplicate the issue keys of a repository payload in place and truncate them when over the limit.

    Args:
        repository: The devinfo repository payload. It is modified in place.
        limit: Maximum number of issue keys per commit, branch or last commit.

    Returns:
        True if any resource exceeded the limit and the payload was truncated.
    """
    update_repository_issue_keys(repository, dedup)
    if within_issue_key_limit(repository, limit):
        return False

    over_limit = [resource.get("id") for resource in iter_issue_key_resources(repository) if len(resource.get("issueKeys") or []) > limit]
    update_repository_issue_keys(repository, lambda issue_keys: truncate(issue_keys, limit))
    logger.warning(
        "Truncated issue keys exceeding the Jira reference limit",
        repository_id=repository.get("id"),
        limit=limit,
        truncated_resource_ids=over_limit,
    )
    return True
