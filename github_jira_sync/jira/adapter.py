"""Jira client exposing issue and development information operations.

The client mirrors the method groups of a GitHub REST client (issues,
devinfo.repository, ...) so that GitHub event handlers can talk to both sides
in the same way. Every operation maps to a single HTTP call and returns the raw
httpx response, except for issues.get_all, issues.parse and
devinfo.repository.update.
"""

import asyncio
from types import TracebackType
from typing import Any

import httpx
import structlog
from typing_extensions import Self

from github_jira_sync.jira.client import JiraHTTPClient, get_jira_http_client
from github_jira_sync.storage.abc import InstallationStoreBase, SubscriptionStoreBase
from github_jira_sync.synchronize.issue_keys import parse_issue_keys, shape_repository_issue_keys
from github_jira_sync.utils.constants import (
    APP_KEY_PREFIX,
    DEFAULT_ISSUE_QUERY,
    DEVINFO_API_PATH,
    ISSUE_KEY_LIMIT_SYNC_WARNING,
    ISSUE_READ_API_PATH,
    ISSUE_WRITE_API_PATH,
)
from github_jira_sync.utils.jira import get_jira_id, update_sequence_id

default_logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


class IssueCommentsAPI:
    """Issue comment operations."""

    def __init__(self, http: JiraHTTPClient) -> None:
        self._http = http

    async def get_for_issue(self, issue_id: str) -> httpx.Response:
        """Get the comments of an issue."""
        return await self._http.get(f"{ISSUE_READ_API_PATH}/issue/:issue_id/comment", fields={"issue_id": issue_id})

    async def add_for_issue(self, issue_id: str, payload: dict[str, Any]) -> httpx.Response:
        """Add a comment to an issue."""
        return await self._http.post(f"{ISSUE_WRITE_API_PATH}/issue/:issue_id/comment", payload, fields={"issue_id": issue_id})


class IssueTransitionsAPI:
    """Issue workflow transition operations."""

    def __init__(self, http: JiraHTTPClient) -> None:
        self._http = http

    async def get_for_issue(self, issue_id: str) -> httpx.Response:
        """Get the transitions available for an issue."""
        return await self._http.get(f"{ISSUE_READ_API_PATH}/issue/:issue_id/transitions", fields={"issue_id": issue_id})

    async def update_for_issue(self, issue_id: str, transition_id: str) -> httpx.Response:
        """Move an issue through a transition."""
        return await self._http.post(
            f"{ISSUE_READ_API_PATH}/issue/:issue_id/transitions",
            {"transition": {"id": transition_id}},
            fields={"issue_id": issue_id},
        )


class IssueWorklogsAPI:
    """Issue worklog operations."""

    def __init__(self, http: JiraHTTPClient) -> None:
        self._http = http

    async def get_for_issue(self, issue_id: str) -> httpx.Response:
        """Get the worklogs of an issue."""
        return await self._http.get(f"{ISSUE_READ_API_PATH}/issue/:issue_id/worklog", fields={"issue_id": issue_id})

    async def add_for_issue(self, issue_id: str, payload: dict[str, Any]) -> httpx.Response:
        """Add a worklog to an issue."""
        return await self._http.post(f"{ISSUE_WRITE_API_PATH}/issue/:issue_id/worklog", payload, fields={"issue_id": issue_id})


class IssuesAPI:
    """Issue operations."""

    def __init__(self, http: JiraHTTPClient, logger: structlog.stdlib.BoundLogger) -> None:
        self._http = http
        self._logger = logger
        self.comments = IssueCommentsAPI(http)
        self.transitions = IssueTransitionsAPI(http)
        self.worklogs = IssueWorklogsAPI(http)

    async def get(self, issue_id: str, query: dict[str, Any] | None = None) -> httpx.Response:
        """Get an issue, by default with only its summary field."""
        query = DEFAULT_ISSUE_QUERY if query is None else query
        return await self._http.get(f"{ISSUE_READ_API_PATH}/issue/:issue_id", fields={**query, "issue_id": issue_id})

    async def get_all(self, issue_ids: list[str], query: dict[str, Any] | None = None) -> list[Any]:
        """Fetch several issues concurrently and return the bodies of those that succeeded.

        Failed fetches are dropped from the result rather than raised; they are only
        reported through the log.
        """
        results = await asyncio.gather(*(self.get(issue_id, query) for issue_id in issue_ids), return_exceptions=True)
        issues: list[Any] = []
        dropped: list[dict[str, str]] = []
        for issue_id, result in zip(issue_ids, results, strict=True):
            if isinstance(result, httpx.Response) and result.status_code == 200:
                issues.append(result.json())
            elif isinstance(result, BaseException):
                dropped.append({"issue_id": issue_id, "error": f"{type(result).__name__}: {result}"})
            else:
                dropped.append({"issue_id": issue_id, "error": f"unexpected status {result.status_code}"})
        if dropped:
            self._logger.warning("Dropped issues that could not be fetched", dropped_count=len(dropped), dropped=dropped)
        return issues

    def parse(self, text: str | None) -> list[str] | None:
        """Extract the issue keys referenced in free text."""
        return parse_issue_keys(text)

    async def update(self, issue_id: str, payload: dict[str, Any]) -> httpx.Response:
        """Update an issue."""
        return await self._http.put(f"{ISSUE_WRITE_API_PATH}/issue/:issue_id", payload, fields={"issue_id": issue_id})


class BranchAPI:
    """Development information branch operations."""

    def __init__(self, http: JiraHTTPClient) -> None:
        self._http = http

    async def delete(self, repository_id: str | int, branch_ref: str) -> httpx.Response:
        """Delete a branch from a repository's development information."""
        return await self._http.delete(
            f"{DEVINFO_API_PATH}/repository/{repository_id}/branch/{get_jira_id(branch_ref)}",
            fields={"_updateSequenceId": update_sequence_id()},
        )


class PullRequestAPI:
    """Development information pull request operations."""

    def __init__(self, http: JiraHTTPClient) -> None:
        self._http = http

    async def delete(self, repository_id: str | int, number: int) -> httpx.Response:
        """Delete a pull request from a repository's development information."""
        return await self._http.delete(
            f"{DEVINFO_API_PATH}/repository/{repository_id}/pull_request/{number}",
            fields={"_updateSequenceId": update_sequence_id()},
        )


class RepositoryAPI:
    """Development information repository operations, including the bulk update."""

    def __init__(
        self,
        http: JiraHTTPClient,
        subscription_store: SubscriptionStoreBase,
        jira_host: str,
        github_installation_id: int,
        logger: structlog.stdlib.BoundLogger,
    ) -> None:
        self._http = http
        self._subscription_store = subscription_store
        self._jira_host = jira_host
        self._github_installation_id = github_installation_id
        self._logger = logger

    async def get(self, repository_id: str | int) -> httpx.Response:
        """Get a repository's development information."""
        return await self._http.get(f"{DEVINFO_API_PATH}/repository/{repository_id}")

    async def delete(self, repository_id: str | int) -> httpx.Response:
        """Delete a repository's development information."""
        return await self._http.delete(
            f"{DEVINFO_API_PATH}/repository/{repository_id}",
            fields={"_updateSequenceId": update_sequence_id()},
        )

    async def update(self, data: dict[str, Any], prevent_transitions: bool = False) -> httpx.Response:
        """Send a repository's commits and branches to the bulk devinfo endpoint.

        Issue keys are deduplicated in place. When any commit, branch or branch
        last commit still references more than the allowed number of issue keys,
        every resource is truncated and a sync warning is recorded on the
        subscription before the payload is sent. A missing subscription aborts the
        sync with NotFoundError.
        """
        if shape_repository_issue_keys(data):
            subscription = await self._subscription_store.get_single_installation(self._jira_host, self._github_installation_id)
            await subscription.update(sync_warning=ISSUE_KEY_LIMIT_SYNC_WARNING)
            self._logger.warning(
                "Recorded sync warning on subscription",
                repository_id=data.get("id"),
                sync_warning=ISSUE_KEY_LIMIT_SYNC_WARNING,
            )

        return await self._http.post(
            f"{DEVINFO_API_PATH}/bulk",
            {
                "preventTransitions": bool(prevent_transitions),
                "repositories": [data],
                "properties": {"installationId": self._github_installation_id},
            },
        )


class MigrationAPI:
    """Development information migration operations.

    Both endpoints take no parameters but answer 500 to an empty or null body, so
    an empty object is always sent.
    """

    def __init__(self, http: JiraHTTPClient) -> None:
        self._http = http

    async def complete(self) -> httpx.Response:
        """Mark the migration to this app as complete."""
        return await self._http.post(f"{DEVINFO_API_PATH}/github/migrationComplete", {})

    async def undo(self) -> httpx.Response:
        """Undo the migration to this app."""
        return await self._http.post(f"{DEVINFO_API_PATH}/github/undoMigration", {})


class InstallationAPI:
    """Operations on development information tagged with a GitHub installation ID."""

    def __init__(self, http: JiraHTTPClient) -> None:
        self._http = http

    async def exists(self, github_installation_id: int) -> httpx.Response:
        """Check whether Jira holds development information for an installation."""
        return await self._http.get(f"{DEVINFO_API_PATH}/existsByProperties", fields={"installationId": github_installation_id})

    async def delete(self, github_installation_id: int) -> httpx.Response:
        """Delete all development information for an installation."""
        return await self._http.delete(f"{DEVINFO_API_PATH}/bulkByProperties", fields={"installationId": github_installation_id})


class DevInfoAPI:
    """Development information operations."""

    def __init__(self, repository: RepositoryAPI, http: JiraHTTPClient) -> None:
        self.branch = BranchAPI(http)
        self.pull_request = PullRequestAPI(http)
        self.repository = repository
        self.migration = MigrationAPI(http)
        self.installation = InstallationAPI(http)


class JiraClient:
    """Jira client for one Jira host and GitHub installation pair."""

    def __init__(
        self,
        http: JiraHTTPClient,
        base_url: str,
        jira_host: str,
        github_installation_id: int,
        subscription_store: SubscriptionStoreBase,
        logger: structlog.stdlib.BoundLogger,
    ) -> None:
        """Initialize the client with an already-authenticated request layer."""
        self.http = http
        self.base_url = base_url
        self.jira_host = jira_host
        self.github_installation_id = github_installation_id
        self.issues = IssuesAPI(http, logger)
        self.devinfo = DevInfoAPI(
            RepositoryAPI(http, subscription_store, jira_host, github_installation_id, logger),
            http,
        )

    async def get_fields(self) -> httpx.Response:
        """Get the issue fields defined on the Jira instance."""
        return await self.http.get(f"{ISSUE_READ_API_PATH}/field")

    async def aclose(self) -> None:
        """Close the underlying HTTP transport."""
        await self.http.aclose()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()


async def create_jira_client(
    jira_host: str,
    github_installation_id: int,
    logger: structlog.stdlib.BoundLogger | None = None,
    *,
    installation_store: InstallationStoreBase,
    subscription_store: SubscriptionStoreBase,
    app_key: str = APP_KEY_PREFIX,
    timeout: float = 30.0,
    transport: httpx.AsyncBaseTransport | None = None,
) -> JiraClient:
    """Create a Jira client for a Jira host on behalf of a GitHub installation.

    Args:
        jira_host: Base URL of the Jira instance (e.g. https://example.atlassian.net).
        github_installation_id: GitHub App installation the client syncs for.
        logger: Logger to bind request context to (defaults to this module's logger).
        installation_store: Store holding the Connect installation credentials.
        subscription_store: Store holding subscriptions, used to record sync warnings.
        app_key: Connect app key used as the JWT issuer.
        timeout: HTTP timeout in seconds.
        transport: Optional httpx transport, mainly for tests.

    Returns:
        A JiraClient bound to the installation's base URL and shared secret.

    Raises:
        NotFoundError: If no installation is registered for the Jira host.
    """
    installation = await installation_store.get_for_host(jira_host)
    bound_logger = (logger or default_logger).bind(jira_host=installation.jira_host, github_installation_id=github_installation_id)
    http = get_jira_http_client(
        jira_host=installation.jira_host,
        shared_secret=installation.shared_secret,
        app_key=app_key,
        logger=bound_logger,
        timeout=timeout,
        transport=transport,
    )
    bound_logger.debug("Created Jira client")
    return JiraClient(
        http=http,
        base_url=installation.jira_host.rstrip("/"),
        jira_host=jira_host,
        github_installation_id=github_installation_id,
        subscription_store=subscription_store,
        logger=bound_logger,
    )
