"""Unit tests for GitHub installation management."""

from types import SimpleNamespace
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from github_jira_sync.installations.exceptions import SubscriptionAccessError
from github_jira_sync.installations.management import (
    delete_subscription,
    is_installation_admin,
    list_admin_installations,
)

JIRA_HOST = "https://example.atlassian.net"


def make_installation(installation_id: int, login: str, target_type: str) -> SimpleNamespace:
    """Build an object shaped like a githubkit Installation."""
    return SimpleNamespace(id=installation_id, account=SimpleNamespace(login=login), target_type=target_type)


def make_github(installations: list[Any], roles: dict[str, Any] | None = None, login: str = "octocat") -> MagicMock:
    """Build a mocked githubkit client returning the given installations and membership roles."""
    roles = roles or {}
    github = MagicMock()
    github.rest.apps.async_list_installations_for_authenticated_user = AsyncMock(
        return_value=SimpleNamespace(parsed_data=SimpleNamespace(installations=installations))
    )
    github.rest.users.async_get_authenticated = AsyncMock(return_value=SimpleNamespace(parsed_data=SimpleNamespace(login=login)))

    async def get_membership_for_user(org: str, username: str) -> SimpleNamespace:
        role = roles[org]
        if isinstance(role, Exception):
            raise role
        return SimpleNamespace(parsed_data=SimpleNamespace(role=role))

    github.rest.orgs.async_get_membership_for_user = AsyncMock(side_effect=get_membership_for_user)
    return github


@pytest.mark.asyncio
async def test_user_installation_admin_is_owner() -> None:
    """Test that a user installation is administered by its owner only."""
    github = make_github([])
    assert await is_installation_admin(github, org="octocat", username="octocat", target_type="User") is True
    assert await is_installation_admin(github, org="someone-else", username="octocat", target_type="User") is False
    github.rest.orgs.async_get_membership_for_user.assert_not_awaited()


@pytest.mark.asyncio
async def test_list_admin_installations() -> None:
    """Test that only installations administered by the user are listed."""
    installations = [
        make_installation(1, "octocat", "User"),
        make_installation(2, "admin-org", "Organization"),
        make_installation(3, "member-org", "Organization"),
        make_installation(4, "locked-org", "Organization"),
        make_installation(5, "someone-else", "User"),
    ]
    github = make_github(
        installations,
        roles={"admin-org": "admin", "member-org": "member", "locked-org": RuntimeError("Resource not accessible by integration")},
    )
    result = await list_admin_installations(github, "octocat")
    assert [installation.id for installation in result] == [1, 2]


@pytest.mark.asyncio
async def test_delete_subscription_requires_arguments() -> None:
    """Test that installation ID and Jira host are both required."""
    with pytest.raises(ValueError, match="must be provided"):
        await delete_subscription(make_github([]), MagicMock(), None, JIRA_HOST)
    with pytest.raises(ValueError, match="must be provided"):
        await delete_subscription(make_github([]), MagicMock(), 1, "")


@pytest.mark.asyncio
async def test_delete_subscription_without_access() -> None:
    """Test that a user without access to the installation cannot delete its subscription."""
    store = MagicMock()
    store.uninstall = AsyncMock()
    with pytest.raises(SubscriptionAccessError, match="does not have access"):
        await delete_subscription(make_github([make_installation(1, "octocat", "User")]), store, "2", JIRA_HOST)
    store.uninstall.assert_not_awaited()


@pytest.mark.asyncio
async def test_delete_subscription_organization_non_admin() -> None:
    """Test that organization members who are not admins cannot delete the subscription."""
    store = MagicMock()
    store.uninstall = AsyncMock()
    github = make_github([make_installation(2, "member-org", "Organization")], roles={"member-org": "member"})
    with pytest.raises(SubscriptionAccessError, match="not an admin"):
        await delete_subscription(github, store, 2, JIRA_HOST)
    store.uninstall.assert_not_awaited()


@pytest.mark.asyncio
async def test_delete_subscription_organization_admin() -> None:
    """Test that organization admins can delete the subscription."""
    store = MagicMock()
    store.uninstall = AsyncMock(return_value=1)
    github = make_github([make_installation(2, "admin-org", "Organization")], roles={"admin-org": "admin"})
    assert await delete_subscription(github, store, "2", JIRA_HOST) == 1
    store.uninstall.assert_awaited_once_with(github_installation_id=2, jira_host=JIRA_HOST)
    github.rest.orgs.async_get_membership_for_user.assert_awaited_once_with(org="admin-org", username="octocat")


@pytest.mark.asyncio
async def test_delete_subscription_user_installation() -> None:
    """Test that a user installation's subscription is deleted without a membership check."""
    store = MagicMock()
    store.uninstall = AsyncMock(return_value=1)
    github = make_github([make_installation(1, "octocat", "User")])
    assert await delete_subscription(github, store, 1, JIRA_HOST) == 1
    github.rest.orgs.async_get_membership_for_user.assert_not_awaited()
