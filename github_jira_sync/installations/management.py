"""Manages which GitHub App installations a user may link to, or unlink from, Jira."""

from typing import Any

import structlog
from githubkit import GitHub

from github_jira_sync.installations.exceptions import SubscriptionAccessError
from github_jira_sync.storage.abc import SubscriptionStoreBase

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


def _account_login(installation: Any) -> str | None:
    account = getattr(installation, "account", None)
    return getattr(account, "login", None)


async def list_user_installations(github: GitHub[Any]) -> list[Any]:
    """List the GitHub App installations the authenticated user can access."""
    response = await github.rest.apps.async_list_installations_for_authenticated_user()
    return list(response.parsed_data.installations)


async def is_installation_admin(github: GitHub[Any], org: str | None, username: str, target_type: str) -> bool:
    """Check whether a user administers the account an installation belongs to.

    A user installation is administered by the user owning it. For an
    organization installation the user's membership role is looked up; if that
    lookup fails (for instance because the organization has not accepted the
    membership permission) the user is treated as a non-admin.
    """
    if target_type == "User":
        return org == username

    try:
        response = await github.rest.orgs.async_get_membership_for_user(org=org, username=username)
    except Exception as e:
        logger.warning(
            "Organization has not accepted the permission needed to read memberships",
            org=org,
            username=username,
            error=str(e),
        )
        return False
    return response.parsed_data.role == "admin"


async def list_admin_installations(github: GitHub[Any], login: str) -> list[Any]:
    """List the installations the signed-in user administers."""
    admin_installations: list[Any] = []
    for installation in await list_user_installations(github):
        if await is_installation_admin(github, org=_account_login(installation), username=login, target_type=installation.target_type):
            admin_installations.append(installation)
    logger.info("Listed administered GitHub installations", login=login, installation_count=len(admin_installations))
    return admin_installations


async def delete_subscription(
    github: GitHub[Any],
    subscription_store: SubscriptionStoreBase,
    installation_id: int | str | None,
    jira_host: str | None,
) -> int:
    """Delete the subscription linking a GitHub installation to a Jira host.

    Args:
        github: GitHub client authenticated as the signed-in user.
        subscription_store: Store holding the subscriptions.
        installation_id: The GitHub App installation to unlink.
        jira_host: The Jira host to unlink it from.

    Returns:
        The number of subscriptions removed.

    Raises:
        ValueError: If installation_id or jira_host is missing.
        SubscriptionAccessError: If the user cannot access the installation, or is
            not an admin of the organization it belongs to.
    """
    if not installation_id or not jira_host:
        raise ValueError("installation_id and jira_host must be provided to delete a subscription.")
    installation_id = int(installation_id)

    user_installation = next(
        (installation for installation in await list_user_installations(github) if installation.id == installation_id),
        None,
    )
    if user_installation is None:
        raise SubscriptionAccessError(
            installation_id,
            f"Failed to delete subscription for {installation_id}. User does not have access to that installation.",
        )

    if user_installation.target_type == "Organization":
        user = await github.rest.users.async_get_authenticated()
        login = user.parsed_data.login
        membership = await github.rest.orgs.async_get_membership_for_user(org=_account_login(user_installation), username=login)
        if membership.parsed_data.role != "admin":
            raise SubscriptionAccessError(
                installation_id,
                f"Failed to delete subscription to {installation_id}. User is not an admin of that installation",
            )

    return await subscription_store.uninstall(github_installation_id=installation_id, jira_host=jira_host)
