"""YAML file backed installation and subscription store.

The store file has two top-level keys, each holding a list of records using the
same camelCase field names Jira and GitHub use:

    installations:
      - jiraHost: https://example.atlassian.net
        sharedSecret: ...
    subscriptions:
      - jiraHost: https://example.atlassian.net
        gitHubInstallationId: 1234
        syncWarning: null

The file is read on every lookup and rewritten on every change, so the file on
disk is always the source of truth.
"""

from pathlib import Path
from typing import Any

import structlog
from pydantic import ValidationError
from structlog.stdlib import BoundLogger

from github_jira_sync.schemas.installation import Installation, Subscription
from github_jira_sync.storage.abc import InstallationStoreBase, SubscriptionStoreBase
from github_jira_sync.storage.exceptions import NotFoundError, StoreError, StoreFormatError
from github_jira_sync.utils.yaml import dump_yaml_to_file, load_yaml_file

logger: BoundLogger = structlog.get_logger(__name__)  # type: ignore


class YAMLStore(InstallationStoreBase, SubscriptionStoreBase):
    """Installation and subscription store persisted in a single YAML file."""

    def __init__(self, path: Path) -> None:
        """Initialize the store for a YAML file, which need not exist yet."""
        self.path = path

    def _load(self) -> dict[str, list[dict[str, Any]]]:
        if not self.path.exists():
            return {"installations": [], "subscriptions": []}
        try:
            data = load_yaml_file(self.path)
        except Exception as e:
            raise StoreFormatError(self.path, str(e)) from e
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise StoreFormatError(self.path, "top-level content must be a mapping")
        for key in ("installations", "subscriptions"):
            records = data.get(key) or []
            if not isinstance(records, list):
                raise StoreFormatError(self.path, f"'{key}' must be a list")
            data[key] = records
        return data

    def _dump(self, data: dict[str, list[dict[str, Any]]]) -> None:
        dump_yaml_to_file(data, self.path)

    def _subscription_from_record(self, record: dict[str, Any]) -> Subscription:
        try:
            return Subscription.model_validate(record).bind(self)
        except ValidationError as e:
            raise StoreFormatError(self.path, f"invalid subscription record: {e.errors()}") from e

    @staticmethod
    def _matches(record: dict[str, Any], jira_host: str, github_installation_id: int) -> bool:
        return record.get("jiraHost") == jira_host and str(record.get("gitHubInstallationId")) == str(github_installation_id)

    async def add_installation(self, installation: Installation) -> None:
        """Register (or replace) the installation credentials for a Jira host."""
        data = self._load()
        data["installations"] = [record for record in data["installations"] if record.get("jiraHost") != installation.jira_host]
        data["installations"].append(installation.model_dump(by_alias=True, exclude_none=True))
        self._dump(data)
        logger.info("Stored installation", jira_host=installation.jira_host)

    async def add_subscription(self, subscription: Subscription) -> Subscription:
        """Create a subscription linking a GitHub installation to a Jira host."""
        data = self._load()
        for record in data["subscriptions"]:
            if self._matches(record, subscription.jira_host, subscription.github_installation_id):
                raise StoreError(
                    f"Subscription for installation {subscription.github_installation_id} on {subscription.jira_host} already exists."
                )
        data["subscriptions"].append(subscription.model_dump(by_alias=True))
        self._dump(data)
        logger.info(
            "Stored subscription",
            jira_host=subscription.jira_host,
            github_installation_id=subscription.github_installation_id,
        )
        return subscription.bind(self)

    async def get_for_host(self, jira_host: str) -> Installation:
        """Get the installation registered for a Jira host."""
        for record in self._load()["installations"]:
            if record.get("jiraHost") == jira_host:
                try:
                    return Installation.model_validate(record)
                except ValidationError as e:
                    raise StoreFormatError(self.path, f"invalid installation record: {e.errors()}") from e
        raise NotFoundError(f"No installation found for Jira host {jira_host}")

    async def get_single_installation(self, jira_host: str, github_installation_id: int) -> Subscription:
        """Get the single subscription for a GitHub installation on a Jira host."""
        matches = [record for record in self._load()["subscriptions"] if self._matches(record, jira_host, github_installation_id)]
        if not matches:
            raise NotFoundError(f"No subscription found for installation {github_installation_id} on Jira host {jira_host}")
        if len(matches) > 1:
            raise StoreError(f"Found {len(matches)} subscriptions for installation {github_installation_id} on Jira host {jira_host}")
        return self._subscription_from_record(matches[0])

    async def get_all_for_host(self, jira_host: str) -> list[Subscription]:
        """List every subscription for a Jira host."""
        return [self._subscription_from_record(record) for record in self._load()["subscriptions"] if record.get("jiraHost") == jira_host]

    async def save_subscription(self, subscription: Subscription) -> None:
        """Persist the sync warning of an existing subscription."""
        data = self._load()
        for record in data["subscriptions"]:
            if self._matches(record, subscription.jira_host, subscription.github_installation_id):
                record["syncWarning"] = subscription.sync_warning
                break
        else:
            raise NotFoundError(
                f"No subscription found for installation {subscription.github_installation_id} on Jira host {subscription.jira_host}"
            )
        self._dump(data)
        logger.debug(
            "Saved subscription",
            jira_host=subscription.jira_host,
            github_installation_id=subscription.github_installation_id,
            sync_warning=subscription.sync_warning,
        )

    async def uninstall(self, github_installation_id: int, jira_host: str) -> int:
        """Delete the subscriptions for a GitHub installation on a Jira host."""
        data = self._load()
        remaining = [record for record in data["subscriptions"] if not self._matches(record, jira_host, github_installation_id)]
        removed = len(data["subscriptions"]) - len(remaining)
        data["subscriptions"] = remaining
        self._dump(data)
        logger.info(
            "Uninstalled subscription",
            jira_host=jira_host,
            github_installation_id=github_installation_id,
            removed=removed,
        )
        return removed
