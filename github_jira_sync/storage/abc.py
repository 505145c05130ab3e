"""Base ABCs for installation and subscription stores."""

from abc import ABC, abstractmethod

from github_jira_sync.schemas.installation import Installation, Subscription


class InstallationStoreBase(ABC):
    """Base ABC for looking up Jira installation credentials."""

    @abstractmethod
    async def get_for_host(self, jira_host: str) -> Installation:
        """Get the installation registered for a Jira host, raising NotFoundError if absent."""
        pass


class SubscriptionStoreBase(ABC):
    """Base ABC for reading and persisting GitHub subscriptions."""

    @abstractmethod
    async def get_single_installation(self, jira_host: str, github_installation_id: int) -> Subscription:
        """Get the one subscription linking a GitHub installation to a Jira host."""
        pass

    @abstractmethod
    async def get_all_for_host(self, jira_host: str) -> list[Subscription]:
        """List every subscription for a Jira host."""
        pass

    @abstractmethod
    async def save_subscription(self, subscription: Subscription) -> None:
        """Persist the mutable fields of a subscription."""
        pass

    @abstractmethod
    async def uninstall(self, github_installation_id: int, jira_host: str) -> int:
        """Delete the subscriptions for a GitHub installation on a Jira host, returning how many were removed."""
        pass
