"""Pydantic models for Jira installations and GitHub subscriptions."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr

if TYPE_CHECKING:
    from github_jira_sync.storage.abc import SubscriptionStoreBase


class Installation(BaseModel):
    """Pydantic model for the Jira-side credentials of a Connect app installation."""

    model_config = ConfigDict(populate_by_name=True)

    jira_host: str = Field(alias="jiraHost")
    shared_secret: str = Field(alias="sharedSecret")
    client_key: str | None = Field(default=None, alias="clientKey")


class Subscription(BaseModel):
    """Pydantic model linking one GitHub App installation to one Jira host."""

    model_config = ConfigDict(populate_by_name=True, validate_assignment=True)

    jira_host: str = Field(alias="jiraHost")
    github_installation_id: int = Field(alias="gitHubInstallationId")
    sync_warning: str | None = Field(default=None, alias="syncWarning")

    _store: Any = PrivateAttr(default=None)

    def bind(self, store: SubscriptionStoreBase) -> Subscription:
        """Attach the store that persists changes made through update()."""
        self._store = store
        return self

    async def update(self, **fields: Any) -> Subscription:
        """Set the given fields and persist them through the owning store."""
        if self._store is None:
            raise RuntimeError("Subscription is not bound to a store and cannot be persisted.")
        for name, value in fields.items():
            if name not in type(self).model_fields:
                raise ValueError(f"Unknown subscription field: {name}")
            setattr(self, name, value)
        await self._store.save_subscription(self)
        return self
