"""Pydantic schema for Jira development information repository payloads.

Only the fields this application shapes are declared. Every other devinfo field
(authors, file lists, URLs, timestamps...) is accepted as extra data and passed
through to Jira unchanged.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class DevInfoModel(BaseModel):
    """Base model accepting camelCase devinfo fields and keeping unknown ones."""

    model_config = ConfigDict(populate_by_name=True, extra="allow", coerce_numbers_to_str=True)


class CommitModel(DevInfoModel):
    """A commit referencing zero or more Jira issues."""

    id: str
    issue_keys: list[str] = Field(default_factory=list, alias="issueKeys")
    message: str | None = None


class BranchModel(DevInfoModel):
    """A branch referencing Jira issues, with an optional last commit."""

    id: str
    name: str
    issue_keys: list[str] = Field(default_factory=list, alias="issueKeys")
    last_commit: CommitModel | None = Field(default=None, alias="lastCommit")


class PullRequestModel(DevInfoModel):
    """A pull request referencing Jira issues."""

    id: str
    issue_keys: list[str] = Field(default_factory=list, alias="issueKeys")


class RepositoryModel(DevInfoModel):
    """A repository update as sent in the repositories list of a bulk devinfo call."""

    id: str
    name: str | None = None
    url: str | None = None
    update_sequence_id: int | None = Field(default=None, alias="updateSequenceId")
    commits: list[CommitModel] | None = None
    branches: list[BranchModel] | None = None
    pull_requests: list[PullRequestModel] | None = Field(default=None, alias="pullRequests")

    def to_payload(self) -> dict[str, Any]:
        """Dump the repository to the camelCase mapping expected by Jira."""
        return self.model_dump(mode="json", by_alias=True, exclude_unset=True)
