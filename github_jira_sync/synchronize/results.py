"""Contains results of application execution."""


class RepositorySyncResult:
    """Contains results of a repository sync to Jira."""

    def __init__(
        self,
        repository_id: str,
        commit_count: int,
        branch_count: int,
        truncated: bool,
        status_code: int,
    ) -> None:
        """Initialize the result with the synced repository and what was sent for it."""
        self.repository_id = repository_id
        self.commit_count = commit_count
        self.branch_count = branch_count
        self.truncated = truncated
        self.status_code = status_code
