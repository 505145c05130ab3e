"""Orchestrates the synchronization of a GitHub repository's development information to Jira."""

import time
from copy import deepcopy
from pathlib import Path

import httpx
import structlog
from pydantic import ValidationError
from ruamel.yaml.error import YAMLError

from github_jira_sync.jira.adapter import create_jira_client
from github_jira_sync.schemas.devinfo import RepositoryModel
from github_jira_sync.storage.yaml_store import YAMLStore
from github_jira_sync.synchronize.issue_keys import dedup, update_repository_issue_keys, within_issue_key_limit
from github_jira_sync.synchronize.results import RepositorySyncResult
from github_jira_sync.utils.constants import APP_KEY_PREFIX
from github_jira_sync.utils.yaml import load_payload_file

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


def load_repository_payload(payload_path: Path) -> RepositoryModel:
    """Load and validate a repository update from a JSON or YAML file."""
    if not payload_path.exists():
        raise FileNotFoundError(f"Repository payload file not found: {payload_path.absolute()}")
    try:
        content = load_payload_file(payload_path)
    except YAMLError as e:
        raise ValueError(f"Invalid repository payload in '{payload_path.name}': {e}") from e
    try:
        return RepositoryModel.model_validate(content)
    except ValidationError as e:
        raise ValueError(f"Invalid repository payload in '{payload_path.name}': {e}") from e


async def run_repository_sync(
    jira_host: str,
    github_installation_id: int,
    payload_path: Path,
    store_path: Path,
    prevent_transitions: bool = False,
    app_key: str = APP_KEY_PREFIX,
    timeout: float = 30.0,
    transport: httpx.AsyncBaseTransport | None = None,
) -> RepositorySyncResult:
    """Run the repository sync workflow: load a repository update and send it to Jira."""
    repository = load_repository_payload(payload_path)
    data = repository.to_payload()

    preview = deepcopy(data)
    update_repository_issue_keys(preview, dedup)
    truncated = not within_issue_key_limit(preview)

    store = YAMLStore(store_path)
    start_time = time.time()
    logger.info("Syncing repository", repository_id=repository.id, jira_host=jira_host, start_time=start_time)
    async with await create_jira_client(
        jira_host,
        github_installation_id,
        installation_store=store,
        subscription_store=store,
        app_key=app_key,
        timeout=timeout,
        transport=transport,
    ) as client:
        response = await client.devinfo.repository.update(data, prevent_transitions=prevent_transitions)
    end_time = time.time()

    result = RepositorySyncResult(
        repository_id=repository.id,
        commit_count=len(data.get("commits") or []),
        branch_count=len(data.get("branches") or []),
        truncated=truncated,
        status_code=response.status_code,
    )
    logger.info(
        "Synced repository",
        repository_id=result.repository_id,
        commit_count=result.commit_count,
        branch_count=result.branch_count,
        truncated=result.truncated,
        status_code=result.status_code,
        duration=round(end_time - start_time, 2),
    )
    return result
