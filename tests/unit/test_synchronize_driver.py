"""Unit tests for the repository sync driver."""

import json
from pathlib import Path

import httpx
import pytest

from github_jira_sync.storage.exceptions import NotFoundError
from github_jira_sync.storage.yaml_store import YAMLStore
from github_jira_sync.synchronize.driver import load_repository_payload, run_repository_sync
from github_jira_sync.utils.constants import ISSUE_KEY_LIMIT_SYNC_WARNING

JIRA_HOST = "https://example.atlassian.net"

STORE_CONTENT = """\
installations:
  - jiraHost: https://example.atlassian.net
    sharedSecret: shared-secret
subscriptions:
  - jiraHost: https://example.atlassian.net
    gitHubInstallationId: 1234
"""


@pytest.fixture
def store_path(tmp_path: Path) -> Path:
    """Write a store file with one installation and one subscription."""
    path = tmp_path / "store.yaml"
    path.write_text(STORE_CONTENT)
    return path


def write_payload(tmp_path: Path, issue_key_count: int) -> Path:
    """Write a JSON repository update with one commit and one branch."""
    payload = {
        "id": "42",
        "name": "octocat/Hello-World",
        "url": "https://github.com/octocat/Hello-World",
        "updateSequenceId": 1,
        "commits": [
            {
                "id": "a1",
                "hash": "a1",
                "message": "ABC-1 change",
                "issueKeys": [f"ABC-{number}" for number in range(1, issue_key_count + 1)],
            }
        ],
        "branches": [{"id": "main", "name": "main", "issueKeys": ["ABC-1", "ABC-1"], "url": "https://github.com/octocat/Hello-World/tree/main"}],
    }
    path = tmp_path / "payload.json"
    path.write_text(json.dumps(payload))
    return path


@pytest.mark.asyncio
async def test_run_repository_sync(tmp_path: Path, store_path: Path) -> None:
    """Test syncing a repository under the issue key limit."""
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(202, json={"acceptedDevinfoEntities": {}})

    result = await run_repository_sync(
        JIRA_HOST,
        1234,
        write_payload(tmp_path, 3),
        store_path,
        transport=httpx.MockTransport(handler),
    )

    assert result.repository_id == "42"
    assert result.commit_count == 1
    assert result.branch_count == 1
    assert result.truncated is False
    assert result.status_code == 202
    body = json.loads(requests[0].content)
    repository = body["repositories"][0]
    assert repository["branches"][0]["issueKeys"] == ["ABC-1"]
    assert repository["branches"][0]["url"] == "https://github.com/octocat/Hello-World/tree/main"
    assert repository["commits"][0]["hash"] == "a1"
    assert body["properties"] == {"installationId": 1234}
    assert (await YAMLStore(store_path).get_single_installation(JIRA_HOST, 1234)).sync_warning is None


@pytest.mark.asyncio
async def test_run_repository_sync_truncates(tmp_path: Path, store_path: Path) -> None:
    """Test that an oversized commit is truncated and the warning lands in the store."""
    result = await run_repository_sync(
        JIRA_HOST,
        1234,
        write_payload(tmp_path, 150),
        store_path,
        transport=httpx.MockTransport(lambda request: httpx.Response(202)),
    )
    assert result.truncated is True
    assert (await YAMLStore(store_path).get_single_installation(JIRA_HOST, 1234)).sync_warning == ISSUE_KEY_LIMIT_SYNC_WARNING


@pytest.mark.asyncio
async def test_run_repository_sync_unknown_host(tmp_path: Path, store_path: Path) -> None:
    """Test that syncing to a host without an installation fails."""
    with pytest.raises(NotFoundError):
        await run_repository_sync("https://unknown.atlassian.net", 1234, write_payload(tmp_path, 1), store_path)


def test_load_repository_payload_yaml(tmp_path: Path) -> None:
    """Test loading a YAML repository update."""
    path = tmp_path / "payload.yaml"
    path.write_text("id: '42'\ncommits:\n  - id: a1\n    issueKeys: [ABC-1]\n")
    repository = load_repository_payload(path)
    assert repository.to_payload() == {"id": "42", "commits": [{"id": "a1", "issueKeys": ["ABC-1"]}]}


def test_load_repository_payload_missing_file(tmp_path: Path) -> None:
    """Test that a missing payload file raises FileNotFoundError."""
    with pytest.raises(FileNotFoundError):
        load_repository_payload(tmp_path / "missing.json")


def test_load_repository_payload_invalid(tmp_path: Path) -> None:
    """Test that a payload without a repository ID is rejected."""
    path = tmp_path / "payload.json"
    path.write_text(json.dumps({"commits": []}))
    with pytest.raises(ValueError, match="Invalid repository payload"):
        load_repository_payload(path)


def test_load_repository_payload_malformed_yaml(tmp_path: Path) -> None:
    """Test that a payload that is not valid YAML is rejected."""
    path = tmp_path / "payload.yaml"
    path.write_text("not: [valid: yaml")
    with pytest.raises(ValueError, match="Invalid repository payload"):
        load_repository_payload(path)
