"""Pytest configuration for integration tests."""

import os
from pathlib import Path

import pytest
from dotenv import load_dotenv

REQUIRED_JIRA_VARS = ["JIRA_HOST", "JIRA_SHARED_SECRET", "GITHUB_INSTALLATION_ID"]


@pytest.fixture(autouse=True, scope="session")
def load_env() -> None:
    """Load environment variables from .env.integration, then .env, before running integration tests."""
    project_root = Path(__file__).parent.parent.parent
    for env_file in (project_root / ".env.integration", project_root / ".env"):
        if env_file.exists():
            load_dotenv(dotenv_path=env_file)


@pytest.fixture
def jira_environment() -> dict[str, str]:
    """Return the live Jira settings, skipping the test when they are not configured."""
    missing_vars = [var for var in REQUIRED_JIRA_VARS if not os.getenv(var)]
    if missing_vars:
        pytest.skip(f"Missing environment variables for live Jira tests: {', '.join(missing_vars)}")
    return {var: os.environ[var] for var in REQUIRED_JIRA_VARS}
