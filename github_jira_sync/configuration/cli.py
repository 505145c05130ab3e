"""Defines the Command Line Interface (CLI) using Typer."""

import asyncio
import json
from pathlib import Path

import httpx
import typer
from dotenv import load_dotenv
from githubkit.exception import GitHubException
from typer import Argument, Option
from typing_extensions import Annotated

from github_jira_sync.configuration.env import settings
from github_jira_sync.connect.descriptor import app_key_for_instance, build_app_descriptor
from github_jira_sync.github.client import get_github_user_client
from github_jira_sync.installations.exceptions import SubscriptionAccessError
from github_jira_sync.installations.management import delete_subscription, list_admin_installations
from github_jira_sync.storage.exceptions import StoreError
from github_jira_sync.storage.yaml_store import YAMLStore
from github_jira_sync.synchronize.driver import run_repository_sync
from github_jira_sync.synchronize.issue_keys import parse_issue_keys
from github_jira_sync.utils.logging_config import configure_logging

load_dotenv()

typer_app = typer.Typer(pretty_exceptions_show_locals=False)


@typer_app.callback()
def main_callback(
    debug: Annotated[bool, Option(envvar="DEBUG", help="Enable debug logging.")] = settings.DEBUG,
) -> None:
    """Synchronize GitHub development information into Jira."""
    configure_logging(debug=debug)


@typer_app.command(name="descriptor")
def descriptor_cli(
    base_url: Annotated[str, Option(envvar="APP_URL", help="Public base URL the app is served from.")],
    instance_name: Annotated[str | None, Option(envvar="INSTANCE_NAME", help="Deployment instance name.")] = settings.INSTANCE_NAME,
) -> None:
    """Print the Atlassian Connect app descriptor."""
    typer.echo(json.dumps(build_app_descriptor(base_url=base_url.rstrip("/"), instance_name=instance_name), indent=2))


@typer_app.command(name="parse-issue-keys")
def parse_issue_keys_cli(
    text: Annotated[str, Argument(help="Free text such as a commit message.")],
) -> None:
    """Print the Jira issue keys referenced in a piece of text."""
    issue_keys = parse_issue_keys(text)
    if issue_keys is None:
        typer.echo("No issue keys found", err=True)
        raise typer.Exit(code=1)
    for issue_key in issue_keys:
        typer.echo(issue_key)


@typer_app.command(name="sync-repository")
def sync_repository_cli(
    jira_host: Annotated[str, Argument(help="Jira host URL (e.g. https://example.atlassian.net).")],
    installation_id: Annotated[int, Argument(help="GitHub App installation ID.")],
    payload_path: Annotated[Path, Argument(help="Path to a JSON or YAML repository update.")],
    prevent_transitions: Annotated[bool, Option(help="Prevent Jira from transitioning issues for this update.")] = False,
    store_path: Annotated[Path, Option(envvar="STORE_PATH", help="Path to the installation and subscription store.")] = settings.STORE_PATH,
    instance_name: Annotated[str | None, Option(envvar="INSTANCE_NAME", help="Deployment instance name.")] = settings.INSTANCE_NAME,
) -> None:
    """Send a repository's commits and branches to Jira."""
    try:
        result = asyncio.run(
            run_repository_sync(
                jira_host=jira_host,
                github_installation_id=installation_id,
                payload_path=payload_path,
                store_path=store_path,
                prevent_transitions=prevent_transitions,
                app_key=app_key_for_instance(instance_name),
                timeout=settings.JIRA_TIMEOUT,
            )
        )
    except (FileNotFoundError, ValueError, StoreError, httpx.HTTPError) as e:
        typer.echo(f"Error syncing repository: {e}", err=True)
        raise typer.Exit(code=1) from e

    typer.echo(f"Synced repository {result.repository_id}: {result.commit_count} commits, {result.branch_count} branches")
    if result.truncated:
        typer.echo("Warning: issue keys were truncated to fit Jira's reference limit", err=True)


# --- Subscription commands ---
subscriptions_app = typer.Typer(help="Subscription-related commands")


@subscriptions_app.command(name="list")
def list_subscriptions_cli(
    jira_host: Annotated[str, Argument(help="Jira host URL.")],
    store_path: Annotated[Path, Option(envvar="STORE_PATH", help="Path to the installation and subscription store.")] = settings.STORE_PATH,
) -> None:
    """List the GitHub installations subscribed to a Jira host, with their sync warnings."""
    try:
        subscriptions = asyncio.run(YAMLStore(store_path).get_all_for_host(jira_host))
    except StoreError as e:
        typer.echo(f"Error reading store: {e}", err=True)
        raise typer.Exit(code=1) from e

    if not subscriptions:
        typer.echo(f"No subscriptions found for {jira_host}")
        return
    for subscription in subscriptions:
        warning = f" (warning: {subscription.sync_warning})" if subscription.sync_warning else ""
        typer.echo(f"{subscription.github_installation_id}{warning}")


@subscriptions_app.command(name="delete")
def delete_subscription_cli(
    jira_host: Annotated[str, Argument(help="Jira host URL.")],
    installation_id: Annotated[int, Argument(help="GitHub App installation ID.")],
    github_token: Annotated[str | None, Option(envvar="GITHUB_TOKEN", help="GitHub token of the user deleting the subscription.")] = None,
    github_api_url: Annotated[str, Option(envvar="GITHUB_API_URL", help="GitHub API URL.")] = settings.GITHUB_API_URL,
    store_path: Annotated[Path, Option(envvar="STORE_PATH", help="Path to the installation and subscription store.")] = settings.STORE_PATH,
) -> None:
    """Delete the subscription of a GitHub installation to a Jira host."""

    async def run() -> int:
        github = await get_github_user_client(github_token or settings.GITHUB_TOKEN or "", github_api_url)
        return await delete_subscription(github, YAMLStore(store_path), installation_id, jira_host)

    try:
        removed = asyncio.run(run())
    except (RuntimeError, ValueError, SubscriptionAccessError, StoreError, GitHubException) as e:
        typer.echo(f"Error deleting subscription: {e}", err=True)
        raise typer.Exit(code=1) from e
    typer.echo(f"Deleted {removed} subscription(s) for installation {installation_id} on {jira_host}")


# --- Installation commands ---
installations_app = typer.Typer(help="GitHub installation commands")


@installations_app.command(name="list")
def list_installations_cli(
    login: Annotated[str, Argument(help="GitHub login of the signed-in user.")],
    github_token: Annotated[str | None, Option(envvar="GITHUB_TOKEN", help="GitHub token of the signed-in user.")] = None,
    github_api_url: Annotated[str, Option(envvar="GITHUB_API_URL", help="GitHub API URL.")] = settings.GITHUB_API_URL,
) -> None:
    """List the GitHub App installations a user administers."""

    async def run() -> list:
        github = await get_github_user_client(github_token or settings.GITHUB_TOKEN or "", github_api_url)
        return await list_admin_installations(github, login)

    try:
        installations = asyncio.run(run())
    except (RuntimeError, GitHubException) as e:
        typer.echo(f"Error listing installations: {e}", err=True)
        raise typer.Exit(code=1) from e
    for installation in installations:
        account = getattr(installation.account, "login", None)
        typer.echo(f"{installation.id}\t{account}\t{installation.target_type}")


typer_app.add_typer(subscriptions_app, name="subscriptions")
typer_app.add_typer(installations_app, name="installations")


if __name__ == "__main__":
    typer_app()
