"""Builds the Atlassian Connect app descriptor served to Jira."""

from typing import Any

from github_jira_sync.utils.constants import APP_KEY_PREFIX, PRODUCTION_INSTANCE_NAME


def app_key_for_instance(instance_name: str | None) -> str:
    """Return the Connect app key for a deployment instance."""
    return f"{APP_KEY_PREFIX}.{instance_name}" if instance_name else APP_KEY_PREFIX


def app_name_for_instance(instance_name: str | None) -> str:
    """Return the display name of the app, suffixed with the instance outside production."""
    if instance_name == PRODUCTION_INSTANCE_NAME or not instance_name:
        return "GitHub"
    return f"GitHub ({instance_name})"


def descriptor_base_url(host: str, secure: bool = False, forwarded_proto: str | None = None) -> str:
    """Return the public base URL of the app for the host a request was made to."""
    is_https = secure or forwarded_proto == "https"
    return f"{'https' if is_https else 'http'}://{host}"


def build_app_descriptor(base_url: str, instance_name: str | None = None) -> dict[str, Any]:
    """Build the Connect app descriptor.

    Args:
        base_url: Public base URL the app is served from.
        instance_name: Deployment instance name (e.g. "production", "staging").

    Returns:
        The descriptor as a JSON-serializable dictionary.
    """
    return {
        # GDPR compliant APIs are not in use yet.
        "apiMigrations": {
            "gdpr": False,
        },
        "name": app_name_for_instance(instance_name),
        "description": "Application for integrating with GitHub",
        "key": app_key_for_instance(instance_name),
        "baseUrl": base_url,
        "lifecycle": {
            "installed": "/jira/events/installed",
            "uninstalled": "/jira/events/uninstalled",
            "enabled": "/jira/events/enabled",
            "disabled": "/jira/events/disabled",
        },
        "vendor": {
            "name": "GitHub",
            "url": "http://github.com",
        },
        "authentication": {
            "type": "jwt",
        },
        "scopes": ["READ", "WRITE", "DELETE", "ADMIN"],
        "apiVersion": 1,
        "modules": {
            "jiraDevelopmentTool": {
                "application": {"value": "GitHub"},
                "capabilities": ["branch", "commit", "pull_request"],
                "key": "github-development-tool",
                "logoUrl": "https://assets-cdn.github.com/images/modules/logos_page/GitHub-Mark.png",
                "name": {"value": "GitHub"},
                "url": "https://github.com",
            },
            "postInstallPage": {
                "key": "github-post-install-page",
                "name": {"value": "GitHub Configuration"},
                "url": "/jira/configuration",
                "conditions": [
                    {
                        "condition": "addon_property_exists",
                        "invert": True,
                        "params": {
                            "propertyKey": "configuration",
                            "objectKey": "has-repos",
                        },
                    },
                    {"condition": "user_is_admin"},
                ],
            },
        },
    }
