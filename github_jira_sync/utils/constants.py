"""Shared constants used across the application."""

import re

# Jira Issue Key Constants
# ------------------------

ISSUE_KEY_PATTERN = re.compile(r"[A-Z]+-[0-9]+")
"""Pattern to match Jira issue keys (e.g., ABC-123) in free text."""

ISSUE_KEY_API_LIMIT = 100
"""Maximum number of issue keys a single commit, branch or last commit may reference in one bulk call."""

ISSUE_KEY_LIMIT_SYNC_WARNING = "Exceeded issue key reference limit. Some issues may not be linked."
"""Warning persisted on a subscription when issue keys were truncated during a sync."""

# Jira REST API Paths
# -------------------

DEVINFO_API_PATH = "/rest/devinfo/0.10"
"""Base path of the Jira development information API."""

ISSUE_READ_API_PATH = "/rest/api/latest"
"""Base path used for reading issue data."""

ISSUE_WRITE_API_PATH = "/rest/api/3"
"""Base path used for mutating issue data."""

DEFAULT_ISSUE_QUERY = {"fields": "summary"}
"""Query used when fetching an issue without an explicit field selection."""

# Atlassian Connect Constants
# ---------------------------

APP_KEY_PREFIX = "com.github.integration"
"""Connect app key, suffixed with the instance name outside of the default instance."""

PRODUCTION_INSTANCE_NAME = "production"
"""Instance name whose descriptor is published without an instance suffix in its name."""

JWT_EXPIRY_SECONDS = 180
"""Lifetime of the JWT attached to each outbound Jira request."""

JIRA_ID_ALLOWED_PATTERN = re.compile(r"[a-zA-Z0-9_-]+")
"""Names matching this pattern can be used as Jira devinfo identifiers as-is."""
