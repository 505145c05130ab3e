# This file is intended to hold the setup for the authenticated githubkit client.

"""Sets up the githubkit client acting on behalf of a signed-in GitHub user."""

from githubkit import GitHub
from githubkit.auth import TokenAuthStrategy


async def get_github_user_client(github_token: str, github_api_url: str = "https://api.github.com") -> GitHub[TokenAuthStrategy]:
    """Returns a GitHub client authenticated with a user's OAuth or personal access token."""
    if not github_token:
        raise RuntimeError("GitHub user authentication requires a GitHub token.")
    # Disable HTTP caching to always get fresh installation and membership data
    return GitHub(auth=TokenAuthStrategy(github_token), base_url=github_api_url, http_cache=False)
