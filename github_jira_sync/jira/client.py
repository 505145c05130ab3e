# This file is intended to hold the setup for the authenticated Jira HTTP transport.

"""Sets up the authenticated httpx transport used to talk to a Jira instance."""

import hashlib
import re
import time
from typing import Any, Generator
from urllib.parse import quote

import httpx
import jwt
import structlog

from github_jira_sync.utils.constants import JWT_EXPIRY_SECONDS

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)

PATH_FIELD_PATTERN = re.compile(r":([A-Za-z_][A-Za-z0-9_]*)")


def _percent_encode(value: str) -> str:
    return quote(value, safe="")


def canonical_request(method: str, url: httpx.URL, base_path: str = "") -> str:
    """Build the Atlassian Connect canonical request string used for the query string hash.

    The path is made relative to the Jira context path, and query parameters are
    sorted by name with repeated values sorted and joined by commas. The jwt
    parameter itself is never part of the canonical request.
    """
    path = url.path
    if base_path and path.startswith(base_path):
        path = path[len(base_path) :]
    if not path.startswith("/"):
        path = "/" + path
    if len(path) > 1:
        path = path.rstrip("/")
    path = path.replace("&", "%26")

    params: dict[str, list[str]] = {}
    for key, value in url.params.multi_items():
        if key == "jwt":
            continue
        params.setdefault(key, []).append(value)
    query = "&".join(
        f"{_percent_encode(key)}={','.join(_percent_encode(value) for value in sorted(values))}" for key, values in sorted(params.items())
    )
    return f"{method.upper()}&{path}&{query}"


def query_string_hash(method: str, url: httpx.URL, base_path: str = "") -> str:
    """Return the SHA-256 hex digest of the canonical request."""
    return hashlib.sha256(canonical_request(method, url, base_path).encode("utf-8")).hexdigest()


class ConnectJWTAuth(httpx.Auth):
    """Signs every request with an Atlassian Connect JWT built from the installation's shared secret."""

    def __init__(self, app_key: str, shared_secret: str, base_path: str = "", expiry_seconds: int = JWT_EXPIRY_SECONDS) -> None:
        """Initialize the auth flow for one Connect app installation."""
        self.app_key = app_key
        self.shared_secret = shared_secret
        self.base_path = base_path.rstrip("/")
        self.expiry_seconds = expiry_seconds

    def create_token(self, method: str, url: httpx.URL) -> str:
        """Create the JWT for a single request."""
        now = int(time.time())
        claims = {
            "iss": self.app_key,
            "iat": now,
            "exp": now + self.expiry_seconds,
            "qsh": query_string_hash(method, url, self.base_path),
        }
        return jwt.encode(claims, self.shared_secret, algorithm="HS256")

    def auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        """Attach the Authorization header to the outgoing request."""
        request.headers["Authorization"] = f"JWT {self.create_token(request.method, request.url)}"
        yield request


def expand_path(path: str, fields: dict[str, Any] | None) -> tuple[str, dict[str, Any]]:
    """Fill the ':name' placeholders of a path template from fields.

    Returns the expanded path and the fields not consumed by the template, which
    are sent as query parameters.
    """
    remaining = dict(fields or {})

    def replace(match: re.Match[str]) -> str:
        name = match.group(1)
        if name not in remaining:
            raise ValueError(f"Missing value for path field '{name}' in {path}")
        return _percent_encode(str(remaining.pop(name)))

    return PATH_FIELD_PATTERN.sub(replace, path), remaining


class JiraHTTPClient:
    """Thin request layer over httpx bound to one Jira instance.

    Non-2xx responses raise httpx.HTTPStatusError; transport errors propagate as
    raised by httpx. Nothing is retried here.
    """

    def __init__(self, client: httpx.AsyncClient, logger: structlog.stdlib.BoundLogger) -> None:
        """Initialize the request layer with an already-configured httpx client."""
        self.client = client
        self.logger = logger

    async def request(self, method: str, path: str, json: Any = None, fields: dict[str, Any] | None = None) -> httpx.Response:
        """Send a request to a path template, returning the raw response."""
        url, params = expand_path(path, fields)
        self.logger.debug("Sending Jira request", method=method, path=url, params=params)
        response = await self.client.request(method, url, json=json, params=params or None)
        if response.is_error:
            self.logger.error(
                "Jira request failed",
                method=method,
                path=url,
                status_code=response.status_code,
                body=response.text,
            )
            response.raise_for_status()
        else:
            self.logger.debug("Jira request succeeded", method=method, path=url, status_code=response.status_code)
        return response

    async def get(self, path: str, fields: dict[str, Any] | None = None) -> httpx.Response:
        """Send a GET request."""
        return await self.request("GET", path, fields=fields)

    async def post(self, path: str, json: Any, fields: dict[str, Any] | None = None) -> httpx.Response:
        """Send a POST request with a JSON body."""
        return await self.request("POST", path, json=json, fields=fields)

    async def put(self, path: str, json: Any, fields: dict[str, Any] | None = None) -> httpx.Response:
        """Send a PUT request with a JSON body."""
        return await self.request("PUT", path, json=json, fields=fields)

    async def delete(self, path: str, fields: dict[str, Any] | None = None) -> httpx.Response:
        """Send a DELETE request."""
        return await self.request("DELETE", path, fields=fields)

    async def aclose(self) -> None:
        """Close the underlying httpx client."""
        await self.client.aclose()


def get_jira_http_client(
    jira_host: str,
    shared_secret: str,
    app_key: str,
    logger: structlog.stdlib.BoundLogger,
    timeout: float = 30.0,
    transport: httpx.AsyncBaseTransport | None = None,
) -> JiraHTTPClient:
    """Returns a request layer for a Jira instance authenticated with Connect JWTs."""
    if not (jira_host and shared_secret):
        raise RuntimeError("Jira authentication requires both a Jira host and a shared secret.")
    base_url = httpx.URL(jira_host)
    client = httpx.AsyncClient(
        base_url=base_url,
        auth=ConnectJWTAuth(app_key=app_key, shared_secret=shared_secret, base_path=base_url.path),
        headers={"Accept": "application/json"},
        timeout=timeout,
        transport=transport,
    )
    return JiraHTTPClient(client, logger)
