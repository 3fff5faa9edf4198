"""Async GitHub Traffic API client."""

from datetime import UTC, datetime
from typing import Self

import httpx

from ghtraffic.models import TrafficData, TrafficPoint


class GitHubAPIError(Exception):
    """Base exception for GitHub API errors."""


class RateLimitError(GitHubAPIError):
    """Raised when rate limit is exceeded."""

    def __init__(self, message: str, reset_at: datetime | None = None):
        """Initialize with reset time.

        Args:
            message: Error message.
            reset_at: When rate limit resets (UTC).
        """
        super().__init__(message)
        self.reset_at = reset_at


class AuthenticationError(GitHubAPIError):
    """Raised for authentication failures."""


class NotFoundError(GitHubAPIError):
    """Raised when repository doesn't exist or no access."""


class GitHubTrafficClient:
    """Async client for GitHub Traffic API.

    Each request is made once; failures are reported to the caller, which
    decides how to degrade.

    Attributes:
        BASE_URL: GitHub API base URL.
        PER_PAGE: Page size used when listing repositories.
    """

    BASE_URL = "https://api.github.com"
    PER_PAGE = 100

    def __init__(self, token: str, timeout: float = 30.0):
        """Initialize client with authentication token.

        Args:
            token: GitHub personal access token with push access to the repos.
            timeout: Request timeout in seconds.
        """
        self.token = token
        self.timeout = timeout
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> Self:
        """Enter async context manager."""
        self._client = httpx.AsyncClient(
            base_url=self.BASE_URL,
            headers={
                "Accept": "application/vnd.github+json",
                "Authorization": f"Bearer {self.token}",
                "X-GitHub-Api-Version": "2022-11-28",
            },
            timeout=self.timeout,
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit async context manager."""
        if self._client:
            await self._client.aclose()

    async def _request(self, method: str, path: str, params: dict | None = None):
        """Execute a single request.

        Args:
            method: HTTP method.
            path: API endpoint path.
            params: Query parameters.

        Returns:
            Decoded JSON response.

        Raises:
            RateLimitError: When rate limit is exceeded.
            AuthenticationError: For auth failures.
            NotFoundError: When resource not found.
            GitHubAPIError: For other API errors.
        """
        if not self._client:
            raise RuntimeError("Client not initialized. Use async context manager.")

        try:
            response = await self._client.request(method, path, params=params)
        except httpx.RequestError as e:
            raise GitHubAPIError(f"Request failed: {e}") from e

        if response.status_code == 200:
            return response.json()

        if response.status_code == 401:
            raise AuthenticationError("Invalid or expired token")

        if response.status_code == 403:
            # Check if rate limited
            remaining = response.headers.get("X-RateLimit-Remaining", "1")
            if remaining == "0":
                reset_timestamp = int(response.headers.get("X-RateLimit-Reset", "0"))
                reset_at = datetime.fromtimestamp(reset_timestamp, tz=UTC)
                raise RateLimitError(
                    f"Rate limit exceeded. Resets at {reset_at.isoformat()}",
                    reset_at=reset_at,
                )
            raise AuthenticationError("Access forbidden - check token permissions")

        if response.status_code == 404:
            raise NotFoundError(f"Repository not found or no access: {path}")

        raise GitHubAPIError(f"API error {response.status_code}: {response.text}")

    async def _get_traffic(self, owner: str, repo: str, metric: str) -> TrafficData:
        data = await self._request("GET", f"/repos/{owner}/{repo}/traffic/{metric}")
        return TrafficData(
            count=data.get("count", 0),
            uniques=data.get("uniques", 0),
            items=[
                TrafficPoint(
                    timestamp=item.get("timestamp", ""),
                    count=item.get("count", 0),
                    uniques=item.get("uniques", 0),
                )
                for item in data.get(metric, [])
            ],
        )

    async def get_views(self, owner: str, repo: str) -> TrafficData:
        """Fetch page view traffic for last 14 days.

        Args:
            owner: Repository owner/organization.
            repo: Repository name.

        Returns:
            TrafficData with views breakdown.
        """
        return await self._get_traffic(owner, repo, "views")

    async def get_clones(self, owner: str, repo: str) -> TrafficData:
        """Fetch clone traffic for last 14 days.

        Args:
            owner: Repository owner/organization.
            repo: Repository name.

        Returns:
            TrafficData with clones breakdown.
        """
        return await self._get_traffic(owner, repo, "clones")

    async def list_repositories(self, account: str) -> list[str]:
        """List public, non-fork repositories owned by an account.

        Args:
            account: User or organization login.

        Returns:
            Repository names in API order.
        """
        names: list[str] = []
        page = 1
        while True:
            data = await self._request(
                "GET",
                f"/users/{account}/repos",
                params={"type": "owner", "per_page": self.PER_PAGE, "page": page},
            )
            for item in data:
                if item.get("fork") or item.get("private"):
                    continue
                owner = (item.get("owner") or {}).get("login", account)
                if owner.lower() != account.lower():
                    continue
                names.append(item["name"])

            if len(data) < self.PER_PAGE:
                return names
            page += 1
