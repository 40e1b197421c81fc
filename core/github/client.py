"""
GitHub API client for the read-only calls the dashboard relays
"""

import os
from typing import Dict, List, Any, Optional
from dataclasses import dataclass
from datetime import datetime, timezone

import aiohttp

from .errors import GitHubAPIError, RateLimitExceededError
from utils.logger import get_logger

logger = get_logger(__name__)

UNKNOWN_AUTHOR = "Unknown"


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse a GitHub ISO-8601 timestamp into an aware datetime"""
    if not value:
        return None
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_timestamp(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


@dataclass(frozen=True)
class PullRequest:
    """GitHub pull request information"""
    id: int
    title: str
    state: str
    created_at: datetime
    merged_at: Optional[datetime]
    closed_at: Optional[datetime]
    author: Optional[str]
    url: str

    @property
    def user(self) -> str:
        return self.author or UNKNOWN_AUTHOR

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "PullRequest":
        user = data.get('user') or {}
        return cls(
            id=data['id'],
            title=data.get('title', ''),
            state=data.get('state', ''),
            created_at=parse_timestamp(data['created_at']),
            merged_at=parse_timestamp(data.get('merged_at')),
            closed_at=parse_timestamp(data.get('closed_at')),
            author=user.get('login') or None,
            url=data.get('html_url', '')
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert pull request to the relay's JSON shape"""
        return {
            "id": self.id,
            "title": self.title,
            "state": self.state,
            "created_at": format_timestamp(self.created_at),
            "merged_at": format_timestamp(self.merged_at),
            "user": self.user,
            "url": self.url
        }


@dataclass(frozen=True)
class Branch:
    """GitHub branch head information"""
    name: str
    commit_sha: str
    commit_url: str

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Branch":
        commit = data.get('commit') or {}
        return cls(
            name=data['name'],
            commit_sha=commit.get('sha', ''),
            commit_url=commit.get('url', '')
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "commit_sha": self.commit_sha,
            "commit_url": self.commit_url
        }


class GitHubClient:
    """GitHub API client for repository, branch and pull request reads"""

    def __init__(self, config: Dict[str, Any]):
        """Initialize GitHub client with configuration"""
        self.config = config
        self.token = config.get('github_token', os.getenv('GITHUB_TOKEN'))
        self.api_base_url = config.get('api_base_url', 'https://api.github.com')
        self.timeout = config.get('timeout', 30)
        self.per_page = min(config.get('per_page', 100), 100)

        if not self.token:
            logger.warning("GitHub token not provided. Requests will be sent unauthenticated.")

        self._session = None

    async def __aenter__(self):
        """Async context manager entry"""
        await self._ensure_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit"""
        await self.close()

    async def _ensure_session(self):
        """Ensure aiohttp session is created"""
        if self._session is None or self._session.closed:
            headers = {
                'Accept': 'application/vnd.github+json',
                'User-Agent': 'RepoInsights-Relay/1.0'
            }

            if self.token:
                headers['Authorization'] = f'Bearer {self.token}'

            timeout = aiohttp.ClientTimeout(total=self.timeout)
            self._session = aiohttp.ClientSession(
                headers=headers,
                timeout=timeout
            )

    async def close(self):
        """Close aiohttp session"""
        if self._session and not self._session.closed:
            await self._session.close()

    @staticmethod
    def _is_rate_limited(status: int, headers) -> bool:
        if status == 429:
            return True
        return status == 403 and headers.get('X-RateLimit-Remaining') == '0'

    async def _make_request(self, method: str, endpoint: str, **kwargs) -> Any:
        """Make a single authenticated request to the GitHub API.

        No retries: a rate-limit denial raises RateLimitExceededError and any
        other failure raises GitHubAPIError.
        """
        await self._ensure_session()

        url = f"{self.api_base_url.rstrip('/')}/{endpoint.lstrip('/')}"

        try:
            async with self._session.request(method, url, **kwargs) as response:
                if self._is_rate_limited(response.status, response.headers):
                    logger.error("GitHub API rate limit exceeded")
                    raise RateLimitExceededError(status=response.status)

                if response.status >= 400:
                    message = f"Request failed with status code {response.status}"
                    try:
                        body = await response.json(content_type=None)
                    except ValueError:
                        body = None
                    if isinstance(body, dict) and body.get('message'):
                        message = f"{message}: {body['message']}"
                    raise GitHubAPIError(message, response.status)

                try:
                    return await response.json(content_type=None)
                except ValueError as e:
                    raise GitHubAPIError(
                        f"Invalid JSON in response with status code {response.status}", response.status
                    ) from e
        except aiohttp.ClientError as e:
            raise GitHubAPIError(str(e) or e.__class__.__name__) from e

    async def list_user_repositories(self) -> List[Dict[str, Any]]:
        """List repositories visible to the authenticated user, unmodified"""
        return await self._make_request('GET', "user/repos")

    async def list_branches(self, owner: str, repo: str) -> List[Branch]:
        """
        Get repository branches

        Args:
            owner: Repository owner
            repo: Repository name

        Returns:
            List of Branch objects (first page, GitHub's default page size)
        """
        endpoint = f"repos/{owner}/{repo}/branches"
        data = await self._make_request('GET', endpoint)
        return [Branch.from_api(item) for item in data]

    async def list_pull_requests(self, owner: str, repo: str,
                                 state: str = "all") -> List[PullRequest]:
        """
        Get repository pull requests

        Args:
            owner: Repository owner
            repo: Repository name
            state: Pull request state filter (open, closed, all)

        Returns:
            List of PullRequest objects (first page only)
        """
        endpoint = f"repos/{owner}/{repo}/pulls"
        params = {'state': state, 'per_page': self.per_page}
        data = await self._make_request('GET', endpoint, params=params)
        return [PullRequest.from_api(item) for item in data]
