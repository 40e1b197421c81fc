import os
import pytest
from datetime import datetime, timezone
from unittest.mock import patch

# Set test environment variables before importing app modules
os.environ["GITHUB_CLIENT_ID"] = "test-client-id"
os.environ["GITHUB_CLIENT_SECRET"] = "test-client-secret"
os.environ["FRONTEND_URL"] = "http://localhost:3000"
os.environ["ALLOWED_ORIGINS"] = "http://localhost:3000"

from core.github import Branch, GitHubAPIError, PullRequest  # noqa: E402


@pytest.fixture(autouse=True)
def mock_settings():
    """Mock settings for all tests."""
    with patch.dict(os.environ, {
        "GITHUB_CLIENT_ID": "test-client-id",
        "GITHUB_CLIENT_SECRET": "test-client-secret",
        "FRONTEND_URL": "http://localhost:3000",
        "ALLOWED_ORIGINS": "http://localhost:3000",
    }):
        yield


def utc(year, month, day, hour=12, minute=0):
    return datetime(year, month, day, hour, minute, tzinfo=timezone.utc)


def make_pr(number=1, created_at=None, merged_at=None, closed_at=None, user="octocat", state="closed"):
    """Build a PullRequest with sensible defaults."""
    if closed_at is None and merged_at is not None:
        closed_at = merged_at
    return PullRequest(
        id=number,
        title=f"PR {number}",
        state=state,
        created_at=created_at or utc(2024, 1, 1),
        merged_at=merged_at,
        closed_at=closed_at,
        author=user,
        url=f"https://github.com/octo/repo/pull/{number}",
    )


def make_branch(name="main"):
    return Branch(
        name=name,
        commit_sha=f"sha-{name}",
        commit_url=f"https://api.github.com/repos/octo/repo/commits/sha-{name}",
    )


class FakeGitHubClient:
    """In-memory stand-in for GitHubClient keyed by owner/repo."""

    def __init__(self, repositories=None, branches=None, pull_requests=None, failures=None):
        self.repositories = repositories or []
        self.branches = branches or {}
        self.pull_requests = pull_requests or {}
        self.failures = failures or {}
        self.calls = []

    def _check(self, key):
        if key in self.failures:
            raise self.failures[key]

    async def list_user_repositories(self):
        self.calls.append(("repos", None, None))
        self._check("*")
        return self.repositories

    async def list_branches(self, owner, repo):
        key = f"{owner}/{repo}"
        self.calls.append(("branches", key, None))
        self._check(key)
        return self.branches.get(key, [])

    async def list_pull_requests(self, owner, repo, state="all"):
        key = f"{owner}/{repo}"
        self.calls.append(("pulls", key, state))
        self._check(key)
        return self.pull_requests.get(key, [])


@pytest.fixture
def fake_github():
    return FakeGitHubClient()


@pytest.fixture
def client(fake_github):
    """TestClient whose GitHub dependency is the in-memory fake."""
    from fastapi.testclient import TestClient

    from api.dependencies import get_github_client
    from main import app

    app.dependency_overrides[get_github_client] = lambda: fake_github
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def upstream_error(message="Request failed with status code 404: Not Found", status=404):
    return GitHubAPIError(message, status)
