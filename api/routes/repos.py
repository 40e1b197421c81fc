"""
Repository relay routes: repositories, branches and pull requests
"""

import asyncio
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from api.dependencies import get_github_client
from core.dashboard import gather_per_repository, parse_repository_key
from core.github import GitHubAPIError, GitHubClient
from utils.logger import get_logger

logger = get_logger(__name__)
router = APIRouter(tags=["repositories"])


class BranchItem(BaseModel):
    name: str
    commit_sha: str
    commit_url: str


class BranchesResponse(BaseModel):
    """Response model for a repository's branches."""
    branches: List[BranchItem]


class PullRequestItem(BaseModel):
    id: int
    title: str
    state: str
    created_at: str
    merged_at: Optional[str]
    user: str
    url: str


class PullRequestsResponse(BaseModel):
    """Response model for a repository's pull requests."""
    pullRequests: List[PullRequestItem]


def split_repository_keys(repos: List[str]) -> List[str]:
    """Accept both repeated ``repos`` parameters and comma-separated values."""
    keys = []
    for value in repos:
        for key in value.split(","):
            key = key.strip()
            if key and key not in keys:
                keys.append(key)
    return keys


async def fetch_repository_data(client: GitHubClient, owner: str, repo: str) -> Dict[str, Any]:
    """Branches and pull requests for one repository, fetched concurrently."""
    branches, pull_requests = await asyncio.gather(
        client.list_branches(owner, repo),
        client.list_pull_requests(owner, repo, state="all"),
        return_exceptions=True
    )
    for outcome in (branches, pull_requests):
        if isinstance(outcome, Exception):
            raise outcome

    return {
        "branches": [branch.to_dict() for branch in branches],
        "pullRequests": [pr.to_dict() for pr in pull_requests]
    }


@router.get("/repos")
async def list_repositories(client: GitHubClient = Depends(get_github_client)):
    """List the authenticated user's repositories as GitHub returns them."""
    try:
        return await client.list_user_repositories()
    except GitHubAPIError as e:
        logger.error(f"Error fetching repositories: {e}")
        raise


@router.get("/branches/{owner}/{repo}", response_model=BranchesResponse)
async def list_branches(owner: str, repo: str, client: GitHubClient = Depends(get_github_client)):
    """Get the branches of a repository with their head commits."""
    try:
        branches = await client.list_branches(owner, repo)
    except GitHubAPIError as e:
        logger.error(f"Error fetching branches for {repo}: {e}")
        raise

    return {"branches": [branch.to_dict() for branch in branches]}


@router.get("/pulls/{owner}/{repo}", response_model=PullRequestsResponse)
async def list_pull_requests(owner: str, repo: str, client: GitHubClient = Depends(get_github_client)):
    """Get open and closed pull requests of a repository."""
    try:
        pull_requests = await client.list_pull_requests(owner, repo, state="all")
    except GitHubAPIError as e:
        logger.error(f"Error fetching PRs for {repo}: {e}")
        raise

    return {"pullRequests": [pr.to_dict() for pr in pull_requests]}


@router.get("/repo-data")
async def get_repository_data(
    repos: List[str] = Query(default=[], description="Repositories as owner/name"),
    client: GitHubClient = Depends(get_github_client)
):
    """Branches and pull requests for several repositories at once.

    A repository that fails to load gets an ``error`` entry; the others are
    returned normally.
    """
    jobs = {}
    invalid = {}
    for key in split_repository_keys(repos):
        parsed = parse_repository_key(key)
        if parsed is None:
            invalid[key] = {"error": f"Invalid repository '{key}', expected owner/name"}
            continue
        jobs[key] = fetch_repository_data(client, *parsed)

    results = await gather_per_repository(jobs)
    return {**results, **invalid}
