"""
Metrics relay routes: pull request trends, merge time and branch activity
"""

import asyncio
from typing import Any, Dict, List, Union

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from api.dependencies import get_github_client
from api.routes.repos import split_repository_keys
from core.dashboard import (
    MetricsAggregator,
    TimeRange,
    gather_per_repository,
    parse_repository_key,
    resolve_time_range,
)
from core.github import GitHubAPIError, GitHubClient
from utils.logger import get_logger

logger = get_logger(__name__)
router = APIRouter(tags=["metrics"])

RANGE_DESCRIPTION = "Time window: 3months (default) or 6months"


class TrendItem(BaseModel):
    week: str
    pr_count: int


class BranchActivityItem(BaseModel):
    date: str
    branches_created: int
    branches_deleted: int


class RepositoryMetricsResponse(BaseModel):
    """Response model for repository-wide metrics."""
    pr_trends: List[TrendItem]
    avg_merge_time: Union[str, int]
    branch_activity: List[BranchActivityItem]


class DeveloperMetricsResponse(BaseModel):
    """Response model for a single developer's metrics."""
    individual_pr_trends: List[TrendItem]
    avg_merge_time: Union[str, int]


async def fetch_repository_metrics(client: GitHubClient, owner: str, repo: str,
                                   time_range: TimeRange) -> Dict[str, Any]:
    """Fetch closed pull requests and branches, then aggregate them."""
    pull_requests, branches = await asyncio.gather(
        client.list_pull_requests(owner, repo, state="closed"),
        client.list_branches(owner, repo),
        return_exceptions=True
    )
    for outcome in (pull_requests, branches):
        if isinstance(outcome, Exception):
            raise outcome

    return MetricsAggregator(time_range).repository_metrics(pull_requests, branches)


@router.get("/metrics/{owner}/{repo}", response_model=RepositoryMetricsResponse)
async def get_repository_metrics(
    owner: str,
    repo: str,
    window: str = Query("3months", alias="range", description=RANGE_DESCRIPTION),
    client: GitHubClient = Depends(get_github_client)
):
    """Weekly merged pull request counts, average merge time and branch activity."""
    time_range = resolve_time_range(window)
    try:
        return await fetch_repository_metrics(client, owner, repo, time_range)
    except GitHubAPIError as e:
        logger.error(f"Error fetching metrics for {repo}: {e}")
        raise


@router.get("/developer-metrics/{owner}/{repo}/{developer}", response_model=DeveloperMetricsResponse)
async def get_developer_metrics(
    owner: str,
    repo: str,
    developer: str,
    window: str = Query("3months", alias="range", description=RANGE_DESCRIPTION),
    client: GitHubClient = Depends(get_github_client)
):
    """Weekly pull request counts and average merge time for one author."""
    time_range = resolve_time_range(window)
    try:
        pull_requests = await client.list_pull_requests(owner, repo, state="closed")
    except GitHubAPIError as e:
        logger.error(f"Error fetching developer metrics for {developer}: {e}")
        raise

    return MetricsAggregator(time_range).developer_metrics(pull_requests, developer)


@router.get("/metrics-batch")
async def get_metrics_batch(
    repos: List[str] = Query(default=[], description="Repositories as owner/name"),
    window: str = Query("3months", alias="range", description=RANGE_DESCRIPTION),
    client: GitHubClient = Depends(get_github_client)
):
    """Repository metrics for several repositories, fetched concurrently.

    Every repository shares one resolved time window. Failures are reported
    per repository under an ``error`` key.
    """
    time_range = resolve_time_range(window)

    jobs = {}
    invalid = {}
    for key in split_repository_keys(repos):
        parsed = parse_repository_key(key)
        if parsed is None:
            invalid[key] = {"error": f"Invalid repository '{key}', expected owner/name"}
            continue
        jobs[key] = fetch_repository_metrics(client, parsed[0], parsed[1], time_range)

    results = await gather_per_repository(jobs)
    return {**results, **invalid}
