"""
Concurrent per-repository fetches with failure isolation
"""

import asyncio
from typing import Any, Awaitable, Dict, List, Optional, Tuple

from core.github.errors import GitHubAPIError
from utils.logger import get_logger

logger = get_logger(__name__)


def repository_key(owner: str, repo: str) -> str:
    return f"{owner}/{repo}"


def parse_repository_key(key: str) -> Optional[Tuple[str, str]]:
    """Split ``owner/repo`` into its parts, or None when malformed"""
    parts = key.strip().strip("/").split("/")
    if len(parts) != 2 or not all(parts):
        return None
    return parts[0], parts[1]


def error_entry(error: BaseException) -> Dict[str, Any]:
    entry: Dict[str, Any] = {"error": str(error) or error.__class__.__name__}
    if isinstance(error, GitHubAPIError) and error.status is not None:
        entry["status"] = error.status
    return entry


async def gather_per_repository(jobs: Dict[str, Awaitable[Any]]) -> Dict[str, Any]:
    """
    Run one awaitable per repository concurrently

    Each task returns its own result; results are merged into a fresh dict
    only after every task has finished. A failing repository gets an
    ``{"error": ...}`` entry and never aborts its siblings.

    Args:
        jobs: Mapping of ``owner/repo`` keys to awaitables

    Returns:
        Mapping of the same keys to results or error entries
    """
    keys: List[str] = list(jobs)
    outcomes = await asyncio.gather(*(jobs[key] for key in keys), return_exceptions=True)

    results: Dict[str, Any] = {}
    for key, outcome in zip(keys, outcomes):
        if isinstance(outcome, Exception):
            logger.error(f"Failed to fetch data for {key}: {outcome}")
            results[key] = error_entry(outcome)
        elif isinstance(outcome, BaseException):
            raise outcome
        else:
            results[key] = outcome

    return results
