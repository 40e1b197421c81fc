"""
Shared FastAPI dependencies: access token extraction and GitHub clients
"""

from typing import AsyncIterator, Optional

from fastapi import Depends, Header, Query

from core.config import settings
from core.github import GitHubClient, GitHubOAuth


def get_access_token(
    authorization: Optional[str] = Header(default=None),
    token: Optional[str] = Query(default=None, description="GitHub access token"),
) -> Optional[str]:
    """Bearer token from the Authorization header, else the ``token`` query parameter"""
    if authorization:
        scheme, _, credentials = authorization.partition(" ")
        if scheme.lower() == "bearer" and credentials.strip():
            return credentials.strip()
    return token or None


async def get_github_client(token: Optional[str] = Depends(get_access_token)) -> AsyncIterator[GitHubClient]:
    """One client (and one HTTP session) per relay call"""
    client = GitHubClient({
        'github_token': token,
        'api_base_url': settings.github_api_base_url,
        'timeout': settings.request_timeout_seconds,
        'per_page': settings.pull_request_page_size,
    })
    async with client:
        yield client


def get_oauth() -> GitHubOAuth:
    return GitHubOAuth({
        'client_id': settings.github_client_id,
        'client_secret': settings.github_client_secret,
        'oauth_base_url': settings.github_oauth_base_url,
        'callback_url': settings.oauth_callback_url,
        'scope': settings.oauth_scope,
        'timeout': settings.request_timeout_seconds,
    })
