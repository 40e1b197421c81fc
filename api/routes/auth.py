"""
GitHub OAuth routes

The relay keeps no session: after the code exchange the access token is
handed to the frontend, which sends it back on every call.
"""

from typing import Optional
from urllib.parse import urlencode

from fastapi import APIRouter, Depends
from fastapi.responses import RedirectResponse

from api.dependencies import get_oauth
from core.config import settings
from core.github import GitHubOAuth, OAuthError
from utils.logger import get_logger

logger = get_logger(__name__)
router = APIRouter(tags=["auth"])


def frontend_root() -> str:
    return f"{settings.frontend_url.rstrip('/')}/"


@router.get("/auth/github")
async def login(oauth: GitHubOAuth = Depends(get_oauth)):
    """Send the browser to GitHub's authorization page."""
    return RedirectResponse(oauth.authorize_url())


@router.get("/auth/github/callback")
async def callback(code: Optional[str] = None, oauth: GitHubOAuth = Depends(get_oauth)):
    """Exchange the authorization code and pass the token to the dashboard."""
    if not code:
        logger.warning("OAuth callback received without an authorization code")
        return RedirectResponse(frontend_root())

    try:
        token = await oauth.exchange_code(code)
    except OAuthError as e:
        logger.error(f"GitHub OAuth failed: {e}")
        return RedirectResponse(frontend_root())

    query = urlencode({"token": token})
    return RedirectResponse(f"{settings.frontend_url.rstrip('/')}/dashboard?{query}")


@router.get("/auth/logout")
async def logout():
    """Nothing is held server-side; the frontend discards its token."""
    return RedirectResponse(frontend_root())
