"""
Exceptions raised while talking to GitHub
"""

from typing import Optional

RATE_LIMIT_MESSAGE = "GitHub API rate limit exceeded. Try again later."


class GitHubAPIError(RuntimeError):
    """Upstream GitHub failure: network error or non-2xx response"""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status = status


class RateLimitExceededError(GitHubAPIError):
    """GitHub refused the request because the rate limit is used up"""

    def __init__(self, message: str = RATE_LIMIT_MESSAGE, status: Optional[int] = 403):
        super().__init__(message, status)


class OAuthError(Exception):
    """Authorization code could not be exchanged for an access token"""
