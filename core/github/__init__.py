"""
GitHub integration module: REST client, OAuth handshake and error types
"""

from .client import GitHubClient, PullRequest, Branch
from .errors import GitHubAPIError, RateLimitExceededError, OAuthError
from .oauth import GitHubOAuth

__all__ = [
    'GitHubClient',
    'PullRequest',
    'Branch',
    'GitHubAPIError',
    'RateLimitExceededError',
    'OAuthError',
    'GitHubOAuth'
]
