"""
GitHub OAuth web flow: authorize redirect and code-for-token exchange
"""

from typing import Any, Dict
from urllib.parse import urlencode

import aiohttp

from .errors import OAuthError
from utils.logger import get_logger

logger = get_logger(__name__)


class GitHubOAuth:
    """Stateless helper for the authorization-code grant"""

    def __init__(self, config: Dict[str, Any]):
        self.client_id = config.get('client_id', '')
        self.client_secret = config.get('client_secret', '')
        self.oauth_base_url = config.get('oauth_base_url', 'https://github.com/login/oauth')
        self.callback_url = config.get('callback_url', '')
        self.scope = config.get('scope', 'repo')
        self.timeout = config.get('timeout', 30)

    def authorize_url(self) -> str:
        """URL the browser is sent to for the user to grant access"""
        params = {
            'client_id': self.client_id,
            'redirect_uri': self.callback_url,
            'scope': self.scope,
        }
        return f"{self.oauth_base_url.rstrip('/')}/authorize?{urlencode(params)}"

    async def exchange_code(self, code: str) -> str:
        """
        Exchange an authorization code for an access token

        Args:
            code: The code GitHub appended to the callback URL

        Returns:
            The access token

        Raises:
            OAuthError: if GitHub rejects the code or cannot be reached
        """
        payload = {
            'client_id': self.client_id,
            'client_secret': self.client_secret,
            'code': code,
            'redirect_uri': self.callback_url,
        }
        url = f"{self.oauth_base_url.rstrip('/')}/access_token"
        timeout = aiohttp.ClientTimeout(total=self.timeout)

        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.post(url, data=payload, headers={'Accept': 'application/json'}) as response:
                    if response.status >= 400:
                        raise OAuthError(f"Token exchange failed with status code {response.status}")
                    data = await response.json(content_type=None)
        except aiohttp.ClientError as e:
            raise OAuthError(f"Token exchange failed: {e}") from e

        token = data.get('access_token') if isinstance(data, dict) else None
        if not token:
            error = data.get('error_description') or data.get('error') if isinstance(data, dict) else None
            raise OAuthError(f"Token exchange rejected: {error or 'no access token returned'}")

        return token
