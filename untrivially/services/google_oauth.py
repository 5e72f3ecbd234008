"""Google OAuth2 authorization-code flow."""
from typing import Optional, Tuple

import requests
from authlib.common.errors import AuthlibBaseError
from authlib.integrations.requests_client import OAuth2Session
from pydantic import ValidationError

from untrivially.core.config import settings
from untrivially.core.log import get_logger
from untrivially.schemas.auth.auth_base import GoogleUserInfo

log = get_logger(__name__)

AUTHORIZATION_URL = "https://accounts.google.com/o/oauth2/v2/auth"
TOKEN_URL = "https://oauth2.googleapis.com/token"
USERINFO_URL = "https://www.googleapis.com/oauth2/v2/userinfo"
SCOPES = ["profile", "email"]


class OAuthError(Exception):
    """The identity provider could not be reached or answered with something unusable."""


class GoogleOAuthClient:
    def __init__(self, client_id: str, client_secret: str, redirect_uri: str, timeout: float = 10.0):
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri
        self.timeout = timeout

    def _session(self, token: Optional[dict] = None) -> OAuth2Session:
        return OAuth2Session(
            self.client_id,
            self.client_secret,
            scope=" ".join(SCOPES),
            redirect_uri=self.redirect_uri,
            token=token,
        )

    def authorization_url(self) -> Tuple[str, str]:
        """Returns the consent URL and the state value embedded in it."""
        return self._session().create_authorization_url(AUTHORIZATION_URL)

    def exchange_code(self, code: str) -> str:
        """Trades an authorization code for a Google access token."""
        try:
            token = self._session().fetch_token(TOKEN_URL, code=code, timeout=self.timeout)
        except (AuthlibBaseError, requests.RequestException, ValueError) as e:
            log.error("google token exchange failed", extra={"error": str(e)})
            raise OAuthError("Token exchange with Google failed") from e

        access_token = token.get("access_token")
        if not access_token:
            raise OAuthError("Google did not return an access token")
        return access_token

    def fetch_user_info(self, access_token: str) -> GoogleUserInfo:
        session = self._session(token={"access_token": access_token, "token_type": "Bearer"})
        try:
            resp = session.get(USERINFO_URL, timeout=self.timeout)
            resp.raise_for_status()
            return GoogleUserInfo(**resp.json())
        except (AuthlibBaseError, requests.RequestException, ValueError, TypeError, ValidationError) as e:
            log.error("google userinfo fetch failed", extra={"error": str(e)})
            raise OAuthError("Could not read user info from Google") from e


def get_oauth_client() -> GoogleOAuthClient:
    return GoogleOAuthClient(
        client_id=settings.GOOGLE_CLIENT_ID,
        client_secret=settings.GOOGLE_CLIENT_SECRET,
        redirect_uri=settings.GOOGLE_REDIRECT_URI,
        timeout=settings.OAUTH_HTTP_TIMEOUT_SECONDS,
    )
