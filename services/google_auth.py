# tracker/services/google_auth.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from google.auth.exceptions import RefreshError, TransportError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import Flow

from core.settings import GOOGLE_OAUTH, SHEETS_SYNC, GoogleOAuthSettings
from services.errors import CredentialError
from services.sync_state_store import SyncState


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TokenPair:
    access_token: Optional[str]
    refresh_token: Optional[str]


class GoogleAuth:
    """OAuth web flow for the Sheets API plus refresh of the stored token pair."""

    def __init__(
        self,
        settings: GoogleOAuthSettings = GOOGLE_OAUTH,
        scopes: Iterable[str] = SHEETS_SYNC.scopes,
    ):
        self.settings = settings
        self.scopes = list(scopes)

    @property
    def is_available(self) -> bool:
        return bool(self.settings.client_id and self.settings.client_secret)

    def authorization_url(self) -> str:
        flow = self._flow()
        url, _state = flow.authorization_url(
            access_type="offline",
            prompt="consent",
            include_granted_scopes="true",
        )
        return url

    def authorize(self, code: str) -> TokenPair:
        if not code:
            raise CredentialError("Authorization code is required")
        flow = self._flow()
        flow.fetch_token(code=code)
        creds = flow.credentials
        logger.info("Google authorization completed")
        return TokenPair(access_token=creds.token, refresh_token=creds.refresh_token)

    def current_credential(self, state: SyncState) -> Credentials:
        """Return credentials usable for one API call, refreshing when needed."""

        if not state.refresh_token:
            raise CredentialError("No refresh token stored")
        creds = Credentials(
            token=state.access_token,
            refresh_token=state.refresh_token,
            token_uri=self.settings.token_uri,
            client_id=self.settings.client_id,
            client_secret=self.settings.client_secret,
            scopes=self.scopes,
        )
        if not creds.valid:
            try:
                creds.refresh(Request())
            except (RefreshError, TransportError) as exc:
                raise CredentialError(f"Token refresh failed: {exc}") from exc
            logger.debug("Refreshed Google access token")
        return creds

    # ----- helpers -----
    def _flow(self) -> Flow:
        if not self.is_available:
            raise CredentialError("GOOGLE_CLIENT_ID / GOOGLE_CLIENT_SECRET are not configured")
        client_config = {
            "web": {
                "client_id": self.settings.client_id,
                "client_secret": self.settings.client_secret,
                "auth_uri": self.settings.auth_uri,
                "token_uri": self.settings.token_uri,
                "redirect_uris": [self.settings.redirect_uri],
            }
        }
        return Flow.from_client_config(
            client_config,
            scopes=self.scopes,
            redirect_uri=self.settings.redirect_uri,
            # authorization_url and fetch_token run on separate requests
            autogenerate_code_verifier=False,
        )


__all__ = ["GoogleAuth", "TokenPair"]
