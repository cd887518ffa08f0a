"""
OAuth authentication for dbxsync.

Links the app to a Dropbox account through the no-redirect OAuth 2 flow
(the user pastes a code) and persists the resulting tokens.
"""

import json
import logging
from pathlib import Path
from typing import Optional

import requests
from dropbox import DropboxOAuth2FlowNoRedirect
from dropbox.exceptions import DropboxException

from ..core.paths import get_token_path
from .client import CHUNK_SIZE, DropboxStore, DropboxStoreConfig
from .errors import AuthFailure

logger = logging.getLogger(__name__)


class DropboxAuth:
    """
    Manages linking and reconnecting to Dropbox.

    Tokens are requested with offline access, so the saved refresh token
    lets the SDK renew short-lived access tokens on its own.
    """

    def __init__(
        self,
        app_key: str,
        app_secret: Optional[str] = None,
        token_path: Optional[Path] = None,
        timeout: int = 100,
        max_retries: int = 4,
        chunk_size: int = CHUNK_SIZE,
    ):
        """
        Initialize the auth manager.

        Args:
            app_key: Key of the app registered with Dropbox
            app_secret: Secret of the app (PKCE is used when omitted)
            token_path: Path to save/load the token (default: .dbxsync/token.json)
            timeout: Request timeout passed to stores built here
            max_retries: SDK retry budget passed to stores built here
            chunk_size: Transfer chunk size passed to stores built here
        """
        self.app_key = app_key
        self.app_secret = app_secret
        self.token_path = token_path or get_token_path()
        self.timeout = timeout
        self.max_retries = max_retries
        self.chunk_size = chunk_size
        self._flow: Optional[DropboxOAuth2FlowNoRedirect] = None
        self._token: Optional[dict] = None
        self._store: Optional[DropboxStore] = None

    @property
    def has_token(self) -> bool:
        """Check if a token has been saved."""
        return self.token_path.exists()

    @property
    def is_linked(self) -> bool:
        """Check if a store is connected."""
        return self._store is not None

    @property
    def store(self) -> Optional[DropboxStore]:
        """The connected store, if any."""
        return self._store

    @property
    def access_token(self) -> Optional[str]:
        """Current access token (loaded from disk if not in memory)."""
        token = self._token or self._load_token()
        if token:
            return token.get("access_token")
        return None

    def start_link(self) -> str:
        """
        Begin linking an account.

        Returns:
            URL the user opens to authorize the app and obtain a code
        """
        self._flow = DropboxOAuth2FlowNoRedirect(
            self.app_key,
            consumer_secret=self.app_secret,
            token_access_type="offline",
            use_pkce=not self.app_secret,
        )
        return self._flow.start()

    def finish_link(self, code: str) -> DropboxStore:
        """
        Exchange the authorization code and connect.

        Args:
            code: Code shown to the user after authorizing the URL from start_link()

        Returns:
            Connected DropboxStore
        """
        if self._flow is None:
            raise AuthFailure("Linking was not started; call start_link() first")

        try:
            result = self._flow.finish(code.strip())
        except (DropboxException, requests.exceptions.RequestException) as e:
            raise AuthFailure(f"Could not finish linking: {e}") from e

        self._token = {
            "access_token": result.access_token,
            "refresh_token": getattr(result, "refresh_token", None),
            "account_id": result.account_id,
        }
        self._save_token(self._token)
        self._flow = None
        logger.info("Linked Dropbox account %s", result.account_id)
        return self._connect(self._token)

    def reconnect(self, access_token: Optional[str] = None) -> DropboxStore:
        """
        Connect with a known token.

        Args:
            access_token: Token to use; the saved token is used if omitted

        Returns:
            Connected DropboxStore
        """
        if access_token:
            self._token = {"access_token": access_token}
        elif self._token is None:
            self._token = self._load_token()

        if not self._token or not (self._token.get("access_token") or self._token.get("refresh_token")):
            raise AuthFailure("No saved token; link an account first")
        return self._connect(self._token)

    def _connect(self, token: dict) -> DropboxStore:
        config = DropboxStoreConfig(
            access_token=token.get("access_token"),
            refresh_token=token.get("refresh_token"),
            app_key=self.app_key if token.get("refresh_token") else None,
            app_secret=self.app_secret if token.get("refresh_token") else None,
            timeout=self.timeout,
            max_retries=self.max_retries,
            chunk_size=self.chunk_size,
        )
        self._store = DropboxStore(config)
        return self._store

    def _load_token(self) -> Optional[dict]:
        if not self.token_path.exists():
            return None
        try:
            with open(self.token_path) as f:
                return json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("Could not read token file %s: %s", self.token_path, e)
            return None

    def _save_token(self, token: dict):
        """Save token to the token file."""
        try:
            self.token_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.token_path, "w") as f:
                json.dump(token, f, indent=2)
        except OSError as e:
            logger.warning("Could not save token to %s: %s", self.token_path, e)

    def clear_token(self):
        """Remove saved token (force re-linking)."""
        if self.token_path.exists():
            self.token_path.unlink()
        self._token = None
        self._store = None
