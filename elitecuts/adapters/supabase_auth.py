"""
Supabase auth (GoTrue) password sign-in for the admin dashboard.
"""

import json
import logging
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import pendulum
import requests

from ..domain.exceptions import AuthenticationError

logger = logging.getLogger(__name__)


@dataclass
class Session:
    """A signed-in admin session."""
    access_token: str
    refresh_token: str
    email: str
    expires_at: int  # Unix timestamp

    def is_expired(self, leeway_seconds: int = 30) -> bool:
        return pendulum.now("UTC").int_timestamp + leeway_seconds >= self.expires_at

    @classmethod
    def from_token_response(cls, data: Dict[str, Any]) -> "Session":
        """Build a session from a ``/token`` response body."""
        try:
            expires_at = data.get("expires_at") or (
                pendulum.now("UTC").int_timestamp + int(data["expires_in"])
            )
            return cls(
                access_token=data["access_token"],
                refresh_token=data.get("refresh_token", ""),
                email=data["user"]["email"],
                expires_at=int(expires_at),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise AuthenticationError(f"Unexpected token response: {exc}") from exc


class SupabaseAuthenticator:
    """
    Handles admin sign-in against the Supabase auth API.

    The session is cached on disk so that consecutive CLI invocations stay
    signed in until it expires or ``sign_out`` is called:
    1. ``sign_in`` exchanges e-mail and password for tokens
    2. ``get_session`` returns the cached session, refreshing it if expired
    3. ``sign_out`` revokes the token and removes the cache
    """

    def __init__(
        self,
        url: str,
        api_key: str,
        cache_file: Path | None = None,
        timeout: int = 10
    ):
        """
        Initialize the authenticator.

        Args:
            url: Supabase project URL
            api_key: Project anon key
            cache_file: Optional path to the session cache file
            timeout: Request timeout in seconds
        """
        self.auth_url = f"{url.rstrip('/')}/auth/v1"
        self.api_key = api_key
        self.timeout = timeout
        self.cache_file = cache_file or Path.home() / ".elitecuts_session.json"
        self._session: Optional[Session] = self._load_cache()

    def sign_in(self, email: str, password: str) -> Session:
        """
        Sign in with e-mail and password.

        Raises:
            AuthenticationError: If the credentials are rejected or the request fails
        """
        data = self._post_token("password", {"email": email, "password": password})
        session = Session.from_token_response(data)
        self._session = session
        self._save_cache(session)
        logger.info("Signed in as %s", session.email)
        return session

    def get_session(self) -> Session | None:
        """
        Get the current session, refreshing it when expired.

        Returns:
            The session, or None if not signed in or the refresh failed
        """
        if self._session is None:
            return None

        if not self._session.is_expired():
            return self._session

        try:
            data = self._post_token("refresh_token", {"refresh_token": self._session.refresh_token})
        except AuthenticationError as exc:
            logger.warning("Session refresh failed: %s", exc)
            self.clear_cache()
            return None

        self._session = Session.from_token_response(data)
        self._save_cache(self._session)
        return self._session

    def sign_out(self) -> None:
        """Revoke the current session (best effort) and clear the cache."""
        if self._session is not None:
            try:
                response = requests.post(
                    f"{self.auth_url}/logout",
                    headers={
                        "apikey": self.api_key,
                        "Authorization": f"Bearer {self._session.access_token}",
                    },
                    timeout=self.timeout
                )
                response.raise_for_status()
            except requests.exceptions.RequestException as exc:
                logger.warning("Could not revoke session on the server: %s", exc)

        self.clear_cache()

    def clear_cache(self) -> None:
        """Forget the session locally."""
        self._session = None
        if self.cache_file.exists():
            self.cache_file.unlink()

    def _post_token(self, grant_type: str, body: Dict[str, str]) -> Dict[str, Any]:
        try:
            response = requests.post(
                f"{self.auth_url}/token",
                params={"grant_type": grant_type},
                headers={"apikey": self.api_key, "Content-Type": "application/json"},
                json=body,
                timeout=self.timeout
            )
        except requests.exceptions.RequestException as exc:
            raise AuthenticationError(f"Authentication request failed: {exc}") from exc

        if not response.ok:
            try:
                error = response.json()
            except ValueError:
                error = {}
            message = (
                error.get("error_description")
                or error.get("msg")
                or error.get("message")
                or response.text
            )
            raise AuthenticationError(f"Authentication failed: {message}")

        return response.json()

    def _load_cache(self) -> Optional[Session]:
        """Load the cached session from disk if it exists."""
        if not self.cache_file.exists():
            return None

        try:
            with open(self.cache_file, "r", encoding="utf-8") as file_handle:
                return Session(**json.load(file_handle))
        except (OSError, ValueError, TypeError) as exc:
            logger.warning("Could not load session cache %s: %s", self.cache_file, exc)
            return None

    def _save_cache(self, session: Session) -> None:
        try:
            self.cache_file.parent.mkdir(parents=True, exist_ok=True)
            with open(self.cache_file, "w", encoding="utf-8") as file_handle:
                json.dump(asdict(session), file_handle)
            # Set restrictive permissions (owner only)
            self.cache_file.chmod(0o600)
        except OSError as exc:
            logger.warning("Could not save session cache to %s: %s", self.cache_file, exc)
