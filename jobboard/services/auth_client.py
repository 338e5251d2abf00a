"""
Supabase Auth (GoTrue) REST client.

Only the call the backend needs: refreshing an expired session.
"""
from typing import Optional

import requests

from jobboard.core.config import Settings
from jobboard.core.errors import ExternalServiceError, Unauthorized


class SupabaseAuthClient:
    def __init__(self, base_url: str, anon_key: str, timeout: Optional[float] = None):
        self.base_url = base_url.rstrip("/")
        self.anon_key = anon_key
        self.timeout = timeout
        self.http = requests.Session()

    @classmethod
    def from_settings(cls, settings: Settings) -> "SupabaseAuthClient":
        return cls(settings.supabase_url, settings.supabase_anon_key, settings.http_timeout_seconds)

    def _headers(self, access_token: Optional[str] = None) -> dict:
        headers = {"apikey": self.anon_key, "Content-Type": "application/json"}
        if access_token:
            headers["Authorization"] = f"Bearer {access_token}"
        return headers

    def refresh_session(self, refresh_token: str) -> dict:
        """
        Exchange a refresh token for a new session.

        Returns the GoTrue session payload:
            {"access_token", "refresh_token", "expires_at", "user": {...}}
        """
        try:
            resp = self.http.post(
                f"{self.base_url}/auth/v1/token",
                params={"grant_type": "refresh_token"},
                json={"refresh_token": refresh_token},
                headers=self._headers(),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise ExternalServiceError("Auth service unavailable", details=str(e))

        if resp.status_code in (400, 401):
            raise Unauthorized("Session expired")
        if not resp.ok:
            raise ExternalServiceError("Failed to refresh session", details=resp.text)
        return resp.json()

    def close(self) -> None:
        self.http.close()
