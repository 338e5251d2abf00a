"""
Supabase Storage REST client.

Runs with the service-role key; callers are responsible for authorizing the
request before touching storage.
"""
import logging
from typing import List, Optional
from urllib.parse import quote

import requests

from jobboard.core.config import Settings
from jobboard.core.errors import ExternalServiceError

log = logging.getLogger(__name__)

MAX_FILE_SIZE = 10 * 1024 * 1024  # 10MB

DOCUMENT_MIME_TYPES = [
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
]


class SupabaseStorageClient:
    def __init__(self, base_url: str, service_key: str, timeout: Optional[float] = None):
        self.base_url = base_url.rstrip("/")
        self.service_key = service_key
        self.timeout = timeout
        self.http = requests.Session()

    @classmethod
    def from_settings(cls, settings: Settings) -> "SupabaseStorageClient":
        return cls(settings.supabase_url, settings.supabase_service_role_key, settings.http_timeout_seconds)

    def _headers(self, **extra) -> dict:
        headers = {
            "apikey": self.service_key,
            "Authorization": f"Bearer {self.service_key}",
        }
        headers.update(extra)
        return headers

    def _request(self, method: str, path: str, error: str, **kwargs) -> requests.Response:
        try:
            resp = self.http.request(
                method,
                f"{self.base_url}/storage/v1{path}",
                timeout=self.timeout,
                **kwargs
            )
        except requests.RequestException as e:
            raise ExternalServiceError("Storage service unavailable", details=str(e))

        if not resp.ok:
            log.error("%s: %s %s", error, resp.status_code, resp.text)
            raise ExternalServiceError(error, details=resp.text)
        return resp

    def list_buckets(self) -> List[dict]:
        return self._request("GET", "/bucket", "Failed to list buckets", headers=self._headers()).json()

    def create_bucket(
        self,
        name: str,
        public: bool = True,
        file_size_limit: int = MAX_FILE_SIZE,
        allowed_mime_types: Optional[List[str]] = None
    ) -> dict:
        body = {
            "id": name,
            "name": name,
            "public": public,
            "file_size_limit": file_size_limit,
            "allowed_mime_types": allowed_mime_types or DOCUMENT_MIME_TYPES,
        }
        return self._request(
            "POST", "/bucket", "Failed to create bucket", json=body, headers=self._headers()
        ).json()

    def upload(self, bucket: str, path: str, data: bytes, content_type: str = "application/octet-stream") -> str:
        """Upload a new object (no overwrite). Returns the object path."""
        self._request(
            "POST",
            f"/object/{bucket}/{quote(path)}",
            "Failed to upload file to storage",
            data=data,
            headers=self._headers(**{"Content-Type": content_type, "x-upsert": "false"}),
        )
        return path

    def public_url(self, bucket: str, path: str) -> str:
        return f"{self.base_url}/storage/v1/object/public/{bucket}/{quote(path)}"

    def close(self) -> None:
        self.http.close()
