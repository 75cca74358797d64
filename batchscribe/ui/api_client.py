"""
Synchronous HTTP client for the BatchScribe backend API.

Uses ``httpx.Client`` (sync) because Streamlit scripts run synchronously.
"""

import logging
from urllib.parse import unquote

import httpx
import streamlit as st

logger = logging.getLogger(__name__)


class APIError(Exception):
    """User-friendly API error with categorized message.

    Categories: "connection", "timeout", "http", "network", "unknown".
    Used by the UI to display appropriate error messages.
    """

    def __init__(self, message: str, category: str = "unknown") -> None:
        self.message = message
        self.category = category
        super().__init__(message)


def attachment_filename(resp: httpx.Response, default: str) -> str:
    """Read the download name from ``Content-Disposition``.

    Prefers the RFC 5987 ``filename*=utf-8''...`` form over plain ``filename``.
    """
    plain = None
    for part in resp.headers.get("content-disposition", "").split(";"):
        key, _, value = part.strip().partition("=")
        if key == "filename*" and value.lower().startswith("utf-8''"):
            return unquote(value[len("utf-8''"):])
        if key == "filename":
            plain = value.strip('"')
    return plain or default


class APIClient:
    """Thin synchronous wrapper around httpx for calling the FastAPI backend.

    All methods return parsed JSON (or raw bytes for downloads) or raise
    ``APIError`` with user-friendly messages for display in the UI.
    """

    def __init__(self, base_url: str = "http://localhost:8000") -> None:
        """Initialize the HTTP client.

        Args:
            base_url: Base URL of the BatchScribe FastAPI backend.
        """
        self._base_url = base_url.rstrip("/")
        self._client = httpx.Client(base_url=self._base_url, timeout=30.0)

    def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        """Execute an HTTP request with user-friendly error handling.

        Args:
            method: HTTP method name ("get", "post", "delete").
            path: API endpoint path (e.g. "/api/v1/files").
            **kwargs: Passed through to httpx (json, params, files, timeout, etc.).

        Returns:
            The httpx Response object with a successful status code.

        Raises:
            APIError: On connection, timeout, HTTP status, or network errors.
        """
        try:
            resp = getattr(self._client, method)(path, **kwargs)
            resp.raise_for_status()
            return resp
        except httpx.ConnectError:
            raise APIError(
                "Backend server is not running. "
                "Start it with: `uvicorn batchscribe.api.app:app --reload --port 8000`",
                category="connection",
            ) from None
        except httpx.TimeoutException:
            raise APIError(
                "Request timed out. The server may be overloaded.",
                category="timeout",
            ) from None
        except httpx.HTTPStatusError as exc:
            try:
                detail = exc.response.json().get("detail", exc.response.text)
            except Exception:
                detail = exc.response.text or str(exc)
            raise APIError(str(detail), category="http") from None
        except httpx.HTTPError as exc:
            raise APIError(f"Network error: {exc}", category="network") from None

    # -- health --

    def health_check(self) -> dict:
        return self._request("get", "/health").json()

    def check_connection(self) -> tuple[bool, str]:
        """Check if the backend is reachable. Returns (ok, message)."""
        try:
            self.health_check()
            return True, "Connected"
        except APIError as exc:
            return False, exc.message

    # -- files --

    def list_files(self) -> list[dict]:
        return self._request("get", "/api/v1/files").json()

    def upload_files(self, files: list[tuple[str, bytes]], source: str = "drop") -> list[dict]:
        """Upload ``(name, content)`` pairs. Returns the entries that were queued."""
        if not files:
            return []
        payload = [("files", (name, content)) for name, content in files]
        return self._request(
            "post",
            "/api/v1/files",
            params={"source": source},
            files=payload,
            timeout=300.0,
        ).json()

    def import_folder(self, path: str) -> list[dict]:
        return self._request(
            "post", "/api/v1/files/folder", json={"path": path}, timeout=300.0
        ).json()

    def remove_file(self, file_id: str) -> dict:
        return self._request("delete", f"/api/v1/files/{file_id}").json()

    # -- batch --

    def run_batch(
        self,
        model: str,
        api_key: str | None = None,
        base_url: str | None = None,
        background: bool = True,
    ) -> dict:
        """Start a batch run. Credentials left as None fall back to server settings."""
        body: dict = {"model": model}
        if api_key is not None:
            body["api_key"] = api_key
        if base_url:
            body["base_url"] = base_url
        return self._request(
            "post",
            "/api/v1/batch/run",
            params={"background": str(background).lower()},
            json=body,
            timeout=None if not background else 30.0,
        ).json()

    def batch_status(self) -> dict:
        return self._request("get", "/api/v1/batch/status").json()

    # -- results --

    def list_results(self) -> list[dict]:
        return self._request("get", "/api/v1/results").json()

    def download_result(self, file_id: str) -> tuple[str, bytes]:
        """Return ``(file_name, content)`` as named by the server's attachment header."""
        resp = self._request("get", f"/api/v1/results/{file_id}/export")
        return attachment_filename(resp, f"{file_id}_transcription.txt"), resp.content

    def download_all_results(self) -> tuple[str, bytes]:
        resp = self._request("get", "/api/v1/results/export")
        return attachment_filename(resp, "all_transcriptions.txt"), resp.content

    # -- models --

    def list_models(self) -> list[dict]:
        return self._request("get", "/api/v1/models").json()

    def refresh_models(self, api_key: str | None = None, base_url: str | None = None) -> list[dict]:
        body: dict = {}
        if api_key is not None:
            body["api_key"] = api_key
        if base_url:
            body["base_url"] = base_url
        return self._request("post", "/api/v1/models/refresh", json=body).json()


@st.cache_resource
def get_api_client(base_url: str = "http://localhost:8000") -> APIClient:
    """Return a cached APIClient, keyed by base_url.

    Uses Streamlit's ``cache_resource`` to persist the client across reruns.
    When the base URL changes (e.g. user updates sidebar), a new client
    is created automatically because the cache key includes the parameter.
    """
    return APIClient(base_url=base_url)
