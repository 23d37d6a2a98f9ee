"""Azure DevOps REST API client.

Usage:
    client = AdoClient("https://dev.azure.com/contoso", token="pat_xxx")
    resp   = client.get(client.org_url("_apis", "projects"), {"api-version": "7.1"})
    if resp.ok:
        projects = resp.value

Unlike a typical wrapper, ``get`` never raises on a non-2xx status: callers
inspect ``ApiResponse.status_code`` and decide whether to skip, degrade or
abort. Only transport failures raise.
"""

from dataclasses import dataclass
from typing import Any
from urllib.parse import quote, urlsplit

import requests


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------

class AdoClientError(Exception):
    """Base exception for all client errors."""


class NetworkError(AdoClientError):
    """Raised on connection timeout or unreachable server."""


# ---------------------------------------------------------------------------
# Response
# ---------------------------------------------------------------------------

@dataclass
class ApiResponse:
    status_code: int
    url: str
    body: Any = None
    text: str = ""

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def value(self) -> list[dict]:
        """Items of an Azure DevOps list response (``{"count", "value"}``)."""
        if isinstance(self.body, dict):
            return self.body.get("value") or []
        return []

    @property
    def description(self) -> str:
        """Short human-readable reason for a failed call."""
        if isinstance(self.body, dict) and self.body.get("message"):
            return str(self.body["message"])
        return self.text[:200] or "no response body"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def organization_name(organization_uri: str) -> str:
    """Return the organization name from an organization URI.

    Handles both ``https://dev.azure.com/<org>`` and the legacy
    ``https://<org>.visualstudio.com`` form.
    """
    parts = urlsplit(organization_uri.strip())
    host = parts.hostname or ""
    if host.endswith(".visualstudio.com"):
        return host.split(".", 1)[0]
    segments = [s for s in parts.path.split("/") if s]
    if not segments:
        raise ValueError(f"Cannot derive organization name from '{organization_uri}'")
    return segments[0]


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------

class AdoClient:
    """Thin wrapper around the Azure DevOps and Advanced Security REST APIs."""

    def __init__(self, organization_uri: str, token: str, timeout: int = 30) -> None:
        self.base_url = organization_uri.rstrip("/")
        self.organization = organization_name(organization_uri)
        self.advsec_base_url = f"https://advsec.dev.azure.com/{self.organization}"
        self._timeout = timeout
        self._session = requests.Session()
        # Azure DevOps PAT auth: empty username, token as password
        self._session.auth = ("", token)
        self._session.headers["Accept"] = "application/json"

    # ------------------------------------------------------------------
    # URL builders
    # ------------------------------------------------------------------

    def org_url(self, *segments: str) -> str:
        return _join(self.base_url, segments)

    def advsec_url(self, *segments: str) -> str:
        return _join(self.advsec_base_url, segments)

    # ------------------------------------------------------------------
    # Public interface
    # ------------------------------------------------------------------

    def get(self, url: str, params: dict[str, Any] | None = None) -> ApiResponse:
        """Perform a single GET request.

        Returns the status code and parsed JSON body whatever the status.

        Raises:
            NetworkError:   Timeout or connection failure
            AdoClientError: Any other transport-level failure
        """
        try:
            response = self._session.get(url, params=params or {}, timeout=self._timeout)
        except requests.exceptions.Timeout as exc:
            raise NetworkError(
                f"Request timed out after {self._timeout}s while contacting '{url}'"
            ) from exc
        except requests.exceptions.ConnectionError as exc:
            raise NetworkError(f"Unable to reach '{url}'") from exc
        except requests.exceptions.RequestException as exc:
            raise AdoClientError(f"Request to '{url}' failed: {exc}") from exc

        try:
            body = response.json()
        except ValueError:
            body = None

        return ApiResponse(
            status_code=response.status_code,
            url=response.url or url,
            body=body,
            text=response.text,
        )


def _join(base: str, segments: tuple[str, ...]) -> str:
    path = "/".join(quote(s, safe="$") for s in segments)
    return f"{base}/{path}" if path else base
