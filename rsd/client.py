"""
client.py

Responsibility: Isolate all interaction with the deploy endpoint.

This module must be the only place that:
- Sends HTTP requests to the configured endpoint
- Interprets its responses / error payloads
"""

from __future__ import annotations

import json
import logging
from typing import Any
from urllib.parse import urlparse

import requests

from rsd.settings import Settings

logger = logging.getLogger(__name__)


class DeployError(RuntimeError):
    pass


class DeployClient:
    def __init__(self, endpoint: str, token: str, *, verify_tls: bool = True, timeout: float = 60.0) -> None:
        if not endpoint or not endpoint.strip():
            raise DeployError("Deploy endpoint is required (set RSD_API_ENDPOINT).")
        if not token or not token.strip():
            raise DeployError("API token is required (set RSD_API_TOKEN).")
        scheme = urlparse(endpoint).scheme
        if scheme not in ("http", "https"):
            raise DeployError(f"Unsupported endpoint scheme {scheme!r}: {endpoint}")
        self._endpoint = endpoint.strip()
        self._token = token.strip()
        self._verify_tls = verify_tls
        self._timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> "DeployClient":
        # Certificate validation is only skipped for RSD_ENVIRONMENT=dev.
        return cls(
            settings.api_endpoint or "",
            settings.api_token or "",
            verify_tls=settings.is_production,
            timeout=settings.request_timeout,
        )

    def _headers(self) -> dict[str, str]:
        return {
            "Content-Type": "text/plain",
            "Authorization": f"Bearer {self._token}",
        }

    def send_package(self, package: dict[str, str]) -> dict[str, Any]:
        """
        POST the package as compact JSON and return the parsed JSON response.

        An empty response body is treated as an empty mapping.
        """
        body = json.dumps(package, separators=(",", ":"), ensure_ascii=False).encode("utf-8")
        if not self._verify_tls:
            logger.warning("TLS certificate validation is disabled (RSD_ENVIRONMENT=dev)")
        try:
            r = requests.request(
                "POST",
                self._endpoint,
                headers=self._headers(),
                data=body,
                verify=self._verify_tls,
                timeout=self._timeout,
            )
        except requests.RequestException as e:
            raise DeployError(f"Request to {self._endpoint} failed: {e}") from e

        if r.status_code >= 400:
            raise DeployError(f"Deploy endpoint returned {r.status_code}: {r.text[:500]}")
        if not r.content.strip():
            return {}
        try:
            payload = r.json()
        except ValueError as e:
            raise DeployError(f"Deploy endpoint returned invalid JSON: {e}") from e
        if not isinstance(payload, dict):
            raise DeployError(f"Deploy endpoint returned {type(payload).__name__}, expected an object.")
        return payload
