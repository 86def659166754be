"""HTTP client for the FastAPI assessment backend."""
from __future__ import annotations

import logging
from typing import Any, Dict

import requests

from fhe_core.errors import TransportError
from streamlit_app.config import BACKEND_BASE_URL, REQUEST_TIMEOUT

LOGGER = logging.getLogger(__name__)


class APIClient:
    def __init__(self, base_url: str = BACKEND_BASE_URL, timeout: float = REQUEST_TIMEOUT) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    # -------------------- Assessment --------------------
    def assess_encrypted(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Submit an encrypted questionnaire; returns the ``data`` of the envelope."""
        return self._post("/assess-encrypted", json=payload)

    def model_info(self) -> Dict[str, Any]:
        return self._get("/model-info")

    def health(self) -> Dict[str, Any]:
        return self._get("/health")

    def initialize(self) -> Dict[str, Any]:
        return self._post("/initialize")

    # -------------------- Internal helpers --------------------
    def _headers(self) -> Dict[str, str]:
        return {"Content-Type": "application/json"}

    def _post(self, path: str, json: Dict[str, Any] | None = None) -> Dict[str, Any]:
        try:
            res = requests.post(
                f"{self.base_url}{path}", json=json or {}, headers=self._headers(), timeout=self.timeout
            )
        except requests.RequestException as exc:
            raise TransportError(f"POST {path} failed: {exc}") from exc
        return self._unwrap("POST", path, res)

    def _get(self, path: str, params: Dict[str, Any] | None = None) -> Dict[str, Any]:
        try:
            res = requests.get(
                f"{self.base_url}{path}", params=params or {}, headers=self._headers(), timeout=self.timeout
            )
        except requests.RequestException as exc:
            raise TransportError(f"GET {path} failed: {exc}") from exc
        return self._unwrap("GET", path, res)

    def _unwrap(self, method: str, path: str, res: requests.Response) -> Dict[str, Any]:
        try:
            res.raise_for_status()
        except requests.HTTPError as exc:
            detail = f"{method} {path} -> {res.status_code} {res.reason}; body={res.text}"
            raise TransportError(detail) from exc
        try:
            body = res.json()
        except ValueError as exc:
            raise TransportError(f"{method} {path} returned a non-JSON body") from exc
        if not isinstance(body, dict) or not body.get("success", False):
            message = body.get("message") if isinstance(body, dict) else None
            raise TransportError(message or f"{method} {path} returned an unsuccessful response")
        LOGGER.debug("%s %s -> %s", method, path, res.status_code)
        return body.get("data") or {}


def get_client(base_url: str | None = None) -> APIClient:
    return APIClient(base_url=base_url or BACKEND_BASE_URL)
