# Overview: HTTP client for the inventory API; wraps auth and record endpoints.

"""
Inventory API client.

A thin httpx wrapper that keeps the bearer token from login/signup and turns
non-2xx responses into ApiError carrying the server's "error" message
verbatim, so a UI can show it as-is.

The records it returns are plain dicts in wire format. They are a possibly
stale copy: nothing here caches or reconciles them with the server.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import httpx


class ApiError(Exception):
    """Non-2xx response from the API."""

    def __init__(self, status_code: int, message: str, payload: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.payload = payload or {}


class InventoryClient:
    """
    HTTP client with authentication and inventory convenience methods.

    Pass transport=httpx.WSGITransport(app=flask_app) to talk to an app
    in-process (used by the test suite).
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        token: Optional[str] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.client = httpx.Client(base_url=self.base_url, timeout=timeout, transport=transport)
        self.token = token
        self.current_user: Optional[Dict[str, Any]] = None

    def close(self) -> None:
        self.client.close()

    def __enter__(self) -> "InventoryClient":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _request(self, method: str, path: str, **kwargs) -> Any:
        response = self.client.request(method, path, headers=self._headers(), **kwargs)
        try:
            body = response.json()
        except ValueError:
            body = {}

        if response.status_code >= 400:
            message = body.get("error") if isinstance(body, dict) else None
            raise ApiError(
                response.status_code,
                message or f"Request failed with status {response.status_code}",
                body if isinstance(body, dict) else None,
            )
        return body

    # -------------------------------------------------------------------------
    # Auth
    # -------------------------------------------------------------------------

    def signup(self, username: str, email: str, password: str) -> Dict[str, Any]:
        data = self._request("POST", "/auth/signup", json={
            "username": username,
            "email": email,
            "password": password,
        })
        self.token = data.get("token")
        self.current_user = data.get("user")
        return data

    def login(self, email: str, password: str) -> Dict[str, Any]:
        """Authenticate and keep the token for later calls."""
        data = self._request("POST", "/auth/login", json={"email": email, "password": password})
        self.token = data.get("token")
        self.current_user = data.get("user")
        return data

    def logout(self) -> None:
        # Tokens are stateless; forgetting it is all a logout does
        self.token = None
        self.current_user = None

    def me(self) -> Dict[str, Any]:
        return self._request("GET", "/auth/me")

    # -------------------------------------------------------------------------
    # Inventory
    # -------------------------------------------------------------------------

    def fetch_page(
        self,
        page: int = 1,
        limit: int = 100,
        search: Optional[str] = None,
        sort: Optional[str] = None,
        order: Optional[str] = None,
    ) -> Dict[str, Any]:
        params: Dict[str, Any] = {"page": page, "limit": limit}
        if search:
            params["search"] = search
        if sort:
            params["sort"] = sort
        if order:
            params["order"] = order
        return self._request("GET", "/inventory", params=params)

    def fetch_all(self, limit: int = 100, **filters) -> List[Dict[str, Any]]:
        """Walk every page and return the full record set."""
        records: List[Dict[str, Any]] = []
        page = 1
        while True:
            body = self.fetch_page(page=page, limit=limit, **filters)
            records.extend(body.get("data", []))
            total_pages = body.get("pagination", {}).get("totalPages", 0)
            if page >= total_pages:
                return records
            page += 1

    def get(self, record_id: int) -> Dict[str, Any]:
        return self._request("GET", f"/inventory/{record_id}")

    def create(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("POST", "/inventory", json=fields)

    def update(self, record_id: int, fields: Dict[str, Any]) -> Dict[str, Any]:
        """Send only the keys that changed; omitted keys are left untouched."""
        return self._request("PUT", f"/inventory/{record_id}", json=fields)

    def delete(self, record_id: int) -> Dict[str, Any]:
        return self._request("DELETE", f"/inventory/{record_id}")

    def duplicate(self, record_id: int) -> Dict[str, Any]:
        return self._request("POST", f"/inventory/{record_id}/duplicate")

    def set_refill_status(self, record_id: int, refill_status: str) -> Dict[str, Any]:
        return self._request("POST", f"/inventory/{record_id}/refill", json={"refill_status": refill_status})
