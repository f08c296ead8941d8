# money_manager/client.py
"""
HTTP client for the Money Manager API.

The client keeps no login state of its own: every protected call takes the
bearer token explicitly. ``call_with_reissue`` covers token expiry by logging in
again once and retrying, instead of intercepting requests behind the caller's back.
"""
import logging
from typing import Any, Dict, Optional

import requests

logger = logging.getLogger("money-manager")

API_BASE = "http://localhost:5001"


class ApiClientError(Exception):
    def __init__(self, status_code, message):
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message


class Credentials:
    """Email/password pair plus the last token issued for it"""

    def __init__(self, email, password, token=None):
        self.email = email
        self.password = password
        self.token = token


def safe_json(resp):
    try:
        return resp.json()
    except ValueError:
        return None


class MoneyManagerClient:
    def __init__(self, base_url=API_BASE, timeout=10, session=None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def _request(self, method, path, token=None, json=None):
        headers = {}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        url = self.base_url + path
        response = self.session.request(method, url, headers=headers, json=json, timeout=self.timeout)

        if response.status_code >= 400:
            payload = safe_json(response) or {}
            message = payload.get("error") or f"HTTP {response.status_code}"
            raise ApiClientError(response.status_code, message)
        return response

    # ---------------- Auth ----------------
    def register(self, name, email, password) -> Dict[str, Any]:
        r = self._request("POST", "/auth/register", json={"name": name, "email": email, "password": password})
        return r.json()["data"]

    def login(self, email, password) -> Dict[str, Any]:
        """Returns ``{"token": ..., "name": ...}``"""
        r = self._request("POST", "/auth/login", json={"email": email, "password": password})
        payload = r.json()
        return {"token": payload["token"], "name": payload["user"]["name"]}

    def verify_token(self, token) -> Dict[str, Any]:
        return self._request("GET", "/auth/verify-token", token=token).json()["user"]

    # ---------------- Transactions ----------------
    def list_transactions(self, token) -> Dict[str, Any]:
        payload = self._request("GET", "/transactions", token=token).json()
        return {"items": payload["data"], "summary": payload["summary"]}

    def get_transaction(self, token, tx_id) -> Dict[str, Any]:
        return self._request("GET", f"/transactions/{tx_id}", token=token).json()["data"]

    def add_transaction(self, token, title, amount, tx_type, date: Optional[str] = None) -> Dict[str, Any]:
        body = {"title": title, "amount": amount, "type": tx_type}
        if date is not None:
            body["date"] = date
        return self._request("POST", "/transactions", token=token, json=body).json()["data"]

    def update_transaction(self, token, tx_id, title, amount, tx_type) -> Dict[str, Any]:
        body = {"title": title, "amount": amount, "type": tx_type}
        return self._request("PUT", f"/transactions/{tx_id}", token=token, json=body).json()["data"]

    def delete_transaction(self, token, tx_id):
        self._request("DELETE", f"/transactions/{tx_id}", token=token)

    def delete_all_transactions(self, token) -> int:
        return self._request("DELETE", "/transactions", token=token).json()["count"]

    def export_csv(self, token) -> str:
        return self._request("GET", "/transactions/export", token=token).text

    # ---------------- Reissue ----------------
    def call_with_reissue(self, credentials: Credentials, method, *args, **kwargs):
        """Call ``method(token, *args)``; on a 401 log in again once and retry.

        ``method`` is one of the bound token-taking methods above. The fresh
        token is stored back on ``credentials`` for the next call.
        """
        if not credentials.token:
            credentials.token = self.login(credentials.email, credentials.password)["token"]
            return method(credentials.token, *args, **kwargs)

        try:
            return method(credentials.token, *args, **kwargs)
        except ApiClientError as e:
            if e.status_code != 401:
                raise
            logger.info("Token rejected, logging in again")
            credentials.token = self.login(credentials.email, credentials.password)["token"]
            return method(credentials.token, *args, **kwargs)
