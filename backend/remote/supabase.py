"""HTTP implementation of the remote backend against a Supabase project.

Talks to the platform's REST surfaces directly with httpx:
  /auth/v1      GoTrue (sessions, users)
  /rest/v1      PostgREST (tables and RPC)
  /storage/v1   object storage
"""

import logging
from typing import Any
from urllib.parse import quote

import httpx

from backend.remote.base import AuthSession, Filters, RemoteError, split_filter

logger = logging.getLogger(__name__)


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _filter_params(filters: Filters | None) -> dict[str, str]:
    """Translate a filter map into PostgREST query parameters."""
    params = {}
    for column, raw in (filters or {}).items():
        op, value = split_filter(raw)
        if value is None:
            params[column] = "is.null"
        else:
            params[column] = f"{op}.{_format_value(value)}"
    return params


def _error_message(resp: httpx.Response) -> str:
    """Pull the human-readable message out of an error response."""
    try:
        body = resp.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        for key in ("message", "msg", "error_description", "error"):
            if body.get(key):
                return str(body[key])
    text = resp.text.strip()
    return text or f"HTTP {resp.status_code}"


class SupabaseBackend:
    """Remote backend bound to one project and, optionally, one user session."""

    def __init__(
        self,
        url: str,
        anon_key: str,
        http: httpx.AsyncClient | None = None,
        access_token: str | None = None,
    ):
        self.url = url.rstrip("/")
        self.anon_key = anon_key
        self._http = http or httpx.AsyncClient()
        self._owns_http = http is None
        self.access_token = access_token

    def as_user(self, access_token: str) -> "SupabaseBackend":
        return SupabaseBackend(self.url, self.anon_key, http=self._http, access_token=access_token)

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    # ── Transport ───────────────────────────────────────────────────────────

    def _headers(self, access_token: str | None = None, extra: dict | None = None) -> dict:
        token = access_token or self.access_token or self.anon_key
        headers = {
            "apikey": self.anon_key,
            "Authorization": f"Bearer {token}",
        }
        if extra:
            headers.update(extra)
        return headers

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict | None = None,
        json: Any = None,
        content: bytes | None = None,
        headers: dict | None = None,
        access_token: str | None = None,
    ) -> httpx.Response:
        try:
            resp = await self._http.request(
                method,
                f"{self.url}{path}",
                params=params,
                json=json,
                content=content,
                headers=self._headers(access_token, headers),
            )
        except httpx.HTTPError as e:
            logger.warning("%s %s failed: %s", method, path, e)
            raise RemoteError(str(e) or e.__class__.__name__) from e

        if resp.status_code >= 400:
            raise RemoteError(_error_message(resp), resp.status_code)
        return resp

    @staticmethod
    def _json(resp: httpx.Response) -> Any:
        if not resp.content:
            return None
        try:
            return resp.json()
        except ValueError as e:
            logger.warning("Non-JSON response from %s (%s)", resp.request.url.path, resp.status_code)
            raise RemoteError(f"Invalid JSON response (HTTP {resp.status_code})") from e

    # ── Auth ────────────────────────────────────────────────────────────────

    async def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        resp = await self._request(
            "POST",
            "/auth/v1/token",
            params={"grant_type": "password"},
            json={"email": email, "password": password},
        )
        data = self._json(resp) or {}
        return AuthSession(
            access_token=data.get("access_token", ""),
            refresh_token=data.get("refresh_token", ""),
            expires_in=int(data.get("expires_in") or 0),
            user=data.get("user") or {},
        )

    async def get_user(self, access_token: str) -> dict:
        resp = await self._request("GET", "/auth/v1/user", access_token=access_token)
        return self._json(resp) or {}

    async def sign_out(self, access_token: str) -> None:
        await self._request("POST", "/auth/v1/logout", access_token=access_token)

    async def update_user(self, access_token: str, attributes: dict) -> dict:
        resp = await self._request(
            "PUT", "/auth/v1/user", json=attributes, access_token=access_token
        )
        return self._json(resp) or {}

    # ── Tables ──────────────────────────────────────────────────────────────

    async def select(
        self,
        table: str,
        columns: str = "*",
        filters: Filters | None = None,
        order: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[dict]:
        params = {"select": columns, **_filter_params(filters)}
        if order:
            params["order"] = f"{order}.{'desc' if descending else 'asc'}"
        if limit is not None:
            params["limit"] = str(limit)
        resp = await self._request("GET", f"/rest/v1/{table}", params=params)
        return self._json(resp) or []

    async def insert(self, table: str, row: dict) -> dict:
        resp = await self._request(
            "POST",
            f"/rest/v1/{table}",
            json=row,
            headers={"Prefer": "return=representation"},
        )
        rows = self._json(resp) or []
        return rows[0] if rows else {}

    async def upsert(self, table: str, row: dict, on_conflict: str) -> list[dict]:
        resp = await self._request(
            "POST",
            f"/rest/v1/{table}",
            params={"on_conflict": on_conflict},
            json=row,
            headers={"Prefer": "resolution=merge-duplicates,return=representation"},
        )
        return self._json(resp) or []

    async def update(self, table: str, patch: dict, filters: Filters) -> list[dict]:
        resp = await self._request(
            "PATCH",
            f"/rest/v1/{table}",
            params=_filter_params(filters),
            json=patch,
            headers={"Prefer": "return=representation"},
        )
        return self._json(resp) or []

    async def delete(self, table: str, filters: Filters) -> None:
        await self._request("DELETE", f"/rest/v1/{table}", params=_filter_params(filters))

    # ── Storage ─────────────────────────────────────────────────────────────

    async def upload(self, bucket: str, path: str, data: bytes, content_type: str) -> str:
        await self._request(
            "POST",
            f"/storage/v1/object/{bucket}/{quote(path)}",
            content=data,
            headers={"Content-Type": content_type, "x-upsert": "false"},
        )
        return path

    def public_url(self, bucket: str, path: str) -> str:
        return f"{self.url}/storage/v1/object/public/{bucket}/{quote(path)}"

    async def remove(self, bucket: str, paths: list[str]) -> None:
        await self._request(
            "DELETE", f"/storage/v1/object/{bucket}", json={"prefixes": paths}
        )

    # ── Remote procedures ───────────────────────────────────────────────────

    async def rpc(self, name: str, params: dict | None = None) -> Any:
        resp = await self._request("POST", f"/rest/v1/rpc/{name}", json=params or {})
        return self._json(resp)
