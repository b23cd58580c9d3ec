"""Capability interface of the hosted backend (auth, tables, storage, RPC).

Everything ArtRoom persists lives behind this interface. Business code
receives an instance explicitly; it never reaches for a global client.
"""

from dataclasses import dataclass, field
from typing import Any, Protocol

# A filter value is either a plain value (equality) or an (operator, value)
# tuple, e.g. {"family_id": "f1", "public_until": ("gt", "2024-01-01T00:00:00Z")}
Filters = dict[str, Any]

FILTER_OPERATORS = ("eq", "neq", "gt", "gte", "lt", "lte")


class RemoteError(Exception):
    """A failed call to the hosted backend (network, permission or validation)."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


@dataclass
class AuthSession:
    access_token: str
    refresh_token: str = ""
    expires_in: int = 0
    user: dict = field(default_factory=dict)

    @property
    def user_id(self) -> str | None:
        return self.user.get("id")


class RemoteBackend(Protocol):
    # ── Auth ────────────────────────────────────────────────────────────────
    async def sign_in_with_password(self, email: str, password: str) -> AuthSession: ...

    async def get_user(self, access_token: str) -> dict: ...

    async def sign_out(self, access_token: str) -> None: ...

    async def update_user(self, access_token: str, attributes: dict) -> dict: ...

    def as_user(self, access_token: str) -> "RemoteBackend": ...

    # ── Tables ──────────────────────────────────────────────────────────────
    async def select(
        self,
        table: str,
        columns: str = "*",
        filters: Filters | None = None,
        order: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[dict]: ...

    async def insert(self, table: str, row: dict) -> dict: ...

    async def upsert(self, table: str, row: dict, on_conflict: str) -> list[dict]: ...

    async def update(self, table: str, patch: dict, filters: Filters) -> list[dict]: ...

    async def delete(self, table: str, filters: Filters) -> None: ...

    # ── Storage ─────────────────────────────────────────────────────────────
    async def upload(self, bucket: str, path: str, data: bytes, content_type: str) -> str: ...

    def public_url(self, bucket: str, path: str) -> str: ...

    async def remove(self, bucket: str, paths: list[str]) -> None: ...

    # ── Remote procedures ───────────────────────────────────────────────────
    async def rpc(self, name: str, params: dict | None = None) -> Any: ...


def split_filter(value: Any) -> tuple[str, Any]:
    """Normalize a filter value into an (operator, value) pair."""
    if isinstance(value, tuple):
        op, operand = value
        if op not in FILTER_OPERATORS:
            raise ValueError(f"Unsupported filter operator: {op}")
        return op, operand
    return "eq", value
