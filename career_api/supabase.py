import logging
from urllib.parse import quote

import httpx

from career_api.config import Settings
from career_api.errors import (
    AuthenticationError,
    NotFoundError,
    PersistenceError,
    PolicyDeniedError,
)

logger = logging.getLogger(__name__)

NO_ROWS_CODE = "PGRST116"
SINGLE_OBJECT = "application/vnd.pgrst.object+json"


# ---------------------------
# Supabase REST client
# ---------------------------
class SupabaseClient:
    """Thin async wrapper over Supabase's REST, Storage and Auth endpoints.

    One instance is created at startup and shared across requests.
    `as_user()` returns a view that sends a caller's JWT instead of the
    service key, so row-level security applies, while reusing the same
    connection pool.
    """

    def __init__(
        self,
        url: str,
        service_key: str,
        anon_key: str | None = None,
        http: httpx.AsyncClient | None = None,
        access_token: str | None = None,
        timeout: float = 8.0,
    ):
        self.url = url.rstrip("/")
        self.service_key = service_key
        self.anon_key = anon_key
        self.access_token = access_token
        self.http = http or httpx.AsyncClient(timeout=timeout)

    @classmethod
    def from_settings(cls, settings: Settings, http: httpx.AsyncClient | None = None) -> "SupabaseClient":
        return cls(
            url=settings.require("SUPABASE_URL"),
            service_key=settings.require("SUPABASE_SERVICE_ROLE_KEY"),
            anon_key=settings.supabase_anon_key,
            http=http,
        )

    def as_user(self, access_token: str) -> "SupabaseClient":
        return SupabaseClient(
            self.url,
            self.service_key,
            anon_key=self.anon_key,
            http=self.http,
            access_token=access_token,
        )

    async def aclose(self) -> None:
        await self.http.aclose()

    def _headers(self, extra: dict | None = None) -> dict:
        if self.access_token:
            headers = {
                "apikey": self.anon_key or self.service_key,
                "Authorization": f"Bearer {self.access_token}",
            }
        else:
            headers = {
                "apikey": self.service_key,
                "Authorization": f"Bearer {self.service_key}",
            }
        if extra:
            headers.update(extra)
        return headers

    async def _send(self, method: str, path: str, context: str, **kwargs) -> httpx.Response:
        try:
            r = await self.http.request(method, f"{self.url}{path}", **kwargs)
        except httpx.RequestError as e:
            raise PersistenceError(f"{context}: {e}") from e

        if not r.is_success:
            raise self._error_for(r, context)
        return r

    @staticmethod
    def _error_for(r: httpx.Response, context: str) -> Exception:
        try:
            body = r.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}

        message = body.get("message") or body.get("error") or body.get("msg") or r.text
        code = body.get("code")
        logger.error("Supabase error (%s): %s %s", context, r.status_code, message)

        if code == NO_ROWS_CODE:
            return NotFoundError(f"{context}: no rows returned")
        if "row-level security policy" in str(message) or r.status_code == 403:
            return PolicyDeniedError(f"{context}: {message}")
        return PersistenceError(f"{context}: {message}")

    # ---------------- Database ----------------

    async def insert(self, table: str, row: dict) -> dict:
        r = await self._send(
            "POST",
            f"/rest/v1/{table}",
            f"Failed to insert into {table}",
            json=row,
            headers=self._headers({"Prefer": "return=representation", "Accept": SINGLE_OBJECT}),
        )
        return r.json()

    async def select(
        self,
        table: str,
        columns: str = "*",
        filters: dict | None = None,
        order: str | None = None,
        limit: int | None = None,
        single: bool = False,
    ):
        params = {"select": columns}
        for column, value in (filters or {}).items():
            params[column] = f"eq.{value}"
        if order:
            params["order"] = order
        if limit is not None:
            params["limit"] = str(limit)

        extra = {"Accept": SINGLE_OBJECT} if single else None
        r = await self._send(
            "GET",
            f"/rest/v1/{table}",
            f"Failed to fetch from {table}",
            params=params,
            headers=self._headers(extra),
        )
        return r.json()

    # ---------------- Storage ----------------

    async def upload(self, bucket: str, path: str, content: bytes, content_type: str) -> dict:
        r = await self._send(
            "POST",
            f"/storage/v1/object/{bucket}/{quote(path)}",
            "Failed to upload file",
            content=content,
            headers=self._headers({"Content-Type": content_type, "x-upsert": "false"}),
        )
        return r.json()

    async def remove(self, bucket: str, paths: list[str]) -> None:
        await self._send(
            "DELETE",
            f"/storage/v1/object/{bucket}",
            "Failed to remove file",
            json={"prefixes": paths},
            headers=self._headers(),
        )

    def public_url(self, bucket: str, path: str) -> str:
        return f"{self.url}/storage/v1/object/public/{bucket}/{quote(path)}"

    # ---------------- Auth ----------------

    async def get_user(self) -> dict:
        if not self.access_token:
            raise AuthenticationError("No authorization token provided")
        try:
            r = await self.http.get(f"{self.url}/auth/v1/user", headers=self._headers())
        except httpx.RequestError as e:
            raise AuthenticationError(f"Authentication failed: {e}") from e

        if not r.is_success:
            logger.error("Supabase auth error: %s %s", r.status_code, r.text)
            raise AuthenticationError("Authentication failed")

        user = r.json()
        if not user or not user.get("id"):
            raise AuthenticationError("User not authenticated")
        return user
