import logging
from typing import Optional

import httpx

from .. import config
from ..session import SessionContext

logger = logging.getLogger(__name__)

FUNCTIONS_PATH = "/functions/v1"


class StoreError(Exception):
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class StoreClient:
    """
    Talks to the profile/registration store over HTTP.

    Calls are awaited one at a time by the screens; no timeout is applied, a
    hung store simply keeps the screen loading.
    """

    def __init__(self, base_url: str = None, anon_key: str = None,
                 http: Optional[httpx.AsyncClient] = None):
        self.base_url = (base_url or config.SUPABASE_URL).rstrip("/")
        self.anon_key = config.SUPABASE_ANON_KEY if anon_key is None else anon_key
        self._http = http or httpx.AsyncClient(timeout=None)

    async def aclose(self):
        await self._http.aclose()

    def _headers(self, session: SessionContext) -> dict:
        return {
            "apikey": self.anon_key,
            "Authorization": f"Bearer {session.access_token}",
        }

    async def _call(self, method: str, path: str, session: SessionContext,
                    default_error: str, **kwargs) -> dict:
        url = f"{self.base_url}{path}"
        try:
            response = await self._http.request(method, url, headers=self._headers(session), **kwargs)
        except httpx.HTTPError as e:
            logger.warning("Store request %s %s failed: %s", method, path, e)
            raise StoreError(str(e) or "Failed to connect to server.") from e

        try:
            body = response.json() if response.content else {}
        except ValueError:
            body = None

        if response.is_error:
            message = body.get("error") if isinstance(body, dict) else None
            logger.info("Store rejected %s %s with %s", method, path, response.status_code)
            raise StoreError(message or default_error, response.status_code)
        if not isinstance(body, dict):
            raise StoreError("Unexpected response from server.", response.status_code)
        return body

    # ---------------- Store Functions ----------------
    async def get_student_info(self, session: SessionContext) -> dict:
        return await self._call(
            "POST", f"{FUNCTIONS_PATH}/get-student-info-by-auth", session,
            "Failed to fetch profile",
        )

    async def register_student(self, session: SessionContext, payload: dict) -> dict:
        return await self._call(
            "POST", f"{FUNCTIONS_PATH}/register-student-by-auth", session,
            "Registration failed.", json=payload,
        )

    async def get_qr(self, session: SessionContext, pass_id: str) -> dict:
        return await self._call(
            "GET", f"{FUNCTIONS_PATH}/get-qr", session,
            "Failed to load QR code details.", params={"pass_id": pass_id},
        )

    # ---------------- Identity Session ----------------
    async def sign_out(self, session: SessionContext):
        try:
            await self._call("POST", "/auth/v1/logout", session, "Sign out failed.")
        except StoreError as e:
            # the local session is dropped either way
            logger.warning("Sign out was not acknowledged: %s", e.message)
