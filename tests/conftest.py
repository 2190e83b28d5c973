from __future__ import annotations

import copy
import json
from datetime import datetime, timedelta
from typing import Any, Callable

import httpx
import pytest
from jose import jwt
from PIL import Image

from convocation import config
from convocation.services.store_client import StoreClient
from convocation.session import SessionContext

STORE_URL = "http://store.test"


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


# ---------------- Supabase table fake ----------------
class _Result:
    def __init__(self, data: list[dict[str, Any]]) -> None:
        self.data = data


_LITERALS = {"null": None, "true": True, "false": False}


def _sql_eq(cell: Any, value: Any) -> bool:
    # NULL never compares equal, as in SQL
    return cell is not None and cell == value


def _condition(text: str) -> Callable[[dict[str, Any]], bool]:
    column, op, raw = text.split(".", 2)
    value = _LITERALS.get(raw, raw)
    if op == "is":
        return lambda row: row.get(column) is value
    if op == "eq":
        return lambda row: _sql_eq(row.get(column), value)
    raise AssertionError(f"unsupported filter operator: {op}")


class _Query:
    def __init__(self, rows: list[dict[str, Any]]) -> None:
        self._rows = rows
        self._filters: list[Callable[[dict[str, Any]], bool]] = []
        self._update: dict[str, Any] | None = None

    def select(self, *_columns: str) -> "_Query":
        return self

    def update(self, values: dict[str, Any]) -> "_Query":
        self._update = values
        return self

    def eq(self, column: str, value: Any) -> "_Query":
        self._filters.append(lambda row: _sql_eq(row.get(column), value))
        return self

    def or_(self, filters: str) -> "_Query":
        conditions = [_condition(part) for part in filters.split(",")]
        self._filters.append(lambda row: any(condition(row) for condition in conditions))
        return self

    def execute(self) -> _Result:
        matched = [row for row in self._rows if all(check(row) for check in self._filters)]
        if self._update is not None:
            for row in matched:
                row.update(self._update)
        return _Result([copy.deepcopy(row) for row in matched])


class FakeSupabase:
    def __init__(self, rows: list[dict[str, Any]]) -> None:
        self.rows = rows

    def table(self, name: str) -> _Query:
        assert name == config.STUDENTS_TABLE
        return _Query(self.rows)


def student_row(**overrides: Any) -> dict[str, Any]:
    row = {
        "email": "asha.nair@cukerala.ac.in",
        "name": "Asha Nair",
        "roll_no": "CUK21MSC014",
        "programme": "M.Sc. Physics",
        "year_of_passing": 2025,
        "is_registered": False,
        "guest_count": None,
        "guest_1_name": None,
        "guest_2_name": None,
        "pass_id": None,
    }
    row.update(overrides)
    return row


def make_token(email: str = "asha.nair@cukerala.ac.in", **claims: Any) -> str:
    payload = {
        "sub": "3f1b7c1e-1111-4a2b-9c3d-000000000001",
        "email": email,
        "aud": "authenticated",
        "exp": datetime.utcnow() + timedelta(hours=1),
    }
    payload.update(claims)
    return jwt.encode(payload, config.SUPABASE_JWT_SECRET, algorithm="HS256")


# ---------------- Store over a mock transport ----------------
class RecordingStore:
    """Routes store requests to canned responses and remembers every call."""

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], Callable[[httpx.Request], httpx.Response]] = {}
        self.calls: list[httpx.Request] = []
        self.route("POST", "/auth/v1/logout", lambda request: httpx.Response(204))

    def route(self, method: str, path: str, handler: Callable[[httpx.Request], httpx.Response]) -> None:
        self.routes[(method, path)] = handler

    def respond(self, method: str, path: str, status_code: int = 200, body: Any = None) -> None:
        self.route(method, path, lambda request: httpx.Response(status_code, json=body))

    def paths(self) -> list[str]:
        return [request.url.path for request in self.calls]

    def body(self, index: int) -> Any:
        return json.loads(self.calls[index].content)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        handler = self.routes.get((request.method, request.url.path))
        if handler is None:
            return httpx.Response(404, json={"error": f"no route for {request.url.path}"})
        return handler(request)

    def client(self) -> StoreClient:
        http = httpx.AsyncClient(transport=httpx.MockTransport(self.handler))
        return StoreClient(base_url=STORE_URL, anon_key="anon-key", http=http)


PROFILE_PATH = "/functions/v1/get-student-info-by-auth"
REGISTER_PATH = "/functions/v1/register-student-by-auth"
QR_PATH = "/functions/v1/get-qr"
LOGOUT_PATH = "/auth/v1/logout"

QR_SVG = (
    '<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 29 29">'
    '<path d="M4 4h7v7H4z M18 4h7v7h-7z M4 18h7v7H4z"/></svg>'
)


def unregistered_profile() -> dict[str, Any]:
    return {
        "name": "Asha Nair",
        "email": "asha.nair@cukerala.ac.in",
        "roll_no": "CUK21MSC014",
        "programme": "M.Sc. Physics",
        "year_of_passing": "2025",
        "is_registered": False,
    }


def registered_profile(**overrides: Any) -> dict[str, Any]:
    profile = unregistered_profile()
    profile.update({
        "is_registered": True,
        "guest_count": 1,
        "guardian1": "Ravi Nair",
        "guardian2": None,
        "pass_id": "CUK25-A1B2C3",
    })
    profile.update(overrides)
    return profile


def ticket_payload(**overrides: Any) -> dict[str, Any]:
    payload = {
        "qrSvgString": QR_SVG,
        "name": "Asha Nair",
        "email": "asha.nair@cukerala.ac.in",
        "roll_no": "CUK21MSC014",
        "guest_1_name": "Ravi Nair",
        "guest_2_name": None,
        "programme": "M.Sc. Physics",
        "year_of_passing": "2025",
    }
    payload.update(overrides)
    return payload


def blank_qr(_svg: str) -> Image.Image:
    return Image.new("RGB", (config.QR_RASTER_SIZE, config.QR_RASTER_SIZE), "white")


@pytest.fixture
def store() -> RecordingStore:
    return RecordingStore()


@pytest.fixture
def session() -> SessionContext:
    return SessionContext(access_token="access-token-1")
