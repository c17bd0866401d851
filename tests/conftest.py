from __future__ import annotations

import copy
from types import SimpleNamespace
from typing import Any, Callable, Dict, List, Optional

import pytest
from fastapi.testclient import TestClient

from cugini.services.core_service import Identity, UserContext, require_user_context


# -----------------------------
# In-memory supabase-py stand-in
# -----------------------------
class FakeResponse:
    def __init__(self, data: Any) -> None:
        self.data = data


class FakeQuery:
    def __init__(self, client: "FakeSupabase", table: str) -> None:
        self.client = client
        self.table = table
        self.op = "select"
        self.payload: Any = None
        self.on_conflict: Optional[str] = None
        self.filters: List[tuple] = []
        self.orders: List[tuple] = []
        self.row_limit: Optional[int] = None
        self.single = False

    def select(self, columns: str = "*") -> "FakeQuery":
        self.op = "select"
        return self

    def eq(self, column: str, value: Any) -> "FakeQuery":
        self.filters.append((column, value))
        return self

    def order(self, column: str, desc: bool = False, nullsfirst: Optional[bool] = None) -> "FakeQuery":
        self.orders.append((column, desc, nullsfirst))
        return self

    def limit(self, n: int) -> "FakeQuery":
        self.row_limit = n
        return self

    def maybe_single(self) -> "FakeQuery":
        self.single = True
        return self

    def insert(self, rows: Any) -> "FakeQuery":
        self.op = "insert"
        self.payload = rows
        return self

    def update(self, patch: Dict[str, Any]) -> "FakeQuery":
        self.op = "update"
        self.payload = patch
        return self

    def upsert(self, payload: Dict[str, Any], on_conflict: Optional[str] = None) -> "FakeQuery":
        self.op = "upsert"
        self.payload = payload
        self.on_conflict = on_conflict
        return self

    def _matches(self, row: Dict[str, Any]) -> bool:
        return all(row.get(col) == val for col, val in self.filters)

    def _sorted(self, rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        # last order() is the least significant key
        for column, desc, nullsfirst in reversed(self.orders):
            nulls = [r for r in rows if r.get(column) is None]
            values = sorted((r for r in rows if r.get(column) is not None), key=lambda r: r[column], reverse=desc)
            first = desc if nullsfirst is None else nullsfirst
            rows = nulls + values if first else values + nulls
        return rows

    def execute(self):
        self.client.queries.append((self.table, self.op, list(self.filters)))
        if self.table in self.client.fail_tables:
            raise RuntimeError(f"{self.table} unavailable")

        rows = self.client.tables.setdefault(self.table, [])

        if self.op == "insert":
            batch = self.payload if isinstance(self.payload, list) else [self.payload]
            inserted = [self.client._store(self.table, r) for r in batch]
            return FakeResponse(copy.deepcopy(inserted))

        if self.op == "update":
            touched = []
            for r in rows:
                if self._matches(r):
                    r.update(self.payload)
                    touched.append(r)
            return FakeResponse(copy.deepcopy(touched))

        if self.op == "upsert":
            key = self.on_conflict or "id"
            for r in rows:
                if r.get(key) == self.payload.get(key):
                    r.update(self.payload)
                    return FakeResponse([copy.deepcopy(r)])
            return FakeResponse([copy.deepcopy(self.client._store(self.table, self.payload))])

        found = self._sorted([copy.deepcopy(r) for r in rows if self._matches(r)])
        if self.row_limit is not None:
            found = found[: self.row_limit]
        if self.single:
            # supabase-py hands back None instead of an empty response
            return FakeResponse(found[0]) if found else None
        return FakeResponse(found)


class FakeRpc:
    def __init__(self, client: "FakeSupabase", name: str, params: Dict[str, Any]) -> None:
        self.client = client
        self.name = name
        self.params = params

    def execute(self):
        self.client.rpc_calls.append((self.name, dict(self.params)))
        handler = self.client.rpc_handlers.get(self.name)
        if handler is None:
            raise RuntimeError(f"function {self.name} does not exist")
        return FakeResponse(handler(self.params) if callable(handler) else handler)


class FakeBucket:
    def __init__(self, storage: "FakeStorage", name: str) -> None:
        self.storage = storage
        self.name = name

    def upload(self, path: str, content: bytes, options: Optional[Dict[str, str]] = None):
        if self.storage.fail:
            raise RuntimeError("new row violates row-level security policy")
        self.storage.uploads.append((self.name, path, content, options or {}))
        return {"path": path}

    def get_public_url(self, path: str) -> str:
        return f"https://storage.test/{self.name}/{path}"


class FakeStorage:
    def __init__(self) -> None:
        self.uploads: List[tuple] = []
        self.fail = False

    def from_(self, bucket: str) -> FakeBucket:
        return FakeBucket(self, bucket)


class FakeAuthAdmin:
    def __init__(self) -> None:
        self.updates: List[tuple] = []
        self.error: Optional[Exception] = None

    def update_user_by_id(self, uid: str, attributes: Dict[str, Any]):
        if self.error:
            raise self.error
        self.updates.append((uid, attributes))
        return SimpleNamespace(user=SimpleNamespace(id=uid))


class FakeAuth:
    def __init__(self) -> None:
        self.admin = FakeAuthAdmin()
        self.calls: List[tuple] = []
        self.error: Optional[Exception] = None

    def _call(self, name: str, *args):
        self.calls.append((name, args))
        if self.error:
            raise self.error

    def sign_up(self, credentials: Dict[str, Any]):
        self._call("sign_up", credentials)
        return SimpleNamespace(user=SimpleNamespace(id="new-user", email=credentials["email"]), session=None)

    def sign_in_with_password(self, credentials: Dict[str, Any]):
        self._call("sign_in_with_password", credentials)
        return SimpleNamespace(
            user=SimpleNamespace(id="user-1", email=credentials["email"]),
            session=SimpleNamespace(access_token="access", refresh_token="refresh"),
        )

    def reset_password_for_email(self, email: str, options: Dict[str, Any]):
        self._call("reset_password_for_email", email, options)


class FakeSupabase:
    def __init__(self) -> None:
        self.tables: Dict[str, List[Dict[str, Any]]] = {}
        self.rpc_handlers: Dict[str, Any] = {}
        self.rpc_calls: List[tuple] = []
        self.queries: List[tuple] = []
        self.fail_tables: set = set()
        self.storage = FakeStorage()
        self.auth = FakeAuth()
        self._next_id = 1

    def _store(self, table: str, row: Dict[str, Any]) -> Dict[str, Any]:
        stored = dict(row)
        stored.setdefault("id", self._next_id)
        self._next_id += 1
        self.tables.setdefault(table, []).append(stored)
        return stored

    def seed(self, table: str, *rows: Dict[str, Any]) -> None:
        for r in rows:
            self._store(table, r)

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def rpc(self, name: str, params: Optional[Dict[str, Any]] = None) -> FakeRpc:
        return FakeRpc(self, name, params or {})


# -----------------------------
# Fixtures
# -----------------------------
@pytest.fixture
def sb() -> FakeSupabase:
    return FakeSupabase()


@pytest.fixture
def identity() -> Identity:
    return Identity(id="user-1", email="ana@example.com", metadata={"full_name": "Ana Pérez"})


@pytest.fixture
def ctx(sb, identity) -> UserContext:
    return UserContext(identity=identity, sb=sb, access_token="token")


@pytest.fixture
def client(ctx, monkeypatch):
    from cugini.config.settings import settings
    from cugini.main import app

    monkeypatch.setattr(settings, "ADMIN_EMAILS", [])
    app.dependency_overrides[require_user_context] = lambda: ctx
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def make_admin(sb, identity) -> Callable[[], None]:
    def _make() -> None:
        sb.seed("admin_users", {"user_id": identity.id})

    return _make
