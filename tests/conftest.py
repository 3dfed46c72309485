from __future__ import annotations

import base64
import copy
import os
import uuid
from datetime import datetime, timezone
from functools import partial
from types import SimpleNamespace
from typing import Any, Callable, Optional

import httpx
import pytest
from fastapi.testclient import TestClient

# repofolio.main builds the app at import time and refuses to start without these
os.environ.setdefault("SUPABASE_URL", "https://example.supabase.co")
os.environ.setdefault("SUPABASE_ANON_KEY", "anon-key")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "service-role-key")
os.environ.setdefault("REDIRECT_URI", "http://localhost:3000/callback")

from repofolio.config import Settings  # noqa: E402
from repofolio.core.dependencies import get_supabase  # noqa: E402
from repofolio.core.rate_limit import limiter  # noqa: E402
from repofolio.main import create_app  # noqa: E402
from repofolio.modules.github.client import GitHubClient  # noqa: E402

GITHUB_TOKEN = "gh-token"


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class FakeAPIError(Exception):
    def __init__(self, message: str, code: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code


class FakeQuery:
    def __init__(self, db: "FakeSupabase", table: str) -> None:
        self._db = db
        self._table = table
        self._op = "select"
        self._columns = "*"
        self._filters: list[Callable[[dict], bool]] = []
        self._order: Optional[tuple[str, bool]] = None
        self._limit: Optional[int] = None
        self._single: Optional[str] = None
        self._payload: Any = None
        self._on_conflict = "id"
        self._ignore_duplicates = False

    def select(self, columns: str = "*", count: Optional[str] = None) -> "FakeQuery":
        self._columns = columns
        return self

    def eq(self, column: str, value: Any) -> "FakeQuery":
        self._filters.append(lambda row: row.get(column) == value)
        return self

    def in_(self, column: str, values: list[Any]) -> "FakeQuery":
        self._filters.append(lambda row: row.get(column) in values)
        return self

    def order(self, column: str, desc: bool = False) -> "FakeQuery":
        self._order = (column, desc)
        return self

    def limit(self, count: int) -> "FakeQuery":
        self._limit = count
        return self

    def maybe_single(self) -> "FakeQuery":
        self._single = "maybe"
        return self

    def single(self) -> "FakeQuery":
        self._single = "single"
        return self

    def insert(self, payload: Any) -> "FakeQuery":
        self._op, self._payload = "insert", payload
        return self

    def update(self, payload: dict) -> "FakeQuery":
        self._op, self._payload = "update", payload
        return self

    def upsert(self, payload: Any, on_conflict: str = "", ignore_duplicates: bool = False) -> "FakeQuery":
        self._op, self._payload = "upsert", payload
        self._on_conflict = on_conflict or "id"
        self._ignore_duplicates = ignore_duplicates
        return self

    def execute(self) -> SimpleNamespace:
        if self._table in self._db.missing_tables:
            raise FakeAPIError(
                f"Could not find the table 'public.{self._table}' in the schema cache", code="PGRST205"
            )
        if (self._table, self._op) in self._db.failures:
            raise FakeAPIError(self._db.failures[(self._table, self._op)])
        self._db.calls.append((self._table, self._op))
        rows = self._db.tables.setdefault(self._table, [])
        handler = getattr(self, f"_execute_{self._op}")
        return SimpleNamespace(data=handler(rows))

    def _matching(self, rows: list[dict]) -> list[dict]:
        return [row for row in rows if all(f(row) for f in self._filters)]

    def _execute_select(self, rows: list[dict]) -> Any:
        found = [copy.deepcopy(row) for row in self._matching(rows)]
        if self._order:
            column, desc = self._order
            found.sort(key=lambda row: (row.get(column) is None, row.get(column)), reverse=desc)
        if self._limit is not None:
            found = found[: self._limit]
        for row in found:
            self._embed_documents(row)
        if self._single == "maybe":
            return found[0] if found else None
        if self._single == "single":
            if len(found) != 1:
                raise FakeAPIError("JSON object requested, multiple (or no) rows returned", code="PGRST116")
            return found[0]
        return found

    def _embed_documents(self, row: dict) -> None:
        if "documents:project_documents(" not in self._columns:
            return
        docs = [d for d in self._db.tables.get("project_documents", []) if d.get("project_id") == row.get("id")]
        if "(count)" in self._columns:
            row["documents"] = [{"count": len(docs)}]
        else:
            row["documents"] = [copy.deepcopy(d) for d in docs]

    def _new_row(self, record: dict) -> dict:
        row: dict = {}
        if self._table != "project_documentation":
            row["id"] = str(uuid.uuid4())
            row["created_at"] = _now()
        if self._table == "projects":
            row.update({"status": "draft", "updated_at": _now()})
        row.update(copy.deepcopy(record))
        return row

    def _execute_insert(self, rows: list[dict]) -> list[dict]:
        records = self._payload if isinstance(self._payload, list) else [self._payload]
        created = [self._new_row(record) for record in records]
        rows.extend(created)
        return copy.deepcopy(created)

    def _execute_update(self, rows: list[dict]) -> list[dict]:
        updated = []
        for row in self._matching(rows):
            row.update(copy.deepcopy(self._payload))
            updated.append(copy.deepcopy(row))
        return updated

    def _execute_upsert(self, rows: list[dict]) -> list[dict]:
        records = self._payload if isinstance(self._payload, list) else [self._payload]
        result = []
        for record in records:
            key = self._on_conflict
            existing = next((row for row in rows if row.get(key) == record.get(key)), None)
            if existing is None:
                row = self._new_row(record)
                rows.append(row)
                result.append(copy.deepcopy(row))
            elif not self._ignore_duplicates:
                existing.update(copy.deepcopy(record))
                result.append(copy.deepcopy(existing))
        return result


class FakeBucket:
    def __init__(self, storage: "FakeStorage", name: str) -> None:
        self._storage = storage
        self.name = name

    def upload(self, path: str, content: bytes, file_options: Optional[dict] = None) -> SimpleNamespace:
        if self._storage.fail_uploads:
            raise FakeAPIError("storage unavailable")
        self._storage.objects[(self.name, path)] = {"content": content, "options": file_options or {}}
        return SimpleNamespace(path=path, full_path=f"{self.name}/{path}")

    def get_public_url(self, path: str) -> str:
        return f"https://example.supabase.co/storage/v1/object/public/{self.name}/{path}"

    def remove(self, paths: list[str]) -> list[dict]:
        for path in paths:
            self._storage.objects.pop((self.name, path), None)
        return [{"name": p} for p in paths]


class FakeStorage:
    def __init__(self) -> None:
        self.objects: dict[tuple[str, str], dict] = {}
        self.fail_uploads = False

    def from_(self, bucket: str) -> FakeBucket:
        return FakeBucket(self, bucket)


class FakeAuth:
    def __init__(self) -> None:
        self.users: dict[str, SimpleNamespace] = {}

    def add_user(self, token: str, user_id: str, *, user_metadata: Optional[dict] = None,
                 app_metadata: Optional[dict] = None) -> None:
        self.users[token] = SimpleNamespace(
            id=user_id,
            email=f"{user_id}@example.com",
            user_metadata=user_metadata or {},
            app_metadata=app_metadata or {},
            created_at="2024-01-01T00:00:00+00:00",
            updated_at=None,
        )

    def get_user(self, jwt: Optional[str] = None) -> SimpleNamespace:
        if jwt not in self.users:
            raise FakeAPIError("invalid JWT: unable to parse or verify signature, token is expired")
        return SimpleNamespace(user=self.users[jwt])


class FakeSupabase:
    """In-memory stand-in for the supabase-py client surface the services use."""

    def __init__(self) -> None:
        self.tables: dict[str, list[dict]] = {}
        self.missing_tables: set[str] = set()
        self.failures: dict[tuple[str, str], str] = {}
        self.calls: list[tuple[str, str]] = []
        self.storage = FakeStorage()
        self.auth = FakeAuth()

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def rows(self, name: str) -> list[dict]:
        return self.tables.setdefault(name, [])


def make_repo(repo_id: int, full_name: str, **overrides: Any) -> dict:
    owner, name = full_name.split("/")
    repo = {
        "id": repo_id,
        "name": name,
        "full_name": full_name,
        "html_url": f"https://github.com/{full_name}",
        "description": f"{name} description",
        "private": False,
        "fork": False,
        "language": "Python",
        "stargazers_count": 10,
        "watchers_count": 10,
        "forks_count": 2,
        "open_issues_count": 1,
        "visibility": "public",
        "owner": {"login": owner},
        "default_branch": "main",
        "created_at": "2020-01-01T00:00:00Z",
        "updated_at": "2024-05-01T00:00:00Z",
        "pushed_at": "2024-05-01T00:00:00Z",
    }
    repo.update(overrides)
    return repo


def make_calendar(weeks: int) -> dict:
    return {
        "totalContributions": weeks * 7,
        "weeks": [
            {
                "contributionDays": [
                    {"date": f"2024-W{w:02d}-{d}", "contributionCount": w * 10 + d}
                    for d in range(7)
                ]
            }
            for w in range(weeks)
        ],
    }


class FakeGitHub:
    """Serves the GitHub endpoints the client uses through httpx.MockTransport."""

    def __init__(self) -> None:
        self.valid_tokens = {GITHUB_TOKEN}
        self.user = {
            "id": 583231,
            "login": "octocat",
            "email": "octocat@github.com",
            "avatar_url": "https://avatars.githubusercontent.com/u/583231",
            "html_url": "https://github.com/octocat",
            "updated_at": "2024-05-01T00:00:00Z",
        }
        self.repos: dict[str, dict] = {
            "octocat/Hello-World": make_repo(1296269, "octocat/Hello-World", stargazers_count=80),
            "octocat/Spoon-Knife": make_repo(1300192, "octocat/Spoon-Knife", stargazers_count=12),
            "octocat/octocat": make_repo(1400000, "octocat/octocat"),
        }
        self.readme: Optional[str] = "# Hi, I'm Octocat"
        self.events = [
            {"id": str(i), "type": "PushEvent", "repo": {"name": "octocat/Hello-World"},
             "created_at": f"2024-05-{i + 1:02d}T00:00:00Z"}
            for i in range(15)
        ]
        self.calendar = make_calendar(52)
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        token = request.headers.get("authorization", "").removeprefix("Bearer ")
        if token not in self.valid_tokens:
            return httpx.Response(401, json={"message": "Bad credentials"})

        path = request.url.path
        if request.method == "POST" and path == "/graphql":
            return httpx.Response(200, json={
                "data": {"viewer": {"contributionsCollection": {"contributionCalendar": self.calendar}}}
            })
        if path == "/user":
            return httpx.Response(200, json=self.user)
        if path == "/user/repos":
            return httpx.Response(200, json=list(self.repos.values()))
        if path == f"/users/{self.user['login']}/events":
            return httpx.Response(200, json=self.events)
        if path.startswith("/repos/") and path.endswith("/readme"):
            if self.readme is None:
                return httpx.Response(404, json={"message": "Not Found"})
            encoded = base64.b64encode(self.readme.encode()).decode()
            return httpx.Response(200, json={"content": encoded, "encoding": "base64"})
        if path.startswith("/repos/"):
            full_name = path.removeprefix("/repos/")
            if full_name in self.repos:
                return httpx.Response(200, json=self.repos[full_name])
        return httpx.Response(404, json={"message": "Not Found"})


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_anon_key="anon-key",
        supabase_service_role_key="service-role-key",
        redirect_uri="http://localhost:3000/callback",
        _env_file=None,
    )


@pytest.fixture
def supabase() -> FakeSupabase:
    db = FakeSupabase()
    db.auth.add_user("dev-token", "dev-1", user_metadata={"user_name": "octocat", "full_name": "The Octocat"})
    db.auth.add_user("other-token", "dev-2")
    db.auth.add_user("expert-token", "expert-1")
    db.auth.add_user("admin-token", "admin-1", app_metadata={"type": "super_user"})
    db.rows("profiles").extend([
        {"id": "dev-1", "username": "octocat", "full_name": "The Octocat", "avatar_url": None, "role": "developer"},
        {"id": "dev-2", "username": "hubot", "full_name": None, "avatar_url": None, "role": "developer"},
        {"id": "expert-1", "username": "reviewer", "full_name": "Rita Reviewer", "avatar_url": None, "role": "expert"},
    ])
    return db


@pytest.fixture
def github() -> FakeGitHub:
    return FakeGitHub()


@pytest.fixture
def app(settings: Settings, supabase: FakeSupabase, github: FakeGitHub):
    application = create_app(settings)
    application.dependency_overrides[get_supabase] = lambda: supabase
    application.state.github_client_factory = partial(
        GitHubClient, transport=httpx.MockTransport(github.handler)
    )
    limiter.reset()
    return application


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture
def link_github(supabase: FakeSupabase) -> Callable[[str], None]:
    def _link(user_id: str, token: str = GITHUB_TOKEN) -> None:
        supabase.rows("user_tokens").append({"id": str(uuid.uuid4()), "user_id": user_id, "github_token": token})
    return _link


@pytest.fixture
def seed_project(supabase: FakeSupabase) -> Callable[..., dict]:
    def _seed(user_id: str, github_repo_id: int = 1, stars: int = 0, name: str = "repo") -> dict:
        row = {
            "id": str(uuid.uuid4()),
            "user_id": user_id,
            "github_repo_id": github_repo_id,
            "repository_full_name": f"someone/{name}",
            "name": name,
            "stars": stars,
            "status": "draft",
            "created_at": _now(),
            "updated_at": _now(),
        }
        supabase.rows("projects").append(row)
        return row
    return _seed


@pytest.fixture
def bearer() -> Callable[[str], dict[str, str]]:
    def _headers(token: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {token}"}
    return _headers
