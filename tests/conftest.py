from typing import Any, Callable, Dict, List, Optional

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from starlette.requests import Request

from adminportal.identity.application.directory_service import DirectoryService
from adminportal.identity.domain.entities.user import (
    AdminProfile,
    ClientUserProfile,
    SolutionsEngineerProfile,
    User,
)
from adminportal.identity.infrastructure.jwt_service import JWTSessionTokenService
from adminportal.identity.infrastructure.password_hasher import Pbkdf2PasswordHasher
from adminportal.identity.infrastructure.persistence import models  # noqa: F401
from adminportal.identity.infrastructure.portal_unit_of_work import unit_of_work_factory
from adminportal.main import create_app
from adminportal.shared.config import Settings
from adminportal.shared.database.session import Database

TEST_JWT_SECRET = "test-secret-not-for-production-0123456789"
TEST_API_KEY = "test-api-key"


# ─── Test doubles ─────────────────────────────────────────────────────────

class InMemorySessionStore:
    """Legacy session store double keyed by session token."""

    def __init__(self) -> None:
        self.sessions: Dict[str, Dict[str, Any]] = {}

    async def get(self, session_token: str) -> Optional[Dict[str, Any]]:
        return self.sessions.get(session_token)


class InMemoryUserRepository:
    """Just enough of the user repository for gates and resolvers."""

    def __init__(self, users: Optional[List[User]] = None) -> None:
        self.users: Dict[str, User] = {u.id: u for u in users or []}
        self.get_calls = 0

    def put(self, user: User) -> None:
        self.users[user.id] = user

    async def get(self, user_id: str) -> Optional[User]:
        self.get_calls += 1
        return self.users.get(user_id)


def make_user(
    role: str,
    *,
    user_id: Optional[str] = None,
    email: Optional[str] = None,
    tenant_id: Optional[str] = None,
    assigned: tuple = (),
    is_org_admin: bool = False,
) -> User:
    user_id = user_id or User.new_id()
    if role == "ADMIN":
        profile = AdminProfile()
    elif role == "SOLUTIONS_ENGINEER":
        profile = SolutionsEngineerProfile(assigned_tenant_ids=tuple(assigned))
    else:
        profile = ClientUserProfile(tenant_id=tenant_id, is_org_admin=is_org_admin)
    return User(
        id=user_id,
        name=f"{role.title()} {user_id[:4]}",
        email=email or f"{user_id[:8]}@example.com",
        profile=profile,
    )


@pytest.fixture
def user_factory() -> Callable[..., User]:
    return make_user


# ─── Core fixtures ────────────────────────────────────────────────────────

@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        environment="test",
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'portal.db'}",
        jwt_secret=TEST_JWT_SECRET,
        api_key=TEST_API_KEY,
        log_format="console",
    )


@pytest.fixture
def token_service(settings) -> JWTSessionTokenService:
    return JWTSessionTokenService(settings.jwt_secret, algorithm=settings.jwt_algorithm)


@pytest.fixture
def hasher() -> Pbkdf2PasswordHasher:
    return Pbkdf2PasswordHasher()


@pytest.fixture
def session_store() -> InMemorySessionStore:
    return InMemorySessionStore()


@pytest.fixture
def user_repo() -> InMemoryUserRepository:
    return InMemoryUserRepository()


@pytest.fixture
def make_request() -> Callable[..., Request]:
    """Bare starlette request with the given cookies, headers and query string."""

    def _make(
        *,
        cookies: Optional[Dict[str, str]] = None,
        headers: Optional[Dict[str, str]] = None,
        query: str = "",
        path: str = "/api/test",
    ) -> Request:
        raw_headers = [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()]
        if cookies:
            cookie_header = "; ".join(f"{k}={v}" for k, v in cookies.items())
            raw_headers.append((b"cookie", cookie_header.encode()))
        scope = {
            "type": "http",
            "method": "GET",
            "path": path,
            "query_string": query.encode(),
            "headers": raw_headers,
        }
        return Request(scope)

    return _make


# ─── Database ─────────────────────────────────────────────────────────────

@pytest_asyncio.fixture
async def database(settings):
    db = Database.from_settings(settings)
    await db.create_all()
    yield db
    await db.dispose()


@pytest.fixture
def uow_factory(database):
    return unit_of_work_factory(database.session_factory)


@pytest.fixture
def directory(uow_factory, hasher) -> DirectoryService:
    return DirectoryService(uow_factory, hasher=hasher)


# ─── HTTP ─────────────────────────────────────────────────────────────────

@pytest.fixture
def app(settings, database, session_store):
    return create_app(settings, database=database, session_store=session_store, configure_logs=False)


@pytest_asyncio.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as ac:
        yield ac


@pytest.fixture
def auth_headers(settings, token_service) -> Callable[[User], Dict[str, str]]:
    """Cookie header carrying a freshly signed session token for the user."""

    def _headers(user: User) -> Dict[str, str]:
        return {"Cookie": f"{settings.session_cookie_name}={token_service.issue(user)}"}

    return _headers
