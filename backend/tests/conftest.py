import os
import sys
import tempfile
from collections.abc import Callable, Iterator

import pytest

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.append(PROJECT_ROOT)

# Must be set before backend.config is imported anywhere
_BOOT_DIR = tempfile.mkdtemp(prefix="devprofiles-tests-")
os.environ.setdefault("DATABASE_URL", f"sqlite:///{_BOOT_DIR}/boot.db")
os.environ["ENV"] = "test"
os.environ.setdefault("STORE_RETRY_BASE_DELAY", "0")

from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.orm import Session, sessionmaker  # noqa: E402

from backend.database import Base, build_engine, get_db  # noqa: E402
from backend.middleware.auth_middleware import create_access_token  # noqa: E402
from backend.models import User  # noqa: E402


@pytest.fixture
def session_factory(tmp_path) -> Iterator[sessionmaker]:
    """Fresh SQLite file per test; each call to the factory is an independent connection."""
    engine = build_engine(f"sqlite:///{tmp_path / 'profiles.db'}")
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(bind=engine, autoflush=False, autocommit=False)
    yield factory
    engine.dispose()


@pytest.fixture
def db(session_factory) -> Iterator[Session]:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def make_user(session_factory) -> Callable[..., int]:
    counter = {"n": 0}

    def _make(name: str = None, avatar: str = None) -> int:
        counter["n"] += 1
        n = counter["n"]
        session = session_factory()
        try:
            user = User(
                name=name or f"Dev {n}",
                email=f"dev{n}@example.com",
                avatar=avatar or f"https://avatars.example.com/{n}.png",
                password_hash="x",
            )
            session.add(user)
            session.commit()
            return user.id
        finally:
            session.close()

    return _make


@pytest.fixture
def client(session_factory) -> Iterator[TestClient]:
    from backend.main import app

    def override_get_db() -> Iterator[Session]:
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.pop(get_db, None)


@pytest.fixture
def auth() -> Callable[[int], dict]:
    def _headers(user_id: int) -> dict:
        return {"Authorization": f"Bearer {create_access_token(str(user_id))}"}

    return _headers
