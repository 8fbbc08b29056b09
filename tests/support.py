"""Shared test wiring: in-memory SQLite, fast bcrypt, and a TestClient with overrides."""

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from notekeeper.core.config import Settings, get_settings
from notekeeper.core.database import get_db
from notekeeper.core.security import create_access_token, hash_password
from notekeeper.main import app
from notekeeper.models import Base, Role, User

TEST_JWT_SECRET = "test-secret-0123456789abcdef0123456789abcdef"
FRONTEND_URL = "http://frontend.test"


def make_settings(**overrides: object) -> Settings:
    """Settings for tests; nothing is read from the environment or .env."""
    values: dict[str, object] = {
        "APP_ENV": "dev",
        "DATABASE_URL": "sqlite://",
        "FRONTEND_URL": FRONTEND_URL,
        "BACKEND_URL": "http://backend.test",
        "JWT_SECRET": TEST_JWT_SECRET,
        "BCRYPT_ROUNDS": 4,
        "GOOGLE_CLIENT_ID": "google-client-id",
        "GOOGLE_CLIENT_SECRET": "google-client-secret",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


def make_session_factory() -> sessionmaker[Session]:
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


class AppHarness:
    """Owns one database and one TestClient; call close() in tearDown."""

    def __init__(self, **settings_overrides: object) -> None:
        self.settings = make_settings(**settings_overrides)
        self.SessionLocal = make_session_factory()

        def override_get_db():
            db = self.SessionLocal()
            try:
                yield db
            finally:
                db.close()

        app.dependency_overrides[get_db] = override_get_db
        app.dependency_overrides[get_settings] = lambda: self.settings
        self.client = TestClient(app)

    def close(self) -> None:
        self.client.close()
        app.dependency_overrides.clear()

    def session(self) -> Session:
        return self.SessionLocal()

    def add_user(
        self,
        username: str,
        email: str,
        password: str = "secret1",
        role: Role = Role.USER,
        google_id: str | None = None,
    ) -> User:
        db = self.session()
        try:
            user = User(
                username=username,
                email=email,
                password_hash=hash_password(password, rounds=self.settings.BCRYPT_ROUNDS),
                role=role.value,
                google_id=google_id,
            )
            db.add(user)
            db.commit()
            db.refresh(user)
            db.expunge(user)
            return user
        finally:
            db.close()

    def get_user(self, email: str) -> User | None:
        db = self.session()
        try:
            user = db.query(User).filter(User.email == email).first()
            if user is not None:
                db.expunge(user)
            return user
        finally:
            db.close()

    def count_users(self) -> int:
        db = self.session()
        try:
            return db.query(User).count()
        finally:
            db.close()

    def auth_headers(self, user: User) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(user.id, self.settings)}"}
