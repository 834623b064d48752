import os

# Must be set before any rolodex module reads its settings.
os.environ["TESTING"] = "1"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

import rolodex.database as _db_mod  # noqa: E402
from rolodex.database import Base  # noqa: E402
from rolodex.database import get_db  # noqa: E402
from rolodex.database import make_engine  # noqa: E402
from rolodex.database import make_sessionmaker  # noqa: E402
from rolodex.events import EventBus  # noqa: E402
from rolodex.services.contact_service import ContactService  # noqa: E402
from rolodex.services.contact_service import get_contact_service  # noqa: E402
from rolodex.websocket.manager import connection_manager  # noqa: E402
from tests.helpers.contact_helpers import RecordingAnnouncer  # noqa: E402
from tests.helpers.contact_helpers import RecordingMailer  # noqa: E402

# Create a test database - using in-memory SQLite for tests
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

test_engine = make_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,  # Use StaticPool for in-memory database
)

TestingSessionLocal = make_sessionmaker(test_engine)

# Route the app's engine and session factory to the test database
_db_mod.default_engine = test_engine
_db_mod.default_session_factory = TestingSessionLocal

# Import app after the engine overrides are in place
from rolodex.main import app  # noqa: E402


@pytest.fixture(scope="session", autouse=True)
def cleanup_global_resources():
    """Detach the global connection manager from the global bus after the session."""
    yield

    connection_manager.close()


@pytest.fixture
def db_session():
    """
    Creates a fresh database for each test, then tears it down after the test is done.
    """
    Base.metadata.create_all(bind=test_engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
def private_bus():
    """A bus nobody else listens on."""
    return EventBus()


@pytest.fixture
def announcer(private_bus):
    return RecordingAnnouncer(private_bus)


@pytest.fixture
def mailer():
    return RecordingMailer()


@pytest.fixture
def contact_service(announcer, mailer):
    return ContactService(announcer, mailer)


@pytest.fixture
def app_announcer():
    """Announcer wired to the global bus so connected sockets see the signal."""
    return RecordingAnnouncer()


@pytest.fixture
def client(db_session, app_announcer, mailer):
    """
    Create a FastAPI TestClient with the test database dependency and a
    service whose outbound mail is recorded instead of sent.

    Used as a context manager so HTTP calls and websocket sessions share one
    event loop.
    """

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    service = ContactService(app_announcer, mailer)

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_contact_service] = lambda: service

    with TestClient(app, backend="asyncio") as c:
        yield c

    app.dependency_overrides = {}


@pytest.fixture
def session_factory(db_session):
    """Factory bound to the test database, for code that opens its own sessions."""
    return TestingSessionLocal
