import os
import tempfile

import pytest

from doubles import InMemorySessionStore, RecordingMailer, TEST_SECRET

# Set test environment variables
os.environ["TESTING"] = "true"
os.environ["MYLO_LOG_JSON"] = "false"


@pytest.fixture
def session_store():
    return InMemorySessionStore()


@pytest.fixture
def mailer():
    return RecordingMailer()


@pytest.fixture
def app(session_store, mailer):
    """Create and configure a new app instance for each test."""
    db_fd, db_path = tempfile.mkstemp()
    from mylo_api.factory import create_app
    from mylo_api.database import db

    app = create_app(
        {
            "TESTING": True,
            "SQLALCHEMY_DATABASE_URI": f"sqlite:///{db_path}",
            "SQLALCHEMY_BINDS": {},
            "JWT_USER_SECRET_KEY": TEST_SECRET,
            "MYLO_LOG_JSON": "false",
        },
        session_store=session_store,
        mailer=mailer,
    )
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()
    os.close(db_fd)
    os.unlink(db_path)


@pytest.fixture
def client(app):
    """A test client for the app."""
    return app.test_client()


@pytest.fixture
def auth_headers(app, session_store):
    """Authorization header for a live session."""
    session_id = session_store.create_session({"email": "admin@mylocal.ing"})
    token = app.extensions["auth_service"].issue_token(session_id)
    return {"Authorization": f"Bearer {token}"}
