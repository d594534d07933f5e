import pytest
from fastapi.testclient import TestClient

from authflow.core.config import AuthConfig
from authflow.database import Base, create_engine_from_config, create_session_factory
from authflow.main import create_app
from authflow.services.email import EmailDeliveryError
from authflow.services.user_store import UserStore


class FakeMailer:
    def __init__(self) -> None:
        self.sent: list[dict] = []
        self.fail = False

    async def send(self, email: str, subject: str, message: str) -> None:
        if self.fail:
            raise EmailDeliveryError('SMTP server unavailable')
        self.sent.append({'email': email, 'subject': subject, 'message': message})


@pytest.fixture
def config() -> AuthConfig:
    return AuthConfig(database_url='sqlite://', jwt_secret_key='test-secret', bcrypt_rounds=4)


@pytest.fixture
def mailer() -> FakeMailer:
    return FakeMailer()


@pytest.fixture
def app(config, mailer):
    return create_app(config, mailer=mailer)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def db_session(app, client):
    session = app.state.session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def user_db(config):
    engine = create_engine_from_config(config)
    Base.metadata.create_all(bind=engine)
    db = create_session_factory(engine)()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def store(user_db, config) -> UserStore:
    return UserStore(user_db, config)


@pytest.fixture
def signup(client):
    def _signup(email: str = 'ada@authflow.dev', password: str = 'correct-horse', name: str = 'Ada'):
        response = client.post(
            '/api/v1/users/signup',
            json={'name': name, 'email': email, 'password': password, 'passwordConfirm': password},
        )
        assert response.status_code == 201, response.text
        return response.json()

    return _signup
