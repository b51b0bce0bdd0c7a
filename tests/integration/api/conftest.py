"""Fixtures for HTTP tests against the full application.

Every test gets its own SQLite file. The application's session
dependency is overridden to use it, and bcrypt runs with minimal rounds.
The lifespan is not entered, so the schema is created here.
"""

import pytest
from fastapi.testclient import TestClient

from lemon.presentation.api.app import create_app
from lemon.presentation.api.dependencies import get_db_session, get_password_service
from lemon_auth import PasswordHashingService
from lemon_config.settings import Settings
from tests.shared.fixtures import (
    create_schema,
    create_test_engine,
    create_test_session_maker,
    run_sync,
    sqlite_url,
)


@pytest.fixture
def api_settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        jwt_secret_key="api-test-jwt-secret",
        remember_me_key="api-test-remember-me-key",
        database_url=sqlite_url(tmp_path),
        application_url="https://lemon.example.com",
        recaptcha_site_key="site-key",
        smtp_host="",
        api_cookie_secure=False,
        json_prefix_enabled=False,
        api_debug=True,
    )


@pytest.fixture
def make_app(api_settings):
    """Build applications that share the test database.

    Keyword arguments matching ``Settings`` fields override the test
    settings; ``auth_failure_handler`` and ``error_normalizer`` are
    passed to ``create_app``.
    """
    engine = create_test_engine(api_settings.database_url)
    run_sync(create_schema(engine))
    session_maker = create_test_session_maker(engine)
    password_service = PasswordHashingService(rounds=4)

    async def override_db_session():
        async with session_maker() as session:
            yield session

    def factory(auth_failure_handler=None, error_normalizer=None, **settings_overrides):
        settings = api_settings.model_copy(update=settings_overrides)
        app = create_app(
            settings,
            auth_failure_handler=auth_failure_handler,
            error_normalizer=error_normalizer,
        )
        app.dependency_overrides[get_db_session] = override_db_session
        app.dependency_overrides[get_password_service] = lambda: password_service
        return app

    yield factory

    run_sync(engine.dispose())


@pytest.fixture
def app(make_app):
    return make_app()


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)
