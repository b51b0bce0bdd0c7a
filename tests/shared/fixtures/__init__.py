from tests.shared.fixtures.database import (
    TEST_PASSWORD,
    TEST_USER_EMAIL,
    TEST_USER_EMAIL_2,
    TEST_USER_ID,
    TEST_USER_ID_2,
    create_schema,
    create_test_engine,
    create_test_session_maker,
    drop_schema,
    run_sync,
    sqlite_url,
)

__all__ = [
    "TEST_PASSWORD",
    "TEST_USER_EMAIL",
    "TEST_USER_EMAIL_2",
    "TEST_USER_ID",
    "TEST_USER_ID_2",
    "create_schema",
    "create_test_engine",
    "create_test_session_maker",
    "drop_schema",
    "run_sync",
    "sqlite_url",
]
