"""Small helpers for driving the API in tests."""

import re

from fastapi import FastAPI
from fastapi.testclient import TestClient

from lemon.infrastructure.mail import MailData
from tests.shared.fixtures import TEST_PASSWORD

API = "/api/v1"

CODE_PATTERN = re.compile(r"code=([\w-]+)")


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def sent_mails(app: FastAPI, to: str | None = None) -> list[MailData]:
    mails = app.state.mail_sender.sent
    return [m for m in mails if to is None or m.to == to]


def last_code(app: FastAPI, to: str) -> str:
    """Code from the newest mail sent to ``to``."""
    mail = sent_mails(app, to)[-1]
    match = CODE_PATTERN.search(mail.body)
    assert match is not None, mail.body
    return match.group(1)


def signup(
    client: TestClient,
    email: str,
    password: str = TEST_PASSWORD,
    name: str = "",
) -> dict:
    response = client.post(
        f"{API}/auth/signup",
        json={"email": email, "password": password, "name": name},
    )
    assert response.status_code == 201, response.text
    return response.json()


def login(
    client: TestClient,
    email: str,
    password: str = TEST_PASSWORD,
    remember_me: bool = False,
):
    return client.post(
        f"{API}/auth/login",
        json={"email": email, "password": password, "rememberMe": remember_me},
    )


def verify(client: TestClient, app: FastAPI, user: dict) -> dict:
    response = client.post(
        f"{API}/users/{user['id']}/verification",
        params={"code": last_code(app, user["email"])},
    )
    assert response.status_code == 200, response.text
    return response.json()


def signup_verified(
    client: TestClient,
    app: FastAPI,
    email: str,
    password: str = TEST_PASSWORD,
    name: str = "",
) -> tuple[dict, str]:
    """Sign up and verify a user; returns the user and an access token."""
    data = signup(client, email, password, name)
    verify(client, app, data["user"])
    response = login(client, email, password)
    assert response.status_code == 200, response.text
    body = response.json()
    return body["user"], body["access_token"]
