import asyncio

import pytest
from fastapi.testclient import TestClient
from mongomock_motor import AsyncMongoMockClient

import database
import notifier
from notifier import EmailMessage, EmailPort


class FakeEmailAdapter(EmailPort):
    """Email adapter that records messages in memory for test assertions."""

    def __init__(self):
        self.sent_emails: list[dict] = []
        self.should_succeed = True

    def send(self, message: EmailMessage, code: str) -> None:
        if not self.should_succeed:
            raise RuntimeError("Email delivery failed")
        self.sent_emails.append({"to": message.to, "subject": message.subject, "body": message.body, "code": code})

    def last_code(self) -> str:
        return self.sent_emails[-1]["code"]


@pytest.fixture()
def db():
    mock_db = AsyncMongoMockClient()["cafe_orders_test"]
    database.use_database(mock_db)
    yield mock_db
    database.use_database(None)


@pytest.fixture()
def fake_email():
    adapter = FakeEmailAdapter()
    notifier.set_notifier(adapter)
    yield adapter
    notifier.set_notifier(None)


@pytest.fixture()
def client(db, fake_email):
    from main import app

    return TestClient(app)


@pytest.fixture()
def run():
    """Run a store coroutine from a synchronous test."""
    return asyncio.run


ESPRESSO = {"productId": "1", "name": "Espresso Simple", "quantity": 1, "price": 2.50}
LATTE = {"productId": "2", "name": "Latte Vainilla", "quantity": 2, "price": 4.50}


def order_payload(**overrides):
    payload = {
        "employeeName": "Ana",
        "employeeEmail": "ana@x.com",
        "items": [dict(ESPRESSO), dict(LATTE)],
        "total": 11.50,
    }
    payload.update(overrides)
    return payload
