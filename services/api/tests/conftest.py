"""
Shared fixtures. The app is imported with the in-memory backend so no test
touches disk or the network.
"""
import os
import sys

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

os.environ["STORAGE_BACKEND"] = "memory"
os.environ["RESEND_API_KEY"] = ""
os.environ["RESIDENTIAL_EMAIL_FROM"] = ""

from adapters.memory import MemoryStore
from core.email_sender import EmailResult
from core.notifications import RequestNotifier
from settings import Settings


class FakeSender:
    """Records every email instead of sending it."""

    def __init__(self, result=None, error=None):
        self.result = result or EmailResult(ok=True, status=200, text="")
        self.error = error
        self.sent = []

    async def __call__(self, to, subject, body):
        self.sent.append({"to": to, "subject": subject, "body": body})
        if self.error:
            raise self.error
        return self.result


class FixedClock:
    def __init__(self, value="2026-01-05T15:30:00.000Z"):
        self.value = value

    def __call__(self):
        return self.value


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def email_settings():
    return Settings(
        _env_file=None,
        resend_api_key="re_test",
        residential_email_from="office@example.com",
        email_backend="resend",
    )


@pytest.fixture
def bare_settings():
    return Settings(_env_file=None, resend_api_key="", residential_email_from="")


@pytest.fixture
def client(store):
    """TestClient bound to a fresh in-memory store."""
    from fastapi.testclient import TestClient
    import main

    previous = main.storage_adapter
    main.storage_adapter = store
    main.app.dependency_overrides[main.get_notifier] = lambda: RequestNotifier(
        sender=FakeSender(), settings=Settings(_env_file=None)
    )
    try:
        yield TestClient(main.app)
    finally:
        main.app.dependency_overrides.clear()
        main.storage_adapter = previous
