"""Pytest configuration and fixtures."""

import pytest
from crumb.cookie import Cookie
from crumb.jar import CookieJar


@pytest.fixture
def jar():
    """Create an empty cookie jar."""
    with CookieJar() as jar:
        yield jar


@pytest.fixture
def make_cookie():
    """Factory for cookies with sensible defaults."""

    def _make(name="session", value="abc123", domain="example.com", path="/", max_age=-1):
        return Cookie(name, value, domain, path, max_age)

    return _make


@pytest.fixture
def events(jar):
    """Record every change notification emitted by the jar fixture."""
    recorded = []

    @jar.on_changed
    def _record(source, author, old, new):
        recorded.append((author, old, new))

    return recorded
