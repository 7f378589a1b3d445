import json

import pytest
import requests

from session.local_session import LocalSession
from session.remote import SupabaseAdapter


class FakeResponse:

    def __init__(self, status_code=200, body=None, headers=None):
        self.status_code = status_code
        self._body = body
        self.headers = headers or {}

    @property
    def text(self):
        return "" if self._body is None else json.dumps(self._body)

    def json(self):
        if self._body is None:
            raise ValueError("No JSON body")
        return self._body

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")


class FakeHTTP:
    """Stands in for requests.Session. Responses are queued, or built by a handler."""

    def __init__(self, handler=None):
        self.handler = handler
        self.responses = []
        self.calls = []

    def queue(self, *responses):
        self.responses.extend(responses)

    def request(self, method, url, params=None, json=None, headers=None, timeout=None):
        call = {"method": method, "url": url, "params": params, "json": json,
                "headers": headers, "timeout": timeout}
        self.calls.append(call)
        if self.handler is not None:
            return self.handler(call)
        if self.responses:
            resp = self.responses.pop(0)
            if isinstance(resp, Exception):
                raise resp
            return resp
        return FakeResponse(201)

    def get(self, url, timeout=None):
        return self.request("GET", url, timeout=timeout)


class FakeClock:

    def __init__(self, start=1000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class FakeAdapter:
    """Records sync calls; methods listed in fail_on raise until their budget is used up."""

    def __init__(self, ready=True):
        self.ready = ready
        self.calls = []
        self.fail_on = {}

    def is_ready(self):
        return self.ready

    def _record(self, name, *args):
        self.calls.append((name,) + args)
        remaining = self.fail_on.get(name, 0)
        if remaining:
            self.fail_on[name] = remaining - 1
            raise RuntimeError(f"{name} failed")

    def insert_session(self, session):
        self._record("insert_session", session["id"])

    def update_session(self, session_id, session):
        self._record("update_session", session_id)

    def insert_configuration(self, config):
        self._record("insert_configuration", config["id"])

    def insert_spin(self, spin):
        self._record("insert_spin", spin["id"])

    def update_spin(self, spin_id, acknowledged_at, acknowledge_method):
        self._record("update_spin", spin_id, acknowledge_method)

    def names(self):
        return [c[0] for c in self.calls]


@pytest.fixture
def db_path(tmp_path):
    return str(tmp_path / "wheel.db")


@pytest.fixture
def local_session(db_path):
    return LocalSession(db_path)


@pytest.fixture
def fake_http():
    return FakeHTTP()


@pytest.fixture
def adapter(fake_http):
    return SupabaseAdapter("https://example.supabase.co", "anon-key", http=fake_http,
                           user_agent="pytest")


@pytest.fixture
def fake_adapter():
    return FakeAdapter()


@pytest.fixture
def clock():
    return FakeClock()
