import json
import pytest
from unittest.mock import MagicMock

from passport_web import create_app
from passport_web.config import TestConfig


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


def make_response(status=200, json_data=None, content_type="application/json"):
    resp = MagicMock(name="response")
    resp.status_code = status
    if isinstance(json_data, Exception):
        resp.json.side_effect = json_data
    else:
        resp.json.return_value = {} if json_data is None else json_data
    resp.headers = {"Content-Type": content_type}
    resp.url = "http://backend.test/api"
    return resp


@pytest.fixture
def app():
    return create_app(TestConfig)


@pytest.fixture
def client(app):
    """Flask test client"""
    with app.test_client() as client:
        yield client


@pytest.fixture
def request_ctx(app):
    with app.test_request_context():
        yield


@pytest.fixture
def fake_response():
    return make_response


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def mock_api(mocker):
    """Patch outgoing HTTP made by the API client."""
    post = mocker.patch("passport_web.services.api_client.requests.post")
    get = mocker.patch("passport_web.services.api_client.requests.get")
    post.return_value = make_response(200, {"success": True})
    get.return_value = make_response(200, {"success": True, "data": []})
    return {"post": post, "get": get}


@pytest.fixture
def signed_in(client):
    """Seed the cookie session with a doctor's token and user record."""
    def _sign_in(role="doctor", token="tok-123", **extra):
        user = {"_id": "u1", "name": "Dr. Test", "email": "doc@example.com", "role": role}
        user.update(extra)
        with client.session_transaction() as sess:
            sess["token"] = token
            sess["user"] = json.dumps(user)
        return user
    return _sign_in


def posted_paths(post_mock):
    return [c.args[0].replace(TestConfig.PASSPORT_API_BASE, "") for c in post_mock.call_args_list]
