import pytest

from api import create_app


@pytest.fixture
def app():
    app = create_app("testing")
    yield app
    app.extensions["storage"].dispose()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def storage(app):
    return app.extensions["storage"]


@pytest.fixture
def register_and_login(client):
    """Register a user, log in and return the access token."""
    def _login(username="alice", password="pw1"):
        res = client.post("/api/user/register", json={"username": username, "password": password})
        assert res.status_code == 200, res.get_json()
        res = client.post("/api/user/login", json={"username": username, "password": password})
        assert res.status_code == 200, res.get_json()
        return res.get_json()["accessToken"]

    return _login
