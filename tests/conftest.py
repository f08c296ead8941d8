import pytest

from money_manager import create_app


@pytest.fixture()
def app(tmp_path):
    """
    Fresh app backed by a throwaway sqlite file for every test.
    """
    app = create_app({
        "TESTING": True,
        "DB_PATH": str(tmp_path / "test.db"),
        "JWT_SECRET_KEY": "test-secret-key-that-is-long-enough-for-hs256",
    })
    yield app


@pytest.fixture()
def client(app):
    return app.test_client()


def register_and_login(client, name, email, password="secret123"):
    r = client.post("/auth/register", json={"name": name, "email": email, "password": password})
    assert r.status_code == 201, r.get_json()
    r = client.post("/auth/login", json={"email": email, "password": password})
    assert r.status_code == 200, r.get_json()
    body = r.get_json()
    return {"Authorization": f"Bearer {body['token']}"}


@pytest.fixture()
def alice(client):
    return register_and_login(client, "Alice", "alice@example.com")


@pytest.fixture()
def bob(client):
    return register_and_login(client, "Bob", "bob@example.com")


@pytest.fixture()
def make_tx(client):
    """POST a transaction and return its JSON body"""
    def _make(headers, title="Salary", amount=100, tx_type="INCOME", **extra):
        body = {"title": title, "amount": amount, "type": tx_type, **extra}
        r = client.post("/transactions", json=body, headers=headers)
        assert r.status_code == 201, r.get_json()
        return r.get_json()["data"]
    return _make
