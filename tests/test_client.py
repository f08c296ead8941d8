from datetime import timedelta

import pytest
from flask_jwt_extended import create_access_token

from money_manager.client import ApiClientError, Credentials, MoneyManagerClient


class FlaskResponse:
    """Just enough of requests.Response for the client"""

    def __init__(self, resp):
        self.status_code = resp.status_code
        self._resp = resp
        self.text = resp.get_data(as_text=True)

    def json(self):
        data = self._resp.get_json(silent=True)
        if data is None:
            raise ValueError("no json")
        return data


class FlaskSession:
    """Routes the client's requests into the Flask test client"""

    def __init__(self, test_client, base_url):
        self.test_client = test_client
        self.base_url = base_url
        self.calls = []

    def request(self, method, url, headers=None, json=None, timeout=None):
        path = url[len(self.base_url):]
        self.calls.append((method, path))
        resp = self.test_client.open(path, method=method, headers=headers or {}, json=json)
        return FlaskResponse(resp)


@pytest.fixture()
def session(client):
    return FlaskSession(client, "http://testserver")


@pytest.fixture()
def api(session):
    return MoneyManagerClient("http://testserver/", session=session)


def test_full_flow(api):
    user = api.register("Ann", "ann@example.com", "secret1")
    assert user["email"] == "ann@example.com"

    login = api.login("ann@example.com", "secret1")
    token = login["token"]
    assert login["name"] == "Ann"
    assert api.verify_token(token)["id"] == user["id"]

    salary = api.add_transaction(token, "Salary", 200, "INCOME")
    api.add_transaction(token, "Rent", 50, "EXPENSES", date="2024-03-01")

    listing = api.list_transactions(token)
    assert [t["title"] for t in listing["items"]] == ["Rent", "Salary"]
    assert listing["summary"]["balance"] == 150

    updated = api.update_transaction(token, salary["id"], "Bonus", 250, "INCOME")
    assert updated["title"] == "Bonus"
    assert api.get_transaction(token, salary["id"])["amount"] == 250

    assert api.export_csv(token).startswith("Title,Amount,Type,Date")

    api.delete_transaction(token, salary["id"])
    with pytest.raises(ApiClientError) as e:
        api.get_transaction(token, salary["id"])
    assert e.value.status_code == 404
    assert e.value.message == "Transaction not found"

    assert api.delete_all_transactions(token) == 1
    assert api.delete_all_transactions(token) == 0


def test_errors_carry_status_and_message(api):
    api.register("Ann", "ann@example.com", "secret1")
    with pytest.raises(ApiClientError) as e:
        api.register("Ann", "ann@example.com", "secret1")
    assert e.value.status_code == 409

    with pytest.raises(ApiClientError) as e:
        api.login("ann@example.com", "bad-password")
    assert e.value.status_code == 401
    assert e.value.message == "Invalid credentials"


def test_call_with_reissue_logs_in_when_no_token(api, session):
    api.register("Ann", "ann@example.com", "secret1")
    creds = Credentials("ann@example.com", "secret1")

    listing = api.call_with_reissue(creds, api.list_transactions)
    assert listing["items"] == []
    assert creds.token


def test_call_with_reissue_retries_once_after_401(app, api, session):
    user = api.register("Ann", "ann@example.com", "secret1")
    with app.app_context():
        stale = create_access_token(identity=user["id"], expires_delta=timedelta(seconds=-1))
    creds = Credentials("ann@example.com", "secret1", token=stale)

    tx = api.call_with_reissue(creds, api.add_transaction, "Salary", 10, "INCOME")
    assert tx["title"] == "Salary"
    assert creds.token != stale
    assert [c for c in session.calls if c[1] == "/auth/login"] == [("POST", "/auth/login")]


def test_call_with_reissue_does_not_retry_other_errors(api, session):
    api.register("Ann", "ann@example.com", "secret1")
    creds = Credentials("ann@example.com", "secret1")
    creds.token = api.login("ann@example.com", "secret1")["token"]
    logins_before = len([c for c in session.calls if c[1] == "/auth/login"])

    with pytest.raises(ApiClientError) as e:
        api.call_with_reissue(creds, api.get_transaction, "missing-id")
    assert e.value.status_code == 404
    assert len([c for c in session.calls if c[1] == "/auth/login"]) == logins_before
