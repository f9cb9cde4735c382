import re

import pytest

from app.models.user import UserRole
from app.services import generators


@pytest.fixture
def junior_headers(make_user, auth_headers):
    return auth_headers(make_user(UserRole.junior))


def test_generate_accounts(client, junior_headers):
    response = client.get("/api/tools/accounts", headers=junior_headers, params={
        "count": 3,
        "custom_names": "Alice\n\nBob",
    })

    assert response.status_code == 200
    body = response.json()
    assert body["total"] == 3
    prefixes = [re.sub(r"\d+$", "", a["username"]) for a in body["items"]]
    assert prefixes == ["alice", "bob", "alice"]
    for account in body["items"]:
        assert re.fullmatch(r"07\d{9}", account["phone_number"])
        assert account["email"].startswith(account["username"] + "@")


def test_count_is_clamped(client, junior_headers):
    body = client.get("/api/tools/accounts?count=5000", headers=junior_headers).json()
    assert body["total"] == generators.MAX_ACCOUNTS


def test_tsv_export(client, junior_headers):
    response = client.get("/api/tools/accounts.tsv?count=2", headers=junior_headers)

    assert response.headers["content-type"].startswith("text/plain")
    lines = response.text.split("\n")
    assert lines[0] == "Username\tPassword\tEmail\tPhone Number\tGeneration Date"
    assert len(lines) == 3
    assert all(len(line.split("\t")) == 5 for line in lines)


@pytest.mark.parametrize("kind", ["person", "address", "phone", "email"])
def test_quick_generators(client, junior_headers, kind):
    body = client.get(f"/api/tools/generate?kind={kind}", headers=junior_headers).json()
    assert body["kind"] == kind
    assert body["value"]


def test_unknown_generator(client, junior_headers):
    response = client.get("/api/tools/generate?kind=iban", headers=junior_headers)
    assert response.status_code == 400


def test_format(client, junior_headers):
    response = client.post("/api/tools/format", headers=junior_headers, json={
        "text": "a  b\nc d",
        "mode": "table",
    })
    assert response.json()["result"] == "a\tb\nc\td"


def test_unknown_format_mode(client, junior_headers):
    response = client.post("/api/tools/format", headers=junior_headers, json={"text": "x", "mode": "upper"})
    assert response.status_code == 400


@pytest.mark.parametrize("role", [UserRole.tester, UserRole.cfo, UserRole.manager])
def test_other_roles_are_refused(client, make_user, auth_headers, role):
    response = client.get("/api/tools/accounts", headers=auth_headers(make_user(role)))
    assert response.status_code == 403
