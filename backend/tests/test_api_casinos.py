import pytest

from app.models.card import CardCasinoAssignment
from app.models.casino import Casino
from app.models.test_work import TestWork as TestWorkModel
from app.models.user import UserRole


def test_create_with_defaults(client, make_user, auth_headers):
    tester = make_user(UserRole.tester)
    response = client.post("/api/casinos", headers=auth_headers(tester), json={
        "name": "Golden Reels",
        "url": "https://goldenreels.example.com",
    })
    assert response.status_code == 200
    casino = response.json()["casino"]
    assert casino["currency"] == "USD"
    assert casino["status"] == "new"
    assert casino["allowed_bins"] == []
    assert casino["auto_approve_limit"] == 100
    assert casino["withdrawal_time_value"] == 0
    assert casino["withdrawal_time_unit"] == "instant"


def test_invalid_url(client, make_user, auth_headers):
    tester = make_user(UserRole.tester)
    response = client.post("/api/casinos", headers=auth_headers(tester), json={
        "name": "Golden Reels",
        "url": "goldenreels",
    })
    assert response.status_code == 400
    assert response.json()["error"].startswith("url:")


def test_bins_are_validated(client, make_user, auth_headers):
    tester = make_user(UserRole.tester)
    bad = client.post("/api/casinos", headers=auth_headers(tester), json={
        "name": "Golden Reels",
        "url": "https://goldenreels.example.com",
        "allowed_bins": ["12345"],
    })
    assert bad.status_code == 400

    good = client.post("/api/casinos", headers=auth_headers(tester), json={
        "name": "Golden Reels",
        "url": "https://goldenreels.example.com",
        "allowed_bins": ["123456", "123456", "654321"],
    })
    assert good.json()["casino"]["allowed_bins"] == ["123456", "654321"]


def test_junior_cannot_create(client, make_user, auth_headers):
    junior = make_user(UserRole.junior)
    response = client.post("/api/casinos", headers=auth_headers(junior), json={
        "name": "Golden Reels",
        "url": "https://goldenreels.example.com",
    })
    assert response.status_code == 403


def test_list_and_filter(client, make_user, auth_headers, make_casino):
    junior = make_user(UserRole.junior)
    make_casino("A")
    make_casino("B", status="approved")

    everything = client.get("/api/casinos", headers=auth_headers(junior)).json()
    approved = client.get("/api/casinos?status=approved", headers=auth_headers(junior)).json()

    assert everything["total"] == 2
    assert [c["name"] for c in approved["items"]] == ["B"]


def test_update(client, make_user, auth_headers, make_casino):
    manager = make_user(UserRole.manager)
    casino = make_casino()
    response = client.patch(f"/api/casinos/{casino.id}", headers=auth_headers(manager), json={
        "status": "testing",
        "allowed_bins": ["411111"],
    })
    assert response.status_code == 200
    assert response.json()["casino"]["status"] == "testing"
    assert response.json()["casino"]["allowed_bins"] == ["411111"]


def test_delete_cleans_links(client, db, make_user, auth_headers, make_casino, make_card):
    admin = make_user(UserRole.admin)
    casino = make_casino()
    card = make_card(assigned_casino_id=None)
    card.casino_assignments.append(CardCasinoAssignment(casino_id=casino.id))
    db.commit()

    response = client.delete(f"/api/casinos/{casino.id}", headers=auth_headers(admin))

    assert response.status_code == 200
    assert db.query(Casino).count() == 0
    assert db.query(CardCasinoAssignment).count() == 0


def test_delete_with_works_is_refused(client, db, make_user, auth_headers, make_casino, make_card):
    admin = make_user(UserRole.admin)
    tester = make_user(UserRole.tester)
    casino = make_casino()
    card = make_card()
    db.add(TestWorkModel(casino_id=casino.id, card_id=card.id, tester_id=tester.id, deposit_amount=20))
    db.commit()

    response = client.delete(f"/api/casinos/{casino.id}", headers=auth_headers(admin))
    assert response.status_code == 400


def test_only_admin_deletes(client, make_user, auth_headers, make_casino):
    manager = make_user(UserRole.manager)
    casino = make_casino()
    assert client.delete(f"/api/casinos/{casino.id}", headers=auth_headers(manager)).status_code == 403


@pytest.mark.parametrize("field", ["name", "url", "status", "allowed_bins", "currency", "withdrawal_time_unit"])
def test_null_on_required_field_is_a_400(client, make_user, auth_headers, make_casino, field):
    manager = make_user(UserRole.manager)
    casino = make_casino()

    response = client.patch(f"/api/casinos/{casino.id}", headers=auth_headers(manager), json={field: None})

    assert response.status_code == 400
    assert response.json() == {"error": f"{field}: cannot be null"}


def test_nullable_fields_can_be_cleared(client, make_user, auth_headers, make_casino):
    manager = make_user(UserRole.manager)
    casino = make_casino(notes="call support first")

    response = client.patch(f"/api/casinos/{casino.id}", headers=auth_headers(manager), json={"notes": None})

    assert response.status_code == 200
    assert response.json()["casino"]["notes"] is None
