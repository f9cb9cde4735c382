import pytest

from app.models.bank import BankBalanceHistory
from app.models.notification import Notification, NotificationType
from app.models.user import UserRole


def test_bank_tree_with_usd_totals(client, make_user, auth_headers, account, make_card):
    manager = make_user(UserRole.manager)
    make_card()

    response = client.get("/api/banks", headers=auth_headers(manager))

    assert response.status_code == 200
    body = response.json()
    [bank] = body["banks"]
    [acc] = bank["accounts"]
    assert acc["cards_available"] is True
    assert acc["balance_usd"] == pytest.approx(603.25)
    assert len(acc["cards"]) == 1
    assert body["statistics"]["total_accounts"] == 1
    assert body["statistics"]["total_cards"] == 1
    assert body["statistics"]["low_balance_accounts"] == 0


def test_junior_cannot_see_banks(client, make_user, auth_headers):
    junior = make_user(UserRole.junior)
    assert client.get("/api/banks", headers=auth_headers(junior)).status_code == 403


def test_create_bank_and_account(client, make_user, auth_headers):
    cfo = make_user(UserRole.cfo)
    bank = client.post("/api/banks", headers=auth_headers(cfo), json={"name": "Revolut", "country": "UK"})
    assert bank.status_code == 200

    account = client.post(f"/api/banks/{bank.json()['id']}/accounts", headers=auth_headers(cfo), json={
        "holder_name": "Jane Doe",
        "balance": 120,
        "currency": "EUR",
    })
    assert account.status_code == 200
    assert account.json()["bank_id"] == bank.json()["id"]


def test_balance_update_writes_history(client, db, make_user, auth_headers, account, make_card):
    manager = make_user(UserRole.manager)
    make_card()
    make_card()

    response = client.patch(f"/api/bank-accounts/{account.id}/balance", headers=auth_headers(manager), json={
        "balance": 5,
        "comment": "card spend",
    })

    assert response.status_code == 200
    body = response.json()
    assert body["affected_cards"] == 2
    assert body["cards_status"] == {"available": 0, "hidden": 2}

    entry = db.query(BankBalanceHistory).one()
    assert float(entry.old_balance) == 500
    assert float(entry.new_balance) == 5
    assert float(entry.change_amount) == -495
    assert entry.change_reason == "card spend"


def test_default_change_reason(client, db, make_user, auth_headers, account):
    cfo = make_user(UserRole.cfo)
    client.patch(f"/api/bank-accounts/{account.id}/balance", headers=auth_headers(cfo), json={"balance": 600})
    assert db.query(BankBalanceHistory).one().change_reason == "Updated by cfo"


def test_negative_balance(client, make_user, auth_headers, account):
    manager = make_user(UserRole.manager)
    response = client.patch(f"/api/bank-accounts/{account.id}/balance", headers=auth_headers(manager), json={"balance": -1})
    assert response.status_code == 400


def test_balance_must_be_a_number(client, make_user, auth_headers, account):
    manager = make_user(UserRole.manager)
    response = client.patch(f"/api/bank-accounts/{account.id}/balance", headers=auth_headers(manager), json={"balance": "100"})
    assert response.status_code == 400


def test_history_newest_first(client, make_user, auth_headers, account):
    hr = make_user(UserRole.hr)
    headers = auth_headers(hr)
    for value in (100, 200, 300):
        client.patch(f"/api/bank-accounts/{account.id}/balance", headers=headers, json={"balance": value})

    history = client.get(f"/api/bank-accounts/{account.id}/balance", headers=headers).json()["history"]

    assert [h["new_balance"] for h in history] == [300, 200, 100]
    assert history[0]["changed_by_user"]["role"] == "hr"


def test_tester_cannot_change_balance(client, make_user, auth_headers, account):
    tester = make_user(UserRole.tester)
    response = client.patch(f"/api/bank-accounts/{account.id}/balance", headers=auth_headers(tester), json={"balance": 1})
    assert response.status_code == 403


def test_assign_bank_to_teamlead(client, db, make_user, auth_headers, account, make_card):
    manager = make_user(UserRole.manager)
    lead = make_user(UserRole.teamlead)
    make_card()

    response = client.post(f"/api/banks/{account.bank_id}/teamleads", headers=auth_headers(manager), json={
        "teamlead_id": str(lead.id),
    })
    assert response.status_code == 200

    notification = db.query(Notification).one()
    assert notification.user_id == lead.id
    assert notification.type == NotificationType.bank_assignment

    again = client.post(f"/api/banks/{account.bank_id}/teamleads", headers=auth_headers(manager), json={
        "teamlead_id": str(lead.id),
    })
    assert again.status_code == 400

    body = client.get("/api/teamlead/assigned-banks", headers=auth_headers(lead)).json()
    [bank] = body["banks"]
    assert bank["name"] == "Monzo"
    assert body["stats"]["total_accounts"] == 1
    assert body["stats"]["active_cards"] == 1
    assert body["stats"]["total_balance"] == pytest.approx(603.25)


def test_bank_goes_to_teamleads_only(client, make_user, auth_headers, account):
    cfo = make_user(UserRole.cfo)
    junior = make_user(UserRole.junior)
    response = client.post(f"/api/banks/{account.bank_id}/teamleads", headers=auth_headers(cfo), json={
        "teamlead_id": str(junior.id),
    })
    assert response.status_code == 400


def test_teamlead_without_banks(client, make_user, auth_headers):
    lead = make_user(UserRole.teamlead)
    body = client.get("/api/teamlead/assigned-banks", headers=auth_headers(lead)).json()
    assert body["banks"] == []
    assert body["message"] == "No banks assigned"
