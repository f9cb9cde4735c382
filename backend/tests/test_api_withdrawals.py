import pytest

from app.models.casino import CasinoStatus
from app.models.notification import Notification
from app.models.paypal import PayPalAccount, PayPalWithdrawal, PayPalWork
from app.models.task import Task
from app.models.user import UserRole
from app.models.work import Work, WorkStatus, WorkWithdrawal
from app.services.withdrawal_review import can_perform


@pytest.fixture
def team(make_user):
    lead = make_user(UserRole.teamlead)
    junior = make_user(UserRole.junior, team_lead=lead)
    return lead, junior


@pytest.fixture
def approved_casino(make_casino):
    return make_casino("Royal Ace", status=CasinoStatus.approved)


@pytest.fixture
def regular_withdrawal(db, team, approved_casino, make_card):
    _, junior = team
    card = make_card(assigned_to=junior.id)
    work = Work(junior_id=junior.id, casino_id=approved_casino.id, card_id=card.id, deposit_amount=50)
    db.add(work)
    db.flush()
    withdrawal = WorkWithdrawal(work_id=work.id, withdrawal_amount=120)
    db.add(withdrawal)
    db.commit()
    return withdrawal


@pytest.fixture
def paypal_withdrawal(db, team, approved_casino):
    _, junior = team
    account = PayPalAccount(user_id=junior.id, name="Main", email="junior.pp@gmail.com")
    db.add(account)
    db.flush()
    work = PayPalWork(user_id=junior.id, paypal_account_id=account.id, casino_id=approved_casino.id, deposit_amount=30)
    db.add(work)
    db.flush()
    withdrawal = PayPalWithdrawal(
        user_id=junior.id, paypal_work_id=work.id, paypal_account_id=account.id,
        casino_id=approved_casino.id, withdrawal_amount=90,
    )
    db.add(withdrawal)
    db.commit()
    return withdrawal


def _act(client, headers, withdrawal, action, source_type="regular", **extra):
    return client.post(
        f"/api/universal/withdrawals/{withdrawal.id}/action",
        headers=headers,
        json={"action": action, "source_type": source_type, **extra},
    )


@pytest.mark.parametrize("role,action,allowed", [
    (UserRole.teamlead, "approve", True),
    (UserRole.teamlead, "block", False),
    (UserRole.teamlead, "create_task", False),
    (UserRole.manager, "block", True),
    (UserRole.admin, "create_task", True),
    (UserRole.hr, "approve", False),
    (UserRole.hr, "block", True),
    (UserRole.cfo, "reject", False),
    (UserRole.cfo, "comment", True),
    (UserRole.junior, "comment", False),
    (UserRole.tester, "approve", False),
])
def test_permission_matrix(role, action, allowed):
    assert can_perform(role, action) is allowed


class TestListing:
    def test_teamlead_sees_team_only(self, client, make_user, auth_headers, team, regular_withdrawal, paypal_withdrawal):
        lead, _ = team
        other_lead = make_user(UserRole.teamlead)

        mine = client.get("/api/universal/withdrawals", headers=auth_headers(lead)).json()
        assert [w["id"] for w in mine["withdrawals"]] == [str(regular_withdrawal.id)]
        assert [w["id"] for w in mine["paypal_withdrawals"]] == [str(paypal_withdrawal.id)]
        assert mine["withdrawals"][0]["source_type"] == "regular"

        empty = client.get("/api/universal/withdrawals", headers=auth_headers(other_lead)).json()
        assert empty["withdrawals"] == []
        assert empty["message"] == "You have no juniors in your team"

    def test_manager_sees_all(self, client, make_user, auth_headers, regular_withdrawal):
        manager = make_user(UserRole.manager)
        body = client.get("/api/universal/withdrawals", headers=auth_headers(manager)).json()
        assert len(body["withdrawals"]) == 1

    def test_junior_is_refused(self, client, auth_headers, team):
        _, junior = team
        assert client.get("/api/universal/withdrawals", headers=auth_headers(junior)).status_code == 403


class TestRegularActions:
    def test_manager_approve_marks_received(self, client, db, make_user, auth_headers, team, regular_withdrawal):
        _, junior = team
        manager = make_user(UserRole.manager)

        response = _act(client, auth_headers(manager), regular_withdrawal, "approve", comment="paid out")

        assert response.status_code == 200
        body = response.json()
        assert body["update_result"]["status"] == "received"
        assert body["performed_by"]["role"] == "manager"
        db.refresh(regular_withdrawal)
        assert regular_withdrawal.checked_by == manager.id
        assert regular_withdrawal.manager_notes == "paid out"
        notification = db.query(Notification).one()
        assert notification.user_id == junior.id
        assert notification.message == "Your withdrawal of $120.00 was processed: approve (paid out)"

    @pytest.mark.parametrize("action,status", [("reject", "problem"), ("block", "block")])
    def test_manager_status_mapping(self, client, make_user, auth_headers, regular_withdrawal, action, status):
        manager = make_user(UserRole.manager)
        response = _act(client, auth_headers(manager), regular_withdrawal, action)
        assert response.json()["update_result"]["status"] == status

    def test_cfo_block_raises_alarm(self, client, db, make_user, auth_headers, regular_withdrawal):
        cfo = make_user(UserRole.cfo)

        response = _act(client, auth_headers(cfo), regular_withdrawal, "block")

        assert response.status_code == 200
        db.refresh(regular_withdrawal)
        assert regular_withdrawal.status.value == "new"
        assert regular_withdrawal.alarm_message == "CFO: blocked"

    def test_hr_comment(self, client, db, make_user, auth_headers, regular_withdrawal):
        hr = make_user(UserRole.hr)
        response = _act(client, auth_headers(hr), regular_withdrawal, "comment", comment="check documents")
        assert response.status_code == 200
        db.refresh(regular_withdrawal)
        assert regular_withdrawal.hr_comment == "check documents"

    def test_comment_is_required(self, client, make_user, auth_headers, regular_withdrawal):
        hr = make_user(UserRole.hr)
        assert _act(client, auth_headers(hr), regular_withdrawal, "comment").status_code == 400

    def test_teamlead_cannot_block(self, client, auth_headers, team, regular_withdrawal):
        lead, _ = team
        response = _act(client, auth_headers(lead), regular_withdrawal, "block")
        assert response.status_code == 403

    def test_create_task(self, client, db, make_user, auth_headers, regular_withdrawal):
        manager = make_user(UserRole.manager)
        hr = make_user(UserRole.hr)

        response = _act(
            client, auth_headers(hr), regular_withdrawal, "create_task",
            task_title="Verify payout", task_priority="high", task_assignee_id=str(manager.id),
        )

        assert response.status_code == 200
        assert response.json()["message"] == 'Task "Verify payout" created'
        task = db.query(Task).one()
        assert task.tags == ["withdrawal", "regular", "urgent"]
        assert task.meta["withdrawal_id"] == str(regular_withdrawal.id)
        assert task.meta["created_from"] == "withdrawal_action"
        assert task.assignee_id == manager.id

    def test_create_task_needs_title(self, client, make_user, auth_headers, regular_withdrawal):
        admin = make_user(UserRole.admin)
        assert _act(client, auth_headers(admin), regular_withdrawal, "create_task").status_code == 400

    def test_unknown_withdrawal(self, client, make_user, auth_headers, paypal_withdrawal):
        manager = make_user(UserRole.manager)
        # a PayPal id is not a regular withdrawal
        response = _act(client, auth_headers(manager), paypal_withdrawal, "approve", source_type="regular")
        assert response.status_code == 404

    def test_invalid_action(self, client, make_user, auth_headers, regular_withdrawal):
        manager = make_user(UserRole.manager)
        assert _act(client, auth_headers(manager), regular_withdrawal, "delete").status_code == 400


class TestPayPalActions:
    def test_manager_sets_manager_status(self, client, db, make_user, auth_headers, paypal_withdrawal):
        manager = make_user(UserRole.manager)

        _act(client, auth_headers(manager), paypal_withdrawal, "approve", source_type="paypal", comment="ok")

        db.refresh(paypal_withdrawal)
        assert paypal_withdrawal.manager_status == "approved"
        assert paypal_withdrawal.status == "pending"
        assert paypal_withdrawal.checked_by_manager == manager.id
        assert paypal_withdrawal.manager_comment == "ok"

    def test_teamlead_sets_teamlead_status(self, client, db, auth_headers, team, paypal_withdrawal):
        lead, _ = team
        _act(client, auth_headers(lead), paypal_withdrawal, "reject", source_type="paypal")
        db.refresh(paypal_withdrawal)
        assert paypal_withdrawal.teamlead_status == "rejected"

    def test_cfo_block_sets_status(self, client, db, make_user, auth_headers, paypal_withdrawal):
        cfo = make_user(UserRole.cfo)
        _act(client, auth_headers(cfo), paypal_withdrawal, "block", source_type="paypal", comment="chargeback")
        db.refresh(paypal_withdrawal)
        assert paypal_withdrawal.status == "blocked"
        assert paypal_withdrawal.checked_by_cfo == cfo.id
        assert paypal_withdrawal.cfo_comment == "chargeback"


class TestJuniorWorks:
    def test_create_work(self, client, auth_headers, team, approved_casino, make_card):
        _, junior = team
        card = make_card(assigned_to=junior.id)

        response = client.post("/api/works", headers=auth_headers(junior), json={
            "casino_id": str(approved_casino.id),
            "card_id": str(card.id),
            "deposit_amount": 40,
            "casino_login": "spinner",
        })

        assert response.status_code == 200
        assert response.json()["work"]["status"] == "active"

    def test_casino_must_be_approved(self, client, auth_headers, team, make_casino, make_card):
        _, junior = team
        card = make_card(assigned_to=junior.id)
        response = client.post("/api/works", headers=auth_headers(junior), json={
            "casino_id": str(make_casino().id),
            "card_id": str(card.id),
            "deposit_amount": 40,
        })
        assert response.status_code == 400

    def test_foreign_card(self, client, auth_headers, team, approved_casino, make_card):
        _, junior = team
        response = client.post("/api/works", headers=auth_headers(junior), json={
            "casino_id": str(approved_casino.id),
            "card_id": str(make_card().id),
            "deposit_amount": 40,
        })
        assert response.status_code == 403

    def test_low_balance(self, client, db, auth_headers, team, approved_casino, make_card, account):
        _, junior = team
        card = make_card(assigned_to=junior.id)
        account.balance = 3
        db.commit()
        response = client.post("/api/works", headers=auth_headers(junior), json={
            "casino_id": str(approved_casino.id),
            "card_id": str(card.id),
            "deposit_amount": 40,
        })
        assert response.status_code == 400

    def test_work_withdrawal(self, client, db, auth_headers, team, regular_withdrawal):
        _, junior = team
        work_id = regular_withdrawal.work_id

        response = client.post("/api/work-withdrawals", headers=auth_headers(junior), json={
            "work_id": str(work_id),
            "withdrawal_amount": 60,
        })
        assert response.status_code == 200
        assert response.json()["withdrawal"]["status"] == "new"

        listed = client.get("/api/work-withdrawals", headers=auth_headers(junior)).json()["withdrawals"]
        assert len(listed) == 2

    def test_withdrawal_on_closed_work(self, client, db, auth_headers, team, regular_withdrawal):
        _, junior = team
        work = db.query(Work).one()
        work.status = WorkStatus.completed
        db.commit()
        response = client.post("/api/work-withdrawals", headers=auth_headers(junior), json={
            "work_id": str(work.id),
            "withdrawal_amount": 60,
        })
        assert response.status_code == 400

    def test_withdrawal_on_foreign_work(self, client, make_user, auth_headers, regular_withdrawal):
        stranger = make_user(UserRole.junior)
        response = client.post("/api/work-withdrawals", headers=auth_headers(stranger), json={
            "work_id": str(regular_withdrawal.work_id),
            "withdrawal_amount": 60,
        })
        assert response.status_code == 404


class TestPayPal:
    def test_account_scoping(self, client, make_user, auth_headers, team, paypal_withdrawal):
        lead, junior = team
        stranger = make_user(UserRole.junior)
        manager = make_user(UserRole.manager)

        assert len(client.get("/api/paypal/accounts", headers=auth_headers(junior)).json()["accounts"]) == 1
        assert len(client.get("/api/paypal/accounts", headers=auth_headers(lead)).json()["accounts"]) == 1
        assert client.get("/api/paypal/accounts", headers=auth_headers(stranger)).json()["accounts"] == []
        assert len(client.get("/api/paypal/accounts", headers=auth_headers(manager)).json()["accounts"]) == 1

    def test_password_is_masked_for_others(self, client, make_user, auth_headers, team):
        _, junior = team
        manager = make_user(UserRole.manager)
        created = client.post("/api/paypal/accounts", headers=auth_headers(junior), json={
            "name": "Backup",
            "email": "backup.pp@gmail.com",
            "password": "hunter22",
        })
        assert created.status_code == 200
        assert created.json()["account"]["password"] == "hunter22"

        [account] = client.get("/api/paypal/accounts", headers=auth_headers(manager)).json()["accounts"]
        assert account["password"] == "********"

    def test_junior_cannot_create_for_others(self, client, make_user, auth_headers, team):
        _, junior = team
        other = make_user(UserRole.junior)
        response = client.post("/api/paypal/accounts", headers=auth_headers(junior), json={
            "name": "Backup",
            "email": "backup.pp@gmail.com",
            "user_id": str(other.id),
        })
        assert response.status_code == 403

    def test_withdrawal_limit(self, client, db, auth_headers, team, paypal_withdrawal):
        _, junior = team
        work_id = paypal_withdrawal.paypal_work_id

        too_much = client.post("/api/paypal/withdrawals", headers=auth_headers(junior), json={
            "paypal_work_id": str(work_id),
            "withdrawal_amount": 301,
        })
        assert too_much.status_code == 400

        ok = client.post("/api/paypal/withdrawals", headers=auth_headers(junior), json={
            "paypal_work_id": str(work_id),
            "withdrawal_amount": 300,
        })
        assert ok.status_code == 200
        assert ok.json()["withdrawal"]["status"] == "pending"

    def test_paypal_work(self, client, db, auth_headers, team, approved_casino):
        _, junior = team
        account = client.post("/api/paypal/accounts", headers=auth_headers(junior), json={
            "name": "Main",
            "email": "main.pp@gmail.com",
        }).json()["account"]

        response = client.post("/api/paypal/works", headers=auth_headers(junior), json={
            "paypal_account_id": account["id"],
            "casino_id": str(approved_casino.id),
            "deposit_amount": 20,
        })
        assert response.status_code == 200
        assert len(client.get("/api/paypal/works", headers=auth_headers(junior)).json()["works"]) == 1
