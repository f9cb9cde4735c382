import os

# settings are read at import time
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SEED_DEFAULT_USERS"] = "false"
os.environ.setdefault("SECRET_KEY", "test-secret-key")

import pytest
from fastapi.testclient import TestClient

from app.core.security import create_access_token, get_password_hash
from app.crud import crud_card
from app.db.database import Base, SessionLocal, engine, get_db
from app.models.bank import Bank, BankAccount
from app.models.casino import Casino, CasinoStatus
from app.models.user import User, UserRole, UserStatus
from app.schemas.card import CardCreate
from main import app

PASSWORD = "secret123"
_password_hash = None


def _hashed_password():
    global _password_hash
    if _password_hash is None:
        _password_hash = get_password_hash(PASSWORD)
    return _password_hash


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make(role=UserRole.junior, username=None, team_lead=None, status=UserStatus.active, **kwargs):
        counter["n"] += 1
        username = username or f"{UserRole(role).value}{counter['n']}"
        user = User(
            username=username,
            email=f"{username}@backoffice.io",
            hashed_password=_hashed_password(),
            first_name=kwargs.pop("first_name", username.capitalize()),
            role=role,
            status=status,
            team_lead_id=team_lead.id if team_lead else None,
            **kwargs,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture
def auth_headers():
    def _headers(user):
        return {"Authorization": f"Bearer {create_access_token(user.username)}"}

    return _headers


@pytest.fixture
def account(db):
    bank = Bank(name="Monzo", country="UK", currency="GBP")
    db.add(bank)
    db.flush()
    account = BankAccount(bank_id=bank.id, holder_name="John Smith", balance=500, currency="GBP")
    db.add(account)
    db.commit()
    db.refresh(account)
    return account


@pytest.fixture
def make_card(db, account):
    counter = {"n": 0}

    def _make(pan=None, bank_account=None, **fields):
        counter["n"] += 1
        pan = pan or f"4111{counter['n']:012d}"
        card = crud_card.create_card(db, CardCreate(
            bank_account_id=(bank_account or account).id,
            card_number=pan,
            cvv="123",
            exp_month=12,
            exp_year=2099,
        ))
        for field, value in fields.items():
            setattr(card, field, value)
        db.commit()
        db.refresh(card)
        return card

    return _make


@pytest.fixture
def make_casino(db):
    def _make(name="Lucky Spins", status=CasinoStatus.new, allowed_bins=None, **kwargs):
        casino = Casino(
            name=name,
            url="https://luckyspins.example.com",
            status=status,
            allowed_bins=allowed_bins or [],
            **kwargs,
        )
        db.add(casino)
        db.commit()
        db.refresh(casino)
        return casino

    return _make
