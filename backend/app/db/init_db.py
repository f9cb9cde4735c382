import logging

from app.core.config import settings
from app.core.security import get_password_hash
from app.db.database import SessionLocal, engine, Base
from app.models import User
from app.models.user import UserRole, UserStatus

logger = logging.getLogger(__name__)

# one account per role for a fresh install
DEFAULT_USERS = [
    {"username": "admin", "email": "admin@backoffice.io", "first_name": "Admin", "role": UserRole.admin},
    {"username": "cfo", "email": "cfo@backoffice.io", "first_name": "CFO", "role": UserRole.cfo},
    {"username": "hr", "email": "hr@backoffice.io", "first_name": "HR", "role": UserRole.hr},
    {"username": "manager", "email": "manager@backoffice.io", "first_name": "Manager", "role": UserRole.manager},
    {"username": "teamlead", "email": "teamlead@backoffice.io", "first_name": "Team", "last_name": "Lead", "role": UserRole.teamlead},
    {"username": "tester", "email": "tester@backoffice.io", "first_name": "Tester", "role": UserRole.tester},
]
DEFAULT_PASSWORD = "admin123"


def init_db() -> None:
    """Create tables and seed default users"""
    # no-op for existing tables
    Base.metadata.create_all(bind=engine)

    if not settings.SEED_DEFAULT_USERS:
        return

    db = SessionLocal()
    try:
        created = 0
        for user_data in DEFAULT_USERS:
            existing_user = db.query(User).filter(User.username == user_data["username"]).first()
            if not existing_user:
                db.add(User(
                    **user_data,
                    hashed_password=get_password_hash(DEFAULT_PASSWORD),
                    status=UserStatus.active,
                ))
                created += 1
        db.commit()
        if created:
            logger.info(f"Seeded {created} default user(s)")
    finally:
        db.close()
