from sqlalchemy import Column, String, Enum, ForeignKey
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
import enum
from .base import BaseModel

class UserRole(str, enum.Enum):
    junior = "junior"
    teamlead = "teamlead"
    manager = "manager"
    tester = "tester"
    hr = "hr"
    cfo = "cfo"
    admin = "admin"

class UserStatus(str, enum.Enum):
    active = "active"
    inactive = "inactive"
    terminated = "terminated"

class User(BaseModel):
    __tablename__ = "users"

    username = Column(String(50), unique=True, index=True, nullable=False)
    email = Column(String(100), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    first_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=True)
    role = Column(Enum(UserRole), nullable=False)
    status = Column(Enum(UserStatus), nullable=False, default=UserStatus.active)
    telegram_username = Column(String(100), nullable=True)

    # juniors belong to a team lead
    team_lead_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=True)

    team_lead = relationship("User", remote_side="User.id", backref="juniors")
    cards = relationship("Card", back_populates="assignee", foreign_keys="Card.assigned_to")

    @property
    def is_active(self) -> bool:
        return self.status == UserStatus.active

    @property
    def full_name(self) -> str:
        name = f"{self.first_name or ''} {self.last_name or ''}".strip()
        return name or self.email
