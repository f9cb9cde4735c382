import logging
from datetime import datetime, timedelta
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.api.deps import get_db, get_current_user, get_current_active_user
from app.core.config import settings
from app.core.security import create_access_token
from app.crud.crud_user import user_crud
from app.models.user import User, UserRole
from app.schemas.user import LoginResponse, Token, UserLogin, User as UserSchema

logger = logging.getLogger(__name__)

router = APIRouter()


def _issue_token(user: User) -> dict:
    expires_in = settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60
    token = create_access_token(user.username, expires_delta=timedelta(seconds=expires_in))
    return {"access_token": token, "token_type": "bearer", "expires_in": expires_in}


@router.post("/login", response_model=LoginResponse)
def login(
    credentials: UserLogin,
    db: Session = Depends(get_db),
):
    """Username or email plus password; inactive accounts cannot log in"""
    user = user_crud.authenticate(db, username=credentials.username, password=credentials.password)
    if not user:
        logger.info(f"Failed login for {credentials.username}")
        raise HTTPException(status_code=401, detail="Invalid username or password")
    if not user.is_active:
        logger.info(f"Login refused for {user.username}: status {user.status.value}")
        raise HTTPException(status_code=403, detail="User not found or inactive")

    logger.info(f"{user.username} ({user.role.value}) logged in")
    return {**_issue_token(user), "user": user}


@router.get("/me", response_model=UserSchema)
def read_current_user(current_user: User = Depends(get_current_active_user)):
    return current_user


@router.post("/refresh", response_model=Token)
def refresh_token(current_user: User = Depends(get_current_active_user)):
    return _issue_token(current_user)


@router.get("/status")
def auth_status(current_user: User = Depends(get_current_user)):
    """Session diagnostics; answers for inactive users too"""
    return {
        "authenticated": True,
        "user_data": UserSchema.model_validate(current_user),
        "permissions": {
            "is_active": current_user.is_active,
            "can_access_teamlead": current_user.role == UserRole.teamlead,
            "has_team_lead": current_user.team_lead_id is not None,
        },
        "timestamp": datetime.utcnow().isoformat(),
    }
