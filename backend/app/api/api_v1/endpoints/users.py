import logging
import uuid
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from app.api.deps import get_db, get_current_active_user, require_roles
from app.core.security import get_password_hash, verify_password
from app.crud.crud_user import user_crud
from app.models.user import User, UserRole, UserStatus
from app.schemas.user import UserCreate, UserUpdate, PasswordChange, User as UserSchema

logger = logging.getLogger(__name__)

router = APIRouter()

# roles that manage accounts
USER_ADMINS = (UserRole.admin, UserRole.hr)

@router.get("", response_model=List[UserSchema])
def get_users(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    role: Optional[UserRole] = None,
    user_status: Optional[UserStatus] = Query(None, alias="status"),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(*USER_ADMINS, UserRole.manager, UserRole.teamlead))
):
    """User list; team leads only see their own juniors"""
    if current_user.role == UserRole.teamlead:
        return user_crud.get_team(db, current_user.id)
    return user_crud.get_multi(db, skip=skip, limit=limit, role=role, status=user_status)

@router.post("", response_model=UserSchema)
def create_user(
    user_create: UserCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(*USER_ADMINS))
):
    if user_crud.get_by_username(db, username=user_create.username):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Username is already taken"
        )
    if user_crud.get_by_email(db, email=user_create.email):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email is already taken"
        )
    if user_create.role == UserRole.admin and current_user.role != UserRole.admin:
        raise HTTPException(status_code=403, detail="Only admins can create admins")

    user = user_crud.create(db, obj_in=user_create)
    logger.info(f"User {user.username} ({user.role.value}) created by {current_user.username}")
    return user

@router.post("/change-password")
def change_password(
    payload: PasswordChange,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user)
):
    if not verify_password(payload.current_password, current_user.hashed_password):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Current password is incorrect"
        )
    if len(payload.new_password) < 6:
        raise HTTPException(status_code=400, detail="Password must be at least 6 characters")

    current_user.hashed_password = get_password_hash(payload.new_password)
    db.commit()
    return {"message": "Password changed"}

@router.get("/{user_id}", response_model=UserSchema)
def get_user(
    user_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user)
):
    # self or account admins
    if current_user.id != user_id and current_user.role not in USER_ADMINS:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not enough permissions"
        )

    user = user_crud.get(db, user_id)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found"
        )
    return user

@router.patch("/{user_id}", response_model=UserSchema)
def update_user(
    user_id: uuid.UUID,
    user_update: UserUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user)
):
    is_admin = current_user.role in USER_ADMINS
    if current_user.id != user_id and not is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not enough permissions"
        )

    user = user_crud.get(db, user_id)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found"
        )

    if user_update.username and user_update.username != user.username:
        if user_crud.get_by_username(db, username=user_update.username):
            raise HTTPException(status_code=400, detail="Username is already taken")
    if user_update.email and user_update.email != user.email:
        if user_crud.get_by_email(db, email=user_update.email):
            raise HTTPException(status_code=400, detail="Email is already taken")

    # role, status and team changes are reserved for account admins
    if not is_admin:
        for field in ("role", "status", "team_lead_id"):
            if field in user_update.model_fields_set:
                raise HTTPException(status_code=403, detail=f"Only admin or HR can change {field}")

    user = user_crud.update(db, db_obj=user, obj_in=user_update)
    logger.info(f"User {user.username} updated by {current_user.username}")
    return user
