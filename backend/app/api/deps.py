from app.db.database import get_db
from app.core.deps import (
    get_current_user,
    get_current_active_user,
    require_roles,
)

__all__ = [
    "get_db",
    "get_current_user",
    "get_current_active_user",
    "require_roles",
]
