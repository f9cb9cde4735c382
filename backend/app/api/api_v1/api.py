from fastapi import APIRouter

from app.api.api_v1.endpoints import (
    auth,
    users,
    banks,
    cards,
    casinos,
    test_works,
    works,
    work_withdrawals,
    paypal,
    universal_withdrawals,
    tasks,
    notifications,
    tools,
)

api_router = APIRouter()

api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(users.router, prefix="/users", tags=["users"])
# /banks and /bank-accounts share one router
api_router.include_router(banks.router, tags=["banks"])
api_router.include_router(cards.router, prefix="/cards", tags=["cards"])
api_router.include_router(casinos.router, prefix="/casinos", tags=["casinos"])
api_router.include_router(test_works.router, prefix="/test-works", tags=["test-works"])
api_router.include_router(works.router, prefix="/works", tags=["works"])
api_router.include_router(work_withdrawals.router, prefix="/work-withdrawals", tags=["work-withdrawals"])
api_router.include_router(paypal.router, prefix="/paypal", tags=["paypal"])
api_router.include_router(universal_withdrawals.router, prefix="/universal", tags=["universal"])
api_router.include_router(tasks.router, prefix="/tasks", tags=["tasks"])
api_router.include_router(notifications.router, prefix="/notifications", tags=["notifications"])
api_router.include_router(tools.router, prefix="/tools", tags=["tools"])
