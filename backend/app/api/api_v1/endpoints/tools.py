import logging
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import PlainTextResponse

from app.api.deps import require_roles
from app.models.user import User, UserRole
from app.schemas.tools import FormatRequest, FormatResponse, GeneratedAccountList
from app.services import generators

logger = logging.getLogger(__name__)

router = APIRouter()

TOOL_USERS = (UserRole.junior, UserRole.teamlead, UserRole.admin)


@router.get("/accounts", response_model=GeneratedAccountList)
def generate_accounts(
    count: int = Query(10),
    custom_names: Optional[str] = None,
    current_user: User = Depends(require_roles(*TOOL_USERS))
):
    """Username/password/email/UK phone batch; count is clamped to 1..1000"""
    names = generators.parse_custom_names(custom_names)
    accounts = generators.generate_accounts(count, names)
    logger.info(f"{current_user.username} generated {len(accounts)} accounts")
    return GeneratedAccountList(total=len(accounts), items=accounts)


@router.get("/accounts.tsv", response_class=PlainTextResponse)
def export_accounts(
    count: int = Query(10),
    custom_names: Optional[str] = None,
    current_user: User = Depends(require_roles(*TOOL_USERS))
):
    names = generators.parse_custom_names(custom_names)
    accounts = generators.generate_accounts(count, names)
    return PlainTextResponse(generators.accounts_to_tsv(accounts))


@router.get("/generate")
def quick_generate(
    kind: str,
    current_user: User = Depends(require_roles(*TOOL_USERS))
):
    generator = generators.QUICK_GENERATORS.get(kind)
    if generator is None:
        raise HTTPException(
            status_code=400,
            detail=f"Unknown generator: {kind}. Use one of {', '.join(generators.QUICK_GENERATORS)}",
        )
    return {"kind": kind, "value": generator()}


@router.post("/format", response_model=FormatResponse)
def format_text(
    payload: FormatRequest,
    current_user: User = Depends(require_roles(*TOOL_USERS))
):
    try:
        result = generators.format_text(payload.text, payload.mode)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return FormatResponse(result=result)
