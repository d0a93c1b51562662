"""Account API: irreversible self-deletion of the signed-in account.

Uses only injected dependencies (get_current_session,
get_delete_account_use_case). Errors raised by the use case are PurgeException
subclasses and are rendered by the central exception handlers.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from account_purge.api.v1.dependencies import (
    get_current_session,
    get_delete_account_use_case,
)
from account_purge.application.dtos.account_deletion import AuthSession
from account_purge.application.use_cases import DeleteAccountUseCase
from account_purge.core.limiter import limit_account_delete
from account_purge.schemas.account import DeleteAccountRequest, DeleteAccountResponse

router = APIRouter()


@router.post("/delete", response_model=DeleteAccountResponse)
@limit_account_delete
async def delete_account(
    request: Request,
    body: DeleteAccountRequest,
    session: Annotated[AuthSession | None, Depends(get_current_session)],
    use_case: Annotated[DeleteAccountUseCase, Depends(get_delete_account_use_case)],
) -> DeleteAccountResponse:
    """Re-prove the password, purge every document of the account, then delete the identity."""
    outcome = await use_case.execute(session, body.password.get_secret_value())
    return DeleteAccountResponse.from_outcome(outcome)
