"""Account API schemas."""

from pydantic import BaseModel, Field, SecretStr

from account_purge.application.dtos.account_deletion import DeletionOutcome


class DeleteAccountRequest(BaseModel):
    """Request body for POST /account/delete.

    A blank password is accepted here and refused by the credential gate, so
    the caller sees the same INVALID_CREDENTIAL answer as for a wrong one.
    """

    password: SecretStr = Field(..., description="Current account password")


class DeleteAccountResponse(BaseModel):
    """Response after the account and its data are gone."""

    status: str = Field(default="deleted")
    redirect_to: str = Field(..., description="Where the client navigates next")
    message: str

    @classmethod
    def from_outcome(cls, outcome: DeletionOutcome) -> "DeleteAccountResponse":
        return cls(
            status=outcome.status.value,
            redirect_to=outcome.redirect_to,
            message=outcome.message,
        )
