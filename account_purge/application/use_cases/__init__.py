"""Use cases."""

from account_purge.application.use_cases.delete_account import DeleteAccountUseCase

__all__ = ["DeleteAccountUseCase"]
