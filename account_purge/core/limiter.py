"""Rate limiter instance for SlowAPI.

Shared so both main (app.state.limiter) and route modules can use the same
instance without circular imports.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

limiter = Limiter(key_func=get_remote_address)

# Password-bearing endpoints share the login budget.
ACCOUNT_DELETE_LIMIT = "10/minute"

limit_account_delete = limiter.limit(ACCOUNT_DELETE_LIMIT)
