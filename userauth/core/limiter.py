"""Rate limiter instance for SlowAPI.

Shared so both main (app.state.limiter) and route modules (e.g. auth) can use
the same instance without circular imports. Central limit strings and decorators
keep rate limits DRY. create_app() switches it off when RATE_LIMIT_ENABLED is false.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

limiter = Limiter(key_func=get_remote_address)

# Single source of truth for rate limit strings and decorators.
LOGIN_LIMIT = "10/minute"
FORGOT_PASSWORD_LIMIT = "5/minute"
RESET_PASSWORD_LIMIT = "10/minute"
WRITE_ENDPOINT_LIMIT = "120/minute"

limit_auth = limiter.limit(LOGIN_LIMIT)
limit_forgot_password = limiter.limit(FORGOT_PASSWORD_LIMIT)
limit_reset_password = limiter.limit(RESET_PASSWORD_LIMIT)
limit_writes = limiter.limit(WRITE_ENDPOINT_LIMIT)
