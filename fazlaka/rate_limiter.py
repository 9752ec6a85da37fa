"""Rate limiter configuration for auth endpoints."""

from slowapi import Limiter
from slowapi.util import get_remote_address

# Rate limiter instance - shared across modules
limiter = Limiter(key_func=get_remote_address)

REGISTER_LIMIT = "5/minute"
LOGIN_LIMIT = "10/minute"
SEND_OTP_LIMIT = "5/minute"
MAGIC_LINK_LIMIT = "5/minute"
RESEND_VERIFICATION_LIMIT = "3/minute"
FORGOT_PASSWORD_LIMIT = "3/hour"
