"""Shared utilities: datetime, generators."""

from userauth.shared.utils.datetime import utc_now
from userauth.shared.utils.generators import generate_cuid, generate_jti

__all__ = [
    "generate_cuid",
    "generate_jti",
    "utc_now",
]
