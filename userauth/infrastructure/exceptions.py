"""Infrastructure exceptions for external operations.

Extend UserAuthException so presentation can map them to HTTP responses
consistently.
"""

from userauth.domain.exceptions import UserAuthException


class MailDeliveryException(UserAuthException):
    """Outbound email could not be handed to the mail server."""

    def __init__(self, reason: str) -> None:
        super().__init__(
            "Email delivery failed; please try again later",
            "MAIL_DELIVERY_ERROR",
            {"reason": reason},
        )
