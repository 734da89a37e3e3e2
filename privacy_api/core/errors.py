"""API error type rendered as ``{messageId, messageDescription, extraInfo}``."""

from typing import Any

from fastapi import status

from privacy_api.models.privacy import MessageId


class PrivacyAPIError(Exception):
    """Base exception for errors surfaced to API callers.

    Carries the HTTP status and the message identifier used in the error
    body. ``message_id`` is usually a ``MessageId`` but upstream services
    may supply identifiers of their own, which are passed through verbatim.
    """

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        message_id: MessageId | str = MessageId.INTERNAL_ERROR,
        extra_info: Any = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.message_id = message_id
        self.extra_info = extra_info

    def to_body(self) -> dict[str, Any]:
        """Render the error body."""
        message_id = self.message_id
        if isinstance(message_id, MessageId):
            message_id = message_id.value
        return {
            "messageId": message_id,
            "messageDescription": self.message,
            "extraInfo": self.extra_info,
        }


class RequestValidationFailed(PrivacyAPIError):
    """Raised when a request body fails local validation."""

    def __init__(self, message: str, message_id: MessageId = MessageId.INVALID_REQUEST) -> None:
        super().__init__(
            message,
            status_code=status.HTTP_400_BAD_REQUEST,
            message_id=message_id,
        )


class ConsentNotFoundError(PrivacyAPIError):
    """Raised when a consent record lookup by id finds nothing."""

    def __init__(self, consent_id: str) -> None:
        super().__init__(
            f"Consent {consent_id} not found",
            status_code=status.HTTP_404_NOT_FOUND,
            message_id=MessageId.CONSENT_NOT_FOUND,
        )
