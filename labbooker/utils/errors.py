from fastapi import HTTPException, status


class BookingError(Exception):
    """A business-rule failure carrying a stable reason tag and a user-facing message."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, reason: str, message: str):
        super().__init__(message)
        self.reason = reason
        self.message = message

    def __repr__(self) -> str:
        return f"{type(self).__name__}(reason={self.reason!r}, message={self.message!r})"


class ValidationError(BookingError):
    """Malformed request input: duration bounds, start time in the past."""


class PolicyViolation(BookingError):
    """Valid input rejected by a booking rule: cooldown, buffer, offline resources."""


class NotFoundError(BookingError):
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(BookingError):
    """Raised when the storage guard rejects a write made against stale availability."""

    status_code = status.HTTP_409_CONFLICT

    def __init__(self, reason: str = "slot_taken", message: str = "Slot no longer available, please retry"):
        super().__init__(reason, message)


def to_http_exception(error: BookingError) -> HTTPException:
    return HTTPException(
        status_code=error.status_code,
        detail={"reason": error.reason, "message": error.message},
    )
