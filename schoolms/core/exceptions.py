from typing import Any, Dict, Optional, Union

from fastapi import status


class ServiceError(Exception):
    """Base exception for service layer errors."""

    def __init__(self, message: str, status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    @property
    def detail(self) -> Union[str, Dict[str, Any]]:
        """Payload for HTTPException.detail."""
        return self.message


class NotFoundError(ServiceError):
    def __init__(self, message: str) -> None:
        super().__init__(message, status.HTTP_404_NOT_FOUND)


class ValidationError(ServiceError):
    """Pre-flight validation failure. Aborts the whole batch it was raised for."""

    def __init__(self, message: str, field: Optional[str] = None, index: Optional[int] = None) -> None:
        super().__init__(message, status.HTTP_400_BAD_REQUEST)
        self.field = field
        self.index = index


class ConflictError(ServiceError):
    """Room or teacher double-booking detected before a schedule write."""

    def __init__(
        self,
        kind: str,
        conflicting_subject: str,
        room: Optional[str],
        slot: str,
        day: str,
        index: Optional[int] = None,
    ) -> None:
        if kind == "teacher":
            message = (
                f"Teacher is already scheduled for \"{conflicting_subject}\" "
                f"in slot {slot} on {day}"
            )
        else:
            message = (
                f"Room {room} slot {slot} on {day} is already used by \"{conflicting_subject}\""
            )
        if index is not None:
            message = f"Time Slot {index + 1}: {message}"
        super().__init__(message, status.HTTP_409_CONFLICT)
        self.kind = kind
        self.conflicting_subject = conflicting_subject
        self.room = room
        self.slot = slot
        self.day = day
        self.index = index

    @property
    def detail(self) -> Dict[str, Any]:
        return {
            "message": self.message,
            "kind": self.kind,
            "conflicting_subject": self.conflicting_subject,
            "room": self.room,
            "slot": self.slot,
            "day": self.day,
            "index": self.index,
        }


class RemoteError(Exception):
    """Base for failures reported by the backend to the portal client."""

    def __init__(self, message: str, status_code: int, payload: Optional[Any] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload


class DuplicateRemoteError(RemoteError):
    """Backend refused a create because the record already exists. Recoverable once."""


class TransientRemoteError(RemoteError):
    """Any other non-2xx response. Terminal for the current action."""
