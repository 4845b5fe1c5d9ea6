from typing import Optional

from pydantic import BaseModel


class ApiResponse(BaseModel):
    """Common envelope: {success, message?, data: {...}}."""

    success: bool = True
    message: Optional[str] = None


class MessageResponse(ApiResponse):
    """Envelope for writes that return no record (deletes)."""
