"""Common response schemas."""

from typing import Optional

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    error: str
    code: Optional[str] = None


class MessageResponse(BaseModel):
    message: str
