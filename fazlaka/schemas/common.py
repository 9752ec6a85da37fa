"""Common response schemas used across the API."""

from pydantic import BaseModel, Field


class MessageResponse(BaseModel):
    """Schema for simple message response."""

    message: str


class ErrorResponse(BaseModel):
    """Envelope returned by every failing endpoint."""

    error: str = Field(..., description="Human-readable error message")


# OpenAPI documentation for the error envelope shared by every router
ERROR_RESPONSES: dict[int | str, dict] = {
    code: {"model": ErrorResponse} for code in (400, 401, 403, 404, 429, 500)
}
