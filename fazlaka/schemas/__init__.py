"""Pydantic schemas for API validation."""

from fazlaka.schemas.common import ERROR_RESPONSES, ErrorResponse, MessageResponse

__all__ = ["ERROR_RESPONSES", "ErrorResponse", "MessageResponse"]
