"""Contact form router."""

import logging

from fastapi import APIRouter

from fazlaka.errors import UpstreamError
from fazlaka.schemas.common import MessageResponse
from fazlaka.schemas.contact import ContactRequest
from fazlaka.services.email_service import EmailService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/contact", tags=["contact"])


@router.post("", response_model=MessageResponse)
def send_contact_message(data: ContactRequest) -> dict:
    """Relay a visitor's message to the site inbox."""
    if not EmailService.send_contact_message(data.name, data.email, data.message):
        raise UpstreamError("Failed to deliver contact message")

    logger.info(f"Contact message relayed from {data.email}")
    return {"message": "Message sent successfully"}
