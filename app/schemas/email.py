from __future__ import annotations

from pydantic import BaseModel, Field


class SendEmailRequest(BaseModel):
    """Payload accepted by POST /send-email."""

    to: str = Field(..., min_length=1, description="Recipient address")
    subject: str = Field(..., description="Message subject")
    text: str = Field(..., description="Plain text body")
