from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import PlainTextResponse

from app.adapters.job_queue.base import AbstractJobQueue
from app.schemas.email import SendEmailRequest

router = APIRouter(tags=["Email"])


@router.post("/send-email", response_class=PlainTextResponse)
async def send_email(payload: SendEmailRequest, request: Request) -> str:
    """Queue an email for background delivery.

    Args:
        payload: Recipient, subject and body of the email.

    Returns:
        str: Confirmation that the job was queued.

    Raises:
        JobQueueAppError: 503 when the queue cannot accept more jobs.
    """
    job_queue: AbstractJobQueue = request.app.state.email_queue
    job_queue.enqueue(payload.to, payload.subject, payload.text)
    return "Email job added to queue!"
