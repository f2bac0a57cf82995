from __future__ import annotations

from fastapi import APIRouter, Request

router = APIRouter(tags=["Health"])


@router.get("/health")
def health_check(request: Request) -> dict:
    """Health check endpoint.

    Used by load balancers and monitoring systems to determine service health.
    Also reports how many clients the limiter is tracking and how many email
    jobs are waiting.

    Returns:
        dict: ``status`` plus limiter and queue counters.
    """
    limiter = request.app.state.rate_limiter
    email_queue = request.app.state.email_queue
    return {
        "status": "ok",
        "rate_limit_tracked_clients": len(limiter),
        "email_jobs_pending": email_queue.pending,
    }
