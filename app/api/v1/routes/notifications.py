import structlog
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from api.dependencies.rate_limits import get_limiter
from infrastructure.services import NotificationServiceDep, get_settings
from modules.notifications.models import NotificationPreference, PreferenceUpdate

logger = structlog.get_logger()

router = APIRouter(prefix="/notifications", tags=["Notifications"])
limiter = get_limiter()


def flush_rate_limit() -> str:
    return get_settings().server.FLUSH_RATE_LIMIT


@router.post("/flush")
@limiter.limit(flush_rate_limit)
def flush_notifications(
    request: Request,  # pylint: disable=unused-argument
    notification_service: NotificationServiceDep,
):
    """
    Deliver every pending notification as one digest per user.

    Called by the in-process scheduler and by external cron triggers. Users
    whose delivery fails keep their rows pending for the next run.

    Returns:
        dict: ``message``, ``sent`` (notifications delivered) and ``users``
        (users attempted). 500 with ``error`` when the queue cannot be read.
    """
    try:
        report = notification_service.flush()
    except Exception as e:  # pylint: disable=broad-except
        logger.error("notification_flush_failed", error=str(e), exc_info=True)
        return JSONResponse(status_code=500, content={"error": "排程通知發送失敗"})

    if report.already_running:
        return {"message": "通知發送進行中", "sent": 0, "users": 0}
    # Groups skipped for a missing identity still count as pending
    if not report.outcomes:
        return {"message": "無待發送通知", "sent": 0, "users": 0}
    return {
        "message": f"已發送 {report.sent} 則通知",
        "sent": report.sent,
        "users": report.users,
    }


@router.get("/preferences/{user_id}", response_model=NotificationPreference)
def get_preferences(user_id: str, notification_service: NotificationServiceDep):
    """Return the user's notification preferences (defaults when none stored)."""
    return notification_service.get_preferences(user_id)


@router.put("/preferences/{user_id}", response_model=NotificationPreference)
@limiter.limit("30/minute")
def update_preferences(
    request: Request,  # pylint: disable=unused-argument
    user_id: str,
    update: PreferenceUpdate,
    notification_service: NotificationServiceDep,
):
    """
    Partially update the user's notification preferences.

    Omitted fields are unchanged; ``null`` clears a quiet-hour bound. Hours
    outside 0..23 and unknown fields are rejected with 422.
    """
    return notification_service.update_preferences(user_id, **update.changes())
