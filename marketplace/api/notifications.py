"""Notifications API: the caller's stored lifecycle alerts."""

from fastapi import APIRouter, Depends
from sqlalchemy import update
from sqlmodel import Session, select

from marketplace.api.deps import get_current_user_id
from marketplace.database import get_session
from marketplace.models.notification import Notification
from marketplace.schemas.notification import MarkReadRequest, NotificationRead

router = APIRouter(prefix="/api/notifications", tags=["notifications"])


@router.get("", response_model=list[NotificationRead])
def list_notifications(
    unread_only: bool = False,
    priority: str | None = None,
    limit: int = 50,
    user_id: str = Depends(get_current_user_id),
    session: Session = Depends(get_session),
):
    stmt = select(Notification).where(Notification.recipient_id == user_id)
    if unread_only:
        stmt = stmt.where(Notification.read == False)  # noqa: E712
    if priority is not None:
        stmt = stmt.where(Notification.priority == priority)
    stmt = stmt.order_by(Notification.created_at.desc(), Notification.id.desc()).limit(limit)
    return session.exec(stmt).all()


@router.post("/read")
def mark_as_read(
    body: MarkReadRequest,
    user_id: str = Depends(get_current_user_id),
    session: Session = Depends(get_session),
):
    result = session.exec(
        update(Notification)
        .where(Notification.id.in_(body.notification_ids))  # type: ignore[attr-defined]
        .where(Notification.recipient_id == user_id)
        .values(read=True)
    )
    session.commit()
    return {"status": "ok", "updated": result.rowcount}
