"""
Download access checks for paywalled resources
"""
import logging
from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from edupal.database import utcnow
from edupal.exceptions import PaymentRequiredError
from edupal.models import Profile, Resource, Subscription, UserStats

logger = logging.getLogger(__name__)


def has_active_subscription(db: Session, user_id: UUID, now: Optional[datetime] = None) -> bool:
    now = now or utcnow()
    subscription = db.query(Subscription).filter(
        Subscription.user_id == user_id,
        Subscription.status == "active"
    ).order_by(Subscription.expires_at.desc()).first()

    if not subscription:
        return False
    return subscription.expires_at is None or subscription.expires_at > now


def consume_download_credit(db: Session, user_id: UUID) -> bool:
    """Spend one credit; the conditional update keeps the balance from going negative"""
    try:
        result = db.execute(
            update(UserStats)
            .where(UserStats.user_id == user_id, UserStats.download_credits > 0)
            .values(download_credits=UserStats.download_credits - 1)
        )
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to consume download credit for {user_id}: {str(e)}")
        return False

    return result.rowcount == 1


def authorize_download(
    db: Session,
    user_id: UUID,
    subscriptions_enabled: bool,
    now: Optional[datetime] = None
) -> str:
    """
    Decide how a user may download a resource

    Returns:
        The grant used: open_access, admin, subscription or credit

    Raises:
        PaymentRequiredError: no grant applies
    """
    if not subscriptions_enabled:
        return "open_access"

    profile = db.query(Profile).filter(Profile.id == user_id).first()
    if profile and profile.is_admin:
        return "admin"

    if has_active_subscription(db, user_id, now):
        return "subscription"

    if consume_download_credit(db, user_id):
        logger.info(f"Download credit consumed by {user_id}")
        return "credit"

    raise PaymentRequiredError("Insufficient download credits or no active subscription")


def increment_download_count(db: Session, resource_id: UUID) -> None:
    """Best-effort counter bump"""
    try:
        db.execute(
            update(Resource)
            .where(Resource.id == resource_id)
            .values(download_count=Resource.download_count + 1)
        )
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to increment download count for {resource_id}: {str(e)}")
