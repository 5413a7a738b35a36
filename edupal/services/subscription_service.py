"""
Subscription lifecycle: pending -> active after payment
"""
import logging
import time
from datetime import datetime, timedelta
from typing import Any, Dict, Optional
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from edupal.database import utcnow
from edupal.exceptions import NotFoundError, PersistenceError, ValidationError
from edupal.models import Subscription, SubscriptionPlan
from edupal.services.paystack_service import PaystackClient

logger = logging.getLogger(__name__)


class SubscriptionService:

    def __init__(self, db: Session, paystack: PaystackClient, default_days: int = 120):
        self.db = db
        self.paystack = paystack
        self.default_days = default_days

    def start_checkout(
        self,
        user_id: UUID,
        email: str,
        plan_id: UUID,
        callback_url: str
    ) -> Dict[str, Any]:
        """
        Create a pending subscription and a Paystack checkout for it

        Returns:
            authorization_url, reference and subscription_id
        """
        plan = self.db.query(SubscriptionPlan).filter(SubscriptionPlan.id == plan_id).first()
        if not plan:
            raise NotFoundError("Plan not found")

        if plan.price_ngn == 0:
            raise ValidationError("Cannot pay for a free plan")

        subscription = Subscription(
            user_id=user_id,
            plan_id=plan.id,
            status="pending",
            amount=plan.price_ngn
        )
        try:
            self.db.add(subscription)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Subscription creation failed: {str(e)}")
            raise PersistenceError("Failed to create subscription record")

        data = self.paystack.initialize_transaction(
            email=email,
            amount_kobo=plan.price_ngn * 100,
            reference=f"edupal_sub_{subscription.id}_{int(time.time() * 1000)}",
            callback_url=callback_url,
            metadata={
                "subscription_id": str(subscription.id),
                "user_id": str(user_id),
                "plan_id": str(plan.id),
                "plan_name": plan.name,
                "custom_fields": [
                    {"display_name": "Plan", "variable_name": "plan", "value": plan.name},
                ],
            },
        )

        subscription.payment_reference = data["reference"]
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            # Verification reads the ids from metadata, not from this column
            self.db.rollback()
            logger.error(f"Failed to store payment reference on {subscription.id}: {str(e)}")

        logger.info(f"Checkout started: subscription={subscription.id}, reference={data['reference']}")

        return {
            "authorization_url": data["authorization_url"],
            "reference": data["reference"],
            "subscription_id": subscription.id,
        }

    def activate(
        self,
        metadata: Optional[Dict[str, Any]],
        reference: str,
        channel: Optional[str],
        now: Optional[datetime] = None
    ) -> Subscription:
        """Mark the subscription named in the transaction metadata as active"""
        metadata = metadata or {}
        subscription_id = _parse_uuid(metadata.get("subscription_id"))
        plan_id = _parse_uuid(metadata.get("plan_id"))

        if not subscription_id:
            raise ValidationError("Missing metadata")

        plan = None
        if plan_id:
            plan = self.db.query(SubscriptionPlan).filter(SubscriptionPlan.id == plan_id).first()
        duration_days = (plan.duration_days if plan else None) or self.default_days

        subscription = self.db.query(Subscription).filter(Subscription.id == subscription_id).first()
        if not subscription:
            raise NotFoundError("Subscription not found")

        now = now or utcnow()
        subscription.status = "active"
        subscription.payment_reference = reference
        subscription.payment_channel = channel or "card"
        subscription.starts_at = now
        subscription.expires_at = now + timedelta(days=duration_days)
        subscription.updated_at = now

        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to activate subscription {subscription_id}: {str(e)}")
            raise PersistenceError("Activation failed")

        logger.info(f"Subscription {subscription_id} activated until {subscription.expires_at.isoformat()}")
        return subscription


def _parse_uuid(value: Any) -> Optional[UUID]:
    if not value:
        return None
    try:
        return UUID(str(value))
    except ValueError:
        return None
