"""
Subscription checkout, verification and Paystack webhook endpoints
"""
from fastapi import APIRouter, Depends, Request
from typing import Optional
import json
import logging

from edupal.config import settings
from edupal.dependencies import get_paystack, get_subscription_service
from edupal.exceptions import AuthenticationError, ValidationError
from edupal.schemas.subscription import (
    SubscribeRequest,
    SubscribeResponse,
    VerifyResponse,
    WebhookAck,
)
from edupal.services.paystack_service import PaystackClient
from edupal.services.subscription_service import SubscriptionService

router = APIRouter(prefix="/api/subscribe", tags=["subscriptions"])
logger = logging.getLogger(__name__)


@router.post("", response_model=SubscribeResponse)
def subscribe(
    request: SubscribeRequest,
    service: SubscriptionService = Depends(get_subscription_service)
):
    """
    Start a Paystack checkout for a paid plan

    Creates a pending subscription and returns the Paystack authorization URL.
    """
    callback_url = request.callback_url or f"{settings.APP_URL}/subscription?status=success"

    result = service.start_checkout(
        user_id=request.user_id,
        email=request.email,
        plan_id=request.plan_id,
        callback_url=callback_url
    )
    return SubscribeResponse(**result)


@router.get("/verify", response_model=VerifyResponse)
def verify_payment(
    reference: Optional[str] = None,
    paystack: PaystackClient = Depends(get_paystack),
    service: SubscriptionService = Depends(get_subscription_service)
):
    """Activate a subscription after the user returns from checkout"""
    if not reference:
        raise ValidationError("Missing reference")

    transaction = paystack.verify_transaction(reference)
    if transaction is None:
        raise ValidationError("Transaction not successful")

    metadata = transaction.get("metadata") or {}
    if not metadata.get("subscription_id") or not metadata.get("plan_id"):
        raise ValidationError("Missing metadata")

    service.activate(
        metadata=metadata,
        reference=reference,
        channel=transaction.get("channel")
    )

    return VerifyResponse(success=True, message="Subscription activated via verification")


@router.post("/webhook", response_model=WebhookAck)
async def paystack_webhook(
    request: Request,
    paystack: PaystackClient = Depends(get_paystack),
    service: SubscriptionService = Depends(get_subscription_service)
):
    """
    Paystack event receiver

    Only charge.success changes state; other events are acknowledged.
    """
    body = await request.body()

    if not paystack.verify_signature(body, request.headers.get("x-paystack-signature")):
        logger.warning("Rejected webhook with invalid signature")
        raise AuthenticationError("Invalid signature")

    try:
        event = json.loads(body)
    except ValueError:
        raise ValidationError("Invalid webhook payload")

    if not isinstance(event, dict):
        raise ValidationError("Invalid webhook payload")

    if event.get("event") == "charge.success":
        data = event.get("data") or {}
        metadata = (data.get("metadata") or {}) if isinstance(data, dict) else None
        if not isinstance(metadata, dict):
            raise ValidationError("Invalid webhook payload")

        if not metadata.get("subscription_id") or not metadata.get("user_id"):
            logger.error(f"Missing metadata in webhook: {metadata}")
            raise ValidationError("Missing metadata")

        subscription = service.activate(
            metadata=metadata,
            reference=data.get("reference"),
            channel=data.get("channel")
        )
        logger.info(f"Subscription {subscription.id} activated for user {metadata['user_id']}")
    else:
        logger.info(f"Ignoring Paystack event {event.get('event')}")

    return WebhookAck(received=True)
