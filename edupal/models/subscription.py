"""
Subscription plan and user subscription models
"""
from sqlalchemy import Column, String, Integer, TIMESTAMP, ForeignKey, Uuid, func
from edupal.database import Base
import uuid


class SubscriptionPlan(Base):
    """
    Plans table - prices are whole Naira
    """
    __tablename__ = "hub_subscription_plans"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(100), nullable=False)
    price_ngn = Column(Integer, nullable=False, default=0)
    duration_days = Column(Integer)

    def __repr__(self):
        return f"<SubscriptionPlan(id={self.id}, name={self.name}, price_ngn={self.price_ngn})>"


class Subscription(Base):
    """
    User subscriptions - created pending, activated after payment verification
    """
    __tablename__ = "hub_subscriptions"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), nullable=False, index=True)
    plan_id = Column(Uuid(as_uuid=True), ForeignKey("hub_subscription_plans.id"), nullable=False)
    status = Column(String(20), nullable=False, default="pending")  # pending | active | expired
    amount = Column(Integer, nullable=False)
    payment_reference = Column(String(100), index=True)
    payment_channel = Column(String(30))
    starts_at = Column(TIMESTAMP)
    expires_at = Column(TIMESTAMP)
    created_at = Column(TIMESTAMP, server_default=func.now())
    updated_at = Column(TIMESTAMP, server_default=func.now())

    def __repr__(self):
        return f"<Subscription(id={self.id}, user_id={self.user_id}, status={self.status})>"
