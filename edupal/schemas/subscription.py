"""
Pydantic schemas for the subscription and payment flow
"""
from pydantic import BaseModel, Field
from typing import Optional
from uuid import UUID


class SubscribeRequest(BaseModel):
    """Start a paid subscription checkout"""
    user_id: UUID = Field(..., alias="userId")
    email: str = Field(..., min_length=3, max_length=255)
    plan_id: UUID = Field(..., alias="planId")
    callback_url: Optional[str] = Field(None, alias="callbackUrl")

    class Config:
        populate_by_name = True


class SubscribeResponse(BaseModel):
    authorization_url: str
    reference: str
    subscription_id: UUID


class VerifyResponse(BaseModel):
    success: bool
    message: str


class WebhookAck(BaseModel):
    received: bool = True
