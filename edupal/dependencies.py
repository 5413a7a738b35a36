"""
FastAPI dependencies wiring request handlers to explicitly constructed clients

Clients are built once in main and stored on app.state; tests swap them via
app.dependency_overrides.
"""
from typing import Optional
from uuid import UUID

from fastapi import Depends, Header, Request
from sqlalchemy.orm import Session

from edupal.config import settings
from edupal.database import get_db
from edupal.exceptions import AuthenticationError, ServiceUnavailableError
from edupal.services.artifact_service import StudyMaterialService
from edupal.services.gemini_service import GeminiService
from edupal.services.paystack_service import PaystackClient
from edupal.services.storage_service import SupabaseStorage
from edupal.services.subscription_service import SubscriptionService
from edupal.utils.cache import ArtifactCache
from edupal.utils.rate_limiter import RateLimiter


generation_rate_limiter = RateLimiter(
    requests_per_minute=settings.RATE_LIMIT_PER_MINUTE,
    requests_per_hour=settings.RATE_LIMIT_PER_HOUR
)


def get_generator(request: Request) -> Optional[GeminiService]:
    return request.app.state.generator


def get_storage(request: Request) -> Optional[SupabaseStorage]:
    return request.app.state.storage


def get_artifact_cache(request: Request) -> ArtifactCache:
    return request.app.state.artifact_cache


def get_paystack(request: Request) -> PaystackClient:
    return request.app.state.paystack


def get_study_service(
    db: Session = Depends(get_db),
    generator: Optional[GeminiService] = Depends(get_generator),
    storage: Optional[SupabaseStorage] = Depends(get_storage),
    cache: ArtifactCache = Depends(get_artifact_cache)
) -> StudyMaterialService:
    return StudyMaterialService(
        db=db,
        generator=generator,
        storage=storage,
        cache=cache,
        min_chars=settings.MIN_EXTRACTED_CHARS,
        max_chars=settings.MAX_PROMPT_CHARS
    )


def get_subscription_service(
    db: Session = Depends(get_db),
    paystack: PaystackClient = Depends(get_paystack)
) -> SubscriptionService:
    return SubscriptionService(db, paystack, default_days=settings.DEFAULT_SUBSCRIPTION_DAYS)


def get_current_user_id(
    authorization: Optional[str] = Header(None),
    storage: Optional[SupabaseStorage] = Depends(get_storage)
) -> UUID:
    """Verify the Supabase access token from the Authorization header"""
    if not authorization:
        raise AuthenticationError("Unauthorized")

    if storage is None:
        raise ServiceUnavailableError("Authentication backend is not configured")

    token = authorization.removeprefix("Bearer ").strip()
    if not token:
        raise AuthenticationError("Invalid token")

    return storage.get_user_id(token)
