"""
Resource download API endpoints
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import Optional
import logging

from edupal.config import settings
from edupal.database import get_db
from edupal.dependencies import get_storage
from edupal.exceptions import ServiceUnavailableError
from edupal.schemas.resource import DownloadRequest, DownloadResponse
from edupal.services.access_service import authorize_download, increment_download_count
from edupal.services.storage_service import SupabaseStorage

router = APIRouter(prefix="/api/resources", tags=["resources"])
logger = logging.getLogger(__name__)


@router.post("/download", response_model=DownloadResponse)
def download_resource(
    request: DownloadRequest,
    db: Session = Depends(get_db),
    storage: Optional[SupabaseStorage] = Depends(get_storage)
):
    """
    Issue a signed download URL for a resource

    Access order when subscriptions are enabled: admin role, active
    subscription, then one download credit.
    """
    if storage is None:
        raise ServiceUnavailableError("File storage is not configured")

    grant = authorize_download(db, request.user_id, settings.SUBSCRIPTIONS_ENABLED)
    logger.info(f"Download of {request.resource_id} by {request.user_id} granted via {grant}")

    signed_url = storage.create_signed_url(request.file_path, settings.SIGNED_URL_TTL)

    increment_download_count(db, request.resource_id)

    return DownloadResponse(download_url=signed_url)
