"""
Pydantic schemas for resource downloads
"""
from pydantic import BaseModel, Field
from uuid import UUID


class DownloadRequest(BaseModel):
    user_id: UUID = Field(..., alias="userId")
    resource_id: UUID = Field(..., alias="resourceId")
    file_path: str = Field(..., min_length=1, alias="filePath")

    class Config:
        populate_by_name = True


class DownloadResponse(BaseModel):
    """Short-lived signed URL"""
    download_url: str = Field(..., alias="downloadUrl")

    class Config:
        populate_by_name = True
