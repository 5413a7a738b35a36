"""
Supabase Storage and Auth access
"""
import logging
from typing import Optional
from uuid import UUID

from supabase import Client, create_client

from edupal.exceptions import AuthenticationError, StorageError

logger = logging.getLogger(__name__)


def storage_path_from_url(file_url: str, bucket: str) -> Optional[str]:
    """
    Derive the object path inside a bucket from its public URL

    ".../storage/v1/object/public/resources/2024/notes.pdf" -> "2024/notes.pdf"
    """
    marker = f"/{bucket}/"
    if marker not in file_url:
        return None
    path = file_url.split(marker, 1)[1].split("?", 1)[0]
    return path or None


class SupabaseStorage:
    """Object storage for resource files, plus token verification"""

    def __init__(self, client: Client, bucket: str = "resources"):
        self.client = client
        self.bucket = bucket

    @classmethod
    def from_credentials(cls, url: str, key: str, bucket: str = "resources") -> "SupabaseStorage":
        return cls(create_client(url, key), bucket)

    def download(self, path: str) -> bytes:
        try:
            data = self.client.storage.from_(self.bucket).download(path)
        except Exception as e:
            logger.error(f"Storage download error for {path}: {str(e)}")
            raise StorageError("Failed to read file from storage")

        if not data:
            raise StorageError("Failed to read file from storage")

        logger.info(f"Downloaded {len(data)} bytes from {self.bucket}/{path}")
        return data

    def create_signed_url(self, path: str, expires_in: int) -> str:
        try:
            result = self.client.storage.from_(self.bucket).create_signed_url(path, expires_in)
        except Exception as e:
            logger.error(f"Signed URL error for {path}: {str(e)}")
            raise StorageError("Failed to generate download link")

        signed_url = result.get("signedURL") or result.get("signedUrl")
        if not signed_url:
            raise StorageError("Failed to generate download link")
        return signed_url

    def get_user_id(self, access_token: str) -> UUID:
        """Resolve a Supabase access token to the user's id"""
        try:
            response = self.client.auth.get_user(access_token)
        except Exception as e:
            logger.warning(f"Token verification failed: {str(e)}")
            raise AuthenticationError("Invalid token")

        if not response or not response.user:
            raise AuthenticationError("Invalid token")
        return UUID(str(response.user.id))
