"""
File storage for uploaded documents.

Two backends share one interface: a local directory for development and
tests, and Google Cloud Storage for deployed environments. Both return a
storage key that is persisted as the document's ``file_url`` locator.
"""
import os
import logging
from typing import Optional
from datetime import datetime, timedelta
import mimetypes
from pathlib import Path

from google.cloud import storage
from google.cloud.exceptions import GoogleCloudError

from docportal.core.config import settings
from docportal.core.exceptions import ExternalServiceError
from docportal.utils.file_upload import generate_unique_filename


logger = logging.getLogger(__name__)


def build_storage_key(owner_id: int, filename: str) -> str:
    """Storage key for an upload: ``documents/profile_<id>/<timestamp>_<uuid>.<ext>``."""
    stamp = datetime.now().strftime('%Y%m%d%H%M%S')
    return f"documents/profile_{owner_id}/{stamp}_{generate_unique_filename(filename)}"


class FileService:
    """Interface implemented by the storage backends."""

    def upload_file(self, content: bytes, filename: str, owner_id: int,
                    content_type: Optional[str] = None) -> dict:
        raise NotImplementedError

    def get_file_content(self, file_url: str) -> bytes:
        raise NotImplementedError

    def delete_file(self, file_url: str) -> bool:
        raise NotImplementedError

    def file_exists(self, file_url: str) -> bool:
        raise NotImplementedError

    def generate_signed_url(self, file_url: str, expiration_minutes: int = 15) -> Optional[str]:
        """Direct download URL, or None when bytes must be served by the API."""
        return None

    @staticmethod
    def guess_content_type(filename: str, content_type: Optional[str] = None) -> str:
        return content_type or mimetypes.guess_type(filename)[0] or "application/octet-stream"


class LocalFileService(FileService):
    """Stores files below ``settings.UPLOAD_DIR``."""

    def __init__(self, root: Optional[str] = None):
        self.root = Path(root or settings.UPLOAD_DIR).resolve()

    def _path_for(self, file_url: str) -> Path:
        path = (self.root / file_url).resolve()
        if self.root not in path.parents:
            raise ExternalServiceError(f"Invalid file locator '{file_url}'")
        return path

    def upload_file(self, content: bytes, filename: str, owner_id: int,
                    content_type: Optional[str] = None) -> dict:
        file_url = build_storage_key(owner_id, filename)
        path = self._path_for(file_url)
        try:
            os.makedirs(path.parent, exist_ok=True)
            with open(path, "wb") as f:
                f.write(content)
        except OSError as e:
            logger.error(f"Failed to store file '{filename}': {e}")
            raise ExternalServiceError("Failed to store uploaded file")

        logger.info(f"File '{filename}' stored as '{file_url}'.")
        return {
            "filename": filename,
            "file_url": file_url,
            "file_size": len(content),
            "content_type": self.guess_content_type(filename, content_type),
        }

    def get_file_content(self, file_url: str) -> bytes:
        path = self._path_for(file_url)
        try:
            with open(path, "rb") as f:
                return f.read()
        except OSError as e:
            logger.error(f"Failed to read file '{file_url}': {e}")
            raise ExternalServiceError(f"Failed to read file '{file_url}'")

    def delete_file(self, file_url: str) -> bool:
        path = self._path_for(file_url)
        try:
            path.unlink()
            logger.info(f"File '{file_url}' deleted successfully.")
            return True
        except OSError as e:
            logger.error(f"Failed to delete file '{file_url}': {e}")
            return False

    def file_exists(self, file_url: str) -> bool:
        return self._path_for(file_url).is_file()


class GCSFileService(FileService):
    """Google Cloud Storage service for managing file uploads."""

    def __init__(self):
        try:
            self.client = storage.Client(project=settings.GCS_PROJECT_ID)
            self.bucket = self.client.bucket(settings.GCS_BUCKET_NAME)
        except GoogleCloudError as e:
            logger.error(f"Failed to initialize Google Cloud Storage client: {e}")
            raise ExternalServiceError("File storage is unavailable")

    def upload_file(self, content: bytes, filename: str, owner_id: int,
                    content_type: Optional[str] = None) -> dict:
        file_url = build_storage_key(owner_id, filename)
        content_type = self.guess_content_type(filename, content_type)
        try:
            blob = self.bucket.blob(file_url)
            blob.metadata = {
                "original_filename": filename,
                "uploaded_by": str(owner_id),
                "upload_time": datetime.now().isoformat()
            }
            blob.upload_from_string(content, content_type=content_type, timeout=120)
            logger.info(f"File '{filename}' uploaded successfully as '{file_url}'.")
        except GoogleCloudError as e:
            logger.error(f"Failed to upload file '{filename}': {e}")
            raise ExternalServiceError("Failed to store uploaded file")

        return {
            "filename": filename,
            "file_url": file_url,
            "file_size": len(content),
            "content_type": content_type,
        }

    def get_file_content(self, file_url: str) -> bytes:
        """Retrieve the content of a file from Google Cloud Storage."""
        try:
            content = self.bucket.blob(file_url).download_as_bytes()
            logger.info(f"Retrieved content for file '{file_url}'.")
            return content
        except GoogleCloudError as e:
            logger.error(f"Failed to retrieve content for file '{file_url}': {e}")
            raise ExternalServiceError(f"Failed to read file '{file_url}'")

    def delete_file(self, file_url: str) -> bool:
        """Delete a file from Google Cloud Storage."""
        try:
            self.bucket.blob(file_url).delete()
            logger.info(f"File '{file_url}' deleted successfully.")
            return True
        except GoogleCloudError as e:
            logger.error(f"Failed to delete file '{file_url}': {e}")
            return False

    def file_exists(self, file_url: str) -> bool:
        """Check if a file exists in Google Cloud Storage."""
        try:
            return self.bucket.blob(file_url).exists()
        except GoogleCloudError as e:
            logger.error(f"Failed to check existence of file '{file_url}': {e}")
            return False

    def generate_signed_url(self, file_url: str, expiration_minutes: int = 15) -> Optional[str]:
        """
        Generate a signed URL for accessing a file in Google Cloud Storage.
        """
        try:
            url = self.bucket.blob(file_url).generate_signed_url(
                expiration=timedelta(minutes=expiration_minutes),
                method="GET"
            )
            logger.info(f"Generated signed URL for '{file_url}' valid for {expiration_minutes} minutes.")
            return url
        except GoogleCloudError as e:
            logger.error(f"Failed to generate signed URL for '{file_url}': {e}")
            raise ExternalServiceError("Failed to create download link")


def get_file_service() -> FileService:
    """Storage backend selected by ``settings.STORAGE_BACKEND``."""
    if settings.STORAGE_BACKEND == "gcs":
        return GCSFileService()
    return LocalFileService()
