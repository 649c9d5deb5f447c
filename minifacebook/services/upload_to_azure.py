# minifacebook/services/upload_to_azure.py
import os
import uuid
from typing import Optional

import structlog
from azure.core.exceptions import AzureError, ResourceExistsError
from azure.storage.blob import BlobServiceClient, ContentSettings

from minifacebook.core.config import Settings
from minifacebook.core.errors import ImageStorageError

logger = structlog.get_logger()


class ImageUploader:
    """Azure Blob 업로드. 클라이언트는 첫 업로드 때 생성."""

    def __init__(self, connection_string: str, container: str):
        self.connection_string = connection_string
        self.container = container
        self._service: Optional[BlobServiceClient] = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "ImageUploader":
        return cls(settings.AZURE_STORAGE_CONNECTION_STRING, settings.AZURE_CONTAINER_NAME)

    def _client(self) -> BlobServiceClient:
        if self._service is not None:
            return self._service
        if not self.connection_string or not self.container:
            raise ImageStorageError("Image storage is not configured")

        try:
            service = BlobServiceClient.from_connection_string(self.connection_string)
        except ValueError as e:
            raise ImageStorageError("Image storage is not configured") from e
        try:
            service.create_container(self.container)
        except ResourceExistsError:
            pass  # 이미 있으면 스킵
        self._service = service
        return service

    def upload(self, data: bytes, filename: str, content_type: Optional[str] = None) -> str:
        """바이트를 랜덤 blob 이름(확장자 유지)으로 업로드하고 URL 반환."""
        ext = os.path.splitext(filename)[1].lower()
        blob_name = f"{uuid.uuid4().hex}{ext}"
        try:
            blob_client = self._client().get_blob_client(container=self.container, blob=blob_name)
            content_settings = ContentSettings(content_type=content_type) if content_type else None
            blob_client.upload_blob(data, overwrite=False, content_settings=content_settings)
        except AzureError as e:
            logger.error("image_upload_failed", blob=blob_name, error=str(e))
            raise ImageStorageError() from e
        return blob_client.url
