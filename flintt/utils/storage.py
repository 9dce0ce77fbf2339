from minio import Minio
from minio.error import S3Error
from flask import current_app
from datetime import timedelta
from urllib.parse import urlparse
from typing import BinaryIO, Optional
import logging
import uuid

logger = logging.getLogger(__name__)

class MinioClient:
    """MinIO client for post media"""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super(MinioClient, cls).__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if self._initialized:
            return

        # MinIO client only accepts host:port, not full URLs
        endpoint = current_app.config['MINIO_ENDPOINT']
        use_ssl = current_app.config['MINIO_USE_SSL']

        if endpoint.startswith('http://') or endpoint.startswith('https://'):
            parsed = urlparse(endpoint)
            endpoint = parsed.netloc
            if parsed.scheme == 'https':
                use_ssl = True

        self.client = Minio(
            endpoint,
            access_key=current_app.config['MINIO_ROOT_USER'],
            secret_key=current_app.config['MINIO_ROOT_PASSWORD'],
            secure=use_ssl
        )
        self.bucket = current_app.config['MINIO_BUCKET']
        self._ensure_bucket_exists()
        self._initialized = True

    def _ensure_bucket_exists(self):
        """Ensure the bucket exists, create if not"""
        try:
            if not self.client.bucket_exists(self.bucket):
                self.client.make_bucket(self.bucket)
        except S3Error as e:
            logger.error(f"Error creating bucket {self.bucket}: {e}")

    @staticmethod
    def media_object_name(group_id: str, user_id: str, filename: str) -> str:
        """Object key for an uploaded post: media/<group>/<user>/<uuid>.<ext>"""
        ext = filename.rsplit('.', 1)[-1].lower() if '.' in filename else 'bin'
        return f"media/{group_id}/{user_id}/{uuid.uuid4().hex}.{ext}"

    @staticmethod
    def validate_object_name(object_name: str) -> bool:
        """Basic validation to avoid accidental path traversal or absolute paths."""
        if not object_name or '..' in object_name or object_name.startswith('/') or '\\' in object_name:
            return False
        return True

    def upload_stream(self, data: BinaryIO, object_name: str, length: int,
                      content_type: str = 'application/octet-stream') -> bool:
        """Upload a file-like object to MinIO"""
        if not self.validate_object_name(object_name):
            logger.warning(f"Rejected upload due to invalid object_name: {object_name}")
            return False
        try:
            self.client.put_object(
                self.bucket,
                object_name,
                data,
                length,
                content_type=content_type
            )
            return True
        except S3Error as e:
            logger.error(f"Error uploading {object_name}: {e}")
            return False

    def delete_file(self, object_name: str) -> bool:
        """Delete a file from MinIO"""
        if not self.validate_object_name(object_name):
            logger.warning(f"Rejected delete due to invalid object_name: {object_name}")
            return False
        try:
            self.client.remove_object(self.bucket, object_name)
            return True
        except S3Error as e:
            logger.error(f"Error deleting {object_name}: {e}")
            return False

    def get_presigned_url(self, object_name: str,
                         expires: int = 3600) -> Optional[str]:
        """Get a presigned URL for a file"""
        if not self.validate_object_name(object_name):
            logger.warning(f"Rejected presigned URL due to invalid object_name: {object_name}")
            return None
        try:
            return self.client.presigned_get_object(
                self.bucket,
                object_name,
                expires=timedelta(seconds=expires)
            )
        except S3Error as e:
            logger.error(f"Error generating presigned URL for {object_name}: {e}")
            return None

    @staticmethod
    def is_media_object_of(object_name: str, group_id: str, user_id: str) -> bool:
        """True when ``object_name`` is an upload made by ``user_id`` for ``group_id``"""
        return (MinioClient.validate_object_name(object_name)
                and object_name.startswith(f"media/{group_id}/{user_id}/"))


def with_media_url(post: dict) -> dict:
    """Copy of a post whose ``media_url`` is a fresh presigned link to its ``media_path``"""
    if not post.get('media_path'):
        return post
    post = dict(post)
    post['media_url'] = MinioClient().get_presigned_url(post['media_path']) or ''
    return post
