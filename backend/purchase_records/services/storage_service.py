import boto3
from botocore.exceptions import ClientError
from fastapi import UploadFile
from typing import Optional, Dict, Any
import os
import random
import time
from purchase_records.config import settings
from purchase_records.exceptions import PurchaseRecordsError, UnsupportedMediaType, PayloadTooLarge
import logging

logger = logging.getLogger(__name__)


class StorageService:
    """Stores uploaded bill images locally or in an S3-compatible bucket"""

    def __init__(self, upload_dir: Optional[str] = None, s3_client=None):
        self.bucket_name = settings.storage_bucket_name
        self.upload_dir = upload_dir or settings.upload_dir
        self.max_size = settings.max_upload_size_bytes
        self.allowed_types = {t.strip().lower() for t in settings.allowed_upload_types.split(",") if t.strip()}

        if s3_client is not None:
            self.s3_client = s3_client
        # Require both access key and secret key to use S3
        elif settings.storage_access_key_id and settings.storage_secret_access_key:
            s3_config = {
                'aws_access_key_id': settings.storage_access_key_id,
                'aws_secret_access_key': settings.storage_secret_access_key,
            }
            if settings.storage_endpoint_url:
                s3_config['endpoint_url'] = settings.storage_endpoint_url
            if settings.storage_region:
                s3_config['region_name'] = settings.storage_region

            try:
                self.s3_client = boto3.client('s3', **s3_config)
                logger.info("S3 storage initialized successfully")
            except Exception as e:
                logger.warning(f"Failed to initialize S3 client, falling back to local storage: {str(e)}")
                self.s3_client = None
        else:
            logger.info("No S3 credentials found, using local filesystem storage")
            self.s3_client = None

    @property
    def backend_name(self) -> str:
        return f"s3://{self.bucket_name}" if self.s3_client else os.path.abspath(self.upload_dir)

    def ensure_storage(self) -> None:
        """Create the local upload directory if absent (run once at startup)"""
        os.makedirs(self.upload_dir, exist_ok=True)
        logger.info(f"Upload directory ready: {os.path.abspath(self.upload_dir)}")

    def get_content_type(self, filename: str) -> str:
        """Determine content type based on file extension"""
        ext = filename.lower().split('.')[-1] if '.' in filename else ''
        content_types = {
            'png': 'image/png',
            'jpg': 'image/jpeg',
            'jpeg': 'image/jpeg',
            'gif': 'image/gif',
        }
        return content_types.get(ext, 'application/octet-stream')

    def _generate_filename(self, original_filename: Optional[str]) -> str:
        """<epoch-ms>-<random 0..1e9><original extension>"""
        ext = os.path.splitext(original_filename or "")[1]
        return f"{int(time.time() * 1000)}-{random.randint(0, 10**9)}{ext}"

    def check_content_type(self, content_type: Optional[str]) -> None:
        if (content_type or "").lower() not in self.allowed_types:
            raise UnsupportedMediaType("Invalid file type. Only JPG, JPEG, PNG, and GIF are allowed.")

    def check_size(self, size: int) -> None:
        if size > self.max_size:
            raise PayloadTooLarge("File too large")

    async def store_upload(self, upload: UploadFile) -> Dict[str, Any]:
        """
        Validate and persist one uploaded bill.

        The content type is checked before any bytes are read; at most max_size + 1
        bytes are buffered so an oversized upload is detected without reading it whole.

        Returns:
            Attachment metadata: {filename, path, size, mimetype}
        """
        self.check_content_type(upload.content_type)

        file_content = await upload.read(self.max_size + 1)
        self.check_size(len(file_content))

        return self.save_file(file_content, upload.filename, upload.content_type)

    def save_file(self, file_content: bytes, original_filename: Optional[str], mimetype: str) -> Dict[str, Any]:
        """Write bytes under a generated name and return attachment metadata"""
        filename = self._generate_filename(original_filename)
        storage_key = f"{self.upload_dir.rstrip('/')}/{filename}"

        if self.s3_client:
            try:
                self.s3_client.put_object(
                    Bucket=self.bucket_name,
                    Key=storage_key,
                    Body=file_content,
                    ContentType=mimetype
                )
            except ClientError as e:
                raise PurchaseRecordsError(f"Failed to upload to S3: {str(e)}")
        else:
            local_path = os.path.join(self.upload_dir, filename)
            try:
                with open(local_path, 'wb') as f:
                    f.write(file_content)
            except OSError as e:
                logger.error(f"Failed to save file to local storage: {str(e)}")
                raise PurchaseRecordsError(f"Failed to save file: {str(e)}")

        logger.info(f"Bill stored: {storage_key} ({len(file_content)} bytes)")
        return {
            "filename": filename,
            "path": storage_key,
            "size": len(file_content),
            "mimetype": mimetype,
        }

    def get_file_url(self, storage_path: str, expires_in: int = 3600) -> str:
        """Presigned URL for S3, public prefix path for local storage"""
        if self.s3_client:
            try:
                return self.s3_client.generate_presigned_url(
                    'get_object',
                    Params={'Bucket': self.bucket_name, 'Key': storage_path},
                    ExpiresIn=expires_in
                )
            except ClientError as e:
                raise PurchaseRecordsError(f"Failed to generate presigned URL: {str(e)}")
        return f"{settings.upload_url_prefix.rstrip('/')}/{os.path.basename(storage_path)}"

    def download_file(self, storage_path: str) -> bytes:
        """
        Read a stored bill back.

        Only the basename of storage_path is honored, so callers cannot reach
        outside the upload directory (or prefix).
        """
        filename = os.path.basename(storage_path)
        if not filename:
            raise FileNotFoundError(f"File not found: {storage_path}")

        if self.s3_client:
            key = f"{self.upload_dir.rstrip('/')}/{filename}"
            try:
                response = self.s3_client.get_object(Bucket=self.bucket_name, Key=key)
                return response['Body'].read()
            except ClientError as e:
                if e.response.get('Error', {}).get('Code') in ('NoSuchKey', '404'):
                    raise FileNotFoundError(f"File not found: {key}")
                raise PurchaseRecordsError(f"Failed to download from S3: {str(e)}")

        local_file_path = os.path.join(self.upload_dir, filename)
        if not os.path.exists(local_file_path):
            raise FileNotFoundError(f"File not found: {local_file_path}")
        with open(local_file_path, 'rb') as f:
            return f.read()


storage_service = StorageService()


def get_storage_service() -> StorageService:
    """FastAPI dependency for the process-wide blob store"""
    return storage_service
