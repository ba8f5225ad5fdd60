"""Screenshot hosting on S3."""

import logging
import uuid

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from .config import Settings, get_settings
from .errors import UploadError

logger = logging.getLogger(__name__)

EXTENSIONS = {"image/png": "png", "image/jpeg": "jpg"}


class S3Uploader:
    """Puts screenshots under {s3_folder}/ and hands back presigned GET URLs."""

    def __init__(self, settings: Settings = None, client=None):
        self.settings = settings or get_settings()
        self.bucket_name = self.settings.s3_bucket_name
        self.s3_client = client or boto3.client(
            "s3",
            aws_access_key_id=self.settings.aws_access_key_id,
            aws_secret_access_key=self.settings.aws_secret_access_key,
            region_name=self.settings.aws_region,
        )

    def screenshot_key(self, content_type: str) -> str:
        ext = EXTENSIONS.get(content_type, "bin")
        return f"{self.settings.s3_folder}/{uuid.uuid4().hex}.{ext}"

    def upload_screenshot(self, image_bytes: bytes, content_type: str = "image/png") -> str:
        if not self.bucket_name:
            raise UploadError("no S3 bucket configured (THEMESHOT_S3_BUCKET_NAME)")

        s3_key = self.screenshot_key(content_type)
        try:
            logger.info(f"Uploading screenshot to s3://{self.bucket_name}/{s3_key}")
            self.s3_client.put_object(
                Bucket=self.bucket_name,
                Key=s3_key,
                Body=image_bytes,
                ContentType=content_type,
            )
            return self.s3_client.generate_presigned_url(
                "get_object",
                Params={"Bucket": self.bucket_name, "Key": s3_key},
                ExpiresIn=self.settings.presigned_url_expiry,
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"S3 upload failed: {e}")
            raise UploadError(f"upload failed: {e}") from e
