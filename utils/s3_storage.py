"""S3 storage for user-uploaded shop photos.

- shop-photos/{user_id}/{unix_ms}.{ext}
"""

from __future__ import annotations

import logging
import time
from typing import Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

logger = logging.getLogger(__name__)

PHOTO_PREFIX = "shop-photos"
CONTENT_TYPES = {
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "gif": "image/gif",
    "webp": "image/webp",
}


class PhotoUploadError(Exception):
    """Raised when S3 rejects an upload."""


class S3StorageManager:
    """S3에 가게 사진 저장"""

    def __init__(
        self,
        bucket_name: str,
        aws_access_key_id: Optional[str] = None,
        aws_secret_access_key: Optional[str] = None,
        region: str = "ap-northeast-1",
        public_base_url: Optional[str] = None,
        s3_client=None,
    ) -> None:
        self.bucket_name = bucket_name
        self.region = region
        self.public_base_url = (
            public_base_url or f"https://{bucket_name}.s3.{region}.amazonaws.com"
        ).rstrip("/")
        self.s3_client = s3_client or boto3.client(
            "s3",
            aws_access_key_id=aws_access_key_id,
            aws_secret_access_key=aws_secret_access_key,
            region_name=region,
        )

    @staticmethod
    def _safe_prefix(value: str, max_len: int = 64) -> str:
        # 파일/키 경로에 안전한 형태로 변환 (공백/특수문자 → _)
        safe = "".join(c if c.isalnum() or c in ("-", "_") else "_" for c in value)
        return safe[:max_len] if len(safe) > max_len else safe

    @staticmethod
    def _extension(filename: Optional[str]) -> str:
        if filename and "." in filename:
            ext = filename.rsplit(".", 1)[1].lower()
            if ext in CONTENT_TYPES:
                return ext
        return "jpg"

    def photo_key(self, user_id: str, filename: Optional[str] = None) -> str:
        ext = self._extension(filename)
        return f"{PHOTO_PREFIX}/{self._safe_prefix(user_id)}/{int(time.time() * 1000)}.{ext}"

    def public_url(self, key: str) -> str:
        return f"{self.public_base_url}/{key}"

    def upload_shop_photo(self, user_id: str, image_data: bytes, filename: Optional[str] = None) -> str:
        """가게 사진을 업로드하고 공개 URL을 반환"""
        key = self.photo_key(user_id, filename)
        try:
            self.s3_client.put_object(
                Bucket=self.bucket_name,
                Key=key,
                Body=image_data,
                ContentType=CONTENT_TYPES[self._extension(filename)],
            )
        except (ClientError, BotoCoreError) as exc:
            logger.error("Failed to upload photo key=%s: %s", key, exc)
            raise PhotoUploadError(str(exc)) from exc
        return self.public_url(key)
