"""
Resume storage on S3.

Wraps boto3 so callers only ever see ``StorageError``; a failed upload is
reported, never replaced by placeholder content.
"""
from __future__ import annotations

import io
import logging
import uuid
from dataclasses import dataclass

import boto3
import pdfplumber
from botocore.exceptions import BotoCoreError, ClientError

from app.core.config import settings

logger = logging.getLogger(__name__)

RESUME_CONTENT_TYPE = "application/pdf"
PREVIEW_CONTENT_TYPE = "image/png"


class StorageError(Exception):
    """Raised when the object store rejects or cannot complete a call."""


@dataclass(frozen=True)
class StoredResume:
    key: str
    preview_key: str | None = None


def _client():
    return boto3.client("s3", region_name=settings.AWS_REGION or None)


def build_resume_key(user_id: int, kind: str, extension: str) -> str:
    prefix = settings.S3_PREFIX
    key = f"users/{user_id}/{kind}/{uuid.uuid4()}.{extension}"
    return f"{prefix}/{key}" if prefix else key


def _put(key: str, content: bytes, content_type: str) -> None:
    s3 = _client()
    try:
        s3.put_object(
            Bucket=settings.S3_BUCKET_NAME,
            Key=key,
            Body=content,
            ContentType=content_type,
        )
    except (ClientError, BotoCoreError) as exc:
        logger.error("S3 put_object failed for key=%s: %s", key, exc)
        raise StorageError("Failed to upload resume. Please try again.") from exc


def render_preview(content: bytes) -> bytes | None:
    """First page of the PDF as PNG bytes, or None when it can't be rendered."""
    if not settings.RESUME_PREVIEW_ENABLED:
        return None
    try:
        with pdfplumber.open(io.BytesIO(content)) as pdf:
            if not pdf.pages:
                return None
            image = pdf.pages[0].to_image(resolution=settings.RESUME_PREVIEW_RESOLUTION)
            buf = io.BytesIO()
            image.save(buf, format="PNG")
            return buf.getvalue()
    except Exception:  # pylint: disable=broad-except
        logger.warning("Resume preview rendering failed; storing resume without preview", exc_info=True)
        return None


def store_resume(user_id: int, content: bytes, content_type: str = RESUME_CONTENT_TYPE) -> StoredResume:
    key = build_resume_key(user_id, "resume", "pdf")
    _put(key, content, content_type)

    preview = render_preview(content)
    if preview is None:
        return StoredResume(key=key)

    preview_key = build_resume_key(user_id, "preview", "png")
    try:
        _put(preview_key, preview, PREVIEW_CONTENT_TYPE)
    except StorageError:
        delete_quietly(key)
        raise
    return StoredResume(key=key, preview_key=preview_key)


def presign_download(key: str) -> str:
    s3 = _client()
    try:
        return s3.generate_presigned_url(
            ClientMethod="get_object",
            Params={"Bucket": settings.S3_BUCKET_NAME, "Key": key},
            ExpiresIn=settings.PRESIGN_EXPIRES_SECONDS,
        )
    except (ClientError, BotoCoreError) as exc:
        logger.error("S3 presign failed for key=%s: %s", key, exc)
        raise StorageError("Resume storage is unavailable") from exc


def delete_object(key: str) -> None:
    s3 = _client()
    try:
        s3.delete_object(Bucket=settings.S3_BUCKET_NAME, Key=key)
    except (ClientError, BotoCoreError) as exc:
        raise StorageError(f"Failed to delete {key}") from exc


def delete_quietly(key: str | None) -> None:
    """Cleanup path for rollbacks; the original error is what the caller reports."""
    if not key:
        return
    try:
        delete_object(key)
    except StorageError:
        logger.warning("Could not clean up orphaned object key=%s", key, exc_info=True)
