"""Media host - S3-compatible object storage for videos and images

Uploaded files are first staged under ``UPLOAD_DIR`` and then pushed to the
bucket. The staged copy is always removed afterwards; a failed removal is
logged and counted but never fails the request.
"""
import logging
import subprocess
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Optional
from urllib.parse import quote, unquote

import boto3
from boto3.exceptions import Boto3Error
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError
from fastapi import UploadFile

from vidtube.core.config import settings
from vidtube.core.errors import InternalError, ValidationError
from vidtube.core.metrics import media_uploads_counter, temp_file_cleanup_failures_counter

logger = logging.getLogger(__name__)
upload_logger = logging.getLogger("upload")
cleanup_logger = logging.getLogger("cleanup")

CHUNK_SIZE = 1024 * 1024  # 1MB

VIDEO_SUFFIXES = {".mp4", ".mov", ".webm", ".mkv", ".avi", ".m4v"}


@dataclass
class MediaAsset:
    url: str
    duration: Optional[float] = None  # Seconds, only for video files


def probe_duration(file_path: Path) -> Optional[float]:
    """Get video duration in seconds using ffprobe; None if it cannot be determined"""
    cmd = [
        'ffprobe',
        '-v', 'error',
        '-show_entries', 'format=duration',
        '-of', 'default=noprint_wrappers=1:nokey=1',
        str(file_path)
    ]
    try:
        result = subprocess.run(cmd, capture_output=True, text=True, timeout=30.0)
    except (OSError, subprocess.TimeoutExpired) as e:
        logger.warning(f"ffprobe unavailable for {file_path.name}: {e}")
        return None

    if result.returncode != 0:
        logger.warning(f"ffprobe failed for {file_path.name}: {result.stderr.strip()}")
        return None

    try:
        duration = float(result.stdout.strip())
    except ValueError:
        return None
    return duration if duration > 0 else None


class MediaHost:
    """Client for the S3-compatible bucket that serves all media"""

    def __init__(self):
        """Initialize the client with configuration from settings"""
        if not settings.MEDIA_ACCESS_KEY_ID or not settings.MEDIA_SECRET_ACCESS_KEY:
            raise ValueError("Media host credentials are missing. Set MEDIA_ACCESS_KEY_ID and MEDIA_SECRET_ACCESS_KEY.")

        if not settings.MEDIA_BUCKET_NAME:
            raise ValueError("MEDIA_BUCKET_NAME is not set.")

        if not settings.MEDIA_PUBLIC_BASE_URL:
            raise ValueError("MEDIA_PUBLIC_BASE_URL is not set.")

        self.bucket = settings.MEDIA_BUCKET_NAME
        self.public_base_url = settings.MEDIA_PUBLIC_BASE_URL.rstrip("/")

        self.s3_client = boto3.client(
            's3',
            endpoint_url=settings.MEDIA_ENDPOINT_URL or None,
            aws_access_key_id=settings.MEDIA_ACCESS_KEY_ID,
            aws_secret_access_key=settings.MEDIA_SECRET_ACCESS_KEY,
            config=Config(signature_version='s3v4')
        )
        logger.info(f"MediaHost initialized for bucket: {self.bucket}")

    def public_url(self, object_key: str) -> str:
        segments = [quote(segment, safe='') for segment in object_key.split('/')]
        return f"{self.public_base_url}/{'/'.join(segments)}"

    def object_key_from_url(self, url: str) -> Optional[str]:
        """Reverse of public_url; None for URLs this host did not issue"""
        prefix = f"{self.public_base_url}/"
        if not url or not url.startswith(prefix):
            return None
        return unquote(url[len(prefix):])

    def upload(self, file_path: Path, folder: str) -> Optional[MediaAsset]:
        """Upload a local file; returns None on failure

        Args:
            file_path: Local file path to upload
            folder: Key prefix, e.g. "avatars", "videos"
        """
        if not file_path or not file_path.exists():
            logger.error(f"File not found: {file_path}")
            return None

        object_key = f"{folder}/{uuid.uuid4().hex}{file_path.suffix.lower()}"
        duration = probe_duration(file_path) if file_path.suffix.lower() in VIDEO_SUFFIXES else None

        try:
            self.s3_client.upload_file(str(file_path), self.bucket, object_key)
        except (ClientError, BotoCoreError, Boto3Error) as e:
            logger.error(f"Failed to upload {file_path.name} as {object_key}: {e}", exc_info=True)
            return None

        upload_logger.info(f"Uploaded {file_path.name} to media host as {object_key}")
        return MediaAsset(url=self.public_url(object_key), duration=duration)

    def delete(self, url: str) -> bool:
        """Delete the object behind url

        Returns:
            True if deletion succeeded or object doesn't exist, False on error
        """
        object_key = self.object_key_from_url(url)
        if not object_key:
            logger.warning(f"Not deleting media outside this host: {url}")
            return False

        try:
            self.s3_client.delete_object(Bucket=self.bucket, Key=object_key)
            logger.info(f"Deleted {object_key} from media host")
            return True
        except ClientError as e:
            error_code = e.response.get('Error', {}).get('Code', 'Unknown')
            if error_code == 'NoSuchKey':
                return True  # Consider it success if already gone
            logger.error(f"Failed to delete {object_key}: {e}", exc_info=True)
            return False
        except (BotoCoreError, Boto3Error) as e:
            logger.error(f"Failed to delete {object_key}: {e}", exc_info=True)
            return False


# Lazy initialization - created on first request, shared by the whole process
_media_host = None


def get_media_host() -> MediaHost:
    """Dependency for FastAPI endpoints"""
    global _media_host
    if _media_host is None:
        _media_host = MediaHost()
    return _media_host


def save_upload_to_temp(upload: UploadFile) -> Path:
    """Stream an incoming upload to a uniquely named file under UPLOAD_DIR"""
    settings.UPLOAD_DIR.mkdir(parents=True, exist_ok=True)
    suffix = Path(upload.filename or "").suffix.lower()
    path = settings.UPLOAD_DIR / f"{uuid.uuid4().hex}{suffix}"
    file_size = 0

    try:
        with open(path, "wb") as f:
            while True:
                chunk = upload.file.read(CHUNK_SIZE)
                if not chunk:
                    break
                file_size += len(chunk)
                if file_size > settings.MAX_FILE_SIZE:
                    raise ValidationError(
                        f"File too large: {upload.filename}. Maximum file size is "
                        f"{settings.MAX_FILE_SIZE / (1024 * 1024):.0f} MB."
                    )
                f.write(chunk)
    except Exception:
        remove_temp_file(path)
        raise

    upload_logger.info(f"Staged {upload.filename} ({file_size / (1024 * 1024):.2f} MB) at {path.name}")
    return path


def remove_temp_file(path: Path) -> None:
    """Best-effort removal of a staged upload"""
    try:
        if path.exists():
            path.unlink()
    except OSError as e:
        temp_file_cleanup_failures_counter.inc()
        cleanup_logger.warning(f"Failed to remove temporary upload {path}: {e}")


def upload_to_media_host(media_host: MediaHost, upload: UploadFile, folder: str, label: str) -> MediaAsset:
    """Stage, push to the media host, and always clean up the staged file

    Raises:
        InternalError: If the media host rejects or fails the upload
    """
    path = save_upload_to_temp(upload)
    try:
        asset = media_host.upload(path, folder)
    finally:
        remove_temp_file(path)

    if asset is None or not asset.url:
        media_uploads_counter.labels(status="failed").inc()
        raise InternalError(f"{label} upload failed!")

    media_uploads_counter.labels(status="success").inc()
    return asset


def delete_from_media_host(media_host: MediaHost, url: Optional[str]) -> None:
    """Best-effort deletion used when media is replaced or its owner row is deleted"""
    if not url:
        return
    if not media_host.delete(url):
        cleanup_logger.warning(f"Media asset could not be deleted and may be orphaned: {url}")
