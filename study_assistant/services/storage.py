"""
Firebase Storage client for uploaded study PDFs.

Uses the Google Cloud Storage client with service account auth. Objects are
stored per user under ``resources/{user_id}/`` and addressed by gs:// URLs.
"""

import json
import logging
import re
import time
from pathlib import Path
from typing import Any, Optional, Tuple

from study_assistant.config import get_settings

logger = logging.getLogger(__name__)

RESOURCE_PREFIX = "resources"

# Lazy import to avoid requiring google-cloud-storage when Firebase is not configured
_storage_client: Optional[Any] = None


def _parse_gs_url(url: str) -> Tuple[str, str]:
    """Parse gs://bucket/path into (bucket, path). Path is without leading slash."""
    m = re.match(r"gs://([^/]+)/(.*)", url.strip())
    if not m:
        raise ValueError(f"Invalid gs:// URL: {url}")
    bucket_name, path = m.group(1), m.group(2) or ""
    return bucket_name, path.lstrip("/")


def _get_client():
    """Return google.cloud.storage Client; create with service account from config."""
    global _storage_client
    if _storage_client is not None:
        return _storage_client
    settings = get_settings()
    creds_json = settings.firebase_service_account_json
    if not creds_json or not creds_json.strip():
        raise ValueError(
            "Storage requires FIREBASE_SERVICE_ACCOUNT_JSON to be set "
            "(JSON string or path to JSON file)."
        )
    try:
        from google.cloud import storage
        from google.oauth2 import service_account
    except ImportError:
        raise ImportError(
            "Storage requires google-cloud-storage. "
            "Install with: pip install google-cloud-storage"
        ) from None
    creds_json = creds_json.strip()
    if creds_json.startswith("{"):
        credentials = service_account.Credentials.from_service_account_info(json.loads(creds_json))
    else:
        path = Path(creds_json)
        if not path.exists():
            raise FileNotFoundError(f"Service account file not found: {creds_json}")
        credentials = service_account.Credentials.from_service_account_file(str(path))
    _storage_client = storage.Client(credentials=credentials, project=credentials.project_id)
    return _storage_client


def _bucket_name() -> str:
    bucket = get_settings().firebase_storage_bucket
    if not bucket:
        raise ValueError("FIREBASE_STORAGE_BUCKET must be set to store uploads")
    return bucket


def build_storage_path(user_id: str, filename: str, timestamp_ms: Optional[int] = None) -> str:
    """Return ``resources/{user_id}/{millis}_{filename}`` for a sanitized filename."""
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    return f"{RESOURCE_PREFIX}/{user_id}/{timestamp_ms}_{filename}"


def upload_bytes(storage_path: str, content: bytes, content_type: str = "application/pdf") -> str:
    """Upload content to the configured bucket and return its gs:// URL."""
    bucket_name = _bucket_name()
    client = _get_client()
    blob = client.bucket(bucket_name).blob(storage_path)
    blob.upload_from_string(content, content_type=content_type)
    logger.info(f"Uploaded {len(content)} bytes to gs://{bucket_name}/{storage_path}")
    return f"gs://{bucket_name}/{storage_path}"


def delete_blob(storage_url: str) -> None:
    """Delete the object at a gs:// URL. Missing objects are ignored."""
    bucket_name, path = _parse_gs_url(storage_url)
    client = _get_client()
    blob = client.bucket(bucket_name).blob(path)
    if blob.exists():
        blob.delete()
    else:
        logger.warning(f"Storage object already gone: {storage_url}")
