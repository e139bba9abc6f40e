# services/drive_service.py
import io
import logging
import mimetypes
import uuid
from pathlib import PurePath
from typing import Optional, Tuple

from googleapiclient.discovery import Resource
from googleapiclient.errors import HttpError
from googleapiclient.http import MediaIoBaseUpload

from config import load_config

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_TYPES = ("image/jpeg", "image/png", "image/webp")
MAX_IMAGE_BYTES = 5 * 1024 * 1024


def public_url(file_id: str) -> str:
    return f"https://drive.google.com/uc?id={file_id}&export=download"


def image_mimetype(filename: str) -> Optional[str]:
    mimetype, _ = mimetypes.guess_type(filename)
    return mimetype if mimetype in ALLOWED_IMAGE_TYPES else None


def unique_name(filename: str) -> str:
    path = PurePath(filename)
    return f"{path.stem}-{uuid.uuid4().hex[:8]}{path.suffix.lower()}"


def upload_image(
        drive: Resource,
        content: bytes,
        filename: str,
        folder_id: Optional[str] = None,
) -> Tuple[bool, str, Optional[str]]:
    """
    Upload an image to the Drive folder and make it readable by link.

    Returns (ok, message, hosted_url)
    """
    mimetype = image_mimetype(filename)
    if mimetype is None:
        return False, "Only JPEG, PNG or WebP images can be uploaded", None
    if not content:
        return False, "The image is empty", None
    if len(content) > MAX_IMAGE_BYTES:
        return False, "Images must be 5 MB or smaller", None

    folder_id = folder_id or load_config().image_folder_id
    if not folder_id:
        return False, "IMAGE_FOLDER_ID is not configured", None

    metadata = {
        "name": unique_name(filename),
        "parents": [folder_id],
    }
    media = MediaIoBaseUpload(io.BytesIO(content), mimetype=mimetype, resumable=False)

    try:
        file = drive.files().create(
            body=metadata,
            media_body=media,
            fields="id",
        ).execute()
        file_id = file["id"]

        drive.permissions().create(
            fileId=file_id,
            body={"type": "anyone", "role": "reader"},
            fields="id",
        ).execute()
    except HttpError as e:
        logger.error("Uploading %s to Drive failed: %s", filename, e)
        return False, "Failed to upload image. Please try again.", None

    logger.info('Uploaded image "%s" as fileId=%s', metadata["name"], file_id)
    return True, "Image uploaded", public_url(file_id)
