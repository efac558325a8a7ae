"""
File answers - stored under UPLOAD_DIR and referenced by their public URL
"""
import logging
import os
import shutil
import uuid
from typing import Optional

from fastapi import UploadFile

from formcraft.config.settings import settings
from formcraft.utils.errors import InternalError

logger = logging.getLogger(__name__)


def save_upload(file: Optional[UploadFile], upload_dir: Optional[str] = None) -> Optional[str]:
    """Save an uploaded file and return its handle, or None when nothing was chosen"""
    if file is None or not file.filename:
        return None
    upload_dir = upload_dir or settings.UPLOAD_DIR
    os.makedirs(upload_dir, exist_ok=True)

    file_ext = os.path.splitext(file.filename)[1]
    filename = f"{uuid.uuid4()}{file_ext}"
    file_path = os.path.join(upload_dir, filename)
    try:
        with open(file_path, "wb") as buffer:
            shutil.copyfileobj(file.file, buffer)
    except OSError as e:
        logger.error("❌ Upload error: %s", e)
        raise InternalError("Failed to store uploaded file")

    return f"/uploads/{filename}"


def discard_upload(handle: Optional[str], upload_dir: Optional[str] = None) -> None:
    """Remove a file saved by save_upload whose submission was never stored"""
    if not handle:
        return
    file_path = os.path.join(upload_dir or settings.UPLOAD_DIR, os.path.basename(handle))
    if not os.path.exists(file_path):
        return
    try:
        os.remove(file_path)
    except OSError as e:
        logger.warning("⚠️ Could not remove orphaned upload %s: %s", file_path, e)
