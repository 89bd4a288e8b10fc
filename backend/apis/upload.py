import re
from typing import Optional

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile

from core.auth import get_current_admin_optional, get_current_reader_optional
from core.common.app_settings import settings
from core.common.errors import bad_request, unauthorized
from core.common.log import logger
from core.integrations.supabase.storage import supabase_storage_media
from schemas import success_response, error_response


router = APIRouter(prefix="/upload", tags=["文件上传"])

FOLDER_RE = re.compile(r"^[A-Za-z0-9-]{1,40}$")
ALLOWED_TYPES = frozenset(
    {"image/jpeg", "image/png", "image/gif", "image/webp", "image/avif"}
)


async def get_uploader(
    admin: Optional[dict] = Depends(get_current_admin_optional),
    reader: Optional[dict] = Depends(get_current_reader_optional),
) -> dict:
    """后台用户或读者均可上传"""
    uploader = admin or reader
    if not uploader:
        raise unauthorized("Not authenticated")
    return uploader


@router.post("", summary="上传图片")
async def upload_image(
    image: UploadFile = File(...),
    folder: str = Query("articles"),
    uploader: dict = Depends(get_uploader),
):
    if not FOLDER_RE.match(folder):
        raise bad_request("Invalid folder name")
    content_type = (image.content_type or "").lower()
    if content_type not in ALLOWED_TYPES:
        raise bad_request("Only image files are allowed")

    data = await image.read()
    if not data:
        raise bad_request("Empty file")
    if len(data) > settings.upload_max_bytes:
        raise bad_request(
            f"File too large, max {settings.upload_max_bytes // (1024 * 1024)}MB"
        )

    try:
        path = supabase_storage_media.object_path(folder, image.filename or "")
        url = await supabase_storage_media.upload_bytes(
            path=path, data=data, content_type=content_type
        )
        logger.info(f"图片上传成功: {path} by {uploader.get('email')}")
        return success_response({"url": url}, message="Image uploaded")
    except Exception as e:
        logger.error(f"图片上传失败: {e}")
        raise HTTPException(
            status_code=502,
            detail=error_response(code=50201, message="Image upload failed"),
        )
