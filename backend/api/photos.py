"""Photo blob storage: upload-by-path onto local disk, served under /photos."""
import logging
import os
import posixpath

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status

from api.identity import CurrentUser, get_current_user
from schemas.photos import PhotoUploadResponse
from utils import config

LOG = logging.getLogger(__name__)

router = APIRouter(prefix="/photos", tags=["photos"])

ALLOWED_EXTENSIONS = (".jpg", ".jpeg", ".png", ".gif", ".webp")


def _check_path(path: str, user_id: str) -> str:
    """Return the normalized storage path or raise HTTPException."""
    if "\\" in path or path.startswith("/"):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid photo path")
    parts = path.split("/")
    if any(part in ("", ".", "..") for part in parts) or len(parts) < 2:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid photo path")
    if parts[0] != user_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Photos must be stored under your own folder",
        )
    if posixpath.splitext(path)[1].lower() not in ALLOWED_EXTENSIONS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unsupported photo type; allowed: {', '.join(ALLOWED_EXTENSIONS)}",
        )
    return path


def public_url(path: str) -> str:
    return f"{config.PUBLIC_BASE_URL}/photos/{path}"


@router.put("/{path:path}", response_model=PhotoUploadResponse, status_code=status.HTTP_201_CREATED)
def upload_photo(
    path: str,
    file: UploadFile = File(...),
    user: CurrentUser = Depends(get_current_user),
) -> PhotoUploadResponse:
    """
    Store an uploaded photo at path (which must start with the user's id). Never overwrites.

    Runs in the threadpool. Reads at most one byte past MAX_PHOTO_BYTES.
    """
    path = _check_path(path, user.id)
    content = file.file.read(config.MAX_PHOTO_BYTES + 1)
    if not content:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Empty photo upload")
    if len(content) > config.MAX_PHOTO_BYTES:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"Photo exceeds {config.MAX_PHOTO_BYTES} bytes",
        )
    dest = os.path.join(config.PHOTO_STORAGE_DIR, *path.split("/"))
    os.makedirs(os.path.dirname(dest), exist_ok=True)
    try:
        with open(dest, "xb") as f:
            f.write(content)
    except FileExistsError:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Photo already exists at '{path}'",
        ) from None
    LOG.info("Stored photo %s (%d bytes)", path, len(content))
    return PhotoUploadResponse(path=path, url=public_url(path))
