"""Upload router issuing presigned direct-upload URLs."""

import logging
from botocore.exceptions import BotoCoreError, ClientError
from fastapi import APIRouter, Depends, HTTPException, status

from src.schemas import UploadUrlRequest, UploadUrlResponse
from src.storage import StorageClient, build_object_key, get_storage_client, UPLOAD_URL_EXPIRES_SECONDS

# Configure logging
logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Upload"])


@router.post("/upload-url", response_model=UploadUrlResponse)
def create_upload_url(
    request: UploadUrlRequest,
    storage: StorageClient = Depends(get_storage_client)
):
    """
    Issue a five-minute presigned PUT URL for a new randomly named object.

    The uploaded bytes are not inspected here.

    Args:
        request: Original filename and content type
        storage: Object storage client

    Returns:
        UploadUrlResponse: Write URL, object key and public read URL
    """
    if not request.filename or not request.content_type:
        logger.warning("Upload URL request missing filename or contentType")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="missing_filename_or_contentType"
        )

    key = build_object_key(request.filename)
    logger.info(f"Issuing upload URL for key: {key}")

    try:
        url = storage.presign_put(key, request.content_type, expires_in=UPLOAD_URL_EXPIRES_SECONDS)
    except (BotoCoreError, ClientError) as e:
        logger.error(f"Failed to presign upload URL for {key}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="server_error"
        )

    return UploadUrlResponse(url=url, key=key, public_url=storage.public_url(key))
