"""Attachment download endpoints."""
from fastapi import APIRouter, Depends
from duetasks.config import settings
from duetasks.dependencies import get_current_active_user
from duetasks.models.user import User
from duetasks.schemas.task import SignedUrlRequest, SignedUrlResponse
from duetasks.services.attachment_service import attachment_service

router = APIRouter()


@router.post("/signed-url", response_model=SignedUrlResponse)
async def create_signed_url(
    request: SignedUrlRequest,
    current_user: User = Depends(get_current_active_user),
):
    """Generate a short-lived download URL for a stored attachment."""
    signed_url = attachment_service.signed_url(
        owner=current_user,
        bucket=request.bucket,
        path=request.path,
    )
    return SignedUrlResponse(signed_url=signed_url, expires_in=settings.SIGNED_URL_TTL_SECONDS)
