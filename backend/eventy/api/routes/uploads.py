"""
Image upload endpoint used by the admin event form.
"""

from fastapi import APIRouter, Depends, File, UploadFile, status
from pydantic import BaseModel

from eventy.services.upload_service import save_image
from eventy.core.security import require_admin

router = APIRouter(prefix="/uploads", tags=["Uploads"])


class UploadResponse(BaseModel):
    path: str


@router.post(
    "",
    response_model=UploadResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
async def upload_image(file: UploadFile = File(...)):
    return UploadResponse(path=await save_image(file))
