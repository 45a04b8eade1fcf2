from typing import Optional

from fastapi import APIRouter, Depends, File, UploadFile

from showcase.api.deps import get_upload_service
from showcase.auth.dependencies import get_current_account
from showcase.schemas import AuthContext, UploadResponse
from showcase.services.uploads import UploadService

router = APIRouter(tags=["Uploads"])


@router.post("/upload", response_model=UploadResponse)
async def upload_file(
    file: Optional[UploadFile] = File(None),
    auth: AuthContext = Depends(get_current_account),
    uploads: UploadService = Depends(get_upload_service)
):
    """
    Store one archive or image and return its URL.
    Requires: authentication
    """
    return await uploads.save(file)
