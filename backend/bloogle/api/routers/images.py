# bloogle/api/routers/images.py
import logging

from fastapi import APIRouter, Depends, File, HTTPException, Response, UploadFile, status
from fastapi.responses import RedirectResponse

from bloogle.api.deps import parse_id, require_user
from bloogle.models.image import Image
from bloogle.models.user import User
from bloogle.services.images import InvalidUpload, image_from_upload

logger = logging.getLogger("uvicorn.error")

router = APIRouter(tags=["images"])


@router.get("/image/{image_id}")
async def get_image(image_id: str):
    """
    Serve a stored image with its original content type.

    Raises:
        HTTPException (400): If the id is not numeric
        HTTPException (404): If no image has this id
    """
    image = await Image.get_or_none(id=parse_id(image_id))
    if not image:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="NOT_FOUND")
    return Response(
        content=image.data,
        media_type=image.mimetype,
        headers={"Cache-Control": "public, max-age=86400", "X-Content-Type-Options": "nosniff"},
    )


@router.post("/update-profile")
async def update_profile(profile: UploadFile | None = File(None), user: User = Depends(require_user)):
    """
    Replace the current user's profile image.

    Raises:
        HTTPException (400): If no file was uploaded or it is not an image
    """
    try:
        image = await image_from_upload(profile)
    except InvalidUpload as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    if image is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="NO_FILE_UPLOADED")
    await User.filter(id=user.id).update(image_id=image.id)
    logger.info("[images] profile image of user id=%s set to id=%s", user.id, image.id)
    return RedirectResponse(url="/", status_code=status.HTTP_303_SEE_OTHER)
