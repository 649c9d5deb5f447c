from fastapi import APIRouter, Depends, File, Request, UploadFile

from minifacebook.core.auth import get_current_account_id
from minifacebook.core.errors import ValidationError
from minifacebook.services.upload_to_azure import ImageUploader

router = APIRouter(prefix="/api", tags=["image"])


def get_image_uploader(request: Request) -> ImageUploader:
    return request.app.state.image_uploader


@router.post("/image")
def upload_image(
    request: Request,
    image: UploadFile = File(...),
    uploader: ImageUploader = Depends(get_image_uploader),
    me: int = Depends(get_current_account_id),
):
    if not image.filename:
        raise ValidationError("File name is missing")
    if not (image.content_type or "").startswith("image/"):
        raise ValidationError("Only image files can be uploaded", code="unsupported_media_type")

    max_bytes = request.app.state.settings.MAX_IMAGE_BYTES
    contents = image.file.read(max_bytes + 1)
    if not contents:
        raise ValidationError("Empty file")
    if len(contents) > max_bytes:
        raise ValidationError("Image is too large", code="image_too_large")

    image_url = uploader.upload(data=contents, filename=image.filename, content_type=image.content_type)
    return {"imageUrl": image_url}
