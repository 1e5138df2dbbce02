"""Product image endpoints: recoloring and background removal."""

import logging

from fastapi import APIRouter, Form, HTTPException, UploadFile
from fastapi.responses import Response

from ..errors import ClassifierError, DecodeError
from ..imaging import apply_color_transform, remove_background, remove_white_background

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/images", tags=["images"])


@router.post("/color-transform")
async def color_transform(
    file: UploadFile,
    color: str = Form("original"),
    finish: str = Form("matte"),
):
    """Recolor the product in an image; background and alpha are preserved."""
    contents = await file.read()
    try:
        png = apply_color_transform(contents, color, finish)
    except DecodeError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return Response(content=png, media_type="image/png")


@router.post("/remove-background")
async def background_removal(file: UploadFile, mode: str = Form("segment")):
    """Cut the furniture out of an image.

    mode="segment" uses the segmentation model, mode="threshold" only drops
    near-white pixels.
    """
    if mode not in ("segment", "threshold"):
        raise HTTPException(status_code=422, detail=f"Unknown mode '{mode}'")

    contents = await file.read()
    try:
        if mode == "threshold":
            png = remove_white_background(contents)
        else:
            png = await remove_background(contents)
    except DecodeError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except ClassifierError as e:
        logger.error("Background removal failed: %s", e)
        raise HTTPException(status_code=502, detail=str(e)) from e
    return Response(content=png, media_type="image/png")
