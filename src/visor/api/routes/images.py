"""Report image API routes."""

from fastapi import APIRouter, File, Form, Query, UploadFile
from fastapi.responses import Response

from visor.dependencies import DBSession, Images, OrgContext
from visor.models.common import envelope
from visor.models.image import ImageDescriptionUpdate

router = APIRouter(prefix="/visor", tags=["Images"])


@router.post("/image")
async def upload_image(
    images: Images,
    ctx: OrgContext,
    db: DBSession,
    image: UploadFile = File(...),
    description: str = Form(..., min_length=1),
    report_id: str = Query(..., alias="id", min_length=1),
) -> dict:
    data = await image.read()
    stored = await images.attach(
        ctx.organization,
        report_id,
        data,
        filename=image.filename,
        content_type=image.content_type,
        description=description,
    )
    await db.commit()
    return envelope(
        "Successfully uploaded an image to the report.",
        data={"image": stored.model_dump(mode="json", by_alias=True)},
    )


@router.get("/images")
async def list_images(
    images: Images,
    ctx: OrgContext,
    report_id: str = Query(..., alias="id", min_length=1),
) -> dict:
    found = await images.list_for(ctx.organization, report_id)
    return envelope(
        "Successfully fetched the images of the report.",
        data={"images": [i.model_dump(mode="json", by_alias=True) for i in found]},
    )


@router.get("/image")
async def download_image(
    images: Images,
    ctx: OrgContext,
    name: str = Query(..., min_length=1),
) -> Response:
    image, data = await images.open(ctx.organization, name)
    return Response(
        content=data,
        media_type=image.content_type,
        headers={"Content-Disposition": f'inline; filename="{image.key}"'},
    )


@router.put("/image")
async def update_image(
    body: ImageDescriptionUpdate,
    images: Images,
    ctx: OrgContext,
    db: DBSession,
    name: str = Query(..., min_length=1),
) -> dict:
    updated = await images.update_description(ctx.organization, name, body.description)
    await db.commit()
    return envelope(
        "Successfully updated the image description.",
        data={"image": updated.model_dump(mode="json", by_alias=True)},
    )


@router.delete("/image")
async def delete_image(
    images: Images,
    ctx: OrgContext,
    db: DBSession,
    name: str = Query(..., min_length=1),
) -> dict:
    await images.remove(ctx.organization, name)
    await db.commit()
    return envelope("Successfully deleted the image.")
