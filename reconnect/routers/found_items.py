import logging
from typing import Optional
from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlmodel import Session

from reconnect.db.db import get_session
from reconnect.models.found_item import FoundItem
from reconnect.utils.errors import StorageError
from reconnect.utils.form_validator import validate_found_item_form
from reconnect.utils.media_store import get_media_store, inspect_image

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/found/upload", status_code=201)
async def upload_found_item(
    description: Optional[str] = Form(None),
    location_desc: Optional[str] = Form(None),
    contact_no: Optional[str] = Form(None),
    city: Optional[str] = Form(None),
    category: Optional[str] = Form(None),
    latitude: Optional[str] = Form(None),
    longitude: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    session: Session = Depends(get_session),
    store=Depends(get_media_store),
):
    # fields are checked before anything touches the media store
    form = validate_found_item_form(
        description=description,
        contact_no=contact_no,
        category=category,
        location_desc=location_desc,
        city=city,
        latitude=latitude,
        longitude=longitude,
        has_image=image is not None and bool(image.filename),
    )

    try:
        raw_bytes = await image.read()
    finally:
        await image.close()

    inspect_image(raw_bytes)

    image_path = store.save(raw_bytes, image.filename)

    try:
        db_item = FoundItem(
            **form.model_dump(),
            image_path=image_path,
            finder_contact=form.contact_no,
        )

        session.add(db_item)
        session.commit()
        session.refresh(db_item)
    except Exception as e:
        session.rollback()
        store.delete(image_path)

        logger.exception("Error posting found item")
        raise StorageError("Server error during upload.", str(e))

    logger.info("Found item %s posted with image %s", db_item.item_id, image_path)

    return {
        "message": "Found item successfully posted!",
        "image_path": image_path,
        "item_id": db_item.item_id,
    }
