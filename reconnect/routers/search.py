import logging
from typing import Optional
from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, col, func, or_, select

from reconnect.db.db import get_session
from reconnect.models.found_item import FoundItem
from reconnect.utils.errors import NotFoundError, StorageError, ValidationError
from reconnect.utils.form_validator import clean
from reconnect.utils.media_store import get_media_store, with_image_urls

logger = logging.getLogger(__name__)

router = APIRouter()

SEARCH_RESULT_LIMIT = 50
# largest id a signed 64-bit primary key can hold
MAX_ITEM_ID = 2**63 - 1


def parse_item_id(raw: str) -> Optional[int]:
    """Ids that cannot name a row (non-numeric, zero, out of range) give None."""
    try:
        item_id = int(raw)
    except ValueError:
        return None

    if not 0 < item_id <= MAX_ITEM_ID:
        return None

    return item_id


def _icontains(column, needle: str):
    return func.lower(col(column)).contains(needle.lower(), autoescape=True)


def build_search_query(product: Optional[str], category: Optional[str], location: Optional[str]):
    query = select(FoundItem)

    if category:
        query = query.where(FoundItem.category == category)

    if product:
        query = query.where(or_(_icontains(FoundItem.description, product), _icontains(FoundItem.location_desc, product)))

    if location:
        query = query.where(or_(_icontains(FoundItem.city, location), _icontains(FoundItem.location_desc, location)))

    return query.order_by(col(FoundItem.found_date).desc(), col(FoundItem.item_id).desc()).limit(SEARCH_RESULT_LIMIT)


@router.get("/search")
def search_found_items(
    product: Optional[str] = None,
    category: Optional[str] = None,
    location: Optional[str] = None,
    session: Session = Depends(get_session),
    store=Depends(get_media_store),
):
    product, category, location = clean(product), clean(category), clean(location)

    if not product and not category and not location:
        raise ValidationError("Please provide search criteria (product, category, or location).")

    try:
        items = session.exec(build_search_query(product, category, location)).all()
    except SQLAlchemyError as e:
        logger.exception("Error during search")
        raise StorageError("Server error during search operation.", str(e))

    logger.debug("Search product=%r category=%r location=%r matched %d", product, category, location, len(items))

    return {
        "message": f"Found {len(items)} relevant items.",
        "results": with_image_urls(items, store),
    }


@router.get("/contact/{item_id}")
def get_finder_contact(
    item_id: str,
    session: Session = Depends(get_session),
):
    item_key = parse_item_id(item_id)
    if item_key is None:
        raise NotFoundError("Item not found.")

    try:
        contact = session.exec(
            select(FoundItem.finder_contact).where(FoundItem.item_id == item_key)
        ).first()
    except SQLAlchemyError as e:
        logger.exception("Error retrieving contact")
        raise StorageError("Server error retrieving contact.", str(e))

    if contact is None:
        raise NotFoundError("Item not found.")

    return {"contact": contact}
