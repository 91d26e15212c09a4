from typing import Optional
from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from reconnect.utils.errors import ValidationError

MISSING_DETAILS = "Missing required item details or image."


class ValidatedFoundItem(BaseModel):
    description: str = Field(min_length=1)
    contact_no: str = Field(min_length=1)
    category: str = Field(min_length=1)
    location_desc: Optional[str] = None
    city: Optional[str] = None
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)


def clean(value: Optional[str]) -> Optional[str]:
    """Strip a form value, mapping blank input to None."""
    if value is None:
        return None

    value = value.strip()
    return value or None


def validate_found_item_form(
    description: Optional[str],
    contact_no: Optional[str],
    category: Optional[str],
    location_desc: Optional[str],
    city: Optional[str],
    latitude: Optional[str],
    longitude: Optional[str],
    has_image: bool,
) -> ValidatedFoundItem:
    description = clean(description)
    contact_no = clean(contact_no)
    category = clean(category)

    if not has_image or not description or not contact_no or not category:
        raise ValidationError(MISSING_DETAILS)

    try:
        return ValidatedFoundItem(
            description=description,
            contact_no=contact_no,
            category=category,
            location_desc=clean(location_desc),
            city=clean(city),
            latitude=clean(latitude),
            longitude=clean(longitude),
        )
    except PydanticValidationError as e:
        reasons = [f"Invalid {'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()]
        raise ValidationError("; ".join(reasons))
