from typing import Optional
from pydantic import BaseModel, ConfigDict

CATEGORIES = ("Electronics", "Bag", "Key", "Document", "Wallet", "Other")

# city is only required on the client, the API accepts reports without it
REQUIRED_FIELDS = ("image", "category", "description", "contact_no", "city")
TEXT_FIELDS = ("description", "location_desc", "contact_no", "city", "category")

LOCATION_DESC_LIMIT = 150


class FoundItemForm(BaseModel):
    """Snapshot of the report form. Every edit returns a new form."""

    model_config = ConfigDict(frozen=True)

    description: str = ""
    location_desc: str = ""
    contact_no: str = ""
    city: str = ""
    category: str = ""
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    image: Optional[str] = None  # local file path


def edit_field(form: FoundItemForm, name: str, value: str) -> FoundItemForm:
    if name not in TEXT_FIELDS:
        raise ValueError(f"Unknown form field '{name}'")

    if name == "category" and value and value not in CATEGORIES:
        raise ValueError(f"Invalid category option '{value}'")

    return form.model_copy(update={name: value})


def set_image(form: FoundItemForm, path: Optional[str]) -> FoundItemForm:
    return form.model_copy(update={"image": path})


def set_coordinates(form: FoundItemForm, latitude: float, longitude: float) -> FoundItemForm:
    return form.model_copy(update={"latitude": latitude, "longitude": longitude})


def apply_place(form: FoundItemForm, place) -> FoundItemForm:
    """Autofill city and spot description from a reverse-geocoded place."""
    return form.model_copy(
        update={
            "city": place.city,
            "location_desc": place.display_name[:LOCATION_DESC_LIMIT],
        }
    )


def missing_fields(form: FoundItemForm) -> list:
    return [name for name in REQUIRED_FIELDS if not getattr(form, name)]


def to_multipart(form: FoundItemForm) -> dict:
    # empty values are left out of the request entirely
    return {
        name: str(value)
        for name, value in form.model_dump(exclude={"image"}).items()
        if value is not None and value != ""
    }
