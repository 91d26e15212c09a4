from typing import Optional
from sqlalchemy import Double, Text
from sqlmodel import Field, SQLModel
from datetime import datetime, timezone


class FoundItemBase(SQLModel):
    # Item fields
    description: str = Field(sa_type=Text)
    category: str = Field(index=True)  # Electronics/Bag/Key/Document/Wallet/Other, not enforced
    location_desc: Optional[str] = Field(default=None, sa_type=Text)
    city: Optional[str] = None

    # GPS
    latitude: Optional[float] = Field(default=None, sa_type=Double)
    longitude: Optional[float] = Field(default=None, sa_type=Double)

    image_path: str


class FoundItem(FoundItemBase, table=True):
    __tablename__ = "found_items"

    item_id: Optional[int] = Field(default=None, primary_key=True)
    found_date: datetime = Field(default_factory=lambda: datetime.now(timezone.utc), index=True)

    # Finder info
    contact_no: str
    finder_contact: str  # disclosed through /api/contact


class FoundItemPublic(FoundItemBase):
    item_id: int
    found_date: datetime
    image_url: Optional[str] = None
