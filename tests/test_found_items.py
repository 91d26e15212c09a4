import os

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.dialects import mysql
from sqlalchemy.exc import OperationalError
from sqlalchemy.schema import CreateTable
from sqlmodel import Session

from reconnect.config import UPLOAD_DIR
from reconnect.main import app
from reconnect.models.found_item import FoundItem
from reconnect.utils import media_store
from reconnect.utils.media_store import LocalMediaStore

VALID_FORM = {
    "description": "Red wallet",
    "contact_no": "+911234567890",
    "category": "Wallet",
    "city": "Pune",
}


def post_item(client, image, data=None, filename="wallet.png"):
    files = {"image": (filename, image, "image/png")} if image is not None else None
    return client.post("/api/found/upload", data=data or VALID_FORM, files=files)


def test_upload_creates_one_row_and_one_file(client, store, all_items, stored_files, image_bytes):
    response = post_item(client, image_bytes)

    assert response.status_code == 201
    body = response.json()
    assert body["message"] == "Found item successfully posted!"
    assert body["image_path"].startswith("uploads/found_images/image-")
    assert body["image_path"].endswith(".png")

    assert len(stored_files()) == 1
    path = store.resolve(body["image_path"])
    with open(path, "rb") as fh:
        assert fh.read() == image_bytes

    items = all_items()
    assert len(items) == 1
    item = items[0]
    assert item.item_id == body["item_id"]
    assert item.image_path == body["image_path"]
    assert item.finder_contact == item.contact_no == "+911234567890"
    assert item.city == "Pune"
    assert item.latitude is None and item.longitude is None
    assert item.found_date is not None


def test_upload_keeps_coordinates_and_spot(client, all_items, image_bytes):
    data = dict(VALID_FORM, latitude="18.5204", longitude="73.8567", location_desc="  Platform 3, bench near exit ")
    response = post_item(client, image_bytes, data=data)

    assert response.status_code == 201
    item = all_items()[0]
    assert item.latitude == pytest.approx(18.5204)
    assert item.longitude == pytest.approx(73.8567)
    assert item.location_desc == "Platform 3, bench near exit"


def test_empty_optional_fields_are_stored_as_null(client, all_items, image_bytes):
    data = dict(VALID_FORM, latitude="", longitude="", location_desc="", city="")
    response = post_item(client, image_bytes, data=data)

    assert response.status_code == 201
    item = all_items()[0]
    assert item.latitude is None
    assert item.location_desc is None
    assert item.city is None


def test_upload_without_image_is_rejected(client, all_items, stored_files):
    response = post_item(client, None)

    assert response.status_code == 400
    assert response.json()["message"] == "Missing required item details or image."
    assert all_items() == []
    assert stored_files() == []


@pytest.mark.parametrize("field", ["description", "contact_no", "category"])
@pytest.mark.parametrize("value", [None, "", "   "])
def test_missing_required_field_creates_nothing(client, all_items, stored_files, image_bytes, field, value):
    data = dict(VALID_FORM)
    if value is None:
        del data[field]
    else:
        data[field] = value

    response = post_item(client, image_bytes, data=data)

    assert response.status_code == 400
    assert all_items() == []
    assert stored_files() == []


def test_non_image_upload_is_rejected(client, all_items, stored_files):
    response = post_item(client, b"definitely not an image", filename="notes.png")

    assert response.status_code == 400
    assert response.json()["message"] == "Uploaded file is not a readable image."
    assert all_items() == []
    assert stored_files() == []


def test_oversized_upload_is_rejected(client, all_items, stored_files, image_bytes, monkeypatch):
    monkeypatch.setattr(media_store, "MAX_UPLOAD_BYTES", 10)

    response = post_item(client, image_bytes)

    assert response.status_code == 400
    assert "limit" in response.json()["message"]
    assert stored_files() == []


@pytest.mark.parametrize("latitude", ["north", "95", "-91"])
def test_bad_latitude_is_rejected(client, all_items, stored_files, image_bytes, latitude):
    response = post_item(client, image_bytes, data=dict(VALID_FORM, latitude=latitude))

    assert response.status_code == 400
    assert "latitude" in response.json()["message"]
    assert all_items() == []
    assert stored_files() == []


def test_failed_insert_removes_the_stored_file(client, all_items, stored_files, image_bytes, monkeypatch):
    def failing_commit(self):
        raise OperationalError("INSERT INTO found_items", {}, Exception("database is gone"))

    monkeypatch.setattr(Session, "commit", failing_commit)

    response = post_item(client, image_bytes)

    assert response.status_code == 500
    body = response.json()
    assert body["message"] == "Server error during upload."
    assert "database is gone" in body["error"]
    assert stored_files() == []

    monkeypatch.undo()
    assert all_items() == []


def test_identical_submissions_are_independent(client, all_items, stored_files, image_bytes):
    first = post_item(client, image_bytes).json()
    second = post_item(client, image_bytes).json()

    assert first["item_id"] != second["item_id"]
    assert first["image_path"] != second["image_path"]
    assert len(stored_files()) == 2
    assert len(all_items()) == 2


def test_uploaded_images_are_served_statically(image_bytes):
    image_path = LocalMediaStore(UPLOAD_DIR).save(image_bytes, "photo.png")

    with TestClient(app) as client:
        response = client.get(f"/{image_path}")

    assert response.status_code == 200
    assert response.content == image_bytes
    os.remove(LocalMediaStore(UPLOAD_DIR).resolve(image_path))


def test_root_reports_status(client):
    response = client.get("/")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "database": True}


def test_long_description_is_stored_intact(client, all_items, image_bytes):
    description = "Red leather wallet with a torn card slot. " * 15
    data = dict(VALID_FORM, description=description.strip(), location_desc="x" * 400)
    response = post_item(client, image_bytes, data=data)

    assert response.status_code == 201
    item = all_items()[0]
    assert item.description == description.strip()
    assert len(item.location_desc) == 400


def test_mysql_columns_fit_free_text_and_coordinates():
    ddl = str(CreateTable(FoundItem.__table__).compile(dialect=mysql.dialect()))

    assert "description TEXT NOT NULL" in ddl
    assert "location_desc TEXT" in ddl
    assert "latitude DOUBLE" in ddl
    assert "longitude DOUBLE" in ddl
