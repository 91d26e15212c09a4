import io
import os
import tempfile

# Configure before the app module reads its settings
os.environ["DB_HOST"] = ""
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["MEDIA_BACKEND"] = "local"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="reconnect-uploads-")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from PIL import Image  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402
from sqlmodel import Session, SQLModel, create_engine, select  # noqa: E402

from reconnect.db.db import get_session  # noqa: E402
from reconnect.main import app  # noqa: E402
from reconnect.models.found_item import FoundItem  # noqa: E402
from reconnect.utils.media_store import LocalMediaStore, get_media_store  # noqa: E402


def _make_image(color="red", size=(8, 8), fmt="PNG") -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def store(tmp_path):
    return LocalMediaStore(str(tmp_path / "uploads"))


@pytest.fixture
def client(engine, store):
    def get_session_override():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = get_session_override
    app.dependency_overrides[get_media_store] = lambda: store

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def image_bytes():
    return _make_image()


@pytest.fixture
def make_image():
    return _make_image


@pytest.fixture
def stored_files(store):
    def _stored_files():
        if not os.path.isdir(store.directory):
            return []
        return sorted(os.listdir(store.directory))

    return _stored_files


@pytest.fixture
def all_items(engine):
    def _all_items():
        with Session(engine) as session:
            return session.exec(select(FoundItem)).all()

    return _all_items
