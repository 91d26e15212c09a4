import io
import os
import re
import time
import random
import logging
from typing import Optional
from PIL import Image, UnidentifiedImageError
import boto3
from botocore.exceptions import BotoCoreError, ClientError

from reconnect.models.found_item import FoundItemPublic
from reconnect.config import MAX_UPLOAD_BYTES, MAX_UPLOAD_SIZE_MB, MEDIA_BACKEND, R2_BUCKET, S3_ENDPOINT_URL, UPLOAD_DIR
from reconnect.utils.errors import StorageError, ValidationError

logger = logging.getLogger(__name__)

URL_PREFIX = "uploads"
FOLDER = "found_images"
DEFAULT_EXT = ".jpg"

_EXT_RE = re.compile(r"\.[a-z0-9]{1,10}")


def generate_filename(original_name: Optional[str]) -> str:
    """Timestamp plus a random integer, keeping the original extension.

    Collisions would need the same millisecond and the same draw out of a
    billion, so no lookup against existing names is done.
    """
    ext = os.path.splitext(os.path.basename(original_name or ""))[1].lower()
    if not _EXT_RE.fullmatch(ext):
        ext = DEFAULT_EXT

    ts = int(time.time() * 1000)
    return f"image-{ts}-{random.randint(0, 10**9)}{ext}"


def inspect_image(data: bytes):
    if not data:
        raise ValidationError("Missing required item details or image.")

    if len(data) > MAX_UPLOAD_BYTES:
        raise ValidationError(f"Image exceeds {MAX_UPLOAD_SIZE_MB}MB limit")

    try:
        with Image.open(io.BytesIO(data)) as img:
            img.verify()
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, SyntaxError):
        raise ValidationError("Uploaded file is not a readable image.")


class LocalMediaStore:
    """Flat directory of uploads, served statically under /uploads."""

    def __init__(self, root: str = UPLOAD_DIR):
        self.root = os.path.abspath(root)
        self.directory = os.path.join(self.root, FOLDER)

    def ensure_directory(self):
        if not os.path.isdir(self.directory):
            os.makedirs(self.directory, exist_ok=True)
            logger.info("Upload directory created: %s", self.directory)

    def save(self, data: bytes, original_name: Optional[str]) -> str:
        self.ensure_directory()

        for _ in range(5):
            name = generate_filename(original_name)
            path = os.path.join(self.directory, name)

            try:
                with open(path, "xb") as out:
                    out.write(data)
            except FileExistsError:
                continue
            except OSError as e:
                logger.exception("Error writing upload %s", path)
                self._remove(path)
                raise StorageError("Server error during upload.", str(e))

            return f"{URL_PREFIX}/{FOLDER}/{name}"

        raise StorageError("Server error during upload.", "Could not allocate a unique file name")

    def delete(self, image_path: Optional[str]):
        if not image_path:
            return

        path = self.resolve(image_path)
        if path:
            self._remove(path)

    def url_for(self, image_path: str) -> str:
        return f"/{image_path}"

    def resolve(self, image_path: str) -> Optional[str]:
        prefix = f"{URL_PREFIX}/"
        if not image_path.startswith(prefix):
            return None

        path = os.path.normpath(os.path.join(self.root, image_path[len(prefix):]))

        # stay inside the upload root
        if os.path.commonpath([self.root, path]) != self.root:
            return None

        return path

    def _remove(self, path: str):
        try:
            os.remove(path)
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.error("Error cleaning up file %s: %s", path, e)


class S3MediaStore:
    """S3-compatible bucket (Cloudflare R2 by default) using the same key scheme."""

    def __init__(self, bucket: str, endpoint_url: Optional[str] = None, client=None):
        self.bucket = bucket
        self.s3 = client or boto3.client(
            service_name="s3",
            endpoint_url=endpoint_url,
            aws_access_key_id=os.getenv("AWS_ACCESS_KEY_ID"),
            aws_secret_access_key=os.getenv("AWS_SECRET_ACCESS_KEY"),
            region_name="auto",
        )

    def save(self, data: bytes, original_name: Optional[str]) -> str:
        key = f"{URL_PREFIX}/{FOLDER}/{generate_filename(original_name)}"

        try:
            self.s3.upload_fileobj(io.BytesIO(data), self.bucket, key)
        except (BotoCoreError, ClientError) as e:
            logger.exception("Error uploading %s to bucket %s", key, self.bucket)
            raise StorageError("Server error during upload.", str(e))

        return key

    def delete(self, image_path: Optional[str]):
        if not image_path:
            return

        try:
            self.s3.delete_object(Bucket=self.bucket, Key=image_path)
        except (BotoCoreError, ClientError) as e:
            logger.error("Error deleting S3 object %s: %s", image_path, e)

    def url_for(self, image_path: str, expires_in=3600) -> Optional[str]:
        try:
            return self.s3.generate_presigned_url(
                "get_object",
                Params={"Bucket": self.bucket, "Key": image_path},
                ExpiresIn=expires_in,
            )
        except (BotoCoreError, ClientError) as e:
            logger.error("Error generating signed URL for %s: %s", image_path, e)
            return None


_media_store = None


def get_media_store():
    global _media_store

    if _media_store is None:
        if MEDIA_BACKEND == "s3":
            _media_store = S3MediaStore(R2_BUCKET, endpoint_url=S3_ENDPOINT_URL)
        else:
            _media_store = LocalMediaStore(UPLOAD_DIR)

    return _media_store


def with_image_urls(items: list, store) -> list:
    response = []

    for item in items:
        data = item.model_dump(exclude={"contact_no", "finder_contact"})
        data["image_url"] = store.url_for(item.image_path)
        response.append(FoundItemPublic.model_validate(data))

    return response
