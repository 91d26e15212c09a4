import os
import logging
import mimetypes
from typing import Optional
import requests

from reconnect.config import API_BASE_URL
from reconnect.client.form_state import FoundItemForm, missing_fields, to_multipart

logger = logging.getLogger(__name__)


class ApiError(Exception):
    def __init__(self, status_code: Optional[int], message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


class IncompleteFormError(ValueError):
    def __init__(self, missing: list):
        super().__init__("Please fill in all required fields (including the City field).")
        self.missing = missing


class ReConnectClient:
    """Thin wrapper over the ReConnect HTTP API."""

    def __init__(self, base_url: str = API_BASE_URL, session=None):
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()

    def _request(self, method: str, path: str, **kwargs):
        try:
            response = self.session.request(method, f"{self.base_url}{path}", **kwargs)
        except requests.RequestException as e:
            logger.error("%s %s failed: %s", method, path, e)
            raise ApiError(None, "Server or network error.") from e

        try:
            body = response.json()
        except ValueError:
            body = {}

        if response.status_code >= 400:
            raise ApiError(response.status_code, body.get("message") or f"Request failed with status {response.status_code}")

        return body

    def submit(self, form: FoundItemForm) -> dict:
        missing = missing_fields(form)
        if missing:
            raise IncompleteFormError(missing)

        mime = mimetypes.guess_type(form.image)[0] or "application/octet-stream"

        with open(form.image, "rb") as fh:
            return self._request(
                "POST",
                "/api/found/upload",
                data=to_multipart(form),
                files={"image": (os.path.basename(form.image), fh, mime)},
            )

    def search(self, product: Optional[str] = None, category: Optional[str] = None, location: Optional[str] = None) -> dict:
        params = {
            key: value
            for key, value in {"product": product, "category": category, "location": location}.items()
            if value
        }
        return self._request("GET", "/api/search", params=params)

    def get_contact(self, item_id: int) -> str:
        return self._request("GET", f"/api/contact/{item_id}")["contact"]

    def image_url(self, image_path: str) -> str:
        if image_path.startswith(("http://", "https://")):
            return image_path
        return f"{self.base_url}/{image_path.lstrip('/')}"

    def fetch_image(self, image_path: str) -> bytes:
        try:
            response = self.session.request("GET", self.image_url(image_path))
        except requests.RequestException as e:
            raise ApiError(None, "Server or network error.") from e

        if response.status_code >= 400:
            raise ApiError(response.status_code, f"Could not load image {image_path}")

        return response.content
