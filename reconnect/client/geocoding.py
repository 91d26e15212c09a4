import logging
from dataclasses import dataclass
import requests

logger = logging.getLogger(__name__)

NOMINATIM_URL = "https://nominatim.openstreetmap.org/reverse"
# Nominatim usage policy requires an identifying User-Agent
USER_AGENT = "ReConnect Lost and Found App / v1.0"
GEOCODE_TIMEOUT = 10


class GeocodingError(Exception):
    pass


@dataclass(frozen=True)
class Place:
    display_name: str
    city: str


def reverse_geocode(latitude: float, longitude: float, session=None) -> Place:
    http = session or requests

    try:
        response = http.get(
            NOMINATIM_URL,
            params={"format": "jsonv2", "lat": latitude, "lon": longitude},
            headers={"User-Agent": USER_AGENT},
            timeout=GEOCODE_TIMEOUT,
        )
        response.raise_for_status()
        data = response.json()
    except (requests.RequestException, ValueError) as e:
        logger.error("Reverse geocoding failed for %s, %s: %s", latitude, longitude, e)
        raise GeocodingError("Location captured, but failed to find readable address. Please enter city manually.") from e

    if "error" in data:
        raise GeocodingError(data["error"])

    address = data.get("address") or {}
    city = address.get("city") or address.get("town") or address.get("village") or address.get("county") or ""
    display_name = data.get("display_name") or f"{latitude:.4f}, {longitude:.4f}"

    return Place(display_name=display_name, city=city)
