import httpx
import logging
from typing import Optional

from logistics.domain.models import ResolvedPlace
from logistics.domain.exceptions import GeocodingError, GeocodingUnavailableError
from logistics.application.interfaces import PlacesService

logger = logging.getLogger(__name__)


class HTTPPlacesClient(PlacesService):
    """Resolves a Google place_id into an address and coordinates"""

    def __init__(self, base_url: str, api_key: str, transport: Optional[httpx.AsyncBaseTransport] = None):
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._transport = transport

    async def resolve(self, place_id: str) -> ResolvedPlace:
        if not self._api_key:
            raise GeocodingError("GOOGLE_PLACES_API_KEY is not configured")

        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                response = await client.get(
                    f"{self._base_url}/details/json",
                    params={
                        "place_id": place_id,
                        "fields": "formatted_address,geometry/location",
                        "key": self._api_key
                    },
                    timeout=10.0
                )
        except httpx.RequestError as e:
            logger.error(f"Places service connection error: {e}")
            raise GeocodingUnavailableError(f"Places service unavailable: {str(e)}")

        if response.status_code != 200:
            logger.error(f"Places service returned {response.status_code} for {place_id}")
            raise GeocodingUnavailableError(f"Places service error: {response.status_code}")

        data = response.json()
        result = data.get("result")
        if data.get("status") != "OK" or not result:
            raise GeocodingError(f"Could not resolve place_id ({data.get('status') or 'no status'})")

        coords = (result.get("geometry") or {}).get("location") or {}
        lat, lng = coords.get("lat"), coords.get("lng")
        if not isinstance(lat, (int, float)) or not isinstance(lng, (int, float)):
            raise GeocodingError("Invalid places response: missing geometry.location")

        return ResolvedPlace(
            address=result.get("formatted_address") or "",
            latitude=float(lat),
            longitude=float(lng)
        )
