"""
Geocoding Service - reverse lookup of a human-readable address
"""
from typing import Optional

import httpx

from atams.logging import get_logger
from attendance_kiosk.core.config import settings

logger = get_logger(__name__)


class GeocodingService:
    def __init__(
        self,
        enabled: Optional[bool] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ) -> None:
        self.enabled = settings.REVERSE_GEOCODE_ENABLED if enabled is None else enabled
        self.url = settings.REVERSE_GEOCODE_URL
        self.timeout = settings.REVERSE_GEOCODE_TIMEOUT_SECONDS
        self.user_agent = settings.REVERSE_GEOCODE_USER_AGENT
        self.transport = transport

    async def reverse(self, latitude: float, longitude: float) -> Optional[str]:
        """
        Look up the address for a coordinate pair

        Returns:
            Address string, or None when disabled or on any lookup failure
        """
        if not self.enabled:
            return None

        params = {"format": "jsonv2", "lat": latitude, "lon": longitude}

        try:
            async with httpx.AsyncClient(
                transport=self.transport,
                timeout=self.timeout,
                headers={"User-Agent": self.user_agent}
            ) as client:
                resp = await client.get(self.url, params=params)
            resp.raise_for_status()
            data = resp.json()
        except httpx.HTTPError as exc:
            logger.warning(f"Reverse geocoding failed for {latitude},{longitude}: {str(exc)}")
            return None
        except ValueError as exc:
            logger.warning(f"Reverse geocoding returned invalid JSON: {str(exc)}")
            return None

        if not isinstance(data, dict):
            return None
        return data.get("display_name") or None
