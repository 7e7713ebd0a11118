"""Mapbox geocoding provider."""

import logging
from typing import Any, Optional
from urllib.parse import quote

import httpx

from ...core.config import settings
from .base import GeocodedAddress, GeocodingProvider

logger = logging.getLogger(__name__)


class MapboxProvider(GeocodingProvider):
    def __init__(self, access_token: Optional[str] = None, country: Optional[str] = None) -> None:
        if access_token is None:
            access_token = settings.mapbox_access_token
        self.access_token = access_token
        self.country = (country or settings.geocoding_country or "").lower()
        self.base_url = "https://api.mapbox.com"

    async def geocode(self, address: str) -> Optional[GeocodedAddress]:
        """Resolve ``address`` to its best match, or None when nothing matches."""
        if not address or not address.strip():
            return None
        if not self.access_token:
            logger.info("Mapbox geocoding skipped - access token not configured")
            return None

        params = {"access_token": self.access_token, "limit": "1"}
        if self.country:
            params["country"] = self.country

        try:
            async with httpx.AsyncClient(timeout=10) as client:
                encoded = quote(address.strip(), safe="")
                resp = await client.get(
                    f"{self.base_url}/geocoding/v5/mapbox.places/{encoded}.json",
                    params=params,
                )
        except httpx.HTTPError as exc:
            logger.warning("Mapbox geocoding request failed: %s", exc)
            return None

        if resp.status_code != 200:
            logger.warning("Mapbox geocoding returned HTTP %s", resp.status_code)
            return None
        features = resp.json().get("features") or []
        if not features:
            return None
        return self._parse_feature(features[0])

    def _parse_feature(self, feature: dict[str, Any]) -> GeocodedAddress:
        center = feature.get("center") or [None, None]
        lng, lat = (center[0], center[1]) if len(center) >= 2 else (None, None)

        context_entries = [
            entry for entry in (feature.get("context") or []) if isinstance(entry, dict)
        ]

        def _context(pref: str, key: str = "text") -> Optional[str]:
            for entry in context_entries:
                ctx_id = entry.get("id", "")
                if isinstance(ctx_id, str) and ctx_id.startswith(pref):
                    value = entry.get(key)
                    return value if isinstance(value, str) else None
            return None

        country = _context("country.", "short_code") or _context("country.")
        if country:
            country = country.split("-")[-1].upper()

        place_id = feature.get("id", "") or ""
        return GeocodedAddress(
            latitude=float(lat) if isinstance(lat, (int, float)) else 0.0,
            longitude=float(lng) if isinstance(lng, (int, float)) else 0.0,
            formatted_address=feature.get("place_name") or "",
            city=_context("place.") or _context("locality."),
            state=_context("region."),
            postal_code=_context("postcode."),
            country=country,
            provider_id=place_id if place_id.startswith("mapbox:") else f"mapbox:{place_id}",
            provider_data=feature,
            confidence_score=float(feature.get("relevance", 1.0)),
        )
