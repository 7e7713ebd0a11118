"""Provider-agnostic geocoding interfaces."""

from abc import ABC, abstractmethod
from typing import Any, Optional

from pydantic import BaseModel


class GeocodedAddress(BaseModel):
    latitude: float
    longitude: float
    formatted_address: str
    city: Optional[str] = None
    state: Optional[str] = None
    postal_code: Optional[str] = None
    country: Optional[str] = None
    provider_id: str
    provider_data: dict[str, Any]
    confidence_score: float = 1.0


class GeocodingProvider(ABC):
    @abstractmethod
    async def geocode(self, address: str) -> Optional[GeocodedAddress]:
        pass
