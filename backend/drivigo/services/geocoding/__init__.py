from .base import GeocodedAddress, GeocodingProvider
from .mapbox_provider import MapboxProvider

__all__ = ["GeocodedAddress", "GeocodingProvider", "MapboxProvider"]
