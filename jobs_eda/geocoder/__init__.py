"""
Geocoding stage.

Resolves work locations through the Google Geocoding API behind a
write-once, file-backed cache so repeated runs don't re-query the service.
"""

from .cache import GeocodeCache, geocode_postings, geocode_subset, mappable
from .client import (
    GeocodeResult,
    Geocoder,
    GeocodingServiceError,
    GoogleGeocodingClient,
    UnresolvedLocationError,
)

__all__ = [
    "GeocodeCache",
    "GeocodeResult",
    "Geocoder",
    "GeocodingServiceError",
    "GoogleGeocodingClient",
    "UnresolvedLocationError",
    "geocode_postings",
    "geocode_subset",
    "mappable",
]
