"""
Google Geocoding API client.

Resolves a free-text work location into latitude, longitude and a formatted
address. API Documentation:
https://developers.google.com/maps/documentation/geocoding/requests-geocoding
"""

import logging
import os
from dataclasses import dataclass
from typing import Any, Optional, Protocol

import requests

from jobs_eda.common.retry import RetryPolicy, call_with_retries

logger = logging.getLogger(__name__)

# Constants
API_TIMEOUT_SECONDS = 30
DEFAULT_BASE_URL = "https://maps.googleapis.com/maps/api/geocode/json"
DEFAULT_REGION_SUFFIX = ", New York, NY"

# API statuses worth another attempt
TRANSIENT_STATUSES = {"OVER_QUERY_LIMIT", "UNKNOWN_ERROR"}


class UnresolvedLocationError(Exception):
    """Raised when the geocoding service has no match for a location."""
    pass


class GeocodingServiceError(Exception):
    """Raised when the geocoding service rejects or fails a request."""
    pass


class TransientGeocodingError(GeocodingServiceError):
    """Service failure that may succeed if the request is repeated."""
    pass


@dataclass(frozen=True)
class GeocodeResult:
    """
    A resolved (or unresolved) location.

    ``location_query`` is the raw source field; unresolved results carry
    None for the coordinates and address.
    """

    location_query: str
    latitude: Optional[float]
    longitude: Optional[float]
    address: Optional[str]

    @property
    def resolved(self) -> bool:
        return self.latitude is not None and self.longitude is not None

    @classmethod
    def unresolved(cls, location_query: str) -> "GeocodeResult":
        return cls(location_query, None, None, None)


class Geocoder(Protocol):
    """Protocol for a geocoding backend used by the cache."""

    def geocode(self, query: str) -> GeocodeResult:
        """Resolve ``query`` or raise UnresolvedLocationError."""


class GoogleGeocodingClient:
    """
    Client for the Google Geocoding API.

    Environment Variables:
        GOOGLE_MAPS_API_KEY: Google Maps Platform API key
        GOOGLE_GEOCODING_URL: Endpoint override (default: Google's JSON endpoint)
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        region_suffix: str = DEFAULT_REGION_SUFFIX,
        max_retries: int = 2,
        retry_delay: float = 1.0,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize the geocoding client.

        Args:
            api_key: API key (defaults to GOOGLE_MAPS_API_KEY env var)
            base_url: Endpoint URL (defaults to GOOGLE_GEOCODING_URL env var or default)
            region_suffix: Text appended to every query to bias results
            max_retries: Sequential retries for transient failures
            retry_delay: Initial backoff delay in seconds
            session: Optional requests session (one is created otherwise)
        """
        self.api_key = api_key or os.getenv("GOOGLE_MAPS_API_KEY")
        self.base_url = base_url or os.getenv("GOOGLE_GEOCODING_URL", DEFAULT_BASE_URL)
        self.region_suffix = region_suffix or ""
        self.session = session or requests.Session()

        if not self.api_key:
            raise ValueError(
                "GOOGLE_MAPS_API_KEY must be set in environment or passed as parameter"
            )

        self.retry_policy = RetryPolicy(
            max_retries=max_retries,
            initial_delay=retry_delay,
            backoff_factor=2.0,
            retry_on=(
                requests.exceptions.ConnectionError,
                requests.exceptions.Timeout,
                TransientGeocodingError,
            ),
        )

    def geocode(self, query: str) -> GeocodeResult:
        """
        Resolve a location string.

        Args:
            query: Raw location text from the dataset

        Returns:
            GeocodeResult keyed by the raw ``query``

        Raises:
            UnresolvedLocationError: If the query is blank or has no match
            GeocodingServiceError: On HTTP errors or rejected requests
            requests.exceptions.RequestException: If transport errors persist
                after retries
        """
        if not query or not str(query).strip():
            raise UnresolvedLocationError("Empty location query")

        address = f"{str(query).strip()}{self.region_suffix}"
        payload = call_with_retries(
            self._request_once,
            address,
            policy=self.retry_policy,
            context={"query": query},
        )

        results = payload.get("results") or []
        first = results[0] if results else None
        location = (first or {}).get("geometry", {}).get("location", {})
        if "lat" not in location or "lng" not in location:
            raise UnresolvedLocationError(f"No coordinates returned for {query!r}")

        result = GeocodeResult(
            location_query=query,
            latitude=float(location["lat"]),
            longitude=float(location["lng"]),
            address=first.get("formatted_address"),
        )
        logger.debug(
            "Location geocoded",
            extra={"query": query, "latitude": result.latitude, "longitude": result.longitude},
        )
        return result

    def _request_once(self, address: str) -> dict[str, Any]:
        params = {"address": address, "key": self.api_key}

        response = self.session.get(self.base_url, params=params, timeout=API_TIMEOUT_SECONDS)

        if self.retry_policy.is_retryable_status(response.status_code):
            raise TransientGeocodingError(
                f"Geocoding API error {response.status_code}: {response.text[:200]}"
            )
        if response.status_code >= 400:
            logger.error("Geocoding API error %s: %s", response.status_code, response.text[:200])
            raise GeocodingServiceError(
                f"Geocoding API error {response.status_code}: {response.text[:200]}"
            )

        try:
            data = response.json()
        except ValueError as exc:
            raise GeocodingServiceError("Failed to parse geocoding response") from exc

        status = data.get("status") if isinstance(data, dict) else None
        if status == "OK":
            return data
        if status == "ZERO_RESULTS":
            raise UnresolvedLocationError(f"No match for {address!r}")
        if status in TRANSIENT_STATUSES:
            raise TransientGeocodingError(f"Geocoding API status {status}")
        if status == "REQUEST_DENIED":
            logger.error("Geocoding request denied - check GOOGLE_MAPS_API_KEY")

        raise GeocodingServiceError(
            f"Geocoding API status {status}: {data.get('error_message', '') if isinstance(data, dict) else ''}"
        )
