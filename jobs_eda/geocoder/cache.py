"""
File-backed geocode cache.

Geocoding calls go to a paid external API, so every answer (including "no
match") is stored the first time a location string is seen and reused on
every later lookup and every later run. Entries are write-once: a stored
result is never replaced within the store. Lookups that fail because of the
service (rejected key, outage, network error) are not answers; they are
skipped for the rest of the run and asked again by the next one.

The store is a CSV file with the columns ``location_query``, ``latitude``,
``longitude`` and ``address``. Previously written subset files (postings plus
coordinates) can also be imported with ``seed_from_frame``.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Optional

import pandas as pd
import requests

from jobs_eda.common.dataset import WORK_LOCATION

from .client import (
    GeocodeResult,
    Geocoder,
    GeocodingServiceError,
    UnresolvedLocationError,
)

logger = logging.getLogger(__name__)

CACHE_COLUMNS = ["location_query", "latitude", "longitude", "address"]

LONGITUDE = "longitude"
LATITUDE = "latitude"
ADDRESS = "address"
COLOR = "color"


def _none_if_missing(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, str):
        return value or None
    return None if pd.isna(value) else value


def _as_float(value: Any) -> Optional[float]:
    value = _none_if_missing(value)
    return None if value is None else float(value)


class GeocodeCache:
    """
    Key-value store from raw location string to GeocodeResult.

    Lookups go through ``resolve``: the store is consulted first and the
    injected geocoder is called only for keys never seen before.

    A "no match" answer is a real result and is stored as an unresolved entry.
    A service or transport failure is only remembered for the lifetime of this
    object: it is not retried within the run, never written by ``save``, and
    the next run calls the service for that key again.
    """

    def __init__(
        self,
        path: Optional[Path | str] = None,
        geocoder: Optional[Geocoder] = None,
    ):
        """
        Args:
            path: CSV file backing the store. None keeps the cache in memory.
            geocoder: Backend used for unknown keys. None makes the cache
                read-only: unknown keys resolve to an unstored unresolved result.
        """
        self.path = Path(path) if path else None
        self.geocoder = geocoder
        self._entries: dict[str, GeocodeResult] = {}
        self._failed: dict[str, GeocodeResult] = {}
        self.hits = 0
        self.misses = 0
        self.service_calls = 0
        self.service_failures = 0

        if self.path is not None and self.path.exists():
            self.load()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, query: object) -> bool:
        return query in self._entries

    def get(self, query: str) -> Optional[GeocodeResult]:
        """Return the stored result for ``query``, or None if never stored."""
        return self._entries.get(query)

    def put(self, result: GeocodeResult) -> GeocodeResult:
        """
        Store a result unless its key is already present.

        Returns:
            The entry held by the store after the call
        """
        existing = self._entries.get(result.location_query)
        if existing is not None:
            logger.debug(
                "Geocode entry already cached; keeping existing value",
                extra={"query": result.location_query},
            )
            return existing
        self._entries[result.location_query] = result
        return result

    def resolve(self, query: str) -> GeocodeResult:
        """
        Look up ``query``, calling the geocoder at most once per key.

        Args:
            query: Raw location string from the dataset

        Returns:
            Cached or freshly resolved GeocodeResult (possibly unresolved)
        """
        cached = self.get(query)
        if cached is None:
            cached = self._failed.get(query)
        if cached is not None:
            self.hits += 1
            return cached

        self.misses += 1
        if self.geocoder is None:
            logger.debug("No geocoder configured; leaving %r unresolved", query)
            return GeocodeResult.unresolved(query)

        self.service_calls += 1
        try:
            result = self.geocoder.geocode(query)
        except UnresolvedLocationError as exc:
            logger.info("Location unresolved: %s", exc, extra={"query": query})
            result = GeocodeResult.unresolved(query)
        except (GeocodingServiceError, requests.exceptions.RequestException) as exc:
            logger.warning(
                "Geocoding failed; skipping for this run",
                extra={"query": query, "error": str(exc), "exception_type": type(exc).__name__},
            )
            self.service_failures += 1
            failed = GeocodeResult.unresolved(query)
            self._failed[query] = failed
            return failed

        if result.location_query != query:
            result = GeocodeResult(query, result.latitude, result.longitude, result.address)
        return self.put(result)

    def load(self) -> int:
        """
        Read entries from the backing file.

        Entries already in memory win over entries from the file.

        Returns:
            Number of entries added
        """
        if self.path is None or not self.path.exists():
            return 0

        frame = pd.read_csv(
            self.path,
            dtype={"location_query": str, "address": str},
            keep_default_na=False,
            na_values={"latitude": [""], "longitude": [""]},
        )
        missing = [column for column in CACHE_COLUMNS if column not in frame.columns]
        if missing:
            raise ValueError(
                f"Geocode cache file {self.path} is missing columns: {', '.join(missing)}"
            )

        before = len(self._entries)
        for row in frame.itertuples(index=False):
            self.put(
                GeocodeResult(
                    location_query=row.location_query,
                    latitude=_as_float(row.latitude),
                    longitude=_as_float(row.longitude),
                    address=_none_if_missing(row.address),
                )
            )
        added = len(self._entries) - before

        logger.info(
            "Geocode cache loaded",
            extra={"cache_path": str(self.path), "entries": added},
        )
        return added

    def save(self) -> Optional[Path]:
        """Write stored entries to the backing file; no-op for in-memory caches.

        Lookups that failed during this run are not stored and not written.
        """
        if self.path is None:
            return None

        self.path.parent.mkdir(parents=True, exist_ok=True)
        frame = pd.DataFrame(
            [
                (e.location_query, e.latitude, e.longitude, e.address)
                for e in self._entries.values()
            ],
            columns=CACHE_COLUMNS,
        )
        frame.to_csv(self.path, index=False)

        logger.info(
            "Geocode cache saved",
            extra={"cache_path": str(self.path), "entries": len(frame)},
        )
        return self.path

    def seed_from_frame(self, frame: pd.DataFrame, query_column: str = WORK_LOCATION) -> int:
        """
        Import resolved rows from a previously written geocoded subset.

        Rows without coordinates are skipped: a subset file cannot tell a "no
        match" answer from a lookup that failed, so those keys are left to the
        cache file (or to the service).

        Args:
            frame: Table with ``query_column``, latitude, longitude and address
            query_column: Column holding the raw location string

        Returns:
            Number of entries added
        """
        before = len(self._entries)
        for query, latitude, longitude, address in zip(
            frame[query_column], frame[LATITUDE], frame[LONGITUDE], frame[ADDRESS]
        ):
            query = _none_if_missing(query)
            latitude, longitude = _as_float(latitude), _as_float(longitude)
            if query is None or latitude is None or longitude is None:
                continue
            self.put(
                GeocodeResult(
                    location_query=str(query),
                    latitude=latitude,
                    longitude=longitude,
                    address=_none_if_missing(address),
                )
            )
        return len(self._entries) - before


def geocode_postings(
    postings: pd.DataFrame,
    cache: GeocodeCache,
    color: str,
    query_column: str = WORK_LOCATION,
) -> pd.DataFrame:
    """
    Attach coordinates to every posting of a subset.

    Rows are processed sequentially. Postings with an empty location are
    left unresolved without consulting the cache.

    Args:
        postings: Subset of postings
        cache: Geocode cache used for every lookup
        color: Marker color for this subset on the map
        query_column: Column holding the location text

    Returns:
        Copy of ``postings`` with longitude, latitude, address and color columns
    """
    longitudes: list[Optional[float]] = []
    latitudes: list[Optional[float]] = []
    addresses: list[Optional[str]] = []

    for raw in postings[query_column]:
        query = _none_if_missing(raw)
        if query is None or not str(query).strip():
            result = GeocodeResult.unresolved("")
        else:
            result = cache.resolve(str(query))
        longitudes.append(result.longitude)
        latitudes.append(result.latitude)
        addresses.append(result.address)

    geocoded = postings.copy()
    geocoded[LONGITUDE] = pd.Series(longitudes, index=postings.index, dtype="float64")
    geocoded[LATITUDE] = pd.Series(latitudes, index=postings.index, dtype="float64")
    geocoded[ADDRESS] = pd.Series(addresses, index=postings.index, dtype="object")
    geocoded[COLOR] = color

    logger.info(
        "Subset geocoded",
        extra={
            "rows": len(geocoded),
            "resolved": int(geocoded[LATITUDE].notna().sum()),
            "color": color,
            "cache_hits": cache.hits,
            "service_calls": cache.service_calls,
        },
    )
    return geocoded


def geocode_subset(
    postings: pd.DataFrame,
    path: Path | str,
    cache: GeocodeCache,
    color: str,
    query_column: str = WORK_LOCATION,
) -> pd.DataFrame:
    """
    Geocode a subset, reusing and then rewriting its persisted file.

    An existing file at ``path`` is imported into the cache first, so rows
    geocoded by an earlier run never reach the external service again.

    Returns:
        The geocoded subset (all rows, resolved or not)
    """
    resolved_path = Path(path)
    if resolved_path.exists():
        previous = pd.read_csv(resolved_path)
        if {query_column, LATITUDE, LONGITUDE, ADDRESS}.issubset(previous.columns):
            added = cache.seed_from_frame(previous, query_column)
            logger.info(
                "Reusing geocoded subset file",
                extra={"subset_path": str(resolved_path), "entries_added": added},
            )
        else:
            logger.warning("Ignoring subset file without coordinate columns: %s", resolved_path)

    geocoded = geocode_postings(postings, cache, color, query_column)

    resolved_path.parent.mkdir(parents=True, exist_ok=True)
    geocoded.to_csv(resolved_path, index=False)
    return geocoded


def mappable(geocoded: pd.DataFrame) -> pd.DataFrame:
    """Rows with coordinates; unresolved rows stay in the files but not on maps."""
    return geocoded[geocoded[LATITUDE].notna() & geocoded[LONGITUDE].notna()]
