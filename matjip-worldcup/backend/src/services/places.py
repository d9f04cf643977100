from __future__ import annotations

import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, List, Optional, Protocol, Tuple

import requests
from loguru import logger

from config import Configuration
from models import GeoPoint, PlaceDetails, VenueRecord


class LookupUnavailable(RuntimeError):
    """The places lookup is not ready or returned a non-OK status."""

    def __init__(self, message: str, status: Optional[str] = None) -> None:
        super().__init__(message)
        self.status = status


class PlacesProvider(Protocol):
    ready: bool

    def search(self, location: GeoPoint, radius_m: int) -> List[VenueRecord]:
        ...

    def details(self, place_id: str) -> PlaceDetails:
        ...


@dataclass
class _RetryPolicy:
    retries: int = 3
    base_delay: float = 0.5


_RETRYABLE_STATUSES = {"UNKNOWN_ERROR", "OVER_QUERY_LIMIT"}


class GooglePlacesClient:
    """Nearby Search / Place Details client for the Google Places web service."""

    def __init__(self, cfg: Configuration) -> None:
        self.cfg = cfg
        self.base = cfg.places_base_url.rstrip("/")
        self.session = requests.Session()
        self._policy = _RetryPolicy()
        self._cache_ttl = 60 * 10  # 10 minutes
        self._cache_max = 128
        self._search_cache: OrderedDict[str, Tuple[float, List[VenueRecord]]] = OrderedDict()
        self._details_cache: OrderedDict[str, Tuple[float, PlaceDetails]] = OrderedDict()

    @property
    def ready(self) -> bool:
        return bool(self.cfg.google_places_api_key)

    def _cache_get(self, cache: OrderedDict[str, Tuple[float, Any]], key: str):  # type: ignore[valid-type]
        entry = cache.get(key)
        if not entry:
            return None
        ts, value = entry
        if time.time() - ts > self._cache_ttl:
            cache.pop(key, None)
            return None
        cache.move_to_end(key)
        return value

    def _cache_set(self, cache: OrderedDict[str, Tuple[float, Any]], key: str, value):  # type: ignore[valid-type]
        if len(cache) >= self._cache_max:
            cache.popitem(last=False)
        cache[key] = (time.time(), value)

    def _get(self, path: str, params: dict) -> dict:
        if not self.ready:
            raise LookupUnavailable("places lookup is not configured")
        url = f"{self.base}{path}"
        headers = {"Accept": "application/json"}
        params = {**params, "key": self.cfg.google_places_api_key, "language": self.cfg.places_language}
        attempt = 0
        while True:
            attempt += 1
            try:
                resp = self.session.get(url, headers=headers, params=params, timeout=self.cfg.places_timeout)
            except requests.RequestException as exc:  # network error
                if attempt <= self._policy.retries:
                    time.sleep(self._policy.base_delay * attempt)
                    continue
                raise LookupUnavailable(f"request error: {exc}")

            if resp.status_code in (429, 500, 502, 503, 504):
                if attempt <= self._policy.retries:
                    time.sleep(self._policy.base_delay * attempt)
                    continue
                raise LookupUnavailable(f"upstream {resp.status_code}: {resp.text[:300]}")

            if not resp.ok:
                raise LookupUnavailable(f"upstream {resp.status_code}: {resp.text[:300]}")

            try:
                payload = resp.json()
            except ValueError:
                raise LookupUnavailable("invalid json response")

            status = payload.get("status", "OK")
            if status in _RETRYABLE_STATUSES and attempt <= self._policy.retries:
                time.sleep(self._policy.base_delay * attempt)
                continue
            if status not in ("OK", "ZERO_RESULTS"):
                message = payload.get("error_message") or "places search failed"
                raise LookupUnavailable(f"{message} ({status})", status=status)
            return payload

    def search(self, location: GeoPoint, radius_m: int) -> List[VenueRecord]:
        key = f"nearby:{location.lat:.5f},{location.lng:.5f}:{radius_m}"
        cached = self._cache_get(self._search_cache, key)
        if cached is not None:
            logger.debug("places cache hit {}", key)
            return list(cached)
        payload = self._get(
            "/maps/api/place/nearbysearch/json",
            {
                "location": f"{location.lat},{location.lng}",
                "radius": radius_m,
                "type": "restaurant",
                "keyword": self.cfg.places_keyword,
            },
        )
        results = parse_places(payload.get("results") or [])
        self._cache_set(self._search_cache, key, list(results))
        return results

    def details(self, place_id: str) -> PlaceDetails:
        cached = self._cache_get(self._details_cache, place_id)
        if cached is not None:
            return cached
        payload = self._get(
            "/maps/api/place/details/json",
            {"place_id": place_id, "fields": "reviews,editorial_summary"},
        )
        details = parse_details(payload.get("result") or {})
        self._cache_set(self._details_cache, place_id, details)
        return details


def parse_places(items: List[dict]) -> List[VenueRecord]:
    results: list[VenueRecord] = []
    for item in items:
        place_id = item.get("place_id")
        loc = ((item.get("geometry") or {}).get("location") or {})
        lat, lng = loc.get("lat"), loc.get("lng")
        if not place_id or lat is None or lng is None:
            continue
        rating = item.get("rating")
        rating_count = item.get("user_ratings_total")
        price_level = item.get("price_level")
        opening = item.get("opening_hours") or {}
        open_now = opening.get("open_now") if isinstance(opening, dict) else None
        photos = tuple(
            str(p["photo_reference"]) for p in (item.get("photos") or []) if isinstance(p, dict) and p.get("photo_reference")
        )
        results.append(
            VenueRecord(
                id=str(place_id),
                name=str(item.get("name") or ""),
                location=GeoPoint(lat=float(lat), lng=float(lng)),
                rating=(float(rating) if isinstance(rating, (int, float)) else None),
                rating_count=(int(rating_count) if isinstance(rating_count, int) else None),
                price_level=(price_level if isinstance(price_level, int) else None),
                types=tuple(str(t) for t in (item.get("types") or [])),
                vicinity=str(item.get("vicinity") or ""),
                open_now=(open_now if isinstance(open_now, bool) else None),
                photos=photos,
            )
        )
    return results


def parse_details(result: dict) -> PlaceDetails:
    reviews = [str(r.get("text")) for r in (result.get("reviews") or []) if isinstance(r, dict) and r.get("text")][:3]
    summary = (result.get("editorial_summary") or {}).get("overview")
    if summary:
        reviews.append(str(summary))
    # Place Details has no structured menu; sections appear only in some payloads.
    menu_items: list[str] = []
    for section in ((result.get("menu") or {}).get("sections") or []):
        for entry in section.get("items") or []:
            if entry.get("name"):
                menu_items.append(str(entry["name"]))
    return PlaceDetails(reviews=tuple(reviews), menu_items=tuple(menu_items))
