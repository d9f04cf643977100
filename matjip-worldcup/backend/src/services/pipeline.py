from __future__ import annotations

from typing import Callable, Iterable, List, Optional

from loguru import logger

from models import Candidate, GeoPoint, PlaceDetails, VenueRecord
from services.classifier import CategoryClassifier
from services.places import LookupUnavailable, PlacesProvider
from services.price import bucket_price
from services.rating_filter import DEFAULT_MIN_RATING, filter_by_rating
from utils import haversine_m


def _unique_by_id(records: Iterable[VenueRecord]) -> List[VenueRecord]:
    seen: set[str] = set()
    out: list[VenueRecord] = []
    for r in records:
        if r.id in seen:
            continue
        seen.add(r.id)
        out.append(r)
    return out


class CandidatePipeline:
    """Turns raw venue records into rating-ordered world cup candidates.

    The provider is injected so the pipeline can run against a fake in tests.
    ``find_*`` calls raise ``LookupUnavailable`` when the provider is missing or
    failing; ``count_*`` calls report 0 instead.
    """

    def __init__(
        self,
        provider: Optional[PlacesProvider],
        classifier: Optional[CategoryClassifier] = None,
        price_lookup: Callable[[Optional[int]], str] = bucket_price,
        *,
        min_rating: float = DEFAULT_MIN_RATING,
        enrich_details: bool = False,
    ) -> None:
        self.provider = provider
        self.classifier = classifier or CategoryClassifier()
        self.price_lookup = price_lookup
        self.min_rating = min_rating
        self.enrich_details = enrich_details

    def _require_provider(self) -> PlacesProvider:
        if self.provider is None or not getattr(self.provider, "ready", False):
            raise LookupUnavailable("places lookup is not ready")
        return self.provider

    def _eligible(self, records: Iterable[VenueRecord], min_rating: Optional[float]) -> List[VenueRecord]:
        threshold = self.min_rating if min_rating is None else min_rating
        return filter_by_rating(_unique_by_id(records), threshold)

    def find_candidates(
        self,
        records: Iterable[VenueRecord],
        min_rating: Optional[float] = None,
        *,
        origin: Optional[GeoPoint] = None,
    ) -> List[Candidate]:
        self._require_provider()
        candidates = [self._to_candidate(r, origin) for r in self._eligible(records, min_rating)]
        # list.sort is stable: equal ratings keep filter order
        candidates.sort(key=lambda c: c.rating, reverse=True)
        return candidates

    def count_candidates(self, records: Iterable[VenueRecord], min_rating: Optional[float] = None) -> int:
        try:
            self._require_provider()
        except LookupUnavailable:
            return 0
        return len(self._eligible(records, min_rating))

    def find_nearby(self, location: GeoPoint, radius_m: int, min_rating: Optional[float] = None) -> List[Candidate]:
        provider = self._require_provider()
        records = provider.search(location, radius_m)
        candidates = self.find_candidates(records, min_rating, origin=location)
        logger.info(
            "candidates lat={:.5f} lng={:.5f} radius_m={} raw={} kept={}",
            location.lat,
            location.lng,
            radius_m,
            len(records),
            len(candidates),
        )
        return candidates

    def count_nearby(self, location: GeoPoint, radius_m: int, min_rating: Optional[float] = None) -> int:
        try:
            provider = self._require_provider()
            records = provider.search(location, radius_m)
        except LookupUnavailable as exc:
            logger.warning("candidate count unavailable: {}", exc)
            return 0
        return self.count_candidates(records, min_rating)

    def _details_for(self, record: VenueRecord) -> Optional[PlaceDetails]:
        if not self.enrich_details or self.provider is None:
            return None
        try:
            return self.provider.details(record.id)
        except Exception as exc:
            logger.warning("details lookup failed for {}: {}", record.id, exc)
            return None

    def _to_candidate(self, record: VenueRecord, origin: Optional[GeoPoint]) -> Candidate:
        menu = self.classifier.classify(record, self._details_for(record))
        distance = None
        if origin is not None:
            distance = round(haversine_m(origin.lat, origin.lng, record.location.lat, record.location.lng), 1)
        return Candidate(
            id=record.id,
            name=record.name,
            rating=float(record.rating or 0.0),
            price_range=self.price_lookup(record.price_level),
            vicinity=record.vicinity,
            categories=menu.categories,
            cuisine_type=menu.cuisine_type,
            sample_menu=menu.sample_menu,
            price_level=record.price_level,
            photos=record.photos,
            open_now=record.open_now,
            rating_count=record.rating_count,
            location=record.location,
            types=record.types,
            distance_m=distance,
        )
