from __future__ import annotations

from typing import Iterable, List

from models import VenueRecord

DEFAULT_MIN_RATING = 3.5


def passes_rating(record: VenueRecord, min_rating: float = DEFAULT_MIN_RATING) -> bool:
    return record.rating is not None and record.rating > min_rating


def filter_by_rating(records: Iterable[VenueRecord], min_rating: float = DEFAULT_MIN_RATING) -> List[VenueRecord]:
    """Keep records rated strictly above ``min_rating``; unrated records are dropped."""
    return [r for r in records if passes_rating(r, min_rating)]
