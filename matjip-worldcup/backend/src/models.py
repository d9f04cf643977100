"""Data models for the restaurant world cup backend."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple


@dataclass(frozen=True)
class GeoPoint:
    lat: float
    lng: float


@dataclass(frozen=True)
class VenueRecord:
    id: str
    name: str
    location: GeoPoint
    rating: Optional[float] = None
    rating_count: Optional[int] = None
    price_level: Optional[int] = None  # 0-4
    types: Tuple[str, ...] = ()
    vicinity: str = ""
    open_now: Optional[bool] = None
    reviews: Tuple[str, ...] = ()
    photos: Tuple[str, ...] = ()  # photo references


@dataclass(frozen=True)
class PlaceDetails:
    reviews: Tuple[str, ...] = ()
    menu_items: Tuple[str, ...] = ()


@dataclass(frozen=True)
class MenuInfo:
    categories: Tuple[str, ...]
    cuisine_type: Tuple[str, ...]
    sample_menu: Tuple[str, ...]
    price_range: str


@dataclass(frozen=True)
class Candidate:
    id: str
    name: str
    rating: float
    price_range: str
    vicinity: str
    categories: Tuple[str, ...]
    cuisine_type: Tuple[str, ...] = ()
    sample_menu: Tuple[str, ...] = ()
    price_level: Optional[int] = None
    photos: Tuple[str, ...] = ()
    open_now: Optional[bool] = None
    rating_count: Optional[int] = None
    location: Optional[GeoPoint] = None
    types: Tuple[str, ...] = ()
    distance_m: Optional[float] = None


@dataclass(frozen=True)
class MatchResult:
    round_number: int
    winner: Candidate
    loser: Candidate


@dataclass(frozen=True)
class BracketState:
    size: int
    round_number: int
    round_name: str
    current_round: Tuple[Candidate, ...]
    pair_index: int
    winners: Tuple[Candidate, ...] = ()
    active_pair: Optional[Tuple[Candidate, Candidate]] = None
    champion: Optional[Candidate] = None
    history: Tuple[MatchResult, ...] = field(default_factory=tuple)

    @property
    def finished(self) -> bool:
        return self.champion is not None

    @property
    def match_number(self) -> int:
        return self.pair_index // 2 + 1

    @property
    def matches_in_round(self) -> int:
        return len(self.current_round) // 2

    @property
    def progress(self) -> float:
        """Share of the current round reached, counting the active match."""
        if self.finished or not self.matches_in_round:
            return 1.0
        return self.match_number / self.matches_in_round
