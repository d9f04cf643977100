from __future__ import annotations

import os
from typing import Any, Optional

from pydantic import BaseModel, Field

from services.classifier import MenuMode
from utils import mask_secret


class Configuration(BaseModel):
    # Google Places
    google_places_api_key: Optional[str] = Field(default=None)
    places_base_url: str = Field(default="https://maps.googleapis.com")
    places_timeout: int = Field(default=10)
    places_language: str = Field(default="ko")
    places_keyword: str = Field(default="음식점")

    # Search defaults
    default_radius_m: int = Field(default=1000)
    min_rating: float = Field(default=3.5)

    # Classification
    menu_mode: MenuMode = Field(default=MenuMode.ENRICHED)
    enrich_details: bool = Field(default=False)

    # Tournament sessions
    session_ttl_sec: int = Field(default=3600)

    @classmethod
    def from_env(cls, overrides: Optional[dict[str, Any]] = None) -> "Configuration":
        raw: dict[str, Any] = {}

        env_map = {
            "google_places_api_key": os.getenv("GOOGLE_PLACES_API_KEY"),
            "places_base_url": os.getenv("PLACES_BASE_URL"),
            "places_timeout": os.getenv("PLACES_TIMEOUT"),
            "places_language": os.getenv("PLACES_LANGUAGE"),
            "places_keyword": os.getenv("PLACES_KEYWORD"),
            "default_radius_m": os.getenv("DEFAULT_RADIUS_M"),
            "min_rating": os.getenv("MIN_RATING"),
            "menu_mode": os.getenv("MENU_MODE"),
            "enrich_details": os.getenv("ENRICH_DETAILS"),
            "session_ttl_sec": os.getenv("SESSION_TTL_SEC"),
        }

        bool_fields = {"enrich_details"}

        for k, v in env_map.items():
            if v is None:
                continue
            if k in bool_fields:
                raw[k] = str(v).lower() in {"1", "true", "yes", "on"}
            else:
                raw[k] = v

        if overrides:
            raw.update({k: v for k, v in overrides.items() if v is not None})

        return cls(**raw)

    def require_places(self) -> None:
        if not self.google_places_api_key:
            raise ValueError("GOOGLE_PLACES_API_KEY is required")

    def log_summary(self) -> str:
        return (
            "places=%s base=%s timeout=%s language=%s radius_m=%s min_rating=%s menu_mode=%s api_key=%s"
            % (
                bool(self.google_places_api_key),
                self.places_base_url,
                self.places_timeout,
                self.places_language,
                self.default_radius_m,
                self.min_rating,
                self.menu_mode.value,
                mask_secret(self.google_places_api_key),
            )
        )
