from __future__ import annotations

from functools import lru_cache
from typing import List, Optional, Tuple

from fastapi import Depends, FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from pydantic import BaseModel, Field

from config import Configuration
from models import BracketState, Candidate, GeoPoint
from services.bracket import BracketEngine, InsufficientCandidates, InvalidChoice, available_sizes, validate_size
from services.classifier import CategoryClassifier
from services.pipeline import CandidatePipeline
from services.places import GooglePlacesClient, LookupUnavailable
from services.tournament_store import TournamentStore


app = FastAPI(title="맛집 이상형 월드컵")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@lru_cache(maxsize=1)
def get_config() -> Configuration:
    cfg = Configuration.from_env()
    logger.info("cfg: {}", cfg.log_summary())
    return cfg


@lru_cache(maxsize=1)
def get_pipeline() -> CandidatePipeline:
    cfg = get_config()
    return CandidatePipeline(
        GooglePlacesClient(cfg),
        CategoryClassifier(cfg.menu_mode),
        min_rating=cfg.min_rating,
        enrich_details=cfg.enrich_details,
    )


@lru_cache(maxsize=1)
def get_store() -> TournamentStore:
    return TournamentStore(ttl_sec=get_config().session_ttl_sec)


class SearchRequest(BaseModel):
    lat: float
    lng: float
    radius_m: Optional[int] = Field(None, ge=100, le=50000, description="Search radius in meters")


class TournamentRequest(SearchRequest):
    session_id: str = Field(..., min_length=1)
    size: int = Field(8, description="Bracket size: 4, 8, 16, 32 or 64")


class PickRequest(BaseModel):
    candidate_id: str


class CandidatePayload(BaseModel):
    id: str
    name: str
    rating: float
    rating_count: Optional[int] = None
    price_level: Optional[int] = None
    price_range: str
    vicinity: str
    categories: List[str] = []
    cuisine_type: List[str] = []
    sample_menu: List[str] = []
    photos: List[str] = []
    open_now: Optional[bool] = None
    distance_m: Optional[float] = None


class CountResponse(BaseModel):
    count: int
    available_sizes: List[int]


class BracketPayload(BaseModel):
    session_id: str
    size: int
    round_number: int
    round_name: str
    match_number: int
    matches_in_round: int
    progress: float
    finished: bool
    active_pair: Optional[Tuple[CandidatePayload, CandidatePayload]] = None
    champion: Optional[CandidatePayload] = None
    winners: List[CandidatePayload] = []


def to_payload(c: Candidate) -> CandidatePayload:
    return CandidatePayload(
        id=c.id,
        name=c.name,
        rating=c.rating,
        rating_count=c.rating_count,
        price_level=c.price_level,
        price_range=c.price_range,
        vicinity=c.vicinity,
        categories=list(c.categories),
        cuisine_type=list(c.cuisine_type),
        sample_menu=list(c.sample_menu),
        photos=list(c.photos),
        open_now=c.open_now,
        distance_m=c.distance_m,
    )


def to_bracket_payload(session_id: str, state: BracketState) -> BracketPayload:
    pair = None
    if state.active_pair is not None:
        pair = (to_payload(state.active_pair[0]), to_payload(state.active_pair[1]))
    return BracketPayload(
        session_id=session_id,
        size=state.size,
        round_number=state.round_number,
        round_name=state.round_name,
        match_number=state.match_number,
        matches_in_round=state.matches_in_round,
        progress=round(state.progress, 4),
        finished=state.finished,
        active_pair=pair,
        champion=(to_payload(state.champion) if state.champion else None),
        winners=[to_payload(c) for c in state.winners],
    )


def _radius(cfg: Configuration, radius_m: Optional[int]) -> int:
    return radius_m if radius_m is not None else cfg.default_radius_m


def _engine_or_404(store: TournamentStore, session_id: str) -> BracketEngine:
    engine = store.get(session_id)
    if engine is None:
        raise HTTPException(status_code=404, detail="tournament not found")
    return engine


@app.get("/healthz")
def healthz(cfg: Configuration = Depends(get_config)) -> dict:
    return {"status": "ok", "places": bool(cfg.google_places_api_key)}


@app.get("/candidates/count", response_model=CountResponse)
def count_candidates(
    lat: float,
    lng: float,
    radius_m: Optional[int] = Query(None, ge=100, le=50000),
    cfg: Configuration = Depends(get_config),
    pipeline: CandidatePipeline = Depends(get_pipeline),
) -> CountResponse:
    count = pipeline.count_nearby(GeoPoint(lat, lng), _radius(cfg, radius_m))
    return CountResponse(count=count, available_sizes=available_sizes(count))


@app.post("/candidates", response_model=List[CandidatePayload])
def find_candidates(
    req: SearchRequest,
    cfg: Configuration = Depends(get_config),
    pipeline: CandidatePipeline = Depends(get_pipeline),
) -> List[CandidatePayload]:
    try:
        found = pipeline.find_nearby(GeoPoint(req.lat, req.lng), _radius(cfg, req.radius_m))
    except LookupUnavailable as exc:
        logger.warning("places lookup unavailable: {}", exc)
        raise HTTPException(status_code=503, detail="음식점 정보를 가져올 수 없습니다. 잠시 후 다시 시도해주세요.")
    return [to_payload(c) for c in found]


@app.post("/tournaments", response_model=BracketPayload)
def start_tournament(
    req: TournamentRequest,
    cfg: Configuration = Depends(get_config),
    pipeline: CandidatePipeline = Depends(get_pipeline),
    store: TournamentStore = Depends(get_store),
) -> BracketPayload:
    try:
        validate_size(req.size)
        found = pipeline.find_nearby(GeoPoint(req.lat, req.lng), _radius(cfg, req.radius_m))
        engine = BracketEngine.seed(found, req.size)
    except LookupUnavailable as exc:
        logger.warning("places lookup unavailable: {}", exc)
        raise HTTPException(status_code=503, detail="음식점 정보를 가져올 수 없습니다. 잠시 후 다시 시도해주세요.")
    except InsufficientCandidates as exc:
        raise HTTPException(status_code=409, detail=str(exc))
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except Exception as exc:
        logger.exception("tournament start failed: {}", exc)
        raise HTTPException(status_code=500, detail="internal error")

    store.put(req.session_id, engine)
    logger.info("tournament session={} size={} pool={}", req.session_id, req.size, len(found))
    return to_bracket_payload(req.session_id, engine.state)


@app.get("/tournaments/{session_id}", response_model=BracketPayload)
def get_tournament(session_id: str, store: TournamentStore = Depends(get_store)) -> BracketPayload:
    engine = _engine_or_404(store, session_id)
    return to_bracket_payload(session_id, engine.state)


@app.post("/tournaments/{session_id}/pick", response_model=BracketPayload)
def pick(session_id: str, req: PickRequest, store: TournamentStore = Depends(get_store)) -> BracketPayload:
    engine = _engine_or_404(store, session_id)
    try:
        state = engine.pick(req.candidate_id)
    except InvalidChoice as exc:
        logger.warning("invalid pick session={}: {}", session_id, exc)
        raise HTTPException(status_code=400, detail=str(exc))
    if state.finished:
        logger.info("tournament session={} champion={}", session_id, state.champion.name)
    return to_bracket_payload(session_id, state)


@app.post("/tournaments/{session_id}/restart", response_model=BracketPayload)
def restart(session_id: str, store: TournamentStore = Depends(get_store)) -> BracketPayload:
    engine = _engine_or_404(store, session_id)
    return to_bracket_payload(session_id, engine.restart())


@app.delete("/tournaments/{session_id}")
def delete_tournament(session_id: str, store: TournamentStore = Depends(get_store)) -> dict:
    if not store.reset(session_id):
        raise HTTPException(status_code=404, detail="tournament not found")
    return {"ok": True}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=8010, reload=True)
