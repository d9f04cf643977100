"""Play a restaurant world cup in the terminal against the live Places API.

Usage:
  python play_worldcup.py --lat 37.5665 --lng 126.9780 --radius 1500 --size 8
"""

import argparse

from dotenv import load_dotenv
load_dotenv("backend/.env")

from config import Configuration
from models import Candidate, GeoPoint
from services.bracket import BracketEngine, InsufficientCandidates, available_sizes
from services.classifier import CategoryClassifier
from services.pipeline import CandidatePipeline
from services.places import GooglePlacesClient, LookupUnavailable


def describe(c: Candidate) -> str:
    menu = ", ".join(c.sample_menu[:3])
    return f"{c.name} ★{c.rating:.1f} [{'/'.join(c.categories[:2])}] {c.price_range} - {menu}"


def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--lat", type=float, required=True)
    parser.add_argument("--lng", type=float, required=True)
    parser.add_argument("--radius", type=int, default=None)
    parser.add_argument("--size", type=int, default=8)
    args = parser.parse_args()

    cfg = Configuration.from_env()
    cfg.require_places()
    pipeline = CandidatePipeline(
        GooglePlacesClient(cfg),
        CategoryClassifier(cfg.menu_mode),
        min_rating=cfg.min_rating,
        enrich_details=cfg.enrich_details,
    )
    location = GeoPoint(args.lat, args.lng)
    radius = args.radius or cfg.default_radius_m

    count = pipeline.count_nearby(location, radius)
    print(f"=== 반경 {radius}m 내 맛집: {count}개 (가능한 토너먼트: {available_sizes(count)}) ===")

    try:
        engine = BracketEngine.seed(pipeline.find_nearby(location, radius), args.size)
    except LookupUnavailable as exc:
        print(f"음식점 정보를 가져올 수 없습니다: {exc}")
        return
    except InsufficientCandidates as exc:
        print(exc)
        return

    state = engine.state
    while not state.finished:
        left, right = state.active_pair
        print()
        print(f"--- {state.round_name} ({state.match_number} / {state.matches_in_round} 매치) ---")
        print(f"  1) {describe(left)}")
        print(f"  2) {describe(right)}")
        answer = input("선택 [1/2]: ").strip()
        if answer not in ("1", "2"):
            continue
        state = engine.pick(left if answer == "1" else right)

    print()
    print(f"🏆 우승: {describe(state.champion)}")


if __name__ == "__main__":
    main()
