"""Cuisine/menu inference for venue records.

Categories and cuisine types come from two rule tables: provider place types
(``TAG_PATTERNS``) and substrings of the venue name (``NAME_PATTERNS``). Both
stages accumulate; nothing short-circuits. The sample menu is either
synthesised from the same tables (``MenuMode.ENRICHED``), taken only from what
the provider returned (``MenuMode.PROVIDER``), or left empty
(``MenuMode.NONE``).
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Dict, Iterable, List, Optional

from models import MenuInfo, PlaceDetails, VenueRecord
from services.price import bucket_price
from utils import dedupe

SAMPLE_MENU_CAP = 8
FALLBACK_CATEGORY = "레스토랑"

FINE_DINING_MENU = ["코스 요리", "셰프 추천", "테이스팅 메뉴", "와인 페어링"]
EVERYDAY_MENU = ["정식", "덮밥", "찌개", "볶음 요리"]
GENERIC_MENU = ["인기 메뉴", "추천 요리", "오늘의 메뉴", "시그니처 요리"]


class MenuMode(str, Enum):
    ENRICHED = "enriched"
    PROVIDER = "provider"
    NONE = "none"


TAG_PATTERNS: Dict[str, Dict[str, object]] = {
    "cafe": {"category": "카페", "cuisine": "음료/디저트", "menu": ["아메리카노", "카페라떼", "크로와상", "마카롱"]},
    "bakery": {"category": "베이커리", "cuisine": "빵/디저트", "menu": ["크루아상", "식빵", "케이크", "도너츠"]},
    "bar": {"category": "바", "cuisine": "주류", "menu": ["맥주", "칵테일", "안주", "사이드 메뉴"]},
    "pizza": {"category": "피자", "cuisine": "이탈리안", "menu": ["페퍼로니 피자", "마르게리타", "하와이안 피자", "파스타"]},
    "chinese_restaurant": {"category": "중식당", "cuisine": "중국요리", "menu": ["짜장면", "탕수육", "고추잡채", "짬뽕"]},
    "japanese_restaurant": {"category": "일식당", "cuisine": "일본요리", "menu": ["라멘", "초밥", "타코야키", "우동"]},
    "korean_restaurant": {"category": "한식당", "cuisine": "한국요리", "menu": ["김치찌개", "불고기", "냉면", "비빔밥"]},
    "mexican_restaurant": {"category": "멕시칸", "cuisine": "멕시코요리", "menu": ["타코", "부리또", "엔칠라다", "과카몰리"]},
    "italian_restaurant": {"category": "이탈리안", "cuisine": "이탈리아요리", "menu": ["스파게티", "리조또", "카르보나라", "티라미수"]},
    "fast_food": {"category": "패스트푸드", "cuisine": "간편식", "menu": ["햄버거", "감자튀김", "치킨", "콜라"]},
    "seafood_restaurant": {"category": "해산물", "cuisine": "해산물요리", "menu": ["회", "새우구이", "해물찜", "매운탕"]},
    "steakhouse": {"category": "스테이크하우스", "cuisine": "고기요리", "menu": ["안심 스테이크", "등심 스테이크", "티본 스테이크", "스테이크 세트"]},
    "sushi_restaurant": {"category": "스시", "cuisine": "일본요리", "menu": ["연어초밥", "우니초밥", "사시미", "오마카세"]},
    "barbecue_restaurant": {"category": "바베큐", "cuisine": "고기요리", "menu": ["삼겹살", "갈비", "목살", "항정살"]},
    "meal_takeaway": {"category": "테이크아웃"},
    "meal_delivery": {"category": "배달"},
}

# Evaluated in order; every rule whose keyword appears in the name fires.
NAME_PATTERNS: List[Dict[str, object]] = [
    {
        "keywords": ["치킨", "chicken"],
        "category": "치킨전문점",
        "cuisine": "치킨",
        "menu": ["후라이드 치킨", "양념 치킨", "간장 치킨", "파닭"],
    },
    {
        "keywords": ["피자", "pizza"],
        "category": "피자",
        "cuisine": "이탈리안",
        "menu": ["페퍼로니 피자", "콤비네이션 피자", "불고기 피자", "치즈 피자"],
    },
    {
        "keywords": ["카페", "cafe", "coffee", "커피"],
        "category": "카페",
        "cuisine": "음료/디저트",
        "menu": ["아메리카노", "카페라떼", "바닐라라떼", "치즈케이크"],
    },
    {
        "keywords": ["고기", "갈비", "소고기", "한우", "beef"],
        "category": "고깃집",
        "cuisine": "고기요리",
        "menu": ["소갈비", "돼지갈비", "등심", "갈비탕"],
    },
    {
        "keywords": ["해산물", "횟집", "수산", "seafood"],
        "category": "해산물",
        "cuisine": "해산물요리",
        "menu": ["모둠회", "해물탕", "조개구이", "물회"],
    },
    {
        "keywords": ["삼겹살", "돼지", "pork"],
        "category": "삼겹살",
        "cuisine": "고기요리",
        "menu": ["삼겹살", "목살", "김치찌개", "된장찌개"],
    },
    {
        "keywords": ["국수", "냉면", "밀면", "noodle"],
        "category": "면요리",
        "cuisine": "한국요리",
        "menu": ["잔치국수", "비빔국수", "물냉면", "비빔냉면"],
    },
    {
        "keywords": ["분식", "떡볶이", "김밥"],
        "category": "분식",
        "cuisine": "한국요리",
        "menu": ["떡볶이", "김밥", "순대", "튀김"],
    },
    {
        "keywords": ["족발", "보쌈"],
        "category": "족발/보쌈",
        "cuisine": "한국요리",
        "menu": ["족발", "보쌈", "막국수", "쟁반국수"],
    },
    {
        "keywords": ["스시", "초밥", "sushi", "일식", "이자카야"],
        "category": "일식당",
        "cuisine": "일본요리",
        "menu": ["모둠초밥", "연어덮밥", "우동", "돈카츠"],
    },
    {
        "keywords": ["중국", "중화", "짜장", "반점", "마라"],
        "category": "중식당",
        "cuisine": "중국요리",
        "menu": ["짜장면", "짬뽕", "탕수육", "마라탕"],
    },
]


def _menu_vocabulary() -> List[str]:
    terms: list[str] = []
    for spec in TAG_PATTERNS.values():
        terms.extend(spec.get("menu", []))  # type: ignore[arg-type]
    for spec in NAME_PATTERNS:
        terms.extend(spec["menu"])  # type: ignore[arg-type]
    # single-syllable terms ("회") match too much free text; longer terms win overlaps
    return sorted((t for t in dedupe(terms) if len(t) > 1), key=len, reverse=True)


MENU_VOCABULARY = _menu_vocabulary()


def mentioned_menu_items(texts: Iterable[str]) -> List[str]:
    """Known menu terms mentioned in free text, in order of appearance."""
    found: list[str] = []
    for text in texts:
        if not text:
            continue
        hits: list[tuple[int, str]] = []
        covered: list[tuple[int, int]] = []
        for term in MENU_VOCABULARY:
            for match in re.finditer(re.escape(term), text):
                pos, end = match.start(), match.end()
                if any(s <= pos and end <= e for s, e in covered):
                    continue
                covered.append((pos, end))
                hits.append((pos, term))
        found.extend(term for _, term in sorted(hits))
    return dedupe(found)


class CategoryClassifier:
    def __init__(self, mode: MenuMode = MenuMode.ENRICHED, cap: int = SAMPLE_MENU_CAP) -> None:
        self.mode = MenuMode(mode)
        self.cap = max(0, cap)

    def classify(self, record: VenueRecord, details: Optional[PlaceDetails] = None) -> MenuInfo:
        categories: list[str] = []
        cuisines: list[str] = []
        synthesized: list[str] = []

        for tag in record.types:
            spec = TAG_PATTERNS.get(tag)
            if spec is None:
                continue
            categories.append(spec["category"])  # type: ignore[arg-type]
            if spec.get("cuisine"):
                cuisines.append(spec["cuisine"])  # type: ignore[arg-type]
            synthesized.extend(spec.get("menu", []))  # type: ignore[arg-type]

        name = (record.name or "").lower()
        for rule in NAME_PATTERNS:
            if any(kw in name for kw in rule["keywords"]):  # type: ignore[union-attr]
                categories.append(rule["category"])  # type: ignore[arg-type]
                cuisines.append(rule["cuisine"])  # type: ignore[arg-type]
                synthesized.extend(rule["menu"])  # type: ignore[arg-type]

        if not categories:
            categories.append(FALLBACK_CATEGORY)
            if record.price_level is not None and record.price_level >= 3:
                synthesized.extend(FINE_DINING_MENU)
            else:
                synthesized.extend(EVERYDAY_MENU)

        provided = self._provider_menu(record, details)
        if self.mode is MenuMode.ENRICHED:
            menu = provided + synthesized
            if not menu:
                menu = list(GENERIC_MENU)
        elif self.mode is MenuMode.PROVIDER:
            menu = provided
        else:
            menu = []

        return MenuInfo(
            categories=tuple(dedupe(categories)),
            cuisine_type=tuple(dedupe(cuisines)),
            sample_menu=tuple(dedupe(menu)[: self.cap]),
            price_range=bucket_price(record.price_level),
        )

    @staticmethod
    def _provider_menu(record: VenueRecord, details: Optional[PlaceDetails]) -> List[str]:
        items: list[str] = []
        reviews = list(record.reviews)
        if details is not None:
            items.extend(i.strip() for i in details.menu_items if i and i.strip())
            reviews.extend(details.reviews)
        items.extend(mentioned_menu_items(reviews))
        return items
