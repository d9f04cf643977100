from __future__ import annotations

from models import GeoPoint, PlaceDetails, VenueRecord
from services.classifier import (
    EVERYDAY_MENU,
    FINE_DINING_MENU,
    GENERIC_MENU,
    SAMPLE_MENU_CAP,
    CategoryClassifier,
    MenuMode,
    mentioned_menu_items,
)

TAG_TYPES = (
    "cafe", "bakery", "bar", "pizza", "chinese_restaurant", "japanese_restaurant",
    "korean_restaurant", "mexican_restaurant", "italian_restaurant", "fast_food",
    "seafood_restaurant", "steakhouse", "sushi_restaurant", "barbecue_restaurant",
    "meal_takeaway", "meal_delivery",
)


def _rec(name: str, types=(), price_level=None, reviews=()) -> VenueRecord:
    return VenueRecord(
        id=name,
        name=name,
        location=GeoPoint(37.5, 127.0),
        rating=4.2,
        price_level=price_level,
        types=tuple(types),
        reviews=tuple(reviews),
    )


def test_tag_stage_accumulates_all_matching_tags() -> None:
    info = CategoryClassifier().classify(_rec("행복 베이커리", ["cafe", "bakery", "restaurant", "food"]))
    assert info.categories == ("카페", "베이커리")
    assert info.cuisine_type == ("음료/디저트", "빵/디저트")
    assert info.sample_menu == (
        "아메리카노", "카페라떼", "크로와상", "마카롱",
        "크루아상", "식빵", "케이크", "도너츠",
    )


def test_name_rules_are_independent_and_deduplicated() -> None:
    info = CategoryClassifier().classify(_rec("BBQ 치킨 & Pizza", ["pizza"]))
    assert info.categories == ("피자", "치킨전문점")
    assert info.cuisine_type == ("이탈리안", "치킨")
    assert len(info.sample_menu) == SAMPLE_MENU_CAP
    assert len(set(info.sample_menu)) == len(info.sample_menu)
    assert info.sample_menu[:5] == ("페퍼로니 피자", "마르게리타", "하와이안 피자", "파스타", "후라이드 치킨")


def test_name_match_is_case_insensitive() -> None:
    info = CategoryClassifier().classify(_rec("Blue Bottle COFFEE"))
    assert info.categories == ("카페",)


def test_fallback_category_depends_on_price_for_menu() -> None:
    clf = CategoryClassifier()
    fancy = clf.classify(_rec("Mystery Place", ["restaurant", "point_of_interest"], price_level=3))
    cheap = clf.classify(_rec("Mystery Place", ["restaurant"], price_level=1))
    unknown = clf.classify(_rec("Mystery Place"))
    assert fancy.categories == cheap.categories == unknown.categories == ("레스토랑",)
    assert list(fancy.sample_menu) == FINE_DINING_MENU
    assert list(cheap.sample_menu) == EVERYDAY_MENU
    assert list(unknown.sample_menu) == EVERYDAY_MENU


def test_category_without_menu_gets_generic_placeholders() -> None:
    info = CategoryClassifier().classify(_rec("Somewhere", ["meal_takeaway"]))
    assert info.categories == ("테이크아웃",)
    assert info.cuisine_type == ()
    assert list(info.sample_menu) == GENERIC_MENU


def test_price_range_is_bucketed() -> None:
    assert CategoryClassifier().classify(_rec("x", price_level=2)).price_range.startswith("보통")
    assert CategoryClassifier().classify(_rec("x")).price_range == "정보없음"


def test_review_mentions_lead_the_enriched_menu() -> None:
    record = _rec("동네 분식", reviews=["여기 양념 치킨이 최고, 떡볶이도 맛있어요"])
    info = CategoryClassifier().classify(record)
    assert info.categories == ("분식",)
    assert info.sample_menu == ("양념 치킨", "떡볶이", "김밥", "순대", "튀김")


def test_provider_mode_uses_only_provider_text() -> None:
    clf = CategoryClassifier(MenuMode.PROVIDER)
    with_reviews = clf.classify(_rec("동네 분식", reviews=["여기 양념 치킨이 최고, 떡볶이도 맛있어요"]))
    assert with_reviews.sample_menu == ("양념 치킨", "떡볶이")

    bare = clf.classify(_rec("Mystery Place"))
    assert bare.categories == ("레스토랑",)
    assert bare.sample_menu == ()


def test_provider_menu_items_come_first_and_are_trimmed() -> None:
    details = PlaceDetails(reviews=("짬뽕 국물이 진해요",), menu_items=("수제버거", " 수제버거 ", ""))
    info = CategoryClassifier(MenuMode.PROVIDER).classify(_rec("x"), details)
    assert info.sample_menu == ("수제버거", "짬뽕")


def test_none_mode_never_synthesises() -> None:
    info = CategoryClassifier(MenuMode.NONE).classify(_rec("BBQ 치킨", ["fast_food"], reviews=["치킨 맛집"]))
    assert info.categories == ("패스트푸드", "치킨전문점")
    assert info.sample_menu == ()


def test_categories_never_empty_and_menu_capped() -> None:
    clf = CategoryClassifier(cap=4)
    samples = [
        _rec(""),
        _rec("치킨 피자 카페 갈비 횟집 삼겹살 국수 분식 족발 스시 중국", list(TAG_TYPES)),
        _rec("Unknown", ["lodging"], price_level=4),
    ]
    for record in samples:
        info = clf.classify(record)
        assert info.categories
        assert len(info.sample_menu) <= 4
        assert len(set(info.sample_menu)) == len(info.sample_menu)
        assert len(set(info.categories)) == len(info.categories)


def test_classification_is_deterministic() -> None:
    record = _rec("홍콩반점 짜장", ["chinese_restaurant", "meal_delivery"])
    clf = CategoryClassifier()
    assert clf.classify(record) == clf.classify(record)


def test_mentioned_menu_items_prefers_longest_overlap() -> None:
    assert mentioned_menu_items(["연어초밥 먹고 초밥 또 먹음"]) == ["연어초밥", "초밥"]
    assert mentioned_menu_items(["연어초밥 말고 그냥 초밥도 맛있어요"]) == ["연어초밥", "초밥"]
    assert mentioned_menu_items(["연어초밥이 최고, 연어초밥 또 주문"]) == ["연어초밥"]
    assert mentioned_menu_items(["짬뽕이랑 탕수육", "탕수육 또 시킴"]) == ["짬뽕", "탕수육"]
    assert mentioned_menu_items(["", "회식 장소로 좋아요"]) == []

