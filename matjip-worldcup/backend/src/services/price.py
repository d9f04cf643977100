from __future__ import annotations

from typing import Dict, Optional

UNKNOWN_PRICE = "정보없음"

PRICE_LABELS: Dict[int, str] = {
    0: "무료",
    1: "저렴함 (₩10,000 이하)",
    2: "보통 (₩10,000-30,000)",
    3: "비쌈 (₩30,000-60,000)",
    4: "매우 비쌈 (₩60,000 이상)",
}


def bucket_price(price_level: Optional[int]) -> str:
    if price_level is None:
        return UNKNOWN_PRICE
    return PRICE_LABELS.get(price_level, UNKNOWN_PRICE)
