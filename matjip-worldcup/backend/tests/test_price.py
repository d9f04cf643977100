from services.price import bucket_price


def test_moderate_level():
    assert bucket_price(2).startswith("보통")


def test_missing_level_is_unknown():
    assert bucket_price(None) == "정보없음"


def test_every_level_has_its_own_label():
    labels = [bucket_price(level) for level in range(5)]
    assert labels[0] == "무료"
    assert labels[4].startswith("매우 비쌈")
    assert len(set(labels)) == 5
    assert "정보없음" not in labels


def test_out_of_range_level_is_unknown():
    assert bucket_price(7) == "정보없음"
