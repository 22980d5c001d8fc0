import math
import pytest
from roomwatch.messages import build_rendering_units, error_unit, listing_bubble
from roomwatch.models import Listing, error_listing

SEARCH_URL = "https://suumo.jp/jj/chintai/ichiran/FR301FC001/?ar=030"


def _make_listing(i: int, **kwargs) -> Listing:
    defaults = {
        "title": f"パークハイツ{i}",
        "address": "東京都渋谷区道玄坂1",
        "rent": "8.5万円",
        "detail_url": f"https://suumo.jp/chintai/jnc_{i}/",
        "source": "suumo",
        "image_url": "https://img01.suumo.com/a.jpg",
        "access": ["ＪＲ山手線/渋谷駅 歩5分"],
    }
    defaults.update(kwargs)
    return Listing(**defaults)


def _carousel(unit):
    return next(m for m in unit if m["type"] == "flex")


@pytest.mark.parametrize("n", [1, 9, 10, 11, 20, 25, 40])
def test_unit_count_and_shared_total(n):
    listings = [_make_listing(i) for i in range(n)]
    units, presented = build_rendering_units(listings, SEARCH_URL, per_unit=10, max_total=20)

    expected_total = min(n, 20)
    assert len(units) == math.ceil(expected_total / 10)
    assert len(presented) == expected_total
    for unit in units:
        carousel = _carousel(unit)
        assert len(carousel["contents"]["contents"]) <= 10
        assert carousel["altText"].startswith(f"物件を{expected_total}件見つけました。")


def test_units_cover_listings_in_order():
    listings = [_make_listing(i) for i in range(15)]
    units, _ = build_rendering_units(listings, SEARCH_URL, per_unit=10, max_total=20)

    uris = [
        bubble["footer"]["contents"][0]["action"]["uri"]
        for unit in units
        for bubble in _carousel(unit)["contents"]["contents"]
    ]
    assert uris == [l.detail_url for l in listings]
    assert "1件目から10件目" in _carousel(units[0])["altText"]
    assert "11件目から15件目" in _carousel(units[1])["altText"]


def test_only_last_unit_links_search_page():
    units, _ = build_rendering_units([_make_listing(i) for i in range(12)], SEARCH_URL, 10, 20)

    assert [m["type"] for m in units[0]] == ["flex"]
    assert [m["type"] for m in units[-1]] == ["flex", "text"]
    assert SEARCH_URL in units[-1][-1]["text"]


def test_no_listings_no_units():
    assert build_rendering_units([], SEARCH_URL) == ([], [])


def test_defaults_come_from_settings():
    units, presented = build_rendering_units([_make_listing(i) for i in range(30)], SEARCH_URL)
    assert len(units) == 2
    assert len(presented) == 20


def test_bubble_fills_empty_fields():
    bubble = listing_bubble(_make_listing(1, floor="", layout="", image_url=""))
    texts = [
        box["contents"][1]["text"]
        for box in bubble["body"]["contents"][1]["contents"]
        if box["layout"] == "baseline"
    ]
    assert "" not in texts
    assert bubble["hero"]["url"] == "https://example.com/default-image.jpg"


def test_error_unit_shows_failure_detail():
    listing = error_listing("APIキーを確認してください", SEARCH_URL, "canary", "https://example.com/e.jpg")
    (message,) = error_unit(listing)
    assert "APIキーを確認してください" in message["altText"]
    assert message["contents"]["contents"][0]["body"]["contents"][0]["text"] == "エラー"
