import pathlib
import pytest
from roomwatch.scrapers.canary import CanaryScraper

FIXTURES = pathlib.Path(__file__).parent / "fixtures"


@pytest.fixture
def listings():
    markup = (FIXTURES / "canary_results.html").read_text(encoding="utf-8")
    return CanaryScraper().extract(markup)


def _by_url(listings, room_id):
    return next(l for l in listings if l.detail_url == f"https://web.canary-app.jp/chintai/rooms/{room_id}/")


def test_extracts_unique_rooms_with_rent(listings):
    assert [l.detail_url for l in listings] == [
        "https://web.canary-app.jp/chintai/rooms/aaa111/",
        "https://web.canary-app.jp/chintai/rooms/aaa222/",
        "https://web.canary-app.jp/chintai/rooms/bbb111/",
    ]
    assert all(l.source == "canary" for l in listings)


def test_structured_fields(listings):
    room = _by_url(listings, "aaa111")
    assert room.title == "カナリーレジデンス中目黒"
    assert room.address == "東京都目黒区上目黒2丁目"
    assert room.access == ["東急東横線 中目黒駅 徒歩4分"]
    assert room.age == "築5年"
    assert room.rent == "10.5万円"
    assert room.management_fee == "8,000円"
    assert room.deposit == "1ヶ月"
    assert room.gratuity == "なし"
    assert room.layout == "1LDK"
    assert room.area == "35.2㎡"
    assert room.floor == "3階"
    assert room.image_url == "https://img.canary-app.jp/rooms/aaa111.jpg"
    assert room.tags == ["オートロック", "宅配ボックス"]


def test_rooms_in_same_building_share_building_fields(listings):
    first = _by_url(listings, "aaa111")
    second = _by_url(listings, "aaa222")
    assert second.title == first.title
    assert second.address == first.address
    assert second.rent == "11.0万円"
    assert second.deposit == "なし"
    assert second.gratuity == "1ヶ月"
    assert second.floor == "5階"


def test_free_text_fallback_when_class_hooks_change(listings):
    room = _by_url(listings, "bbb111")
    assert room.title == "グランドメゾン目黒"
    assert room.rent == "12.3万円"
    assert room.management_fee == "10,000円"
    assert room.deposit == "1ヶ月"
    assert room.gratuity == "なし"
    assert room.layout == "2LDK"
    assert room.area == "55.2m²"
    assert room.floor == "4階"
    assert room.age == "築8年"
    assert room.address == "東京都目黒区目黒1-2-3"
    assert room.access == ["目黒駅 徒歩6分"]
    assert room.image_url == "https://img.canary-app.jp/rooms/bbb111.jpg"


def test_room_without_rent_is_dropped(listings):
    assert all("ccc111" not in l.detail_url for l in listings)


def test_room_link_fallback_selector():
    markup = """
    <div style="margin-bottom: 16px">
      <p class="sc-eba299fd-2">コーポ祐天寺</p>
      <a href="/chintai/rooms/zzz999/"><span>7.2万円 / 3,000円</span><span>1K / 20.1㎡ / 2階</span></a>
    </div>
    """
    (listing,) = CanaryScraper().extract(markup)
    assert listing.title == "コーポ祐天寺"
    assert listing.rent == "7.2万円"
    assert listing.layout == "1K"
    assert listing.detail_url == "https://web.canary-app.jp/chintai/rooms/zzz999/"


def test_result_count_caps_output():
    rooms = "".join(
        f'<a data-testid="search-result-room-thumbail" href="/chintai/rooms/r{i}/">'
        f'<span class="sc-a9d9171a-0">8.0</span></a>'
        for i in range(4)
    )
    markup = f"""
    <p>検索結果 2件</p>
    <div style="margin-bottom: 16px"><p class="sc-eba299fd-2">ハイツ</p>{rooms}</div>
    """
    assert len(CanaryScraper().extract(markup)) == 2


@pytest.mark.parametrize(
    "markup",
    [
        "",
        "<html><body>読み込み中...</body></html>",
        '<a data-testid="search-result-room-thumbail">',
        '<a data-testid="search-result-room-thumbail" href="/chintai/rooms/x/"><span class="sc-a9d9171a-0">',
    ],
)
def test_extract_never_raises_on_broken_markup(markup):
    assert CanaryScraper().extract(markup) == []


def test_room_without_rent_does_not_borrow_sibling_prices():
    markup = """
    <div style="margin-bottom: 16px">
      <p class="sc-eba299fd-2">カナリーハイツ</p>
      <div class="sc-b58b0813-3">東京都目黒区中町1丁目</div>
      <a data-testid="search-result-room-thumbail" href="/chintai/rooms/a/">
        <span class="sc-a9d9171a-0">10.5</span>
        <span class="sc-25310353-3">10.5万円 / 8,000円</span>
        <span class="sc-ba5c86c1-0">敷1ヶ月</span>
        <span class="sc-25310353-5">1LDK / 35.0㎡ / 2階</span>
      </a>
      <a data-testid="search-result-room-thumbail" href="/chintai/rooms/b/">
        <span class="sc-25310353-5">1K / 20㎡ / 3階</span>
      </a>
    </div>
    """
    listings = CanaryScraper().extract(markup)

    assert [l.detail_url for l in listings] == ["https://web.canary-app.jp/chintai/rooms/a/"]
    assert listings[0].management_fee == "8,000円"


def test_text_fallback_reads_prices_from_own_room_only():
    markup = """
    <div style="margin-bottom: 16px">
      <h3>メゾン中町</h3>
      <div>東京都目黒区中町2-3-4</div>
      <div>築12年</div>
      <a data-testid="search-result-room-thumbail" href="/chintai/rooms/c/">
        <div>9.8万円 / 5,000円</div><div>敷1ヶ月 礼1ヶ月</div><div>1LDK / 30.0㎡ / 2階</div>
      </a>
      <a data-testid="search-result-room-thumbail" href="/chintai/rooms/d/">
        <div>7.1万円 / なし</div><div>1R / 18.0㎡ / 4階</div>
      </a>
    </div>
    """
    first, second = CanaryScraper().extract(markup)

    assert first.rent == "9.8万円"
    assert second.rent == "7.1万円"
    assert second.management_fee == "なし"
    assert second.deposit == ""
    assert second.gratuity == ""
    assert second.layout == "1R"
    assert second.floor == "4階"
    assert second.age == "築12年"
    assert second.address == "東京都目黒区中町2-3-4"
