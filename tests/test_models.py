from roomwatch.models import ConfiguredSearch, Listing, error_listing


def test_listing_defaults():
    listing = Listing(
        title="パークハイツ渋谷",
        address="東京都渋谷区道玄坂1",
        rent="8.5万円",
        detail_url="https://suumo.jp/chintai/jnc_000011111111/",
        source="suumo",
    )
    assert listing.access == []
    assert listing.tags == []
    assert listing.is_error is False
    assert listing.management_fee == ""


def test_listing_unique_key_is_detail_url():
    listing = Listing(
        title="Test",
        address="",
        rent="1万円",
        detail_url="https://suumo.jp/chintai/1/",
        source="suumo",
    )
    assert listing.unique_key == "https://suumo.jp/chintai/1/"


def test_listing_lists_are_not_shared():
    a = Listing(title="a", address="", rent="1万円", detail_url="https://x/1", source="suumo")
    b = Listing(title="b", address="", rent="1万円", detail_url="https://x/2", source="suumo")
    a.tags.append("ペット相談")
    assert b.tags == []


def test_error_listing_carries_detail_in_address():
    listing = error_listing("APIキーを確認してください", "https://web.canary-app.jp/chintai/", "canary")
    assert listing.is_error is True
    assert listing.title
    assert listing.address == "APIキーを確認してください"
    assert listing.detail_url == "https://web.canary-app.jp/chintai/"
    assert listing.source == "canary"


def test_configured_search():
    search = ConfiguredSearch(id=3, conversation_id="U123", url="https://suumo.jp/jj/chintai/")
    assert search.id == 3
    assert search.url.startswith("https://")
