import math
from roomwatch.config import SETTINGS
from roomwatch.models import Listing

LABEL_COLOR = "#aaaaaa"
VALUE_COLOR = "#666666"


def _row(label: str, value: str, layout: str = "baseline", bold: bool = False) -> dict:
    text = {
        "type": "text",
        "text": value or "-",
        "wrap": True,
        "color": VALUE_COLOR,
        "size": "sm",
        "flex": 5,
    }
    if bold:
        text["weight"] = "bold"
    return {
        "type": "box",
        "layout": layout,
        "spacing": "sm",
        "contents": [
            {"type": "text", "text": label, "color": LABEL_COLOR, "size": "sm", "flex": 1},
            text,
        ],
    }


def listing_bubble(listing: Listing) -> dict:
    access_lines = [
        {"type": "text", "text": line, "wrap": True, "color": VALUE_COLOR, "size": "sm", "margin": "xs"}
        for line in listing.access
    ]
    details = [
        _row("住所", listing.address),
        _row("階層", listing.floor),
        _row("家賃/管理費", f"{listing.rent}/{listing.management_fee or '-'}", layout="vertical", bold=True),
        _row("敷金/礼金", f"{listing.deposit or '-'}/{listing.gratuity or '-'}", layout="vertical"),
        _row("間取り", listing.layout),
        _row("面積", listing.area),
        _row("築年数", listing.age.replace(" ", "")),
        {
            "type": "box",
            "layout": "vertical",
            "spacing": "sm",
            "contents": [{"type": "text", "text": "アクセス", "color": LABEL_COLOR, "size": "sm"}]
            + access_lines,
        },
    ]
    if listing.tags:
        details.append(_row("特徴", " / ".join(listing.tags), layout="vertical"))

    return {
        "type": "bubble",
        "hero": {
            "type": "image",
            "url": listing.image_url or SETTINGS["placeholder_image"],
            "size": "full",
            "aspectMode": "cover",
        },
        "body": {
            "type": "box",
            "layout": "vertical",
            "contents": [
                {"type": "text", "text": listing.title, "weight": "bold", "size": "xl", "wrap": True},
                {"type": "box", "layout": "vertical", "margin": "lg", "spacing": "sm", "contents": details},
            ],
        },
        "footer": {
            "type": "box",
            "layout": "vertical",
            "spacing": "sm",
            "contents": [
                {
                    "type": "button",
                    "style": "link",
                    "height": "sm",
                    "action": {"type": "uri", "label": "詳細を見る", "uri": listing.detail_url},
                }
            ],
        },
    }


def carousel_message(listings: list[Listing], alt_text: str) -> dict:
    return {
        "type": "flex",
        "altText": alt_text,
        "contents": {"type": "carousel", "contents": [listing_bubble(l) for l in listings]},
    }


def text_message(text: str) -> dict:
    return {"type": "text", "text": text}


def build_rendering_units(
    listings: list[Listing],
    search_url: str,
    per_unit: int | None = None,
    max_total: int | None = None,
) -> tuple[list[list[dict]], list[Listing]]:
    """Split new listings into carousel messages of at most per_unit bubbles.

    At most max_total listings are presented overall. Every caption shows the
    same presented total; the last unit carries a link to the search page.
    Returns the units and the listings that were presented.
    """
    per_unit = per_unit or SETTINGS["per_message"]
    max_total = max_total or SETTINGS["max_notified"]

    presented = listings[:max_total]
    total = len(presented)
    units = []
    for index in range(math.ceil(total / per_unit)):
        start = index * per_unit
        end = min(start + per_unit, total)
        caption = f"物件を{total}件見つけました。{start + 1}件目から{end}件目を表示します。"
        units.append([carousel_message(presented[start:end], caption)])
    if units:
        units[-1].append(text_message(f"検索結果の一覧はこちら\n{search_url}"))
    return units, presented


def error_unit(listing: Listing) -> list[dict]:
    return [carousel_message([listing], f"物件情報の取得でエラーが発生しました: {listing.address}"[:400])]


def no_results_message() -> dict:
    return text_message("条件に合う物件は見つかりませんでした。")


def nothing_new_message() -> dict:
    return text_message("新着物件はありませんでした。")


def current_url_message(url: str) -> dict:
    return text_message(f"現在の検索URL:\n{url}")


def url_updated_message(url: str) -> dict:
    return text_message(f"検索URLを更新しました:\n{url}")


def searching_message() -> dict:
    return text_message("物件を検索しています。しばらくお待ちください。")
