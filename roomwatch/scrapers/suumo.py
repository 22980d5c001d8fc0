import logging
import re
from bs4 import BeautifulSoup
from roomwatch.config import SETTINGS, SUUMO_BASE_URL
from roomwatch.models import Listing
from roomwatch.scrapers.common import finalize, image_src, text_of, texts_of
from roomwatch.text_rules import discover_result_count

logger = logging.getLogger(__name__)

# Column positions inside a unit row, used when the class hooks are missing
FLOOR_COL = 2
PRICE_COL = 3
DEPOSIT_COL = 4
LAYOUT_COL = 5
DETAIL_COL = 8

# "25.5m<sup>2</sup>" flattens to "25.5m 2"
SUPERSCRIPT_SQUARE = re.compile(r"m\s*2$")


class SuumoScraper:
    """Listing extractor for suumo.jp rental search results.

    Each ``.cassetteitem`` is one building; its table rows are the units
    for rent in that building. One Listing is emitted per unit row.
    """

    name = "suumo"
    base_url = SUUMO_BASE_URL
    requires_js = False
    wait_for_selector = None

    def extract(self, markup: str) -> list[Listing]:
        if not markup:
            return []
        soup = BeautifulSoup(markup, "html.parser")

        cassettes = soup.select(".cassetteitem")
        logger.info(f"Found {len(cassettes)} SUUMO buildings")

        raw_records = []
        for cassette in cassettes:
            try:
                building = self._parse_building(cassette)
            except Exception as e:
                logger.warning(f"Skipping unparsable SUUMO building: {e}")
                continue
            for row in self._unit_rows(cassette):
                try:
                    raw_records.append({**building, **self._parse_unit(row, building)})
                except Exception as e:
                    logger.warning(f"Skipping unparsable SUUMO unit in {building['title']!r}: {e}")

        count = discover_result_count(text_of(soup, ".paginate_set-hit"))
        limit = count if count is not None else SETTINGS["max_listings"]
        listings = finalize(raw_records, self.base_url, self.name, limit)
        logger.info(f"Extracted {len(listings)} SUUMO listings from {len(raw_records)} units")
        return listings

    def _unit_rows(self, cassette):
        rows = cassette.select("tr.js-cassette_link")
        if rows:
            return rows
        # older markup puts each unit in its own <tbody>
        return [tbody.tr for tbody in cassette.select("table.cassetteitem_other tbody") if tbody.tr]

    def _parse_building(self, cassette) -> dict:
        age_col = cassette.select_one(".cassetteitem_detail-col3")
        age = text_of(age_col, "div") or text_of(age_col)

        tags = texts_of(cassette, ".cassetteitem_content-label span")
        tags += texts_of(cassette, ".ui-tag--outline")

        return {
            "title": text_of(cassette, ".cassetteitem_content-title"),
            "address": text_of(cassette, ".cassetteitem_detail-col1"),
            "access": texts_of(cassette, ".cassetteitem_detail-col2 .cassetteitem_detail-text"),
            "age": age,
            "tags": tags,
            "image_url": image_src(cassette.select_one(".cassetteitem_object-item img")),
        }

    def _parse_unit(self, row, building: dict) -> dict:
        cols = row.find_all("td", recursive=False)

        def col(index):
            return cols[index] if len(cols) > index else None

        def by_class_or_position(selector, index, position):
            node = row.select_one(selector)
            if node is not None:
                return text_of(node)
            items = col(index).select("li") if col(index) is not None else []
            return text_of(items[position]) if len(items) > position else ""

        link = row.select_one("a.js-cassette_link_href")
        if link is None and col(DETAIL_COL) is not None:
            link = col(DETAIL_COL).select_one("a[href]")
        if link is None:
            link = row.select_one('a[href*="/chintai/"]')

        return {
            "floor": text_of(col(FLOOR_COL)),
            "rent": by_class_or_position(".cassetteitem_price--rent", PRICE_COL, 0),
            "management_fee": by_class_or_position(".cassetteitem_price--administration", PRICE_COL, 1),
            "deposit": by_class_or_position(".cassetteitem_price--deposit", DEPOSIT_COL, 0),
            "gratuity": by_class_or_position(".cassetteitem_price--gratuity", DEPOSIT_COL, 1),
            "layout": by_class_or_position(".cassetteitem_madori", LAYOUT_COL, 0),
            "area": SUPERSCRIPT_SQUARE.sub("m²", by_class_or_position(".cassetteitem_menseki", LAYOUT_COL, 1)),
            "detail_url": link.get("href", "") if link is not None else "",
            "image_url": image_src(row.select_one(".casssetteitem_other-thumbnail-img"))
            or building["image_url"],
        }
