import logging
from bs4 import BeautifulSoup
from roomwatch.config import CANARY_BASE_URL, SETTINGS
from roomwatch.models import Listing
from roomwatch.normalize import collapse_whitespace
from roomwatch.scrapers.common import finalize, image_src, text_of, texts_of
from roomwatch.text_rules import discover_result_count, fields_from_text

logger = logging.getLogger(__name__)

ROOM_SELECTOR = '[data-testid="search-result-room-thumbail"]'
ROOM_FALLBACK_SELECTOR = 'a[href*="/chintai/rooms/"]'

# Generated class names from the Canary front end. They change between deploys;
# blank fields fall back to the text rules.
TITLE = ".sc-eba299fd-2"
ACCESS = ".sc-b58b0813-3"
IMAGE = ".sc-25310353-2"
RENT = ".sc-a9d9171a-0"
FEES = ".sc-25310353-3"
DEPOSIT = ".sc-ba5c86c1-0"
GRATUITY = ".sc-ec8edb4e-0"
LAYOUT = ".sc-25310353-5"
TAG = ".sc-8dc067f-0"

CONTAINER_STYLE = "margin-bottom: 16px"


def _is_room_link(tag) -> bool:
    if tag.get("data-testid") == "search-result-room-thumbail":
        return True
    return "/chintai/rooms/" in (tag.get("href") or "")


def _building_text(container) -> str:
    """Container text minus the room links inside it."""
    if container is None:
        return ""
    strings = [s for s in container.find_all(string=True) if s.find_parent(_is_room_link) is None]
    return collapse_whitespace(" ".join(strings))


def _room_href(room) -> str:
    if room.get("href"):
        return room["href"]
    link = room.find_parent("a", href=True) or room.select_one("a[href]")
    return link["href"] if link is not None else ""


class CanaryScraper:
    """Listing extractor for web.canary-app.jp search results.

    Canary renders its result list client side, so markup must come from a
    JS-rendering transport. Rooms are anchors nested in a building block;
    building fields are read from the block and unit fields from the anchor.
    """

    name = "canary"
    base_url = CANARY_BASE_URL
    requires_js = True
    wait_for_selector = ROOM_SELECTOR

    def extract(self, markup: str) -> list[Listing]:
        if not markup:
            return []
        soup = BeautifulSoup(markup, "html.parser")

        rooms = soup.select(ROOM_SELECTOR)
        if not rooms:
            rooms = soup.select(ROOM_FALLBACK_SELECTOR)
            if rooms:
                logger.warning("Canary room test ids missing, using room link fallback")
        logger.info(f"Found {len(rooms)} Canary room links")

        raw_records = []
        for room in rooms:
            try:
                raw_records.append(self._parse_room(room))
            except Exception as e:
                logger.warning(f"Skipping unparsable Canary room: {e}")

        count = discover_result_count(collapse_whitespace(soup.get_text(" ")))
        limit = count if count is not None else SETTINGS["max_listings"]
        listings = finalize(raw_records, self.base_url, self.name, limit)
        logger.info(f"Extracted {len(listings)} Canary listings from {len(raw_records)} rooms")
        return listings

    def _container(self, room):
        container = room.find_parent(
            lambda tag: CONTAINER_STYLE in (tag.get("style") or "")
        )
        if container is not None:
            return container
        for parent in room.parents:
            if parent.select_one(TITLE):
                return parent
        return room.parent

    def _parse_room(self, room) -> dict:
        container = self._container(room)
        raw = self._structured_fields(room, container)
        if not raw["title"] or not raw["rent"]:
            self._fill_from_text(raw, room, container)
        return raw

    def _structured_fields(self, room, container) -> dict:
        access = texts_of(container, ACCESS)
        address = access[-1] if access else ""
        age = next((a for a in access if "築" in a), "")
        access = [a for a in access[:-1] if a != age]

        rent = text_of(room, RENT)
        if rent and not rent.endswith("円"):
            rent = f"{rent}万円"

        fees = text_of(room, FEES)
        management_fee = fees.split("/")[-1].strip() if "/" in fees else fees.replace(rent, "").strip()

        layout_parts = [p.strip() for p in text_of(room, LAYOUT).split("/")]
        layout_parts += [""] * (3 - len(layout_parts))

        img = room.select_one(IMAGE) or room.select_one("img")

        return {
            "title": text_of(container, TITLE),
            "address": address,
            "access": access,
            "age": age,
            "tags": texts_of(container, TAG),
            "image_url": image_src(img),
            "detail_url": _room_href(room),
            "rent": rent,
            "management_fee": management_fee,
            "deposit": text_of(room, DEPOSIT).replace("敷", "").strip(),
            "gratuity": text_of(room, GRATUITY).replace("礼", "").strip(),
            "layout": layout_parts[0],
            "area": layout_parts[1],
            "floor": layout_parts[2],
        }

    def _fill_from_text(self, raw: dict, room, container) -> None:
        """Lower-confidence path: read blanks from rendered text via text rules."""
        unit = fields_from_text(text_of(room))
        building = fields_from_text(_building_text(container))

        if not raw["title"]:
            heading = container.select_one("h1, h2, h3, h4") if container is not None else None
            img = room.select_one("img[alt]")
            raw["title"] = text_of(heading) or (img.get("alt", "") if img is not None else "")

        for key in ("rent", "management_fee", "deposit", "gratuity", "layout", "area", "floor"):
            if not raw[key]:
                raw[key] = unit[key]
        if not raw["age"]:
            raw["age"] = building["age"]
        if not raw["address"]:
            raw["address"] = building["address"]
        if not raw["access"]:
            raw["access"] = building["access"]
        logger.info(f"Canary room {raw['detail_url']} filled from free text")
