import logging
from roomwatch.config import SETTINGS
from roomwatch.models import Listing
from roomwatch.normalize import collapse_whitespace, is_emittable, normalize_listing

logger = logging.getLogger(__name__)


def text_of(node, selector: str | None = None) -> str:
    """Whitespace-collapsed text of node (or of its first selector match)."""
    if node is None:
        return ""
    if selector:
        node = node.select_one(selector)
        if node is None:
            return ""
    return collapse_whitespace(node.get_text(" "))


def texts_of(node, selector: str) -> list[str]:
    if node is None:
        return []
    return [t for t in (collapse_whitespace(el.get_text(" ")) for el in node.select(selector)) if t]


def image_src(img) -> str:
    """Real image URL of a possibly lazy-loaded <img>."""
    if img is None:
        return ""
    for attr in ("rel", "data-src", "data-original", "src"):
        value = img.get(attr)
        if isinstance(value, list):
            value = " ".join(value)
        if value and not value.startswith("data:"):
            return value
    return ""


def finalize(raw_records, base_url: str, source: str, limit: int | None) -> list[Listing]:
    """Normalize raw field dicts, dropping invalid records and repeated detail URLs."""
    cap = limit if limit is not None else SETTINGS["max_listings"]
    listings = []
    seen = set()
    dropped = 0
    for raw in raw_records:
        if len(listings) >= cap:
            break
        listing = normalize_listing(raw, base_url, source)
        if not is_emittable(listing):
            dropped += 1
            continue
        if listing.detail_url in seen:
            continue
        seen.add(listing.detail_url)
        listings.append(listing)
    if dropped:
        logger.info(f"{source}: dropped {dropped} records missing title, rent or detail URL")
    return listings
