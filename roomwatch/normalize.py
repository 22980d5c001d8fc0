import re
from urllib.parse import urljoin, urlparse
from roomwatch.config import PROMOTIONAL_TAG, SETTINGS
from roomwatch.models import Listing

_WHITESPACE = re.compile(r"[\s　]+")


def collapse_whitespace(text: str | None) -> str:
    if not text:
        return ""
    return _WHITESPACE.sub(" ", text).strip()


def is_absolute_url(url: str) -> bool:
    parsed = urlparse(url)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def absolutize_url(url: str | None, base_url: str) -> str:
    """Resolve a relative URL against the site origin; absolute URLs pass through."""
    url = collapse_whitespace(url)
    if not url:
        return ""
    if is_absolute_url(url):
        return url
    if url.startswith("//"):
        return f"https:{url}"
    return urljoin(base_url.rstrip("/") + "/", url)


def clean_tags(tags) -> list[str]:
    cleaned = []
    for tag in tags or []:
        text = collapse_whitespace(tag)
        if text and text != PROMOTIONAL_TAG and text not in cleaned:
            cleaned.append(text)
    return cleaned


def clean_access(lines) -> list[str]:
    access = []
    for line in lines or []:
        text = collapse_whitespace(line)
        if text:
            access.append(text)
    return access


def normalize_listing(raw: dict, base_url: str, source: str) -> Listing:
    """Build a Listing from loosely scraped fields.

    Price fields keep the site's own formatting (e.g. "8.5万円", "5000円",
    "-"); nothing is coerced to numbers. Missing image URLs fall back to the
    configured placeholder.
    """
    image_url = absolutize_url(raw.get("image_url"), base_url)
    return Listing(
        title=collapse_whitespace(raw.get("title")),
        address=collapse_whitespace(raw.get("address")),
        rent=collapse_whitespace(raw.get("rent")),
        detail_url=absolutize_url(raw.get("detail_url"), base_url),
        source=source,
        layout=collapse_whitespace(raw.get("layout")),
        floor=collapse_whitespace(raw.get("floor")),
        area=collapse_whitespace(raw.get("area")),
        age=collapse_whitespace(raw.get("age")),
        image_url=image_url or SETTINGS["placeholder_image"],
        management_fee=collapse_whitespace(raw.get("management_fee")),
        deposit=collapse_whitespace(raw.get("deposit")),
        gratuity=collapse_whitespace(raw.get("gratuity")),
        access=clean_access(raw.get("access")),
        tags=clean_tags(raw.get("tags")),
    )


def is_emittable(listing: Listing) -> bool:
    """A listing needs a title, a rent and an absolute detail URL."""
    return bool(listing.title and listing.rent and is_absolute_url(listing.detail_url))
