from datetime import datetime, timezone
import gspread
from gspread.utils import rowcol_to_a1
from roomwatch.config import SETTINGS
from roomwatch.models import ConfiguredSearch, Listing

SEARCH_HEADERS = ["id", "conversation_id", "url", "updated_at"]
URL_COL = 3
SEARCH_UPDATED_COL = 4

LISTING_HEADERS = [
    "search_id", "detail_url", "title", "address", "layout", "floor", "area",
    "age", "image_url", "rent", "management_fee", "deposit", "gratuity",
    "access", "tags", "updated_at",
]


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _listing_row(listing: Listing, search_id, updated_at: str) -> list[str]:
    return [
        str(search_id), listing.detail_url, listing.title, listing.address,
        listing.layout, listing.floor, listing.area, listing.age,
        listing.image_url, listing.rent, listing.management_fee,
        listing.deposit, listing.gratuity, "\n".join(listing.access),
        ",".join(listing.tags), updated_at,
    ]


class SheetsClient:
    """Search URLs per conversation and already reported listings, kept in one spreadsheet."""

    def __init__(self, credentials_dict: dict, sheet_id: str):
        gc = gspread.service_account_from_dict(credentials_dict)
        self.spreadsheet = gc.open_by_key(sheet_id)

    def _searches(self):
        return self.spreadsheet.worksheet(SETTINGS["searches_tab"])

    def _listings(self):
        return self.spreadsheet.worksheet(SETTINGS["listings_tab"])

    def get_search(self, conversation_id: str) -> ConfiguredSearch | None:
        for record in self._searches().get_all_records():
            if str(record["conversation_id"]) == conversation_id and record["url"]:
                return ConfiguredSearch(
                    id=int(record["id"]),
                    conversation_id=conversation_id,
                    url=str(record["url"]),
                )
        return None

    def upsert_search(self, conversation_id: str, url: str) -> ConfiguredSearch:
        """Bind url to the conversation, replacing any previous URL."""
        ws = self._searches()
        records = ws.get_all_records()
        now = _now()
        for index, record in enumerate(records):
            if str(record["conversation_id"]) == conversation_id:
                row = index + 2  # header row
                ws.update_cell(row, URL_COL, url)
                ws.update_cell(row, SEARCH_UPDATED_COL, now)
                return ConfiguredSearch(id=int(record["id"]), conversation_id=conversation_id, url=url)

        next_id = max((int(r["id"]) for r in records if str(r["id"]).strip()), default=0) + 1
        ws.append_row([next_id, conversation_id, url, now])
        return ConfiguredSearch(id=next_id, conversation_id=conversation_id, url=url)

    def get_known_urls(self, search_id, candidate_urls: set[str]) -> set[str]:
        known = set()
        for record in self._listings().get_all_records():
            url = record["detail_url"]
            if str(record["search_id"]) == str(search_id) and url in candidate_urls:
                known.add(url)
        return known

    def save_listings(self, listings: list[Listing], search_id) -> int:
        """Upsert listings keyed by (search_id, detail_url). Returns rows written."""
        ws = self._listings()
        existing = {}
        for index, record in enumerate(ws.get_all_records()):
            existing[(str(record["search_id"]), record["detail_url"])] = index + 2

        now = _now()
        updates = []
        appends = []
        written = set()
        for listing in listings:
            key = (str(search_id), listing.detail_url)
            if listing.is_error or key in written:
                continue
            written.add(key)
            row_values = _listing_row(listing, search_id, now)
            if key in existing:
                row = existing[key]
                updates.append(
                    {
                        "range": f"{rowcol_to_a1(row, 1)}:{rowcol_to_a1(row, len(LISTING_HEADERS))}",
                        "values": [row_values],
                    }
                )
            else:
                appends.append(row_values)

        if updates:
            ws.batch_update(updates)
        if appends:
            ws.append_rows(appends)
        return len(written)
