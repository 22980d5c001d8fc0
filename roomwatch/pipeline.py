import logging
from roomwatch.config import SETTINGS
from roomwatch.dedup import filter_new, unique_by_detail_url
from roomwatch.errors import FetchError, RenderingUnavailableError, UnsupportedSiteError
from roomwatch.models import Listing, error_listing
from roomwatch.scrapers.canary import CanaryScraper
from roomwatch.scrapers.suumo import SuumoScraper

logger = logging.getLogger(__name__)

# Host substring -> extractor
SCRAPERS = {
    "suumo.jp": SuumoScraper,
    "canary-app.jp": CanaryScraper,
}


def scraper_for_url(url: str):
    for host, scraper_cls in SCRAPERS.items():
        if host in url:
            return scraper_cls()
    raise UnsupportedSiteError(f"No extractor for {url}")


def scrape_listings(url: str, direct_fetcher, render_fetcher=None) -> list[Listing]:
    """Fetch a search page and extract its listings.

    Sources rendered client side report transport problems as a single
    error listing. For plain HTTP sources, FetchError propagates.
    """
    scraper = scraper_for_url(url)
    logger.info(f"Scraping {url} with {scraper.name}")

    if not scraper.requires_js:
        markup = direct_fetcher.fetch(url)
        return scraper.extract(markup)

    try:
        if render_fetcher is None:
            raise RenderingUnavailableError(f"No rendering transport configured for {scraper.name}")
        markup = render_fetcher.fetch(
            url,
            render_js=True,
            block_ads=True,
            wait_for_selector=scraper.wait_for_selector,
        )
    except FetchError as e:
        logger.error(f"{scraper.name} fetch failed: {e}")
        return [
            error_listing(e.user_message, url, scraper.name, SETTINGS["placeholder_image"])
        ]
    return scraper.extract(markup)


def find_new_listings(listings: list[Listing], store, search_id) -> list[Listing]:
    listings = unique_by_detail_url(listings)
    candidate_urls = {listing.detail_url for listing in listings}
    known = store.get_known_urls(search_id, candidate_urls)
    logger.info(f"{len(known)} of {len(listings)} listings already reported for search {search_id}")
    return filter_new(listings, known)
