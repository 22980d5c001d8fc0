import logging
import requests
from curl_cffi import requests as curl_requests
from roomwatch.config import SETTINGS
from roomwatch.errors import (
    FetchError,
    FetchTimeoutError,
    RenderingUnavailableError,
    raise_for_status_code,
)

logger = logging.getLogger(__name__)

BROWSER_HEADERS = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "ja,en-US;q=0.7,en;q=0.3",
}


class DirectFetcher:
    """Plain HTTP retrieval with a browser-like TLS fingerprint. No JS."""

    def __init__(self, timeout: float | None = None):
        self.session = curl_requests.Session(
            impersonate="chrome136",
            timeout=timeout or SETTINGS["direct_timeout"],
        )
        self.session.headers.update(BROWSER_HEADERS)

    def fetch(self, url: str, render_js: bool = False, block_ads: bool = True,
              wait_for_selector: str | None = None) -> str:
        if render_js:
            raise RenderingUnavailableError(f"Direct fetch cannot render JavaScript for {url}")
        logger.info(f"Fetching {url}")
        try:
            resp = self.session.get(url)
        except curl_requests.exceptions.Timeout as e:
            logger.error(f"Timed out fetching {url}: {e}")
            raise FetchTimeoutError(f"{url}: {e}") from e
        except curl_requests.exceptions.RequestException as e:
            logger.error(f"Failed to fetch {url}: {e}")
            raise FetchError(f"{url}: {e}") from e
        raise_for_status_code(resp.status_code, "direct", url)
        return resp.text


class ScrapingBeeFetcher:
    API_URL = "https://app.scrapingbee.com/api/v1/"

    def __init__(self, api_key: str, timeout: float | None = None):
        self.api_key = api_key
        self.timeout = timeout or SETTINGS["render_timeout"]
        self.session = requests.Session()
        self.session.headers.update(BROWSER_HEADERS)

    def fetch(self, url: str, render_js: bool = True, block_ads: bool = True,
              wait_for_selector: str | None = None) -> str:
        params = {
            "api_key": self.api_key,
            "url": url,
            "render_js": str(render_js).lower(),
            "block_ads": str(block_ads).lower(),
            "wait": "10000",
            "premium_proxy": "true",
            "stealth_proxy": "true",
        }
        if wait_for_selector:
            params["wait_for"] = wait_for_selector

        logger.info(f"ScrapingBee fetch {url} render_js={render_js} wait_for={wait_for_selector}")
        try:
            resp = self.session.get(self.API_URL, params=params, timeout=self.timeout)
        except requests.Timeout as e:
            logger.error(f"ScrapingBee timed out for {url}: {e}")
            raise FetchTimeoutError(f"ScrapingBee: {e}") from e
        except requests.RequestException as e:
            logger.error(f"ScrapingBee request failed for {url}: {e}")
            raise FetchError(f"ScrapingBee: {e}") from e

        if resp.status_code >= 400:
            logger.error(f"ScrapingBee returned {resp.status_code} for {url}: {resp.text[:500]}")
        raise_for_status_code(resp.status_code, "ScrapingBee", _error_detail(resp))
        return resp.text


class PhantomJsCloudFetcher:
    API_URL = "https://phantomjscloud.com/api/browser/v2"
    USER_AGENT = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
    )

    def __init__(self, api_key: str, timeout: float | None = None):
        self.api_key = api_key
        self.timeout = timeout or SETTINGS["render_timeout"]
        self.session = requests.Session()

    def fetch(self, url: str, render_js: bool = True, block_ads: bool = True,
              wait_for_selector: str | None = None) -> str:
        payload = {
            "url": url,
            "renderType": "html",
            "outputAsJson": False,
            "requestSettings": {
                "ignoreImages": block_ads,
                "disableJavascript": not render_js,
                "userAgent": self.USER_AGENT,
                "waitInterval": 5000 if wait_for_selector else 7000,
            },
        }

        logger.info(f"PhantomJsCloud fetch {url} render_js={render_js}")
        try:
            resp = self.session.post(
                f"{self.API_URL}/{self.api_key}/", json=payload, timeout=self.timeout
            )
        except requests.Timeout as e:
            logger.error(f"PhantomJsCloud timed out for {url}: {e}")
            raise FetchTimeoutError(f"PhantomJsCloud: {e}") from e
        except requests.RequestException as e:
            logger.error(f"PhantomJsCloud request failed for {url}: {e}")
            raise FetchError(f"PhantomJsCloud: {e}") from e

        if resp.status_code >= 400:
            logger.error(f"PhantomJsCloud returned {resp.status_code} for {url}: {resp.text[:500]}")
        raise_for_status_code(resp.status_code, "PhantomJsCloud", _error_detail(resp))
        return resp.text


def _error_detail(resp) -> str:
    if resp.status_code < 400:
        return ""
    try:
        data = resp.json()
    except ValueError:
        return resp.text[:200]
    if isinstance(data, dict):
        return str(data.get("message") or data.get("error") or data)[:200]
    return str(data)[:200]


RENDER_FETCHERS = {
    "scrapingbee": (ScrapingBeeFetcher, "scrapingbee_api_key"),
    "phantomjscloud": (PhantomJsCloudFetcher, "phantomjscloud_api_key"),
}


def build_render_fetcher(transport: str, api_keys: dict):
    """Rendering transport named in settings, or None when it has no API key."""
    try:
        fetcher_cls, key_name = RENDER_FETCHERS[transport]
    except KeyError:
        logger.error(f"Unknown render transport {transport!r}")
        return None
    api_key = api_keys.get(key_name, "")
    if not api_key:
        logger.warning(f"No API key for render transport {transport}")
        return None
    return fetcher_cls(api_key)
