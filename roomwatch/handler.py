import base64
import json
import logging
import boto3
import gspread
import requests
from roomwatch.config import SETTINGS
from roomwatch.errors import ConfigurationError, RoomwatchError
from roomwatch.fetch import DirectFetcher, build_render_fetcher
from roomwatch.line import LineClient, verify_signature
from roomwatch.messages import (
    build_rendering_units,
    current_url_message,
    error_unit,
    no_results_message,
    nothing_new_message,
    searching_message,
    text_message,
    url_updated_message,
)
from roomwatch.pipeline import find_new_listings, scrape_listings, scraper_for_url
from roomwatch.sheets import SheetsClient

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)

SEARCH_COMMAND = "物件検索"
SHOW_URL_COMMAND = "URL確認"
UPDATE_COMMAND = "URL更新"


def get_secrets() -> dict:
    client = boto3.client("secretsmanager")
    prefix = SETTINGS["secret_prefix"]

    def secret(name: str) -> dict:
        resp = client.get_secret_value(SecretId=f"{prefix}/{name}")
        return json.loads(resp["SecretString"])

    line = secret("line")
    return {
        "channel_access_token": line["channel_access_token"],
        "channel_secret": line["channel_secret"],
        "google_creds": secret("google-creds"),
        "sheet_id": secret("google-sheet-id")["sheet_id"],
        "fetch_keys": secret("fetch-keys"),
    }


def _response(status: int, body: dict) -> dict:
    return {"statusCode": status, "body": json.dumps(body, ensure_ascii=False)}


def conversation_key(source: dict) -> str:
    if source.get("type") == "group":
        return source["groupId"]
    if source.get("type") == "room":
        return source["roomId"]
    return source["userId"]


def lambda_handler(event, context):
    method = event.get("httpMethod") or event.get("requestContext", {}).get("http", {}).get("method", "")
    path = event.get("rawPath") or event.get("path") or "/"

    if method == "GET" and path.rstrip("/").endswith("/health"):
        return _response(200, {"status": "ok"})
    if method != "POST" or not path.rstrip("/").endswith("/webhook"):
        return _response(404, {"error": "not found"})

    body = event.get("body") or ""
    if event.get("isBase64Encoded"):
        body = base64.b64decode(body).decode("utf-8")
    headers = {k.lower(): v for k, v in (event.get("headers") or {}).items()}

    secrets = get_secrets()
    if not verify_signature(body, headers.get("x-line-signature", ""), secrets["channel_secret"]):
        logger.warning("Rejected webhook with invalid signature")
        return _response(403, {"error": "invalid signature"})

    line = LineClient(secrets["channel_access_token"])
    store = SheetsClient(credentials_dict=secrets["google_creds"], sheet_id=secrets["sheet_id"])

    results = []
    for line_event in json.loads(body).get("events", []):
        if line_event.get("type") != "message" or line_event.get("message", {}).get("type") != "text":
            continue
        result = handle_command(
            line_event["message"]["text"],
            conversation_key(line_event.get("source", {})),
            line_event.get("replyToken", ""),
            line=line,
            store=store,
            fetch_keys=secrets["fetch_keys"],
        )
        if result:
            results.append(result)

    return _response(200, {"success": True, "results": results})


def handle_command(text: str, conversation_id: str, reply_token: str, line, store, fetch_keys: dict):
    text = text.strip()
    if text.startswith(UPDATE_COMMAND):
        return update_url(text[len(UPDATE_COMMAND):], conversation_id, reply_token, line, store)
    if SHOW_URL_COMMAND in text:
        return show_url(conversation_id, reply_token, line, store)
    if SEARCH_COMMAND in text:
        return run_search(
            conversation_id,
            reply_token,
            line=line,
            store=store,
            direct_fetcher=DirectFetcher(),
            render_fetcher=build_render_fetcher(SETTINGS["render_transport"], fetch_keys),
        )
    return None


def update_url(args: str, conversation_id: str, reply_token: str, line, store) -> dict:
    url = next((token for token in args.split() if token.startswith("https://")), "")
    if not url:
        line.reply(reply_token, [text_message("URLは https:// から始まる形式で指定してください。")])
        return {"command": "update", "updated": False}
    try:
        scraper_for_url(url)
    except ConfigurationError as e:
        line.reply(reply_token, [text_message(e.user_message)])
        return {"command": "update", "updated": False}

    search = store.upsert_search(conversation_id, url)
    logger.info(f"Search {search.id} for {conversation_id} now points at {url}")
    line.reply(reply_token, [url_updated_message(url)])
    return {"command": "update", "updated": True}


def show_url(conversation_id: str, reply_token: str, line, store) -> dict:
    search = store.get_search(conversation_id)
    if search is None:
        line.reply(reply_token, [text_message(ConfigurationError.user_message)])
        return {"command": "show", "configured": False}
    line.reply(reply_token, [current_url_message(search.url)])
    return {"command": "show", "configured": True}


def run_search(conversation_id: str, reply_token: str, line, store, direct_fetcher, render_fetcher) -> dict:
    """Scrape the conversation's search URL and push the listings not reported before.

    Results go out as push messages: the reply token has usually expired by
    the time a rendered scrape finishes. Listings are recorded as seen only
    after they have been pushed.
    """
    search = store.get_search(conversation_id)
    if search is None:
        line.reply(reply_token, [text_message(ConfigurationError.user_message)])
        return {"command": "search", "error": "not configured"}

    try:
        line.reply(reply_token, [searching_message()])
    except requests.RequestException as e:
        logger.warning(f"Acknowledgement reply failed for {conversation_id}: {e}")

    try:
        listings = scrape_listings(search.url, direct_fetcher, render_fetcher)
    except RoomwatchError as e:
        logger.error(f"Search {search.id} failed: {e}")
        line.push(conversation_id, [text_message(e.user_message)])
        return {"command": "search", "error": type(e).__name__}

    if not listings:
        line.push(conversation_id, [no_results_message()])
        return {"command": "search", "scraped": 0, "new": 0}

    if all(listing.is_error for listing in listings):
        line.push(conversation_id, error_unit(listings[0]))
        return {"command": "search", "error": listings[0].address}

    new_listings = find_new_listings(listings, store, search.id)
    logger.info(f"{len(new_listings)} new of {len(listings)} scraped for search {search.id}")
    if not new_listings:
        line.push(conversation_id, [nothing_new_message()])
        return {"command": "search", "scraped": len(listings), "new": 0}

    units, presented = build_rendering_units(new_listings, search.url)
    for unit in units:
        line.push(conversation_id, unit)

    saved = 0
    try:
        saved = store.save_listings(presented, search.id)
    except (gspread.exceptions.GSpreadException, requests.RequestException) as e:
        logger.error(f"Failed to save listings for search {search.id}: {e}")

    return {
        "command": "search",
        "scraped": len(listings),
        "new": len(new_listings),
        "notified": len(presented),
        "saved": saved,
    }
