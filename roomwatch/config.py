import os

SETTINGS = {
    "direct_timeout": float(os.environ.get("DIRECT_TIMEOUT", "30")),
    "render_timeout": float(os.environ.get("RENDER_TIMEOUT", "60")),
    "render_transport": os.environ.get("RENDER_TRANSPORT", "scrapingbee"),
    "max_listings": int(os.environ.get("MAX_LISTINGS", "50")),
    "per_message": int(os.environ.get("LISTINGS_PER_MESSAGE", "10")),
    "max_notified": int(os.environ.get("MAX_NOTIFIED_LISTINGS", "20")),
    "placeholder_image": os.environ.get(
        "PLACEHOLDER_IMAGE_URL", "https://example.com/default-image.jpg"
    ),
    "searches_tab": os.environ.get("SEARCHES_TAB", "Searches"),
    "listings_tab": os.environ.get("LISTINGS_TAB", "Listings"),
    "secret_prefix": os.environ.get("SECRET_PREFIX", "roomwatch"),
}

SUUMO_BASE_URL = "https://suumo.jp"
CANARY_BASE_URL = "https://web.canary-app.jp"

PROMOTIONAL_TAG = "イチオシ"
