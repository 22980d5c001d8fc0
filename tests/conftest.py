import os

os.environ.setdefault("DIRECT_TIMEOUT", "30")
os.environ.setdefault("RENDER_TIMEOUT", "60")
os.environ.setdefault("RENDER_TRANSPORT", "scrapingbee")
os.environ.setdefault("MAX_LISTINGS", "50")
os.environ.setdefault("LISTINGS_PER_MESSAGE", "10")
os.environ.setdefault("MAX_NOTIFIED_LISTINGS", "20")
os.environ.setdefault("PLACEHOLDER_IMAGE_URL", "https://example.com/default-image.jpg")
os.environ.setdefault("SECRET_PREFIX", "roomwatch")
