# sitecheck/config.py
import os
from pathlib import Path

# ----- ENV --------------------------------------------------------------------
SITE_URL         = os.environ.get("SITECHECK_SITE_URL", "https://impactsignals.ai").strip().rstrip("/")
EXPECTED_DOMAIN  = os.environ.get("SITECHECK_EXPECTED_DOMAIN", "impactsignals.ai").strip()
REPO_DIR         = os.environ.get("SITECHECK_REPO_DIR", "").strip()

POLL_INTERVAL    = int(os.environ.get("SITECHECK_POLL_INTERVAL", "5"))
MAX_WAIT         = int(os.environ.get("SITECHECK_MAX_WAIT", "90"))
REQUEST_TIMEOUT  = float(os.environ.get("SITECHECK_REQUEST_TIMEOUT", "15"))
SIZE_TOLERANCE   = float(os.environ.get("SITECHECK_SIZE_TOLERANCE", "5"))
XML_CHECK_MODE   = os.environ.get("SITECHECK_XML_CHECK", "parser").strip().lower() or "parser"
DEBUG            = os.environ.get("SITECHECK_DEBUG", "0") == "1"

USER_AGENT = "sitecheck/0.1 (+https://impactsignals.ai)"

# ----- Site layout ------------------------------------------------------------
STYLESHEET    = "style.css"
HOMEPAGE      = "index.html"
FEED          = "feed.xml"
SITEMAP       = "sitemap.xml"
DOMAIN_FILE   = "CNAME"
METADATA_FILE = "episodes.json"

CONTENT_DIR = "episodes"
INDEX_FILE  = "index.html"

# Anything in here vanishing breaks styling, discoverability or syndication.
CRITICAL_FILES = (
    STYLESHEET, HOMEPAGE, "robots.txt", SITEMAP, FEED,
    DOMAIN_FILE, METADATA_FILE, "llms.txt", "llms-full.txt",
)

EXPECTED_SELECTORS = ("body", ".episode-list", ".featured-section", ".episode-page", "nav")

# Minimum byte sizes (strictly greater than)
MIN_STYLESHEET_BYTES = 1000
MIN_FEED_BYTES       = 500
MIN_PAGE_BYTES       = 500

# Root element closed by each XML artifact (used by the heuristic check)
XML_ROOTS = {FEED: "rss", SITEMAP: "urlset"}

# Deploy is "live" once this path answers 200
READY_PATH = "/" + STYLESHEET

# Remote files that only need to answer 200
REMOTE_STATUS_FILES = ("robots.txt", SITEMAP, "llms.txt")


def repo_root(override=None) -> Path:
    """--repo-dir beats SITECHECK_REPO_DIR beats the working directory."""
    raw = override or REPO_DIR
    return Path(raw).expanduser().resolve() if raw else Path.cwd().resolve()


def episode_url(slug: str) -> str:
    return f"{SITE_URL}/{CONTENT_DIR}/{slug}/"
