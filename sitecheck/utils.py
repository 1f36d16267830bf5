# sitecheck/utils.py
import re
import urllib.parse

from . import config

# -------------------------
# Logging
# -------------------------
def log(*args):
    print("[sitecheck]", *args, flush=True)

def debug(*args):
    if config.DEBUG:
        log(*args)

def say(line: str = ""):
    """Report line, unprefixed."""
    print(line, flush=True)

# -------------------------
# Text helpers
# -------------------------
def squash_whitespace(s: str) -> str:
    """Drop every whitespace char, tolerate None (CNAME comparison)."""
    return re.sub(r"\s+", "", s or "")

def http_code(status: int) -> str:
    """0 -> '000', like curl prints an unreachable host."""
    return f"{status:03d}"

# -------------------------
# URL / slug helpers
# -------------------------
_IGNORE_LAST_SEGMENTS = {"", "episodes", "index.html"}

def extract_slug_from_url(url: str) -> str:
    """
    Take the last meaningful path segment of an episode URL.

    Examples:
      https://impactsignals.ai/episodes/7-wfp-grain-atms/            -> 7-wfp-grain-atms
      https://impactsignals.ai/episodes/7-wfp-grain-atms/index.html  -> 7-wfp-grain-atms
    """
    path = urllib.parse.urlparse(url or "").path
    parts = [p for p in (path or "").strip("/").split("/") if p]
    for seg in reversed(parts):
        if seg.lower() not in _IGNORE_LAST_SEGMENTS:
            return seg
    return ""

def normalize_slug(raw: str) -> str:
    """
    Accept a bare slug, an `episodes/<slug>/` path or a full page URL.
    A bare slug comes back exactly as given, minus surrounding whitespace
    and slashes.
    """
    raw = (raw or "").strip()
    if urllib.parse.urlparse(raw).netloc or raw.lstrip("/").startswith(config.CONTENT_DIR + "/"):
        return extract_slug_from_url(raw)
    return raw.strip("/")

def is_safe_slug(slug: str) -> bool:
    """One path segment, no parent references."""
    return bool(slug) and "/" not in slug and "\\" not in slug and ".." not in slug
