# sitecheck/remote.py
import time
from dataclasses import dataclass
from typing import Callable, Optional

import feedparser
import requests

from . import config
from .utils import debug, http_code, say

UNREACHABLE = 0   # curl's "000"

# ----- HTTP -------------------------------------------------------------------
HEADERS = {
    "User-Agent": config.USER_AGENT,
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
}

def new_session() -> requests.Session:
    s = requests.Session()
    s.headers.update(HEADERS)
    return s

_session = None

def _sess(session=None):
    global _session
    if session is not None:
        return session
    if _session is None:
        _session = new_session()
    return _session

def get(url: str, session=None) -> Optional[requests.Response]:
    """GET following redirects; None when the host can't be reached."""
    try:
        return _sess(session).get(url, timeout=config.REQUEST_TIMEOUT, allow_redirects=True)
    except requests.RequestException as e:
        debug(f"GET {url} failed: {e}")
        return None

def head(url: str, session=None) -> Optional[requests.Response]:
    try:
        return _sess(session).head(url, timeout=config.REQUEST_TIMEOUT, allow_redirects=True)
    except requests.RequestException as e:
        debug(f"HEAD {url} failed: {e}")
        return None

def status_code(url: str, session=None) -> int:
    r = get(url, session)
    return r.status_code if r is not None else UNREACHABLE

def fetch_body(url: str, session=None) -> str:
    r = get(url, session)
    return r.text if r is not None else ""

def header_value(url: str, name: str, session=None) -> Optional[str]:
    r = head(url, session)
    if r is None:
        return None
    return r.headers.get(name)

# ----- Bounded retry ----------------------------------------------------------
@dataclass(frozen=True)
class RetryOutcome:
    ok: bool
    elapsed: float
    attempts: int
    last: object = None

def retry_until(predicate: Callable[[], tuple], interval: float, ceiling: float,
                sleep: Callable[[float], None] = time.sleep, backoff: float = 1.0,
                on_retry: Optional[Callable[[float, object], None]] = None) -> RetryOutcome:
    """
    Probe, then sleep `interval` and probe again until `predicate` reports
    success or `ceiling` seconds of sleeping have accumulated.

    `predicate` returns (ok, observed). Elapsed time is the sum of the sleeps,
    so a probe fired at tick t reports elapsed == t. The interval grows by
    `backoff` after each sleep and is clipped so the last sleep lands on
    the ceiling.
    """
    if interval <= 0:
        raise ValueError(f"retry interval must be positive, got {interval}")
    if backoff < 1:
        raise ValueError(f"retry backoff must be >= 1, got {backoff}")
    elapsed = 0
    attempts = 0
    last = None
    step = interval
    while elapsed < ceiling:
        attempts += 1
        ok, last = predicate()
        if ok:
            return RetryOutcome(True, elapsed, attempts, last)
        wait = min(step, ceiling - elapsed)
        sleep(wait)
        elapsed += wait
        step *= backoff
        if on_retry:
            on_retry(elapsed, last)
    return RetryOutcome(False, elapsed, attempts, last)

def poll_until_ready(url: str, interval_seconds: float, max_wait_seconds: float,
                     session=None, sleep: Callable[[float], None] = time.sleep):
    """Return (ready, elapsed). Prints progress after every miss."""
    def probe():
        code = status_code(url, session)
        return code == 200, code

    def progress(elapsed, code):
        say(f"  ... waiting ({elapsed:g}s, got HTTP {http_code(code)})")

    out = retry_until(probe, interval_seconds, max_wait_seconds, sleep=sleep, on_retry=progress)
    return out.ok, out.elapsed

# ----- Size -------------------------------------------------------------------
@dataclass(frozen=True)
class SizeVerdict:
    ok: bool
    verified: bool
    detail: str = ""

def remote_size(response) -> Optional[int]:
    """
    Content-Length, when it describes the file itself. A compressed transfer
    reports the compressed length, which says nothing about the file.
    """
    if response is None:
        return None
    if response.headers.get("Content-Encoding"):
        return None
    raw = response.headers.get("Content-Length", "")
    try:
        return int(raw)
    except (TypeError, ValueError):
        return None

def compare_size_with_tolerance(local_bytes: int, remote_bytes: Optional[int], tolerance_percent: float) -> SizeVerdict:
    if not remote_bytes or remote_bytes <= 0:
        return SizeVerdict(True, False, "Content-Length not available, likely gzipped")
    diff = abs(local_bytes - remote_bytes)
    allowed = local_bytes * tolerance_percent / 100
    detail = f"local: {local_bytes}B, remote: {remote_bytes}B"
    return SizeVerdict(diff <= allowed, True, detail)

# ----- Feed -------------------------------------------------------------------
def parse_feed(text: str):
    feed = feedparser.parse(text or "")
    debug(f"feed parsed: entries={len(feed.entries or [])} bozo={feed.get('bozo', 0)}")
    return feed
