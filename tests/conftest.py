"""Shared fixtures: a healthy site tree on disk and a fake requests session."""

import json
from pathlib import Path

import pytest
import requests
from requests.structures import CaseInsensitiveDict

from sitecheck import config

STYLE_CSS = "\n".join(
    f"{sel} {{ margin: 0; padding: 0; color: #222; }}"
    for sel in ("body", "nav", ".episode-list", ".featured-section", ".episode-page")
) + "\n" + "/* filler */\n" * 100

INDEX_HTML = """<!doctype html>
<html><head><title>Impact Signals</title>
<link rel="stylesheet" href="/style.css"></head>
<body><ul class="episode-list"><li>episode 1</li></ul></body></html>
"""

EPISODE_HTML = """<!doctype html>
<html><head><title>{title}</title>
<meta name="description" content="Episode {n}">
<meta property="og:title" content="{title}">
<link rel="stylesheet" href="/style.css"></head>
<body><article class="episode-page">
<iframe src="https://www.youtube.com/embed/{yt}"></iframe>
{filler}
</article></body></html>
"""

FEED_XML = """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0"><channel><title>Impact Signals</title>
<link>https://impactsignals.ai/</link><description>AI for good, weekly</description>
{items}
</channel></rss>
"""

SITEMAP_XML = """<?xml version="1.0" encoding="UTF-8"?>
<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">
<url><loc>https://impactsignals.ai/</loc></url>
</urlset>
"""

EPISODES = [
    {"slug": "1-first-signal", "episode_number": 1, "youtube_id": "aaa111"},
    {"slug": "2-second-signal", "episode_number": 2, "youtube_id": ""},
    {"slug": "3-third-signal", "episode_number": 3, "youtube_id": "ccc333"},
]


def episode_html(rec: dict) -> str:
    return EPISODE_HTML.format(title=rec["slug"], n=rec["episode_number"],
                               yt=rec.get("youtube_id") or "none", filler="<p>notes</p>\n" * 40)


def feed_xml(n_items: int = 3) -> str:
    items = "\n".join(
        f"<item><title>Episode {i}</title><link>https://impactsignals.ai/episodes/{i}/</link>"
        f"<description>Episode {i} of the show, with a long enough description.</description></item>"
        for i in range(1, n_items + 1)
    )
    return FEED_XML.format(items=items)


def make_site(root: Path, episodes=EPISODES) -> Path:
    root.mkdir(parents=True, exist_ok=True)
    (root / "style.css").write_text(STYLE_CSS, encoding="utf-8")
    (root / "index.html").write_text(INDEX_HTML, encoding="utf-8")
    (root / "robots.txt").write_text("User-agent: *\nSitemap: https://impactsignals.ai/sitemap.xml\n", encoding="utf-8")
    (root / "sitemap.xml").write_text(SITEMAP_XML, encoding="utf-8")
    (root / "feed.xml").write_text(feed_xml(), encoding="utf-8")
    (root / "CNAME").write_text("impactsignals.ai\n", encoding="utf-8")
    (root / "episodes.json").write_text(json.dumps(episodes, indent=2), encoding="utf-8")
    (root / "llms.txt").write_text("# Impact Signals\n", encoding="utf-8")
    (root / "llms-full.txt").write_text("# Impact Signals (full)\n", encoding="utf-8")
    for rec in episodes:
        d = root / "episodes" / rec["slug"]
        d.mkdir(parents=True, exist_ok=True)
        (d / "index.html").write_text(episode_html(rec), encoding="utf-8")
    return root


@pytest.fixture
def site(tmp_path) -> Path:
    return make_site(tmp_path / "site")


# ----- Fake HTTP --------------------------------------------------------------
class FakeResponse:
    def __init__(self, status_code=200, text="", headers=None):
        self.status_code = status_code
        self.text = text
        self.headers = CaseInsensitiveDict(headers or {})


class FakeSession:
    """
    Maps URL -> FakeResponse (or a callable returning one). Unknown URLs
    raise ConnectionError, the way an unreachable host does.
    """

    def __init__(self, routes=None):
        self.routes = dict(routes or {})
        self.calls = []

    def _answer(self, method, url):
        self.calls.append((method, url))
        route = self.routes.get(url)
        if route is None:
            raise requests.ConnectionError(f"no route to {url}")
        return route() if callable(route) else route

    def get(self, url, timeout=None, allow_redirects=True):
        assert timeout, "every request needs an explicit timeout"
        return self._answer("GET", url)

    def head(self, url, timeout=None, allow_redirects=True):
        assert timeout, "every request needs an explicit timeout"
        return self._answer("HEAD", url)


def live_routes(root: Path) -> dict:
    """Routes for a deployed copy of `root` that is healthy."""
    base = config.SITE_URL
    css = (root / "style.css").read_text("utf-8")
    routes = {
        f"{base}/style.css": FakeResponse(200, css, {"Content-Type": "text/css; charset=utf-8",
                                                     "Content-Length": str(len(css.encode()))}),
        f"{base}/": FakeResponse(200, (root / "index.html").read_text("utf-8"), {"Content-Type": "text/html"}),
        f"{base}/robots.txt": FakeResponse(200, "User-agent: *\n"),
        f"{base}/sitemap.xml": FakeResponse(200, SITEMAP_XML),
        f"{base}/llms.txt": FakeResponse(200, "# Impact Signals\n"),
        f"{base}/feed.xml": FakeResponse(200, feed_xml(), {"Content-Type": "application/rss+xml"}),
    }
    for d in sorted((root / "episodes").iterdir()):
        html_path = d / "index.html"
        if html_path.is_file():
            routes[config.episode_url(d.name)] = FakeResponse(200, html_path.read_text("utf-8"))
    return routes

