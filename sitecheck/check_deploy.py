# sitecheck/check_deploy.py
"""
Post-deploy verification. Polls the live site until the stylesheet answers,
then checks the deployed artifacts.

    check-deploy [--repo-dir PATH] [--summary PATH]

Report-only in the publish pipeline: the exit code says whether the site
looks healthy, it doesn't undo anything.
"""

import argparse
import sys
import time
from functools import lru_cache
from pathlib import Path

from . import config
from .checks import (
    CONTENT_MATCH, CROSS_REFERENCE, HTTP_HEADER, HTTP_STATUS, REACHABILITY, SIZE_THRESHOLD,
    XML_WELL_FORMED, Check, Problem, failed, passed, print_summary, print_banner, run,
    status_result, verdict, warned,
)
from .episodes import MetadataError, latest_slug, load_episodes
from .files import file_exists, file_size, looks_like_xml, text_contains
from .remote import (
    compare_size_with_tolerance, fetch_body, head, header_value, parse_feed,
    poll_until_ready, remote_size, status_code,
)
from .report import write_summary
from .utils import log

S_STYLE  = "🎨 Verifying style.css..."
S_HOME   = "📄 Verifying index.html..."
S_FILES  = "🤖 Verifying robots.txt, sitemap.xml, llms.txt..."
S_FEED   = "📡 Verifying feed.xml..."
S_LATEST = "📺 Verifying latest episode page..."


def site_url(path: str) -> str:
    return f"{config.SITE_URL}/{path.lstrip('/')}"

# ----- Individual checks ------------------------------------------------------
def check_ready(state: dict, session, sleep, interval, max_wait):
    ready, elapsed = poll_until_ready(site_url(config.READY_PATH), interval, max_wait,
                                      session=session, sleep=sleep)
    state["ready"] = ready
    if ready:
        return passed(f"Site is live ({config.STYLESHEET} returned 200 after {elapsed:g}s)", actual=elapsed)
    return failed(f"Site NOT reachable after {elapsed:g}s, deploy may have failed",
                  Problem.UNREACHABLE_ENDPOINT, expected=200, actual=elapsed)

def check_content_type(session):
    ctype = header_value(site_url(config.STYLESHEET), "Content-Type", session) or ""
    return verdict("text/css" in ctype.lower(),
                   f"{config.STYLESHEET} Content-Type is CSS",
                   f"{config.STYLESHEET} Content-Type unexpected: {ctype or 'none'}",
                   Problem.MALFORMED_ARTIFACT, expected="text/css", actual=ctype)

def check_remote_size(root: Path, session):
    name = config.STYLESHEET
    local = file_size(root / name)
    response = head(site_url(name), session)
    if response is None:
        return failed(f"{name} HEAD request failed, size not checked",
                      Problem.UNREACHABLE_ENDPOINT, expected=local)
    remote = remote_size(response)
    v = compare_size_with_tolerance(local, remote, config.SIZE_TOLERANCE)
    if not v.verified:
        return passed(f"{name} served", caveat=v.detail, actual=remote)
    return verdict(v.ok, f"{name} size OK ({v.detail})", f"{name} size mismatch ({v.detail})",
                   Problem.SIZE_ANOMALY, expected=local, actual=remote)

def check_feed_body(body: str):
    out = [verdict(looks_like_xml(body), "feed.xml is an XML response", "feed.xml does not look like XML",
                   Problem.MALFORMED_ARTIFACT, heuristic=True, category=XML_WELL_FORMED)]
    feed = parse_feed(body)
    n = len(feed.entries or [])
    if not n:
        out.append(failed("feed.xml has no entries", Problem.MALFORMED_ARTIFACT, actual=0))
    elif feed.get("bozo"):
        out.append(warned(f"feed.xml has {n} entries but is not clean: {feed.get('bozo_exception')}", actual=n))
    else:
        out.append(passed(f"feed.xml parses with {n} entries", actual=n))
    return out

def check_latest_episode(root: Path, session):
    try:
        records = load_episodes(root / config.METADATA_FILE)
    except MetadataError as e:
        log(f"{e}; falling back to episode folders")
        records = []
    slug = latest_slug(records, root / config.CONTENT_DIR)
    if not slug:
        return failed("Could not determine latest episode slug", Problem.MISSING_ARTIFACT)
    return status_result(f"Latest episode /{slug}/", status_code(config.episode_url(slug), session))

# ----- Suite ------------------------------------------------------------------
def build_checks(root: Path, session=None, sleep=time.sleep,
                 interval: float = None, max_wait: float = None) -> list:
    interval = config.POLL_INTERVAL if interval is None else interval
    max_wait = config.MAX_WAIT if max_wait is None else max_wait
    state = {"ready": False}

    def live():
        return state["ready"]

    @lru_cache(maxsize=None)
    def home_body():
        return fetch_body(site_url("/"), session)

    @lru_cache(maxsize=None)
    def feed_body():
        return fetch_body(site_url(config.FEED), session)

    def home_marker(m, ok, bad):
        return verdict(text_contains(home_body(), m), ok, bad, Problem.MALFORMED_ARTIFACT, expected=m)

    style, home = config.STYLESHEET, config.HOMEPAGE
    s_wait = f"⏳ Waiting for GitHub Pages deploy (max {max_wait:g}s)..."

    checks = [
        Check("deploy:ready", s_wait, REACHABILITY, lambda: check_ready(state, session, sleep, interval, max_wait)),
        Check("style:content-type", S_STYLE, HTTP_HEADER, lambda: check_content_type(session), when=live),
        Check("style:size", S_STYLE, SIZE_THRESHOLD, lambda: check_remote_size(root, session),
              when=lambda: live() and file_exists(root / style)),
        Check("home:status", S_HOME, HTTP_STATUS, lambda: status_result(home, status_code(site_url("/"), session)),
              when=live),
        Check("home:stylesheet", S_HOME, CONTENT_MATCH,
              lambda: home_marker(style, f"{home} references {style}", f"{home} does NOT reference {style}"),
              when=live),
        Check("home:title", S_HOME, CONTENT_MATCH,
              lambda: home_marker("<title>", f"{home} has <title> tag", f"{home} missing <title> tag"),
              when=live),
    ]
    for name in config.REMOTE_STATUS_FILES:
        checks.append(Check(f"remote:{name}", S_FILES, HTTP_STATUS,
                            lambda name=name: status_result(name, status_code(site_url(name), session)),
                            when=live))
    checks += [
        Check("feed:status", S_FEED, HTTP_STATUS,
              lambda: status_result(config.FEED, status_code(site_url(config.FEED), session)), when=live),
        Check("feed:body", S_FEED, CONTENT_MATCH, lambda: check_feed_body(feed_body()), when=live),
        Check("episode:latest", S_LATEST, CROSS_REFERENCE, lambda: check_latest_episode(root, session), when=live),
    ]
    return checks


def run_deploy(root: Path, session=None, sleep=time.sleep, interval=None, max_wait=None):
    print_banner("Impact Signals - Post-Deploy Verification")
    result = run(build_checks(root, session, sleep, interval, max_wait), title="Post-Deploy Verification")
    print_summary(result, "POST-DEPLOY", "POST-DEPLOY",
                  fail_hint="🚨 SITE MAY HAVE ISSUES, CHECK IMMEDIATELY", ok_hint="🎉 Site is healthy!")
    return result


def main(argv=None) -> int:
    ap = argparse.ArgumentParser(prog="check-deploy", description="Post-deploy verification of the live site")
    ap.add_argument("--repo-dir", help="Site repository root (default: $SITECHECK_REPO_DIR or cwd)")
    ap.add_argument("--summary", help="Append a Markdown summary to this file (default: $GITHUB_STEP_SUMMARY)")
    args = ap.parse_args(argv)
    if config.POLL_INTERVAL <= 0:
        ap.error(f"SITECHECK_POLL_INTERVAL must be positive, got {config.POLL_INTERVAL}")
    if config.MAX_WAIT < 0:
        ap.error(f"SITECHECK_MAX_WAIT must not be negative, got {config.MAX_WAIT}")

    result = run_deploy(config.repo_root(args.repo_dir))
    write_summary(result, args.summary)
    return result.exit_code


if __name__ == "__main__":
    sys.exit(main())
