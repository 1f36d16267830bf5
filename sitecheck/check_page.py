# sitecheck/check_page.py
"""
Verify one deployed episode page.

    check-page <episode-slug> [--repo-dir PATH] [--summary PATH]
    check-page 7-wfp-grain-atms-google-75m-latam-gpt

Exit 0/1 like the other suites; 2 when the slug is missing.
"""

import argparse
import sys
from functools import lru_cache
from pathlib import Path

from . import config
from .checks import (
    CONTENT_MATCH, CROSS_REFERENCE, FILE_EXISTENCE, HTTP_STATUS, SIZE_THRESHOLD,
    Check, Problem, failed, passed, print_banner, print_summary, run, skipped, status_result,
    verdict, warned,
)
from .episodes import MetadataError, find_record_by_slug, load_episodes
from .files import file_exists, file_size, file_size_above, text_contains
from .remote import fetch_body, status_code
from .report import write_summary
from .utils import is_safe_slug, normalize_slug

S_HTTP  = "🌐 Checking HTTP response..."
S_STYLE = "🎨 Checking style.css link..."
S_HTML  = "📄 Checking HTML structure..."
S_EMBED = "🎬 Checking YouTube embed..."
S_LOCAL = "📁 Checking local files..."

# (marker, regex?, ok message, fail message); grep -i semantics, one line at a time
STRUCTURE_MARKERS = (
    ("<title>", False, "Has <title> tag", "Missing <title> tag"),
    (r"meta.*description", True, "Has meta description", "Missing meta description"),
    (r"meta.*og:title", True, "Has Open Graph title", "Missing Open Graph title"),
    (r"episode-page|episode-content|article", True, "Has episode content section", "Missing episode content section"),
)


def check_embed(body: str, root: Path, slug: str):
    try:
        records = load_episodes(root / config.METADATA_FILE)
    except MetadataError as e:
        return [warned(str(e)), skipped("No usable episode metadata (skipping embed check)")]
    record = find_record_by_slug(records, slug)
    if record is None or not record.youtube_id:
        return skipped(f"No youtube_id in {config.METADATA_FILE} for this episode (skipping)")
    vid = record.youtube_id
    if text_contains(body, vid):
        return passed(f"YouTube embed present (ID: {vid})", expected=vid, actual=vid)
    if text_contains(body, "youtube", ignore_case=True):
        # an embed is there, just not the one episodes.json declares
        return warned(f"YouTube embed present but ID {vid} not found", expected=vid)
    return failed(f"YouTube embed MISSING (expected ID: {vid})", Problem.MALFORMED_ARTIFACT, expected=vid)


def check_local_page(root: Path, slug: str):
    rel = f"{config.CONTENT_DIR}/{slug}/{config.INDEX_FILE}"
    path = root / rel
    if not file_exists(path):
        return failed(f"Local {rel} does NOT exist", Problem.MISSING_ARTIFACT, actual="absent")
    size = file_size(path)
    return [
        passed(f"Local {config.INDEX_FILE} exists"),
        verdict(file_size_above(path, config.MIN_PAGE_BYTES),
                f"Local {config.INDEX_FILE} is {size} bytes",
                f"Local {config.INDEX_FILE} is only {size} bytes, likely incomplete",
                Problem.SIZE_ANOMALY, expected=f"> {config.MIN_PAGE_BYTES}", actual=size,
                category=SIZE_THRESHOLD),
    ]


def build_checks(root: Path, slug: str, session=None) -> list:
    url = config.episode_url(slug)

    @lru_cache(maxsize=None)
    def body():
        return fetch_body(url, session)

    def marker(m, regex, ok, bad):
        return verdict(text_contains(body(), m, regex=regex, ignore_case=regex), ok, bad,
                       Problem.MALFORMED_ARTIFACT, expected=m)

    checks = [
        Check("page:status", S_HTTP, HTTP_STATUS, lambda: status_result("Episode page", status_code(url, session))),
        Check("page:stylesheet", S_STYLE, CONTENT_MATCH,
              lambda: marker(config.STYLESHEET, False, f"Page references {config.STYLESHEET}",
                             f"Page does NOT reference {config.STYLESHEET}")),
    ]
    for m, regex, ok, bad in STRUCTURE_MARKERS:
        checks.append(Check(f"page:{ok}", S_HTML, CONTENT_MATCH,
                            lambda m=m, regex=regex, ok=ok, bad=bad: marker(m, regex, ok, bad)))
    checks += [
        Check("page:embed", S_EMBED, CROSS_REFERENCE, lambda: check_embed(body(), root, slug)),
        Check("page:local", S_LOCAL, FILE_EXISTENCE, lambda: check_local_page(root, slug)),
    ]
    return checks


def run_page(root: Path, slug: str, session=None):
    print_banner(f"Episode Page Verification: {slug}")
    result = run(build_checks(root, slug, session), title=f"Episode Page: {slug}")
    print_summary(result, "EPISODE CHECK", "EPISODE CHECK")
    return result


def main(argv=None) -> int:
    ap = argparse.ArgumentParser(
        prog="check-page",
        description="Verify a specific deployed episode page",
        epilog="Example: check-page 7-wfp-grain-atms-google-75m-latam-gpt",
    )
    ap.add_argument("slug", help="Episode slug (or the episode page URL)")
    ap.add_argument("--repo-dir", help="Site repository root (default: $SITECHECK_REPO_DIR or cwd)")
    ap.add_argument("--summary", help="Append a Markdown summary to this file (default: $GITHUB_STEP_SUMMARY)")
    args = ap.parse_args(argv)

    slug = normalize_slug(args.slug)
    if not is_safe_slug(slug) or ".." in args.slug:
        ap.error(f"not an episode slug: {args.slug!r}")

    result = run_page(config.repo_root(args.repo_dir), slug)
    write_summary(result, args.summary)
    return result.exit_code


if __name__ == "__main__":
    sys.exit(main())
