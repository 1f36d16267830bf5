# sitecheck/check_local.py
"""
Pre-push validation: critical files exist and look sane, episode folders
are complete, and nothing protected is being deleted.

    check-local [--repo-dir PATH] [--summary PATH]

Exit 0 when every check passes (warnings allowed), 1 otherwise.
"""

import argparse
import sys
from pathlib import Path

from . import config
from .checks import (
    CONTENT_MATCH, DIFF_GUARD, FILE_EXISTENCE, SIZE_THRESHOLD, XML_WELL_FORMED,
    Check, Problem, failed, passed, print_banner, print_summary, run, skipped, verdict,
)
from .files import (
    all_subdirectories_have_file, contains_marker, file_exists, file_size,
    file_size_above, is_well_formed_xml, read_text,
)
from .git_guard import detect_deletions
from .report import write_summary
from .utils import log, squash_whitespace

S_FILES    = "📁 Checking critical files exist..."
S_STYLE    = "🎨 Validating style.css..."
S_HOME     = "📄 Validating index.html..."
S_EPISODES = "📺 Checking episode directories..."
S_FEED     = "📡 Validating feed.xml..."
S_SITEMAP  = "🗺️  Validating sitemap.xml..."
S_GIT      = "🔍 Checking for deleted files in git diff..."
S_DOMAIN   = "🌐 Validating CNAME..."

# ----- Individual checks ------------------------------------------------------
def check_exists(root: Path, name: str):
    present = file_exists(root / name)
    return verdict(present, f"{name} exists", f"{name} is MISSING", Problem.MISSING_ARTIFACT,
                   expected="present", actual="present" if present else "absent")

def check_min_size(root: Path, name: str, min_bytes: int):
    size = file_size(root / name)
    return verdict(file_size_above(root / name, min_bytes),
                   f"{name} is {size} bytes (non-trivial)",
                   f"{name} is only {size} bytes, likely truncated or empty",
                   Problem.SIZE_ANOMALY, expected=f"> {min_bytes}", actual=size)

def check_marker(root: Path, name: str, marker: str, ok: str, bad: str):
    return verdict(contains_marker(root / name, marker), ok, bad,
                   Problem.MALFORMED_ARTIFACT, expected=marker)

def check_xml(root: Path, name: str, mode: str):
    v = is_well_formed_xml(root / name, config.XML_ROOTS.get(name, ""), mode)
    if v.ok:
        return passed(f"{name} is valid XML", heuristic=v.heuristic)
    detail = f": {v.detail}" if v.detail else ""
    return failed(f"{name} is NOT valid XML{detail}", Problem.MALFORMED_ARTIFACT, heuristic=v.heuristic)

def check_episode_dirs(root: Path):
    parent = root / config.CONTENT_DIR
    valid, total, missing = all_subdirectories_have_file(parent, config.INDEX_FILE)
    out = [
        failed(f"Episode dir {name} missing {config.INDEX_FILE}", Problem.MISSING_ARTIFACT,
               expected=config.INDEX_FILE, actual="absent")
        for name in missing
    ]
    if total:
        out.append(passed(f"{valid}/{total} episode directories have {config.INDEX_FILE}",
                          expected=total, actual=valid))
    else:
        out.append(failed("No episode directories found", Problem.MISSING_ARTIFACT))
    return out

def check_deletions(root: Path):
    report = detect_deletions(root, config.CRITICAL_FILES, config.CONTENT_DIR, config.INDEX_FILE)
    if not report.is_repo:
        return skipped("Not a git repository, nothing to check")
    if report.error:
        log(f"git diff guard could not run: {report.error}")
        return failed(f"Cannot inspect pending deletions: {report.error}",
                      Problem.DESTRUCTIVE_CHANGE, actual="unknown")
    if not report.deleted:
        return passed("No critical files or episode pages being deleted")
    return [
        failed(f"{path} is being DELETED", Problem.DESTRUCTIVE_CHANGE, actual="deleted")
        for path in report.deleted
    ]

def check_domain(root: Path):
    domain = squash_whitespace(read_text(root / config.DOMAIN_FILE))
    return verdict(domain == config.EXPECTED_DOMAIN,
                   f"CNAME points to {config.EXPECTED_DOMAIN}",
                   f"CNAME contains '{domain}' instead of '{config.EXPECTED_DOMAIN}'",
                   Problem.MALFORMED_ARTIFACT, expected=config.EXPECTED_DOMAIN, actual=domain)

# ----- Suite ------------------------------------------------------------------
def build_checks(root: Path, xml_mode: str = None) -> list:
    xml_mode = xml_mode or config.XML_CHECK_MODE
    style, home, feed = config.STYLESHEET, config.HOMEPAGE, config.FEED
    sitemap, cname = config.SITEMAP, config.DOMAIN_FILE

    def exists(name):
        return lambda: file_exists(root / name)

    checks = [
        Check(f"exists:{f}", S_FILES, FILE_EXISTENCE, lambda f=f: check_exists(root, f))
        for f in config.CRITICAL_FILES
    ]

    checks.append(Check("style:size", S_STYLE, SIZE_THRESHOLD,
                        lambda: check_min_size(root, style, config.MIN_STYLESHEET_BYTES),
                        when=exists(style)))
    for sel in config.EXPECTED_SELECTORS:
        checks.append(Check(f"style:selector:{sel}", S_STYLE, CONTENT_MATCH,
                            lambda sel=sel: check_marker(root, style, sel,
                                                         f"{style} contains '{sel}'",
                                                         f"{style} missing expected selector '{sel}'"),
                            when=exists(style)))

    home_markers = (
        (style, f"{home} references {style}", f"{home} does NOT reference {style}"),
        ("<title>", f"{home} has <title> tag", f"{home} missing <title> tag"),
        ("episode", f"{home} contains episode content", f"{home} has no episode content"),
    )
    for marker, ok, bad in home_markers:
        checks.append(Check(f"home:{marker}", S_HOME, CONTENT_MATCH,
                            lambda m=marker, ok=ok, bad=bad: check_marker(root, home, m, ok, bad),
                            when=exists(home)))

    checks += [
        Check("episodes:index", S_EPISODES, FILE_EXISTENCE, lambda: check_episode_dirs(root)),
        Check("feed:xml", S_FEED, XML_WELL_FORMED, lambda: check_xml(root, feed, xml_mode), when=exists(feed)),
        Check("feed:size", S_FEED, SIZE_THRESHOLD,
              lambda: check_min_size(root, feed, config.MIN_FEED_BYTES), when=exists(feed)),
        Check("sitemap:xml", S_SITEMAP, XML_WELL_FORMED,
              lambda: check_xml(root, sitemap, xml_mode), when=exists(sitemap)),
        Check("git:deletions", S_GIT, DIFF_GUARD, lambda: check_deletions(root)),
        Check("cname:domain", S_DOMAIN, CONTENT_MATCH, lambda: check_domain(root), when=exists(cname)),
    ]
    return checks


def run_local(root: Path, xml_mode: str = None):
    print_banner("Impact Signals - Pre-Push Validation")
    result = run(build_checks(root, xml_mode), title="Pre-Push Validation")
    print_summary(result, "ALL PASSED", "FAILED", fail_hint="🛑 Push should be BLOCKED")
    return result


def main(argv=None) -> int:
    ap = argparse.ArgumentParser(prog="check-local", description="Pre-push validation of the site working copy")
    ap.add_argument("--repo-dir", help="Site repository root (default: $SITECHECK_REPO_DIR or cwd)")
    ap.add_argument("--summary", help="Append a Markdown summary to this file (default: $GITHUB_STEP_SUMMARY)")
    args = ap.parse_args(argv)

    result = run_local(config.repo_root(args.repo_dir))
    write_summary(result, args.summary)
    return result.exit_code


if __name__ == "__main__":
    sys.exit(main())
