import shutil
import subprocess

import pytest

from sitecheck import check_local, config
from sitecheck.check_local import run_local
from sitecheck.checks import Outcome, Problem


def messages(result, outcome):
    return [r.message for r in result.results if r.outcome is outcome]


def test_healthy_site_passes(site, capsys):
    result = run_local(site)
    assert result.failed == 0, result.failures()
    assert result.exit_code == 0
    out = capsys.readouterr().out
    assert "ALL PASSED" in out
    assert "3/3 episode directories have index.html" in out
    assert "Not a git repository" in out


def test_each_missing_critical_file_fails_once_and_skips_content_checks(site):
    for name in ("style.css", "feed.xml", "CNAME"):
        (site / name).unlink()
    result = run_local(site)

    missing = [r for r in result.failures() if r.problem is Problem.MISSING_ARTIFACT]
    assert sorted(r.message for r in missing) == ["CNAME is MISSING", "feed.xml is MISSING", "style.css is MISSING"]
    assert result.failed == 3
    assert not any("style.css contains" in r.message or "selector" in r.message for r in result.results)
    assert not any(r.message.startswith("feed.xml is") and "MISSING" not in r.message for r in result.results)
    assert result.exit_code == 1


def test_empty_stylesheet_fails_size(site):
    (site / "style.css").write_bytes(b"")
    result = run_local(site)
    sizes = [r for r in result.failures() if r.problem is Problem.SIZE_ANOMALY]
    assert [r.message for r in sizes] == ["style.css is only 0 bytes, likely truncated or empty"]


def test_large_stylesheet_passes_size(site):
    css = (site / "style.css").read_text("utf-8")
    (site / "style.css").write_text(css + "x" * (50_000 - len(css)), encoding="utf-8")
    result = run_local(site)
    assert "style.css is 50000 bytes (non-trivial)" in messages(result, Outcome.PASS)


def test_missing_selector_and_homepage_markers(site):
    (site / "style.css").write_text("body { color: red; }\n" * 100, encoding="utf-8")
    (site / "index.html").write_text("<html><body>nothing here</body></html>", encoding="utf-8")
    failed = messages(run_local(site), Outcome.FAIL)
    assert "style.css missing expected selector '.episode-list'" in failed
    assert "style.css missing expected selector 'nav'" in failed
    assert "index.html does NOT reference style.css" in failed
    assert "index.html missing <title> tag" in failed
    assert "index.html has no episode content" in failed


def test_episode_dirs_missing_entries_listed_individually(tmp_path):
    from conftest import make_site
    eps = [{"slug": f"{i}-ep", "episode_number": i, "youtube_id": ""} for i in range(10)]
    root = make_site(tmp_path / "site", episodes=eps)
    (root / "episodes" / "2-ep" / "index.html").unlink()
    (root / "episodes" / "5-ep" / "index.html").unlink()

    result = run_local(root)
    assert "8/10 episode directories have index.html" in messages(result, Outcome.PASS)
    assert messages(result, Outcome.FAIL) == [
        "Episode dir 2-ep missing index.html",
        "Episode dir 5-ep missing index.html",
    ]


def test_no_episode_directories(site):
    shutil.rmtree(site / "episodes")
    assert "No episode directories found" in messages(run_local(site), Outcome.FAIL)


def test_malformed_feed_and_small_feed(site):
    (site / "feed.xml").write_text('<?xml version="1.0"?><rss><channel></rss>', encoding="utf-8")
    failed = messages(run_local(site), Outcome.FAIL)
    assert any(m.startswith("feed.xml is NOT valid XML") for m in failed)
    assert any(m.startswith("feed.xml is only") for m in failed)


def test_heuristic_xml_mode_marks_results(site):
    result = run_local(site, xml_mode="heuristic")
    xml = [r for r in result.results if "valid XML" in r.message]
    assert xml and all(r.heuristic for r in xml)
    assert result.failed == 0


def test_wrong_domain(site):
    (site / "CNAME").write_text("  example.org \n", encoding="utf-8")
    assert "CNAME contains 'example.org' instead of 'impactsignals.ai'" in messages(run_local(site), Outcome.FAIL)


def test_two_runs_give_identical_counts(site):
    (site / "robots.txt").unlink()
    a, b = run_local(site), run_local(site)
    assert (a.passed, a.failed, a.warnings) == (b.passed, b.failed, b.warnings)


@pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")
def test_staged_deletion_blocks_push(site):
    for args in (["init", "-q"], ["add", "-A"],
                 ["-c", "user.email=ci@example.com", "-c", "user.name=CI", "-c", "commit.gpgsign=false",
                  "commit", "-q", "-m", "site"],
                 ["rm", "-q", "episodes/2-second-signal/index.html"]):
        subprocess.run(["git", *args], cwd=site, check=True, capture_output=True)
    result = run_local(site)
    guard = [r for r in result.failures() if r.problem is Problem.DESTRUCTIVE_CHANGE]
    assert [r.message for r in guard] == ["episodes/2-second-signal/index.html is being DELETED"]
    assert result.exit_code == 1


def test_git_unavailable_fails_the_guard_and_finishes_the_run(site, tmp_path, monkeypatch, capsys):
    (site / ".git").mkdir()
    monkeypatch.setenv("PATH", str(tmp_path / "no-bin"))
    result = run_local(site)
    guard = [r for r in result.failures() if r.category == "diff-guard"]
    assert len(guard) == 1
    assert guard[0].message.startswith("Cannot inspect pending deletions: git not available")
    assert result.failed == 1
    assert "CNAME points to impactsignals.ai" in [r.message for r in result.results]
    assert "Push should be BLOCKED" in capsys.readouterr().out


def test_main_exit_codes_and_summary(site, tmp_path, monkeypatch):
    monkeypatch.delenv("GITHUB_STEP_SUMMARY", raising=False)
    summary = tmp_path / "summary.md"
    assert check_local.main(["--repo-dir", str(site), "--summary", str(summary)]) == 0
    assert "Pre-Push Validation" in summary.read_text("utf-8")

    (site / "llms.txt").unlink()
    assert check_local.main(["--repo-dir", str(site)]) == 1


def test_repo_dir_from_environment(site, monkeypatch):
    monkeypatch.setattr(config, "REPO_DIR", str(site))
    assert config.repo_root() == site.resolve()
    assert config.repo_root(str(site / "episodes")) == (site / "episodes").resolve()
