from sitecheck.checks import CONTENT_MATCH, CheckRun, Problem, failed, passed, skipped
from sitecheck.report import render_summary, summary_target, write_summary

RUN = CheckRun("Pre-Push Validation", (
    passed("style.css exists", category="file-existence"),
    failed("index.html missing <title> tag", Problem.MALFORMED_ARTIFACT, category=CONTENT_MATCH),
    passed("feed.xml is valid XML", heuristic=True, category="xml-well-formedness"),
    skipped("Not a git repository, nothing to check"),
))


def test_render_summary_table():
    md = render_summary(RUN)
    assert "### ❌ Pre-Push Validation" in md
    assert "2 passed · 1 failed · 0 warnings" in md
    assert "| ❌ | index.html missing <title> tag | content-match | malformed-artifact |" in md
    assert "basic check" in md


def test_pipes_in_messages_are_escaped():
    md = render_summary(CheckRun("t", (passed("a|b"),)))
    assert "a\\|b" in md


def test_no_target_writes_nothing(monkeypatch):
    monkeypatch.delenv("GITHUB_STEP_SUMMARY", raising=False)
    assert summary_target() is None
    assert write_summary(RUN) is False


def test_appends_to_github_step_summary(tmp_path, monkeypatch):
    target = tmp_path / "step-summary.md"
    target.write_text("earlier step\n", encoding="utf-8")
    monkeypatch.setenv("GITHUB_STEP_SUMMARY", str(target))
    assert write_summary(RUN)
    text = target.read_text("utf-8")
    assert text.startswith("earlier step\n")
    assert "Pre-Push Validation" in text


def test_explicit_path_beats_environment(tmp_path, monkeypatch):
    monkeypatch.setenv("GITHUB_STEP_SUMMARY", str(tmp_path / "ci.md"))
    explicit = tmp_path / "out" / "summary.md"
    write_summary(RUN, str(explicit))
    assert explicit.exists()
    assert not (tmp_path / "ci.md").exists()
