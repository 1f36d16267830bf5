# sitecheck/checks.py
"""
Check model and runner shared by the three suites.

A suite is an ordered list of `Check`s. `run()` calls each probe exactly
once, prints one line per `Result` under the check's section heading, and
folds everything into a `CheckRun`. Nothing is counted through globals.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Callable, Iterable, Optional, Union

from .utils import http_code, say

# ----- Outcomes & taxonomy ----------------------------------------------------
class Outcome(str, Enum):
    PASS = "pass"
    FAIL = "fail"
    WARN = "warn"
    SKIP = "skip"     # informational, never counted


class Problem(str, Enum):
    MISSING_ARTIFACT     = "missing-artifact"
    MALFORMED_ARTIFACT   = "malformed-artifact"
    SIZE_ANOMALY         = "size-anomaly"
    UNREACHABLE_ENDPOINT = "unreachable-endpoint"
    UNEXPECTED_STATUS    = "unexpected-status"
    DESTRUCTIVE_CHANGE   = "destructive-change"


# Check categories
FILE_EXISTENCE  = "file-existence"
CONTENT_MATCH   = "content-match"
SIZE_THRESHOLD  = "size-threshold"
HTTP_STATUS     = "http-status"
HTTP_HEADER     = "http-header"
XML_WELL_FORMED = "xml-well-formedness"
DIFF_GUARD      = "diff-guard"
CROSS_REFERENCE = "cross-reference"
REACHABILITY    = "reachability"

ICONS = {
    Outcome.PASS: "✅",
    Outcome.FAIL: "❌",
    Outcome.WARN: "⚠️ ",
    Outcome.SKIP: "ℹ️ ",
}

RULE = "═" * 47


@dataclass(frozen=True)
class Result:
    message: str
    outcome: Outcome
    category: str = ""
    expected: object = None
    actual: object = None
    problem: Optional[Problem] = None
    heuristic: bool = False
    caveat: Optional[str] = None

    def line(self) -> str:
        text = self.message
        if self.heuristic:
            text += " (basic check)"
        if self.caveat:
            text += f" ({self.caveat})"
        return f"  {ICONS[self.outcome]} {text}"


def passed(message, **kw) -> Result:
    return Result(message, Outcome.PASS, **kw)

def failed(message, problem: Problem, **kw) -> Result:
    return Result(message, Outcome.FAIL, problem=problem, **kw)

def warned(message, **kw) -> Result:
    return Result(message, Outcome.WARN, **kw)

def skipped(message, **kw) -> Result:
    return Result(message, Outcome.SKIP, **kw)

def verdict(ok: bool, ok_message: str, fail_message: str, problem: Problem, **kw) -> Result:
    """Pass/fail helper for the common 'one predicate, two messages' check."""
    return passed(ok_message, **kw) if ok else failed(fail_message, problem, **kw)


def status_result(label: str, code: int, expected: int = 200) -> Result:
    """'<label> returns 200' or a failure telling unreachable apart from a bad status."""
    if code == expected:
        return passed(f"{label} returns {expected}", expected=expected, actual=code)
    problem = Problem.UNREACHABLE_ENDPOINT if code == 0 else Problem.UNEXPECTED_STATUS
    return failed(f"{label} returns HTTP {http_code(code)}", problem, expected=expected, actual=code)


ProbeResult = Union[Result, Iterable[Result], None]


@dataclass(frozen=True)
class Check:
    name: str
    section: str
    category: str
    probe: Callable[[], ProbeResult]
    when: Optional[Callable[[], bool]] = None   # precondition; False -> no result at all


# ----- Run --------------------------------------------------------------------
@dataclass(frozen=True)
class CheckRun:
    title: str
    results: tuple = field(default_factory=tuple)

    def count(self, outcome: Outcome) -> int:
        return sum(1 for r in self.results if r.outcome is outcome)

    @property
    def passed(self) -> int:
        return self.count(Outcome.PASS)

    @property
    def failed(self) -> int:
        return self.count(Outcome.FAIL)

    @property
    def warnings(self) -> int:
        return self.count(Outcome.WARN)

    def failures(self) -> list:
        return [r for r in self.results if r.outcome is Outcome.FAIL]

    @property
    def exit_code(self) -> int:
        return 1 if self.failed else 0


def _as_results(out: ProbeResult) -> list:
    if out is None:
        return []
    if isinstance(out, Result):
        return [out]
    return list(out)


def run(checks: Iterable[Check], title: str = "") -> CheckRun:
    results = []
    section = None
    for chk in checks:
        if chk.when is not None and not chk.when():
            continue
        if chk.section != section:
            if section is not None:
                say()
            say(chk.section)
            section = chk.section
        for res in _as_results(chk.probe()):
            if not res.category:
                res = replace(res, category=chk.category)
            say(res.line())
            results.append(res)
    return CheckRun(title, tuple(results))


def print_banner(title: str):
    say(RULE)
    say(f"  {title}")
    say(RULE)
    say()


def print_summary(run_: CheckRun, ok_label: str, fail_label: str, fail_hint: str = "", ok_hint: str = ""):
    say()
    say(RULE)
    if run_.failed:
        say(f"  ❌ {fail_label}: {run_.failed} failures, {run_.passed} passed, {run_.warnings} warnings")
        if fail_hint:
            say(f"  {fail_hint}")
    else:
        say(f"  ✅ {ok_label}: {run_.passed} checks passed, {run_.warnings} warnings")
        if ok_hint:
            say(f"  {ok_hint}")
    say(RULE)
