# sitecheck/report.py
import os
from pathlib import Path

import jinja2

from .checks import ICONS, CheckRun
from .utils import log

SUMMARY_TEMPLATE = """
### {{ icon }} {{ title }}

{{ passed }} passed · {{ failed }} failed · {{ warnings }} warnings

| | Check | Category | Detail |
|---|---|---|---|
{% for r in results -%}
| {{ icons[r.outcome] | trim }} | {{ r.message | replace("|", "\\\\|") }} | {{ r.category }} | {% if r.problem %}{{ r.problem.value }}{% endif %}{% if r.heuristic %} basic check{% endif %}{% if r.caveat %} {{ r.caveat }}{% endif %} |
{% endfor %}
"""


def render_summary(run_: CheckRun) -> str:
    return jinja2.Template(SUMMARY_TEMPLATE).render(
        icon = "❌" if run_.failed else "✅",
        title = run_.title,
        passed = run_.passed,
        failed = run_.failed,
        warnings = run_.warnings,
        results = run_.results,
        icons = ICONS,
    )


def summary_target(explicit=None):
    """--summary PATH, else the GitHub Actions step summary when running in CI."""
    raw = explicit or os.environ.get("GITHUB_STEP_SUMMARY", "")
    return Path(raw) if raw else None


def write_summary(run_: CheckRun, explicit=None) -> bool:
    target = summary_target(explicit)
    if target is None:
        return False
    target.parent.mkdir(parents=True, exist_ok=True)
    with target.open("a", encoding="utf-8") as f:
        f.write(render_summary(run_))
    log(f"summary appended to {target}")
    return True
