# sitecheck/git_guard.py
"""
Diff guard: refuse a push whose pending changes delete a critical file or an
episode entry page.

Both the staged diff and the working tree (vs HEAD) are inspected, so an
unstaged `rm style.css` is caught as well as a staged one. A repository
with no commit yet is fine; any other git failure is carried in the report
so the caller can fail instead of passing blind.
"""

import subprocess
from dataclasses import dataclass
from pathlib import Path

from .utils import debug

HEAD_CMD     = ["git", "rev-parse", "--verify", "--quiet", "HEAD"]
STAGED_CMD   = ["git", "diff", "--cached", "--name-status", "--no-renames"]
WORKTREE_CMD = ["git", "diff", "--name-status", "--no-renames", "HEAD"]


class GitError(RuntimeError):
    pass


@dataclass(frozen=True)
class DiffGuardReport:
    is_repo: bool
    deleted: tuple = ()
    error: str = ""


def parse_name_status(output: str) -> set:
    """Paths with status D in `git diff --name-status` output."""
    deleted = set()
    for line in (output or "").splitlines():
        parts = line.split("\t")
        if len(parts) >= 2 and parts[0].startswith("D"):
            deleted.add(parts[-1].strip())
    return deleted


def _git(repo_dir: Path, cmd) -> subprocess.CompletedProcess:
    proc = subprocess.run(cmd, cwd=str(repo_dir), capture_output=True, text=True, check=False)
    debug(f"{' '.join(cmd)} exited {proc.returncode}")
    return proc


def _has_head(repo_dir: Path) -> bool:
    # --quiet: exit 1 with no output when HEAD is unborn, 128 when git refuses
    proc = _git(repo_dir, HEAD_CMD)
    if proc.returncode in (0, 1):
        return proc.returncode == 0
    raise GitError(proc.stderr.strip() or f"git rev-parse exited {proc.returncode}")


def _git_deleted(repo_dir: Path, cmd) -> set:
    proc = _git(repo_dir, cmd)
    if proc.returncode != 0:
        raise GitError(proc.stderr.strip() or f"{' '.join(cmd)} exited {proc.returncode}")
    return parse_name_status(proc.stdout)


def is_protected(path: str, protected, content_dir: str, index_file: str) -> bool:
    """A critical file, or exactly <content_dir>/<slug>/<index_file>."""
    if path in protected:
        return True
    prefix = content_dir.rstrip("/") + "/"
    if not path.startswith(prefix):
        return False
    parts = path[len(prefix):].split("/")
    return len(parts) == 2 and bool(parts[0]) and parts[1] == index_file


def filter_protected(deleted, protected, content_dir: str, index_file: str) -> tuple:
    return tuple(sorted(p for p in deleted if is_protected(p, protected, content_dir, index_file)))


def detect_deletions(repo_dir: Path, protected, content_dir: str, index_file: str) -> DiffGuardReport:
    repo_dir = Path(repo_dir)
    if not (repo_dir / ".git").exists():
        return DiffGuardReport(is_repo=False)
    try:
        deleted = _git_deleted(repo_dir, STAGED_CMD)
        if _has_head(repo_dir):
            deleted |= _git_deleted(repo_dir, WORKTREE_CMD)
    except OSError as e:
        return DiffGuardReport(True, error=f"git not available ({e.strerror or e})")
    except GitError as e:
        return DiffGuardReport(True, error=str(e).splitlines()[0])
    debug(f"pending deletions: {sorted(deleted)}")
    return DiffGuardReport(True, filter_protected(deleted, set(protected), content_dir, index_file))
