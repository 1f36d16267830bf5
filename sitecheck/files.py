# sitecheck/files.py
import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from pathlib import Path

# ----- Presence & size --------------------------------------------------------
def file_exists(path: Path) -> bool:
    return Path(path).is_file()

def file_size(path: Path) -> int:
    return Path(path).stat().st_size

def file_size_above(path: Path, threshold_bytes: int) -> bool:
    """False for a missing file; otherwise size strictly above the threshold."""
    p = Path(path)
    return p.is_file() and p.stat().st_size > threshold_bytes

# ----- Content ----------------------------------------------------------------
def read_text(path: Path) -> str:
    return Path(path).read_text("utf-8", errors="replace")

def text_contains(text: str, marker: str, regex: bool = False, ignore_case: bool = False) -> bool:
    if regex:
        return re.search(marker, text or "", re.I if ignore_case else 0) is not None
    if ignore_case:
        return marker.lower() in (text or "").lower()
    return marker in (text or "")

def contains_marker(path: Path, marker: str, regex: bool = False, ignore_case: bool = False) -> bool:
    """grep -q equivalent. A missing file never matches."""
    if not file_exists(path):
        return False
    return text_contains(read_text(path), marker, regex=regex, ignore_case=ignore_case)

# ----- Content directories ----------------------------------------------------
def list_subdirectories(parent: Path):
    parent = Path(parent)
    if not parent.is_dir():
        return []
    return sorted((d for d in parent.iterdir() if d.is_dir()), key=lambda x: x.name)

def all_subdirectories_have_file(parent: Path, filename: str):
    """Return (valid_count, total_count, missing_dir_names) for immediate subdirs."""
    dirs = list_subdirectories(parent)
    missing = [d.name for d in dirs if not (d / filename).is_file()]
    return len(dirs) - len(missing), len(dirs), missing

# ----- XML --------------------------------------------------------------------
@dataclass(frozen=True)
class XmlVerdict:
    ok: bool
    heuristic: bool
    detail: str = ""

def looks_like_xml(text: str, root_tag: str = "") -> bool:
    """
    Weak structural test: an XML declaration and, when given, a closing root
    tag. Says nothing about nesting, entities or encoding.
    """
    if "<?xml" not in (text or ""):
        return False
    return not root_tag or f"</{root_tag}>" in text

def is_well_formed_xml(path: Path, root_tag: str = "", mode: str = "parser") -> XmlVerdict:
    if mode == "heuristic":
        ok = looks_like_xml(read_text(path), root_tag)
        return XmlVerdict(ok, True, "" if ok else f"no XML declaration or </{root_tag}>")
    try:
        root = ET.parse(str(path)).getroot()
    except ET.ParseError as e:
        return XmlVerdict(False, False, str(e))
    tag = root.tag.rsplit("}", 1)[-1]   # strip {namespace}
    if root_tag and tag != root_tag:
        return XmlVerdict(False, False, f"root element is <{tag}>, expected <{root_tag}>")
    return XmlVerdict(True, False)
