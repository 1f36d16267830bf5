# sitecheck/episodes.py
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .files import list_subdirectories


class MetadataError(ValueError):
    """episodes.json exists but can't be used."""


@dataclass(frozen=True)
class EpisodeRecord:
    slug: str
    episode_number: int = 0
    youtube_id: str = ""
    title: str = ""

    @classmethod
    def from_dict(cls, d: dict) -> "EpisodeRecord":
        try:
            number = int(d.get("episode_number") or 0)
        except (TypeError, ValueError):
            number = 0
        return cls(
            slug=str(d.get("slug") or "").strip(),
            episode_number=number,
            youtube_id=str(d.get("youtube_id") or "").strip(),
            title=str(d.get("title") or "").strip(),
        )


def load_episodes(path: Path) -> list:
    """Records from episodes.json; [] when the file is absent."""
    path = Path(path)
    if not path.is_file():
        return []
    try:
        data = json.loads(path.read_text("utf-8"))
    except json.JSONDecodeError as e:
        raise MetadataError(f"{path.name} is not valid JSON: {e}") from e
    if not isinstance(data, list):
        raise MetadataError(f"{path.name} must hold a JSON array of episodes")
    records = [EpisodeRecord.from_dict(d) for d in data if isinstance(d, dict)]
    return [r for r in records if r.slug]


def find_record_by_slug(records, slug: str) -> Optional[EpisodeRecord]:
    for r in records:
        if r.slug == slug:
            return r
    return None


def latest_slug(records, content_dir: Path) -> Optional[str]:
    """Highest episode_number wins; otherwise the last episode folder by name."""
    if records:
        return max(records, key=lambda r: r.episode_number).slug
    dirs = list_subdirectories(content_dir)
    return dirs[-1].name if dirs else None
