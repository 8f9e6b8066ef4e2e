"""
Library and watch history, persisted as flat JSON files in DATA_DIR.

A missing or unreadable file starts the collection empty.
"""
from __future__ import annotations
import json
import logging
import os
from dataclasses import dataclass
from datetime import datetime

from ..providers.base import Anime
from . import config

log = logging.getLogger("kwikstream.store")

HISTORY_LIMIT = 50


@dataclass
class HistoryItem:
    anime: Anime
    episode_session: str
    last_episode: str
    last_watched: str

    def to_dict(self):
        return {
            "anime": self.anime.to_dict(),
            "episode_session": self.episode_session,
            "last_episode": self.last_episode,
            "last_watched": self.last_watched,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "HistoryItem":
        return cls(
            anime=Anime.from_dict(d["anime"]),
            episode_session=d["episode_session"],
            last_episode=d["last_episode"],
            last_watched=d["last_watched"],
        )


def _load(path: str) -> list:
    if not os.path.exists(path):
        return []
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        log.warning(f"Ignoring unreadable {path}: {e}")
        return []
    return data if isinstance(data, list) else []


def _save(path: str, data: list):
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)


class WatchStore:
    def __init__(self, data_dir: str | None = None):
        self.data_dir = data_dir or config.DATA_DIR
        self.library_path = os.path.join(self.data_dir, "library.json")
        self.history_path = os.path.join(self.data_dir, "history.json")
        self.library: list[Anime] = []
        self.history: list[HistoryItem] = []
        for d in _load(self.library_path):
            try:
                self.library.append(Anime.from_dict(d))
            except (KeyError, TypeError):
                continue
        for d in _load(self.history_path):
            try:
                self.history.append(HistoryItem.from_dict(d))
            except (KeyError, TypeError):
                continue

    def toggle_library(self, anime: Anime) -> bool:
        """Add `anime` to the library, or remove it if present. Returns True when added."""
        pos = next((i for i, a in enumerate(self.library) if a.session == anime.session), None)
        if pos is not None:
            self.library.pop(pos)
            added = False
        else:
            self.library.append(anime)
            added = True
        _save(self.library_path, [a.to_dict() for a in self.library])
        return added

    def record_history(self, anime: Anime, episode_session: str, episode: str,
                       now: datetime | None = None) -> HistoryItem:
        self.history = [h for h in self.history if h.anime.session != anime.session]
        item = HistoryItem(
            anime=anime,
            episode_session=episode_session,
            last_episode=episode,
            last_watched=(now or datetime.now()).strftime("%Y-%m-%d %H:%M"),
        )
        self.history.insert(0, item)
        del self.history[HISTORY_LIMIT:]
        _save(self.history_path, [h.to_dict() for h in self.history])
        return item
