"""Kiosk catalog: ERP modules, information topics, and university backgrounds.

Loaded once per session (built-in content or a JSON file) and read-only
afterwards.  Every descriptor is a frozen dataclass so the catalog can be
shared freely between the resolver, the state machine and the server.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from config import content

logger = logging.getLogger(__name__)

DEFAULT_BACKGROUND = "DEFAULT"

# Media kinds whose players report completion; the rest rely on the fallback timeout.
_END_SIGNALLING_KINDS = frozenset({"youtube"})
MEDIA_KINDS = frozenset({"synthesia", "youtube", "web"})


class CatalogError(ValueError):
    """Raised when catalog data is structurally invalid."""


@dataclass(frozen=True)
class MediaRef:
    kind: str
    url: str
    video_id: str | None = None

    @property
    def signals_end(self) -> bool:
        return self.kind in _END_SIGNALLING_KINDS


@dataclass(frozen=True)
class ModuleDescriptor:
    key: str
    title: str
    summary: str
    media: MediaRef
    synonyms: tuple[str, ...] = ()


@dataclass(frozen=True)
class TopicDescriptor:
    key: str
    match_keys: tuple[str, ...]
    summary: str
    url: str


@dataclass(frozen=True)
class BackgroundEntry:
    key: str
    match_keys: tuple[str, ...]
    image_ref: str
    label: str = ""


@dataclass(frozen=True)
class Catalog:
    modules: tuple[ModuleDescriptor, ...]
    topics: tuple[TopicDescriptor, ...]
    backgrounds: tuple[BackgroundEntry, ...]
    organization_name: str = ""
    home_topic_key: str | None = None
    default_background: str = DEFAULT_BACKGROUND
    default_background_image: str = ""
    _module_index: dict = field(default_factory=dict, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_module_index", {m.key: m for m in self.modules})

    def module(self, key: str | None) -> ModuleDescriptor | None:
        return self._module_index.get(key) if key else None

    def topic(self, key: str | None) -> TopicDescriptor | None:
        return next((t for t in self.topics if t.key == key), None)

    def background(self, key: str | None) -> BackgroundEntry | None:
        return next((b for b in self.backgrounds if b.key == key), None)

    def background_image(self, key: str) -> str:
        """Image for ``key``; unknown keys and the default key map to the default image."""
        entry = self.background(key)
        return entry.image_ref if entry else self.default_background_image

    def menu(self) -> dict[str, Any]:
        """JSON-safe listing for the kiosk menus."""
        return {
            "organization": self.organization_name,
            "modules": [{"key": m.key, "title": m.title} for m in self.modules],
            "topics": [{"key": t.key, "summary": t.summary, "url": t.url} for t in self.topics],
        }


def _require(entry: dict, name: str, where: str) -> str:
    value = entry.get(name)
    if value in (None, "", []):
        raise CatalogError(f"{where}: missing '{name}'")
    if not isinstance(value, str):
        raise CatalogError(f"{where}: '{name}' must be a string")
    return value


def _entries(data: dict, section: str) -> list[tuple[str, dict]]:
    """Entries of a top-level list, each checked to be an object."""
    raw = data.get(section) or []
    if not isinstance(raw, list):
        raise CatalogError(f"{section}: must be a list")
    entries = []
    for i, entry in enumerate(raw):
        where = f"{section}[{i}]"
        if not isinstance(entry, dict):
            raise CatalogError(f"{where}: must be an object")
        entries.append((where, entry))
    return entries


def _strings(entry: dict, name: str, where: str, required: bool = True) -> tuple[str, ...]:
    """A list of non-empty strings, lower-cased for matching."""
    value = entry.get(name)
    if value is None and not required:
        return ()
    if not isinstance(value, list) or not all(isinstance(s, str) and s.strip() for s in value):
        raise CatalogError(f"{where}: '{name}' must be a list of non-empty strings")
    if required and not value:
        raise CatalogError(f"{where}: missing '{name}'")
    return tuple(s.lower() for s in value)


def _parse_media(raw: Any, where: str) -> MediaRef:
    if not isinstance(raw, dict):
        raise CatalogError(f"{where}: 'media' must be an object")
    kind = _require(raw, "kind", where)
    if kind not in MEDIA_KINDS:
        raise CatalogError(f"{where}: unknown media kind {kind!r}")
    return MediaRef(kind=kind, url=_require(raw, "url", where), video_id=raw.get("video_id"))


def catalog_from_dict(data: dict) -> Catalog:
    """Build a Catalog from the JSON/dict layout used by ``config.content``."""
    modules = tuple(
        ModuleDescriptor(
            key=_require(raw, "key", where),
            title=raw.get("title") or raw["key"],
            summary=_require(raw, "summary", where),
            media=_parse_media(raw.get("media"), where),
            synonyms=_strings(raw, "synonyms", where, required=False),
        )
        for where, raw in _entries(data, "modules")
    )
    keys = [m.key for m in modules]
    if len(set(keys)) != len(keys):
        raise CatalogError("modules: duplicate keys")

    topics = tuple(
        TopicDescriptor(
            key=_require(raw, "key", where),
            match_keys=_strings(raw, "keys", where),
            summary=_require(raw, "summary", where),
            url=raw.get("url", ""),
        )
        for where, raw in _entries(data, "topics")
    )
    backgrounds = tuple(
        BackgroundEntry(
            key=_require(raw, "key", where),
            match_keys=_strings(raw, "keys", where),
            image_ref=_require(raw, "image", where),
            label=raw.get("label") or raw["key"].replace("_", " ").title(),
        )
        for where, raw in _entries(data, "backgrounds")
    )
    return Catalog(
        modules=modules,
        topics=topics,
        backgrounds=backgrounds,
        organization_name=data.get("organization_name", ""),
        home_topic_key=data.get("home_topic"),
        default_background_image=data.get("default_background_image", ""),
    )


def default_catalog() -> Catalog:
    """Catalog built from the bundled content."""
    return catalog_from_dict({
        "organization_name": content.ORGANIZATION_NAME,
        "home_topic": content.HOME_TOPIC,
        "default_background_image": content.DEFAULT_BACKGROUND_IMAGE,
        "modules": content.MODULES,
        "topics": content.TOPICS,
        "backgrounds": content.BACKGROUNDS,
    })


def load_catalog(path: str | Path | None = None) -> Catalog:
    """Load a catalog JSON file; missing or unreadable files fall back to the built-in content."""
    if not path:
        return default_catalog()
    path = Path(path)
    if not path.exists():
        logger.warning("Catalog %s not found; using built-in content", path)
        return default_catalog()
    try:
        with open(path) as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.warning("Load catalog failed (%s); using built-in content", e)
        return default_catalog()
    if not isinstance(data, dict):
        raise CatalogError(f"{path}: top level must be an object")
    catalog = catalog_from_dict(data)
    logger.info(
        "Loaded catalog %s: %d modules, %d topics, %d backgrounds",
        path, len(catalog.modules), len(catalog.topics), len(catalog.backgrounds),
    )
    return catalog
