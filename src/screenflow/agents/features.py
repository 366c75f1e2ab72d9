"""Feature extraction and prompt-sized summaries of feature documents."""

import re
from dataclasses import dataclass
from typing import Any

from ..core import get_logger
from ..core.json import JSONParseError, loads, safe_json_dumps

logger = get_logger(__name__)

_WHITESPACE = re.compile(r"\s+")


@dataclass(frozen=True)
class FeatureRef:
    """A feature named in the document, with the id screens link to."""

    id: str
    name: str


DEFAULT_FEATURES: tuple[FeatureRef, ...] = (
    FeatureRef("profile", "Profile"),
    FeatureRef("settings", "Settings"),
    FeatureRef("notifications", "Notifications"),
    FeatureRef("dashboard", "Dashboard"),
)


def slugify(name: str) -> str:
    """Feature id derived from its name: whitespace runs to ``_``, lowercased."""
    return _WHITESPACE.sub("_", name).lower()


def _text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def _first_text(item: dict[str, Any], *keys: str) -> str:
    for key in keys:
        value = _text(item.get(key))
        if value:
            return value
    return ""


def _as_object(content: Any) -> dict[str, Any] | None:
    if isinstance(content, dict):
        return content
    if isinstance(content, str):
        try:
            decoded = loads(content)
        except JSONParseError:
            return None
        return decoded if isinstance(decoded, dict) else None
    return None


def _from_named_list(items: list[Any]) -> list[FeatureRef]:
    """``features`` / ``keyFeatures``: strings or objects with id/name/title."""
    found = []
    for item in items:
        if isinstance(item, str):
            name = item.strip()
            feature_id = slugify(name)
        elif isinstance(item, dict):
            name = _first_text(item, "name", "title", "id")
            feature_id = _first_text(item, "id", "featureId") or (
                slugify(_text(item.get("name"))) if _text(item.get("name")) else ""
            )
        else:
            continue
        if feature_id and name:
            found.append(FeatureRef(feature_id, name))
    return found


def _from_requirements(items: list[Any]) -> list[FeatureRef]:
    """``functionalRequirements``: deduplicated by feature id."""
    found: dict[str, FeatureRef] = {}
    for item in items:
        if isinstance(item, str):
            name = item.strip()
            feature_id = slugify(name)
        elif isinstance(item, dict):
            name = _first_text(item, "feature", "featureName", "title", "name")
            feature_id = _first_text(item, "featureId", "id") or (slugify(name) if name else "")
        else:
            continue
        if name and feature_id and feature_id not in found:
            found[feature_id] = FeatureRef(feature_id, name)
    return list(found.values())


def _from_sections(items: list[Any]) -> list[FeatureRef]:
    found = []
    for item in items:
        if not isinstance(item, dict):
            continue
        name = _first_text(item, "featureName", "title", "name")
        feature_id = _first_text(item, "featureId", "id") or (slugify(name) if name else "")
        if feature_id and name:
            found.append(FeatureRef(feature_id, name))
    return found


def _from_user_stories(items: list[Any]) -> list[FeatureRef]:
    found: dict[str, FeatureRef] = {}
    for item in items:
        if not isinstance(item, dict):
            continue
        name = _first_text(item, "feature", "featureName", "category")
        feature_id = _text(item.get("featureId")) or (slugify(name) if name else "")
        if name and feature_id and feature_id not in found:
            found[feature_id] = FeatureRef(feature_id, name)
    return list(found.values())


_EXTRACTORS = (
    ("features", _from_named_list),
    ("keyFeatures", _from_named_list),
    ("functionalRequirements", _from_requirements),
    ("sections", _from_sections),
    ("userStories", _from_user_stories),
)


def extract_features(content: Any) -> list[FeatureRef]:
    """
    List the features a feature document describes.

    Looks at ``features``, ``keyFeatures``, ``functionalRequirements``,
    ``sections`` and ``userStories`` in that order and uses the first that
    yields anything. Plain-text or featureless documents get a generic
    Profile / Settings / Notifications / Dashboard set.
    """
    document = _as_object(content)
    if document is None:
        return list(DEFAULT_FEATURES)

    for key, extractor in _EXTRACTORS:
        items = document.get(key)
        if isinstance(items, list):
            features = extractor(items)
            if features:
                logger.debug("features_extracted", source=key, count=len(features))
                return features

    return list(DEFAULT_FEATURES)


def _truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    if limit <= 3:
        return text[:limit]
    return text[: limit - 3].rstrip() + "..."


def summarize_document(content: Any, limit: int = 800) -> str:
    """
    Summary of a feature document that fits in ``limit`` characters.

    Small documents are passed through. Large structured documents are reduced
    to title, overview, the first requirements and flows and the feature list
    before truncation.
    """
    if content is None:
        return ""

    text = content if isinstance(content, str) else safe_json_dumps(content)
    if len(text) <= limit:
        return text

    document = _as_object(content)
    if document is None:
        return _truncate(text, limit)

    requirements = document.get("requirements") or document.get("functionalRequirements") or []
    flows = document.get("userFlows") or document.get("flows") or document.get("userJourneys") or []
    summary = {
        "title": document.get("title") or document.get("name"),
        "overview": document.get("overview") or document.get("summary") or document.get("description"),
        "features": [{"id": f.id, "name": f.name} for f in extract_features(document)],
        "requirements": requirements[:8] if isinstance(requirements, list) else requirements,
        "userFlows": flows[:5] if isinstance(flows, list) else flows,
    }
    summary = {key: value for key, value in summary.items() if value}
    return _truncate(safe_json_dumps(summary), limit)


__all__ = ["FeatureRef", "DEFAULT_FEATURES", "slugify", "extract_features", "summarize_document"]
