"""
Turn Plex section payloads into CatalogItem lists.

The format is sniffed from the body, never taken from the Content-Type header.
Both formats are wrapped in a record type and mapped by to_catalog_item.
"""

import json
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from typing import Any

from loguru import logger
from pydantic import ValidationError

from reelroll.core.exceptions import MalformedRecord, PayloadFormatError
from reelroll.models.catalog import CatalogItem

ITEM_ELEMENTS = ("Video", "Directory")
JSON_CONTAINER_KEYS = ("Metadata", "Video", "Directory")
POSTER_SOURCE_FIELDS = ("thumb", "art", "parentThumb", "grandparentThumb")

_BOM = "\ufeff"


@dataclass(frozen=True)
class MarkupRecord:
    """An item element from an XML MediaContainer."""

    element: ET.Element

    def value(self, name: str) -> Any:
        return self.element.get(name)

    def tags(self, name: str) -> list[str]:
        return _flatten_tags([child.get("tag") for child in self.element.findall(name)])


@dataclass(frozen=True)
class JsonRecord:
    """An item object from a JSON MediaContainer."""

    data: dict[str, Any]

    def value(self, name: str) -> Any:
        return self.data.get(name)

    def tags(self, name: str) -> list[str]:
        raw = self.data.get(name)
        if raw is None:
            raw = self.data.get(name.lower())
        return _flatten_tags(raw)


UpstreamRecord = MarkupRecord | JsonRecord


def _flatten_tags(value: Any) -> list[str]:
    """Accept a scalar, a {"tag": ...} object, or a list of either; return plain strings."""
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        flattened: list[str] = []
        for entry in value:
            flattened.extend(_flatten_tags(entry))
        return flattened
    if isinstance(value, dict):
        return _flatten_tags(value.get("tag"))
    text = str(value).strip()
    return [text] if text else []


def _text(value: Any) -> str | None:
    if value is None or isinstance(value, (dict, list)):
        return None
    text = str(value).strip()
    return text or None


def to_catalog_item(record: UpstreamRecord, section_id: int | None = None) -> CatalogItem:
    """Map one upstream record onto CatalogItem. Raises MalformedRecord if it cannot be addressed."""
    item_id = _text(record.value("key")) or _text(record.value("ratingKey"))
    if not item_id:
        raise MalformedRecord("Record has no key")

    poster_source = None
    for name in POSTER_SOURCE_FIELDS:
        poster_source = _text(record.value(name))
        if poster_source:
            break

    try:
        return CatalogItem(
            id=item_id,
            title=_text(record.value("title")),
            kind=_text(record.value("type")),
            section_id=section_id,
            year=_text(record.value("year")),
            summary=_text(record.value("summary")),
            content_rating=_text(record.value("contentRating")),
            critic_rating=_text(record.value("rating")),
            audience_rating=_text(record.value("audienceRating")),
            duration_ms=_text(record.value("duration")),
            leaf_count=_text(record.value("leafCount")),
            directors=tuple(record.tags("Director")),
            cast=tuple(record.tags("Role")),
            genres=tuple(record.tags("Genre")),
            poster_source_path=poster_source,
        )
    except ValidationError as e:
        fields = ", ".join(str(err["loc"][0]) for err in e.errors() if err.get("loc"))
        raise MalformedRecord(f"Record {item_id} has invalid fields: {fields}") from e


def _decode(raw_payload: bytes | str) -> str:
    if isinstance(raw_payload, bytes):
        raw_payload = raw_payload.decode("utf-8", errors="replace")
    return raw_payload.lstrip(_BOM).lstrip()


def _markup_records(text: str) -> list[UpstreamRecord]:
    try:
        root = ET.fromstring(text)
    except ET.ParseError as e:
        raise PayloadFormatError(f"Unreadable XML payload: {e}") from e
    return [MarkupRecord(child) for child in root if child.tag in ITEM_ELEMENTS]


def _json_records(text: str) -> list[UpstreamRecord | None]:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise PayloadFormatError(f"Unreadable JSON payload: {e}") from e
    if not isinstance(data, dict):
        raise PayloadFormatError("JSON payload must be an object")

    container = data.get("MediaContainer", data)
    if not isinstance(container, dict):
        raise PayloadFormatError("MediaContainer must be an object")

    raw_records: list[Any] = []
    for key in JSON_CONTAINER_KEYS:
        entries = container.get(key)
        if entries is None:
            continue
        if isinstance(entries, dict):
            entries = [entries]
        if not isinstance(entries, list):
            raise PayloadFormatError(f"MediaContainer.{key} must be a list")
        raw_records.extend(entries)

    # Non-object entries are kept as None and counted as malformed below
    return [JsonRecord(entry) if isinstance(entry, dict) else None for entry in raw_records]


def parse_records(raw_payload: bytes | str) -> list[UpstreamRecord | None]:
    text = _decode(raw_payload)
    if text.startswith("{"):
        return _json_records(text)
    if text.startswith("<"):
        return _markup_records(text)
    raise PayloadFormatError("Payload is neither JSON nor XML")


def normalize(raw_payload: bytes | str, section_id: int | None = None) -> list[CatalogItem]:
    """Normalize one section payload. Malformed records are skipped, never raised."""
    items: list[CatalogItem] = []
    skipped = 0
    for record in parse_records(raw_payload):
        if record is None:
            skipped += 1
            continue
        try:
            items.append(to_catalog_item(record, section_id))
        except MalformedRecord as e:
            skipped += 1
            logger.debug(f"Section {section_id}: skipping record: {e.message}")

    if skipped:
        logger.info(f"Section {section_id}: normalized {len(items)} items, skipped {skipped} malformed")
    return items


def parse_server_identity(raw_payload: bytes | str) -> str | None:
    """Return the server machineIdentifier from the root server document."""
    text = _decode(raw_payload)
    if text.startswith("{"):
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise PayloadFormatError(f"Unreadable JSON payload: {e}") from e
        container = data.get("MediaContainer", data) if isinstance(data, dict) else None
        if not isinstance(container, dict):
            return None
        return _text(container.get("machineIdentifier"))
    if text.startswith("<"):
        try:
            root = ET.fromstring(text)
        except ET.ParseError as e:
            raise PayloadFormatError(f"Unreadable XML payload: {e}") from e
        return _text(root.get("machineIdentifier"))
    raise PayloadFormatError("Payload is neither JSON nor XML")
