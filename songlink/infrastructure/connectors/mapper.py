"""Conversion of Songlink API responses into domain models.

The API answers a lookup with two tables: ``linksByPlatform`` (one link
object per matched platform) and ``entitiesByUniqueId`` (one metadata record
per upstream catalogue entity). Link objects reference entities through
``entityUniqueId``. The functions here join the two tables into a Track.

Mapping is all-or-nothing: any missing field, wrong type or unknown
identifier aborts the whole conversion with an exception.
"""

from collections.abc import Mapping
import json
from typing import Any

from songlink.config import get_logger
from songlink.domain.entities import (
    APIProvider,
    Links,
    Metadata,
    Platform,
    PlatformTrack,
    Thumbnail,
    Track,
)
from songlink.domain.exceptions import MalformedResponseError

logger = get_logger(__name__).bind(service="mapper")

# Entity keys consumed by Metadata itself; everything else lands in ``extra``
_METADATA_KEYS = frozenset({
    "id",
    "type",
    "title",
    "artistName",
    "thumbnailUrl",
    "thumbnailWidth",
    "thumbnailHeight",
    "apiProvider",
    "platforms",
    "country",
})

_TYPE_NAMES = {str: "string", int: "integer", dict: "object", list: "array"}


def _describe(expected: type) -> str:
    return _TYPE_NAMES.get(expected, expected.__name__)


def _is_instance(value: Any, expected: type) -> bool:
    # JSON booleans must not pass as integers
    if expected is int and isinstance(value, bool):
        return False
    if expected is dict:
        return isinstance(value, Mapping)
    return isinstance(value, expected)


def _require(obj: Mapping[str, Any], key: str, expected: type, path: str) -> Any:
    """Read a required field, raising MalformedResponseError if absent or mistyped."""
    if key not in obj or obj[key] is None:
        raise MalformedResponseError(f"Missing required field '{path}.{key}'")
    value = obj[key]
    if not _is_instance(value, expected):
        raise MalformedResponseError(
            f"Field '{path}.{key}' must be {_describe(expected)}, "
            f"got {type(value).__name__}"
        )
    return value


def _optional(obj: Mapping[str, Any], key: str, expected: type, path: str) -> Any:
    """Read an optional field; absent and null both map to None."""
    if obj.get(key) is None:
        return None
    return _require(obj, key, expected, path)


def parse_document(raw: str | bytes) -> dict[str, Any]:
    """Decode a raw transport payload into a JSON object."""
    try:
        document = json.loads(raw)
    except (ValueError, TypeError) as e:
        raise MalformedResponseError(f"Response is not valid JSON: {e}") from e

    if not isinstance(document, dict):
        raise MalformedResponseError(
            f"Response must be a JSON object, got {type(document).__name__}"
        )
    return document


def convert_links(link: Mapping[str, Any], path: str) -> Links:
    """Build Links from one ``linksByPlatform`` entry."""
    return Links(
        url=_require(link, "url", str, path),
        mobile_deep_link=_optional(link, "nativeAppUriMobile", str, path),
        desktop_deep_link=_optional(link, "nativeAppUriDesktop", str, path),
    )


def convert_thumbnail(entity: Mapping[str, Any], path: str) -> Thumbnail | None:
    """Build a Thumbnail when the entity carries cover art."""
    url = _optional(entity, "thumbnailUrl", str, path)
    if url is None:
        return None
    return Thumbnail(
        url=url,
        width=_require(entity, "thumbnailWidth", int, path),
        height=_require(entity, "thumbnailHeight", int, path),
    )


def convert_metadata(
    entity: Mapping[str, Any],
    entity_unique_id: str,
    country: str,
    path: str,
) -> Metadata:
    """Build Metadata from one ``entitiesByUniqueId`` entry."""
    return Metadata(
        entity_unique_id=entity_unique_id,
        country=country,
        type=_optional(entity, "type", str, path),
        title=_optional(entity, "title", str, path),
        artist_name=_optional(entity, "artistName", str, path),
        thumbnail=convert_thumbnail(entity, path),
        extra={k: v for k, v in entity.items() if k not in _METADATA_KEYS},
    )


def convert_powered_by(entity: Mapping[str, Any], path: str) -> tuple[Platform, ...]:
    """Map an entity's ``platforms`` array onto Platform variants."""
    identifiers = _require(entity, "platforms", list, path)
    platforms = []
    for index, identifier in enumerate(identifiers):
        if not isinstance(identifier, str):
            raise MalformedResponseError(
                f"Field '{path}.platforms[{index}]' must be string, "
                f"got {type(identifier).__name__}"
            )
        platforms.append(Platform.from_identifier(identifier))
    return tuple(platforms)


def convert_platform_track(
    platform: Platform,
    link: Mapping[str, Any],
    entities: Mapping[str, Any],
) -> PlatformTrack:
    """Join one platform's link object with the entity it references."""
    link_path = f"linksByPlatform.{platform.identifier}"
    links = convert_links(link, link_path)

    entity_unique_id = _require(link, "entityUniqueId", str, link_path)
    entity_path = f"entitiesByUniqueId.{entity_unique_id}"
    if entity_unique_id not in entities:
        raise MalformedResponseError(
            f"'{link_path}.entityUniqueId' references unknown entity "
            f"'{entity_unique_id}'"
        )
    entity = entities[entity_unique_id]
    if not _is_instance(entity, dict):
        raise MalformedResponseError(f"Field '{entity_path}' must be object")

    # Entity country wins; the link object's country is the fallback
    country = _optional(entity, "country", str, entity_path) or _optional(
        link, "country", str, link_path
    )
    if country is None:
        raise MalformedResponseError(
            f"Missing required field '{entity_path}.country'"
        )

    return PlatformTrack(
        platform=platform,
        links=links,
        metadata=convert_metadata(entity, entity_unique_id, country, entity_path),
        provider=APIProvider.from_identifier(
            _require(entity, "apiProvider", str, entity_path)
        ),
        powered_by=convert_powered_by(entity, entity_path),
    )


def map_track(document: Mapping[str, Any]) -> Track:
    """Convert a decoded Songlink response into a Track.

    Platforms missing from ``linksByPlatform`` are skipped; the API does not
    match every platform for every item. Keys in ``linksByPlatform`` that are
    not modelled as Platform variants are ignored.

    Raises:
        MalformedResponseError: required field missing or mistyped
        UnrecognizedIdentifierError: unknown apiProvider or platforms entry
    """
    entity_unique_id = _require(document, "entityUniqueId", str, "$")
    user_country = _require(document, "userCountry", str, "$")
    page_url = _require(document, "pageUrl", str, "$")
    entities = _require(document, "entitiesByUniqueId", dict, "$")
    links_by_platform = _require(document, "linksByPlatform", dict, "$")

    platforms: dict[Platform, PlatformTrack] = {}
    for platform in Platform:
        link = links_by_platform.get(platform.identifier)
        if link is None:
            continue
        if not _is_instance(link, dict):
            raise MalformedResponseError(
                f"Field 'linksByPlatform.{platform.identifier}' must be object"
            )
        platforms[platform] = convert_platform_track(platform, link, entities)

    logger.debug(
        f"Mapped {entity_unique_id} to {len(platforms)} platforms "
        f"({len(links_by_platform)} links in response)"
    )

    return Track(
        entity_unique_id=entity_unique_id,
        user_country=user_country,
        page_url=page_url,
        platforms=platforms,
    )
