"""Track-related domain entities.

Immutable representations of one resolved media item across platforms.
Everything here is built once by the response mapper and never mutated,
except the lazily decoded thumbnail image.
"""

from collections.abc import Mapping
import threading
from types import MappingProxyType
from typing import Any

from attrs import define, field, validators

from songlink.domain.entities.enums import APIProvider, Platform


def _freeze_platforms(
    value: Mapping[Platform, "PlatformTrack"],
) -> Mapping[Platform, "PlatformTrack"]:
    """Copy into a read-only mapping ordered by Platform declaration."""
    return MappingProxyType({p: value[p] for p in Platform if p in value})


def _freeze_extra(value: Mapping[str, Any]) -> Mapping[str, Any]:
    return MappingProxyType(dict(value))


@define(frozen=True, slots=True)
class Links:
    """Web link plus optional native app deep links for one platform."""

    url: str = field(validator=validators.instance_of(str))
    mobile_deep_link: str | None = field(default=None)
    desktop_deep_link: str | None = field(default=None)


@define(frozen=True, slots=True)
class Thumbnail:
    """Cover art reference with lazily decoded image data.

    The image is downloaded and decoded on first access and memoized on the
    instance. Concurrent first calls are serialized so decoding happens once.
    """

    url: str = field(validator=validators.instance_of(str))
    width: int = field(validator=validators.instance_of(int))
    height: int = field(validator=validators.instance_of(int))
    _image: Any = field(default=None, init=False, eq=False, repr=False)
    _lock: threading.Lock = field(
        factory=threading.Lock, init=False, eq=False, repr=False
    )

    def image(self) -> Any:
        """Return the decoded Pillow image, downloading it on first use.

        Raises:
            ImageDecodeError: download or decoding failed
        """
        from songlink.infrastructure.imaging import load_image

        with self._lock:
            if self._image is None:
                # Frozen class; memo is the only deferred field
                object.__setattr__(self, "_image", load_image(self.url))
            return self._image

    def average_color(self) -> tuple[int, int, int]:
        """Average RGB colour of the thumbnail."""
        from songlink.infrastructure.imaging import average_color

        return average_color(self.image())


@define(frozen=True, slots=True)
class Metadata:
    """Descriptive data for one upstream entity.

    Attributes:
        entity_unique_id: Upstream id, e.g. ``SPOTIFY_SONG::0Jcij1eWd5bDMU5iPbxe2i``
        country: Country the entity was looked up in
        type: Entity kind reported by the API ("song" or "album")
        extra: Remaining descriptive fields of the entity, untouched
    """

    entity_unique_id: str = field(validator=validators.instance_of(str))
    country: str = field(validator=validators.instance_of(str))
    type: str | None = field(default=None)
    title: str | None = field(default=None)
    artist_name: str | None = field(default=None)
    thumbnail: Thumbnail | None = field(default=None)
    extra: Mapping[str, Any] = field(factory=dict, converter=_freeze_extra, hash=False)


@define(frozen=True, slots=True)
class PlatformTrack:
    """One platform's view of the resolved media item.

    ``powered_by`` lists the platforms served by the same upstream entity,
    in the order the API returned them.
    """

    platform: Platform = field(validator=validators.instance_of(Platform))
    links: Links = field(validator=validators.instance_of(Links))
    metadata: Metadata = field(validator=validators.instance_of(Metadata))
    provider: APIProvider = field(validator=validators.instance_of(APIProvider))
    powered_by: tuple[Platform, ...] = field(default=(), converter=tuple)


@define(frozen=True, slots=True)
class Track:
    """Root object returned by a resolution.

    Holds at most one PlatformTrack per Platform. Platforms the upstream
    service could not match are simply absent.
    """

    entity_unique_id: str = field(validator=validators.instance_of(str))
    user_country: str = field(validator=validators.instance_of(str))
    page_url: str = field(validator=validators.instance_of(str))
    platforms: Mapping[Platform, PlatformTrack] = field(
        factory=dict, converter=_freeze_platforms, hash=False
    )

    def get_platform(self, platform: Platform) -> PlatformTrack | None:
        """Return the entry for ``platform`` or None when it was not matched."""
        return self.platforms.get(platform)

    def url_for(self, platform: Platform) -> str | None:
        """Shortcut to the web link for ``platform``."""
        entry = self.platforms.get(platform)
        return entry.links.url if entry else None

    @property
    def available_platforms(self) -> tuple[Platform, ...]:
        return tuple(self.platforms)
