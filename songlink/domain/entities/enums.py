"""Platform and API provider enumerations.

Both enums map a stable external identifier (the key used by the Songlink API)
to exactly one variant. Lookup tables are built once at import time.
"""

from enum import Enum
from typing import Self

from songlink.domain.exceptions import UnrecognizedIdentifierError


class _IdentifiedEnum(Enum):
    """Enum whose value is the external identifier string."""

    @property
    def identifier(self) -> str:
        return self.value

    @classmethod
    def from_identifier(cls, identifier: str) -> Self:
        """Return the variant for ``identifier``.

        Raises:
            UnrecognizedIdentifierError: identifier is not part of the fixed set
        """
        try:
            return cls._value2member_map_[identifier]
        except (KeyError, TypeError):
            raise UnrecognizedIdentifierError(cls._kind(), identifier) from None

    @classmethod
    def _kind(cls) -> str:
        return cls.__name__


class Platform(_IdentifiedEnum):
    """Consumer facing service a link points to.

    Declaration order is the order platforms appear in a resolved Track.
    """

    SPOTIFY = "spotify"
    ITUNES = "itunes"
    APPLE_MUSIC = "appleMusic"
    YOUTUBE = "youtube"
    YOUTUBE_MUSIC = "youtubeMusic"
    GOOGLE = "google"
    GOOGLE_STORE = "googleStore"
    PANDORA = "pandora"
    DEEZER = "deezer"
    TIDAL = "tidal"
    AMAZON_STORE = "amazonStore"
    AMAZON_MUSIC = "amazonMusic"
    SOUNDCLOUD = "soundcloud"
    NAPSTER = "napster"
    YANDEX = "yandex"
    SPINRILLA = "spinrilla"
    # Older releases mapped AUDIUS to "yandex", which made it unreachable
    AUDIUS = "audius"
    AUDIOMACK = "audiomack"

    @classmethod
    def _kind(cls) -> str:
        return "platform"


class APIProvider(_IdentifiedEnum):
    """Backend catalogue that supplied an entity's metadata.

    One provider can back several platforms (itunes serves both ITUNES and
    APPLE_MUSIC).
    """

    SPOTIFY = "spotify"
    ITUNES = "itunes"
    YOUTUBE = "youtube"
    GOOGLE = "google"
    PANDORA = "pandora"
    DEEZER = "deezer"
    TIDAL = "tidal"
    AMAZON = "amazon"
    SOUNDCLOUD = "soundcloud"
    NAPSTER = "napster"
    YANDEX = "yandex"
    SPINRILLA = "spinrilla"
    AUDIUS = "audius"
    AUDIOMACK = "audiomack"

    @classmethod
    def _kind(cls) -> str:
        return "apiProvider"
