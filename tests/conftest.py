"""Shared fixtures: Songlink response documents and a scripted transport."""

import copy
import json
import threading

import pytest

from songlink.domain.entities import APIProvider, Links, Metadata, Platform, PlatformTrack, Track

SPOTIFY_URL = "https://open.spotify.com/track/1"


class FakeTransport:
    """In-memory transport returning a canned document and recording calls."""

    def __init__(self, document=None, error=None, delay_event=None):
        self.document = document
        self.error = error
        self.delay_event = delay_event
        self.calls: list[tuple[str, str]] = []
        self._lock = threading.Lock()

    def fetch(self, url: str, user_agent: str) -> str:
        with self._lock:
            self.calls.append((url, user_agent))
        if self.delay_event is not None:
            self.delay_event.wait(timeout=5)
        if self.error is not None:
            raise self.error
        return json.dumps(self.document)


@pytest.fixture
def spotify_document():
    """Minimal single-platform response."""
    return {
        "entityUniqueId": "SPOTIFY_1",
        "userCountry": "US",
        "pageUrl": "https://song.link/s/1",
        "entitiesByUniqueId": {
            "SPOTIFY_1": {
                "country": "US",
                "apiProvider": "spotify",
                "platforms": ["spotify"],
            },
        },
        "linksByPlatform": {
            "spotify": {
                "url": SPOTIFY_URL,
                "entityUniqueId": "SPOTIFY_1",
                "country": "US",
            },
        },
    }


@pytest.fixture
def full_document():
    """Multi-platform response shaped like a real Songlink answer."""
    return {
        "entityUniqueId": "SPOTIFY_SONG::0Jcij1eWd5bDMU5iPbxe2i",
        "userCountry": "US",
        "pageUrl": "https://song.link/s/0Jcij1eWd5bDMU5iPbxe2i",
        "entitiesByUniqueId": {
            "SPOTIFY_SONG::0Jcij1eWd5bDMU5iPbxe2i": {
                "id": "0Jcij1eWd5bDMU5iPbxe2i",
                "type": "song",
                "title": "Kitchen",
                "artistName": "SZA",
                "thumbnailUrl": "https://i.scdn.co/image/ab67616d0000b273",
                "thumbnailWidth": 640,
                "thumbnailHeight": 640,
                "apiProvider": "spotify",
                "platforms": ["spotify"],
            },
            "ITUNES_SONG::1668935290": {
                "id": "1668935290",
                "type": "song",
                "title": "Kitchen",
                "artistName": "SZA",
                "apiProvider": "itunes",
                "platforms": ["appleMusic", "itunes"],
                "isExplicit": True,
            },
            "AUDIUS_SONG::abc": {
                "id": "abc",
                "type": "song",
                "title": "Kitchen",
                "artistName": "SZA",
                "apiProvider": "audius",
                "platforms": ["audius"],
            },
        },
        "linksByPlatform": {
            "spotify": {
                "country": "US",
                "url": "https://open.spotify.com/track/0Jcij1eWd5bDMU5iPbxe2i",
                "nativeAppUriDesktop": "spotify:track:0Jcij1eWd5bDMU5iPbxe2i",
                "entityUniqueId": "SPOTIFY_SONG::0Jcij1eWd5bDMU5iPbxe2i",
            },
            "itunes": {
                "country": "US",
                "url": "https://geo.music.apple.com/us/album/_/1668935286?i=1668935290&app=itunes",
                "nativeAppUriMobile": "itmss://itunes.apple.com/us/album/_/1668935286?i=1668935290",
                "nativeAppUriDesktop": "itmss://itunes.apple.com/us/album/_/1668935286?i=1668935290",
                "entityUniqueId": "ITUNES_SONG::1668935290",
            },
            "appleMusic": {
                "country": "US",
                "url": "https://geo.music.apple.com/us/album/_/1668935286?i=1668935290",
                "nativeAppUriMobile": "music://music.apple.com/us/album/_/1668935286?i=1668935290",
                "entityUniqueId": "ITUNES_SONG::1668935290",
            },
            "audius": {
                "country": "US",
                "url": "https://audius.co/sza/kitchen",
                "entityUniqueId": "AUDIUS_SONG::abc",
            },
            "boomplay": {
                "country": "US",
                "url": "https://www.boomplay.com/songs/1",
                "entityUniqueId": "BOOMPLAY_SONG::1",
            },
        },
    }


@pytest.fixture
def document_copy():
    """Deep copy helper so tests can mutate fixture documents freely."""
    return copy.deepcopy


@pytest.fixture
def spotify_track():
    """Domain Track equivalent to ``spotify_document``."""
    entry = PlatformTrack(
        platform=Platform.SPOTIFY,
        links=Links(url=SPOTIFY_URL),
        metadata=Metadata(entity_unique_id="SPOTIFY_1", country="US"),
        provider=APIProvider.SPOTIFY,
        powered_by=[Platform.SPOTIFY],
    )
    return Track(
        entity_unique_id="SPOTIFY_1",
        user_country="US",
        page_url="https://song.link/s/1",
        platforms={Platform.SPOTIFY: entry},
    )


@pytest.fixture
def transport_factory():
    """FakeTransport class, for tests that need custom behaviour."""
    return FakeTransport


@pytest.fixture
def fake_transport(spotify_document):
    return FakeTransport(document=spotify_document)
