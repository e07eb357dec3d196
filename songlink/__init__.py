"""Python client for the Songlink (Odesli) links API.

Resolve a link from one streaming service into links for every other
service Songlink can match:

```python
from songlink import Platform, Songlink

client = Songlink.builder().country("gb").build()
track = client.resolve("https://open.spotify.com/track/0Jcij1eWd5bDMU5iPbxe2i")
print(track.url_for(Platform.APPLE_MUSIC))
```
"""

from songlink.application import ClientConfig, Songlink, SonglinkBuilder
from songlink.domain.entities import (
    APIProvider,
    Links,
    Metadata,
    Platform,
    PlatformTrack,
    Thumbnail,
    Track,
)
from songlink.domain.exceptions import (
    ImageDecodeError,
    MalformedResponseError,
    SonglinkError,
    TransportError,
    UnrecognizedIdentifierError,
)
from songlink.infrastructure.cache import ResolverCache
from songlink.infrastructure.connectors import RequestsTransport, TransportProtocol

__version__ = "1.0.0"

__all__ = [
    "APIProvider",
    "ClientConfig",
    "ImageDecodeError",
    "Links",
    "MalformedResponseError",
    "Metadata",
    "Platform",
    "PlatformTrack",
    "RequestsTransport",
    "ResolverCache",
    "Songlink",
    "SonglinkBuilder",
    "SonglinkError",
    "Thumbnail",
    "Track",
    "TransportError",
    "TransportProtocol",
    "UnrecognizedIdentifierError",
]
