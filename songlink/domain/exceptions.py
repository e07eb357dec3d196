"""Error taxonomy for link resolution.

Every error raised by the library derives from SonglinkError so callers can
catch the whole family in one place.
"""


class SonglinkError(Exception):
    """Base class for songlink errors."""


class TransportError(SonglinkError):
    """Network or HTTP level failure while talking to the Songlink API."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code

    @property
    def is_rate_limited(self) -> bool:
        return self.status_code == 429


class MalformedResponseError(SonglinkError):
    """Response document is missing a required field or has the wrong type."""


class UnrecognizedIdentifierError(SonglinkError):
    """A platform or API provider identifier has no matching enum variant.

    Usually means the upstream service added something this client does not
    model yet.
    """

    def __init__(self, kind: str, identifier: object) -> None:
        super().__init__(f"Unrecognized {kind} identifier: {identifier!r}")
        self.kind = kind
        self.identifier = identifier


class ImageDecodeError(SonglinkError):
    """Thumbnail image could not be downloaded or decoded."""
