"""Transport protocol definition.

The resolution client only needs one capability from the network layer:
fetch a URL with a given user agent and hand back the body. Anything that
satisfies TransportProtocol can be plugged into the client, which keeps the
HTTP library swappable and makes the client trivial to test.
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class TransportProtocol(Protocol):
    """Interface for fetching raw Songlink API responses."""

    def fetch(self, url: str, user_agent: str) -> str | bytes:
        """Fetch ``url`` and return the response body.

        Args:
            url: Fully built request URL including query parameters
            user_agent: Value for the User-Agent header

        Returns:
            Raw JSON document as text or bytes

        Raises:
            TransportError: on network failure or a non-success HTTP status
        """
        ...
