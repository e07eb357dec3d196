"""HTTP transport for the Songlink API built on requests.

RequestsTransport is the default implementation of TransportProtocol. It
owns a pooled requests.Session, applies the configured timeout and converts
every requests failure into TransportError so callers only deal with the
library's own error taxonomy.

Retries are opt-in (``retry_count=0`` by default). When enabled, transient
failures (connection errors, 429 and 5xx) are retried with exponential
backoff; client errors are raised immediately.
"""

from typing import Any

from attrs import define, field
import backoff
import requests

from songlink.config import get_logger, resilient_operation, settings
from songlink.domain.exceptions import TransportError

# Get contextual logger with service binding
logger = get_logger(__name__).bind(service="transport")


def _is_permanent(error: Exception) -> bool:
    """True for failures that retrying cannot fix."""
    if not isinstance(error, TransportError) or error.status_code is None:
        return False
    return error.status_code != 429 and error.status_code < 500


@define(slots=True)
class RequestsTransport:
    """requests-backed transport with optional exponential backoff.

    Attributes:
        timeout: Seconds to wait for connect and read
        retry_count: Extra attempts after the first one for transient failures
        retry_base_delay: Base delay between retries (seconds)
        retry_max_delay: Maximum delay between retries (seconds)
    """

    timeout: float = field(factory=lambda: settings.transport.timeout)
    retry_count: int = field(factory=lambda: settings.transport.retry_count)
    retry_base_delay: float = field(
        factory=lambda: settings.transport.retry_base_delay
    )
    retry_max_delay: float = field(factory=lambda: settings.transport.retry_max_delay)
    session: requests.Session = field(factory=requests.Session, repr=False)

    def _on_backoff(self, details: dict[str, Any]) -> None:
        """Log backoff event."""
        logger.warning(
            f"Backing off Songlink request (attempt {details['tries']}), "
            f"retrying in {details['wait']:.2f}s"
        )

    def _on_giveup(self, details: dict[str, Any]) -> None:
        """Log when we give up retrying."""
        exception = details.get("exception")
        logger.error(
            f"All {details['tries']} attempts failed after "
            f"{details['elapsed']:.2f}s: {exception!s}"
        )

    def fetch(self, url: str, user_agent: str) -> str:
        """Fetch ``url`` and return the body as text.

        Raises:
            TransportError: network failure or non-2xx status
        """
        if self.retry_count <= 0:
            return self._get(url, user_agent)

        @backoff.on_exception(
            backoff.expo,
            TransportError,
            max_tries=self.retry_count + 1,  # +1 because first attempt counts
            factor=self.retry_base_delay,
            max_value=self.retry_max_delay,
            jitter=backoff.full_jitter,
            giveup=_is_permanent,
            on_backoff=self._on_backoff,
            on_giveup=self._on_giveup,
        )
        def get_with_backoff() -> str:
            return self._get(url, user_agent)

        return get_with_backoff()

    @resilient_operation("songlink_fetch")
    def _get(self, url: str, user_agent: str) -> str:
        logger.debug(f"GET {url}")
        try:
            response = self.session.get(
                url,
                headers={"User-Agent": user_agent, "Accept": "application/json"},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise TransportError(f"Request to Songlink failed: {e}") from e

        if not response.ok:
            raise TransportError(
                f"Songlink returned HTTP {response.status_code}: "
                f"{response.text[:200]}",
                status_code=response.status_code,
            )

        return response.text

    def close(self) -> None:
        self.session.close()
