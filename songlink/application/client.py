"""Songlink resolution client.

Songlink is the public entry point of the library. It owns the client
configuration and the resolver cache, and offers the same resolution in
three concurrency flavours:

- ``resolve(uri)`` blocks the calling thread until the Track is available
- ``resolve(uri, on_success, on_failure)`` / ``resolve_async`` run on the
  shared worker pool and report through callbacks and a Future
- ``aresolve(uri)`` awaits the blocking path from asyncio code

Please note this is only a wrapper: attributing Songlink and following their
terms of service is the caller's responsibility. Without an API key the
service limits clients to roughly 10 requests per minute; exceeding that
surfaces as a TransportError with status 429.
"""

import asyncio
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from datetime import timedelta
import threading
from typing import Self, overload
from urllib.parse import quote_plus

from attrs import define, field, validators

from songlink.config import get_logger, settings
from songlink.domain.entities import Track
from songlink.infrastructure.cache import ResolverCache
from songlink.infrastructure.connectors.mapper import map_track, parse_document
from songlink.infrastructure.connectors.protocols import TransportProtocol
from songlink.infrastructure.connectors.transport import RequestsTransport

logger = get_logger(__name__).bind(service="client")

SuccessCallback = Callable[[Track], object]
FailureCallback = Callable[[BaseException], object]

_executor: ThreadPoolExecutor | None = None
_executor_lock = threading.Lock()


def get_executor() -> ThreadPoolExecutor:
    """Return the process-wide worker pool, creating it on first use."""
    global _executor

    with _executor_lock:
        if _executor is None:
            _executor = ThreadPoolExecutor(
                max_workers=settings.worker.max_workers,
                thread_name_prefix=settings.worker.thread_name_prefix,
            )
            logger.debug(
                f"Started worker pool with {settings.worker.max_workers} threads"
            )
        return _executor


def normalize_uri(uri: str) -> str:
    """Percent-encode ``uri`` for use as a query value and cache key."""
    return quote_plus(uri, safe="")


def _validate_country(instance, attribute, value: str) -> None:
    if len(value) != 2 or not value.isalpha():
        raise ValueError(f"country must be a two-letter code, got {value!r}")


@define(frozen=True, slots=True)
class ClientConfig:
    """Immutable configuration for a Songlink client.

    Attributes:
        country: Two-letter country code used when searching catalogues
        api_key: Songlink API key, None for anonymous (rate limited) access
        user_agent: User-Agent header sent with every request
        cache_size: Maximum number of cached Tracks
        cache_duration: Idle time after which a cached Track expires
        endpoint: Songlink links endpoint
    """

    country: str = field(
        default="US",
        converter=str.upper,
        validator=_validate_country,
    )
    api_key: str | None = field(default=None)
    user_agent: str = field(
        default=settings.client.user_agent,
        validator=validators.instance_of(str),
    )
    cache_size: int = field(
        default=500, validator=[validators.instance_of(int), validators.gt(0)]
    )
    cache_duration: timedelta = field(
        default=timedelta(hours=2),
        validator=[
            validators.instance_of(timedelta),
            validators.gt(timedelta(0)),
        ],
    )
    endpoint: str = field(default=settings.client.endpoint)

    @classmethod
    def from_settings(cls) -> "ClientConfig":
        """Create a configuration from environment-backed settings."""
        return cls(
            country=settings.client.country,
            api_key=settings.client.api_key,
            user_agent=settings.client.user_agent,
            cache_size=settings.client.cache_size,
            cache_duration=timedelta(hours=settings.client.cache_duration_hours),
            endpoint=settings.client.endpoint,
        )


class Songlink:
    """Client for the Songlink (Odesli) links API.

    Create one instance per configuration and share it; it is safe to use
    from many threads. Prefer ``Songlink.builder()`` over calling the
    constructor directly.
    """

    def __init__(
        self,
        config: ClientConfig | None = None,
        transport: TransportProtocol | None = None,
    ) -> None:
        self.config = config or ClientConfig.from_settings()
        self.transport = transport or RequestsTransport()
        self._cache = ResolverCache(
            max_size=self.config.cache_size,
            expire_after_access=self.config.cache_duration,
        )
        logger.debug(
            f"Songlink client ready (country={self.config.country}, "
            f"api_key={'set' if self.config.api_key else 'unset'}, "
            f"cache_size={self.config.cache_size})"
        )

    @staticmethod
    def builder() -> "SonglinkBuilder":
        return SonglinkBuilder()

    @property
    def cache(self) -> ResolverCache:
        return self._cache

    def build_request_url(self, uri: str) -> str:
        """Build the API request URL for a raw, unencoded ``uri``."""
        return self._request_url(normalize_uri(uri))

    def _request_url(self, encoded: str) -> str:
        url = f"{self.config.endpoint}?url={encoded}&userCountry={self.config.country}"
        if self.config.api_key is not None:
            url += f"&key={quote_plus(self.config.api_key, safe='')}"
        return url

    def _load(self, encoded: str) -> Track:
        """Cache loader: fetch, decode and map one lookup."""
        logger.info(f"Resolving {encoded} via Songlink")
        raw = self.transport.fetch(self._request_url(encoded), self.config.user_agent)
        return map_track(parse_document(raw))

    @overload
    def resolve(self, uri: str) -> Track: ...

    @overload
    def resolve(
        self,
        uri: str,
        on_success: SuccessCallback,
        on_failure: FailureCallback,
    ) -> Future[Track]: ...

    def resolve(self, uri, on_success=None, on_failure=None):
        """Resolve ``uri`` into a Track.

        Called with just ``uri`` this blocks the calling thread and returns
        the Track, raising the originating error on failure. It never
        returns None.

        Called with callbacks it returns immediately; see ``resolve_async``.

        Args:
            uri: Link to resolve, e.g. a Spotify track URL (encoded for you)
            on_success: Receives the Track on a worker thread
            on_failure: Receives the exception on a worker thread
        """
        if on_success is not None or on_failure is not None:
            return self.resolve_async(uri, on_success=on_success, on_failure=on_failure)

        return self._cache.get_or_compute(normalize_uri(uri), self._load)

    def resolve_async(
        self,
        uri: str,
        on_success: SuccessCallback | None = None,
        on_failure: FailureCallback | None = None,
    ) -> Future[Track]:
        """Resolve ``uri`` on the shared worker pool.

        Exactly one of the callbacks runs, exactly once, on a worker thread,
        never on the caller's thread. The returned Future completes with the
        same outcome once the callback has returned. Submitted resolutions
        cannot be cancelled: the Future is already running when returned, so
        ``cancel()`` is always False.
        """
        future: Future[Track] = Future()
        future.set_running_or_notify_cancel()

        def task() -> None:
            try:
                track = self.resolve(uri)
            except Exception as e:
                try:
                    if on_failure is not None:
                        on_failure(e)
                    else:
                        logger.warning(f"Resolution of {uri} failed: {e!s}")
                finally:
                    future.set_exception(e)
                return
            try:
                if on_success is not None:
                    on_success(track)
            except Exception as e:
                future.set_exception(e)
                return
            future.set_result(track)

        get_executor().submit(task)
        return future

    async def aresolve(self, uri: str) -> Track:
        """Resolve ``uri`` without blocking the running event loop."""
        return await asyncio.to_thread(self.resolve, uri)


class SonglinkBuilder:
    """Fluent factory for Songlink clients.

    Unset values fall back to the library settings (``SONGLINK_CLIENT__*``
    environment variables), which default to country "US", no API key,
    a 500 entry cache and a two hour idle expiry.
    """

    def __init__(self) -> None:
        defaults = ClientConfig.from_settings()
        self._country = defaults.country
        self._api_key = defaults.api_key
        self._user_agent = defaults.user_agent
        self._cache_size = defaults.cache_size
        self._cache_duration = defaults.cache_duration
        self._endpoint = defaults.endpoint
        self._transport: TransportProtocol | None = None

    def country(self, country_code: str) -> Self:
        """Two-letter country code for catalogue lookups (upper-cased)."""
        self._country = country_code.upper()
        return self

    def api_key(self, api_key: str | None) -> Self:
        """API key; without one Songlink allows about 10 requests/minute."""
        self._api_key = api_key
        return self

    def user_agent(self, user_agent: str) -> Self:
        self._user_agent = user_agent
        return self

    def cache_size(self, size: int) -> Self:
        self._cache_size = size
        return self

    def cache_duration(self, expiration: timedelta) -> Self:
        """Idle time after the last access before a cached Track expires."""
        self._cache_duration = expiration
        return self

    def endpoint(self, endpoint: str) -> Self:
        self._endpoint = endpoint
        return self

    def transport(self, transport: TransportProtocol) -> Self:
        """Use a custom transport instead of the requests-based default."""
        self._transport = transport
        return self

    def build(self) -> Songlink:
        """Validate the configuration and return a new client.

        Treat the result as long-lived and share it; build another only for
        a different configuration (e.g. another API key).
        """
        config = ClientConfig(
            country=self._country,
            api_key=self._api_key,
            user_agent=self._user_agent,
            cache_size=self._cache_size,
            cache_duration=self._cache_duration,
            endpoint=self._endpoint,
        )
        return Songlink(config=config, transport=self._transport)
