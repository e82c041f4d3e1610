import logging
import os
from typing import Any, Dict, Optional, Type, Union

import requests
import urllib3
from diskcache import FanoutCache
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)
from urllib3.exceptions import InsecureRequestWarning

from lco.core.exceptions import RateLimitException, TransportError
from lco.core.rate_limiter import AdaptiveRateLimiter
from lco.settings import HTTP_CACHE_ENABLED, HTTP_TIMEOUT, VERIFY_TLS

logger = logging.getLogger(__name__)


class HttpClient:
    """HTTP client with exponential backoff, adaptive rate limiting and optional disk caching."""

    def __init__(
        self,
        max_retries: int = 5,
        initial_delay: float = 1.0,
        max_delay: float = 60.0,
        timeout: Optional[Union[float, tuple]] = 30,
        session: Optional[requests.Session] = None,
        retry_exceptions: Optional[tuple[Type[Exception], ...]] = None,
        verify: bool = True,
        enable_cache: bool = False,
        cache_dir: Optional[str] = None,
        cache_size_limit: int = 100_000_000,
        cache_ttl: int = 3600,
        rate_limiter: Optional[AdaptiveRateLimiter] = None,
    ):
        """
        Initialize the HTTP client.

        Args:
            max_retries: Maximum number of attempts per request
            initial_delay: Initial delay between retries in seconds
            max_delay: Maximum delay between retries in seconds
            timeout: Timeout passed to every request
            session: Optional requests.Session to use
            retry_exceptions: Exceptions to retry on. Defaults to requests errors and rate limits
            verify: Whether to verify TLS certificates
            enable_cache: Whether to cache GET responses on disk
            cache_dir: Directory for cache storage. Defaults to ./data/cache/http
            cache_size_limit: Maximum cache size in bytes
            cache_ttl: Time to live for cached responses in seconds
            rate_limiter: Rate limiter shared between requests
        """
        self.timeout = timeout
        self.session = session or requests.Session()
        self.verify = verify
        self.enable_cache = enable_cache
        self.cache_ttl = cache_ttl
        self.rate_limiter = rate_limiter or AdaptiveRateLimiter()

        if not verify:
            urllib3.disable_warnings(InsecureRequestWarning)

        self.retry_exceptions = retry_exceptions or (
            requests.exceptions.RequestException,
            RateLimitException,
        )

        self._retry_decorator = retry(
            stop=stop_after_attempt(max_retries),
            wait=wait_exponential(multiplier=initial_delay, min=initial_delay, max=max_delay),
            retry=retry_if_exception_type(self.retry_exceptions),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )

        if self.enable_cache:
            if cache_dir is None:
                cache_dir = os.path.join(os.getcwd(), "data", "cache", "http")
            os.makedirs(cache_dir, exist_ok=True)
            self._cache = FanoutCache(
                directory=cache_dir, size_limit=cache_size_limit, timeout=60, shards=4
            )
            logger.debug(f"FanoutCache initialized at {cache_dir}")

    def _make_request(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        self.rate_limiter.wait()
        response = self.session.request(
            method=method, url=url, timeout=self.timeout, verify=self.verify, **kwargs
        )

        if response.status_code == 429:
            retry_after = response.headers.get("Retry-After")
            try:
                retry_after = int(retry_after) if retry_after else None
            except ValueError:
                retry_after = None

            self.rate_limiter.record_rate_limit(retry_after)
            logger.warning(
                f"Rate limited: {url}",
                extra={"event_type": "rate_limit", "url": url, "retry_after": retry_after},
            )
            raise RateLimitException(f"Rate limited on {url}", retry_after)

        response.raise_for_status()
        self.rate_limiter.record_success()
        return response

    def _get_cache_key(self, method: str, url: str, **kwargs: Any) -> str:
        sorted_kwargs = sorted((k, v) for k, v in kwargs.items() if k not in ["data", "json"])
        return f"{method}:{url}:{str(sorted_kwargs)}"

    def request(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        """
        Make an HTTP request with retry logic and optional caching.

        Only GET requests are cached.

        Raises:
            TransportError: If all retry attempts fail
        """
        cacheable = self.enable_cache and method == "GET"

        if cacheable:
            cache_key = self._get_cache_key(method, url, **kwargs)
            try:
                cached_response = self._cache.get(cache_key)
                if cached_response is not None:
                    logger.debug(f"Cache hit for {url}")
                    return cached_response
            except Exception as e:
                logger.warning(f"Cache read error for {url}: {e}. Continuing without cache.")

        try:
            response = self._retry_decorator(self._make_request)(method, url, **kwargs)
        except self.retry_exceptions as e:
            logger.error(
                f"Request failed: {method} {url}: {e}",
                extra={"url": url, "method": method, "error_type": type(e).__name__},
            )
            raise TransportError(f"{method} {url} failed: {e}", url=url) from e

        if cacheable:
            try:
                self._cache.set(cache_key, response, expire=self.cache_ttl)
            except Exception as e:
                logger.warning(f"Cache write error for {url}: {e}. Response returned without caching.")

        return response

    def get(self, url: str, **kwargs: Any) -> requests.Response:
        """Make a GET request."""
        return self.request("GET", url, **kwargs)

    def post(self, url: str, **kwargs: Any) -> requests.Response:
        """Make a POST request. Never cached."""
        return self.request("POST", url, **kwargs)

    def get_cache_info(self) -> Dict[str, Any]:
        if not self.enable_cache:
            return {"enabled": False}

        return {
            "enabled": True,
            "volume": self._cache.volume(),
            "directory": self._cache.directory,
            "ttl": self.cache_ttl,
        }


def get_http_client() -> HttpClient:
    """Returns an HttpClient configured from settings."""
    return HttpClient(timeout=HTTP_TIMEOUT, verify=VERIFY_TLS, enable_cache=HTTP_CACHE_ENABLED)
