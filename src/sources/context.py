# src/sources/context.py — v1
"""Process-wide state shared by all source adapters.

Holds feature flags, API keys, the result cache, per-source rate limiter
and the HTTP client. One instance is built at startup and passed to every
adapter; tests build their own isolated instances.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import httpx

from signalgate.execution.rate_limiter import MinIntervalRateLimiter
from signalgate.sources.cache import ResultCache

if TYPE_CHECKING:
    from signalgate.config.settings import Settings
    from signalgate.core.models import SourceConfig

logger = logging.getLogger(__name__)

MASTER_FLAG = "comparison_sources_enabled"
DEFAULT_USER_AGENT = "signalgate/0.1 (+metadata validation)"


class SourceContext:
    """Feature flags, cache, limiter and HTTP client for comparison sources.

    Args:
        flags: Initial feature flag values. Missing flags are off.
        api_keys: API keys keyed by source id.
        cache: Result cache (new empty cache by default).
        rate_limiter: Per-source limiter (new limiter by default).
        http_client: Shared async HTTP client, created lazily if omitted.
        timeout_s: Request timeout for the lazily created client.
        user_agent: User-Agent header for the lazily created client.
    """

    def __init__(
        self,
        flags: dict[str, bool] | None = None,
        api_keys: dict[str, str] | None = None,
        cache: ResultCache | None = None,
        rate_limiter: MinIntervalRateLimiter | None = None,
        http_client: httpx.AsyncClient | None = None,
        timeout_s: float = 10.0,
        user_agent: str = DEFAULT_USER_AGENT,
    ) -> None:
        self._initial_flags = dict(flags or {})
        self._flags = dict(self._initial_flags)
        self._api_keys = dict(api_keys or {})
        self.cache = cache or ResultCache()
        self.rate_limiter = rate_limiter or MinIntervalRateLimiter()
        self._http_client = http_client
        self._owns_client = http_client is None
        self._timeout_s = timeout_s
        self._user_agent = user_agent

    @classmethod
    def from_settings(cls, settings: Settings) -> SourceContext:
        return cls(
            flags=settings.feature_flags,
            api_keys=settings.api_keys,
            timeout_s=settings.http_timeout_s,
            user_agent=settings.http_user_agent,
        )

    # --- Feature flags ---

    def flag(self, key: str) -> bool:
        return self._flags.get(key, False)

    def set_flag(self, key: str, value: bool) -> None:
        self._flags[key] = value

    def is_enabled(self, config: SourceConfig) -> bool:
        """Master switch, the source's own flag and its static enabled bit."""
        return (
            config.enabled
            and self.flag(MASTER_FLAG)
            and self.flag(config.feature_flag_key)
        )

    def enable_all(self, flag_keys: list[str] | None = None) -> None:
        """Turn on the master switch and the given (or all known) source flags."""
        self._flags[MASTER_FLAG] = True
        for key in flag_keys if flag_keys is not None else list(self._flags):
            self._flags[key] = True

    def disable_all(self) -> None:
        self._flags[MASTER_FLAG] = False

    # --- Credentials ---

    def api_key(self, source_id: str) -> str:
        return self._api_keys.get(source_id, "")

    # --- HTTP ---

    @property
    def http_client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                timeout=self._timeout_s,
                headers={"User-Agent": self._user_agent},
                follow_redirects=True,
            )
        return self._http_client

    async def aclose(self) -> None:
        """Close the HTTP client if this context created it."""
        if self._http_client is not None and self._owns_client:
            await self._http_client.aclose()
            self._http_client = None

    async def __aenter__(self) -> SourceContext:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    # --- Lifecycle ---

    def reset(self) -> None:
        """Restore initial flags and drop cached results and limiter history."""
        self._flags = dict(self._initial_flags)
        self.cache.clear()
        self.rate_limiter.reset()
        logger.debug("Source context reset")
