"""
Upstream stylesheet download.

Fetches the Google Fonts @font-face stylesheet for a Noto Sans CJK locale,
optionally reusing responses through an explicit ResponseCache.
"""

import hashlib
import os
import time
from collections import OrderedDict
from collections.abc import Callable
from pathlib import Path
from typing import Protocol

import requests

from cjk_font_subsetter.config.options import FontDisplay, FontWeight, Locale
from cjk_font_subsetter.config.sources import (
    DEFAULT_CACHE_MAX_ENTRIES,
    DEFAULT_CACHE_TTL,
    GOOGLE_FONTS_CSS_URL,
    REQUEST_TIMEOUT,
    USER_AGENT,
)
from cjk_font_subsetter.core.errors import FetchError
from cjk_font_subsetter.utils.logging import logger


class StylesheetSource(Protocol):
    """Returns raw @font-face CSS for a locale/weight/display triple."""

    def fetch(self, locale: Locale, weight: FontWeight, display: FontDisplay) -> str: ...


class ResponseCache:
    """
    Time-boxed cache of response bodies keyed by URL.

    Entries older than `ttl` seconds are ignored and evicted. Once more than
    `max_entries` are stored the oldest is evicted. With a directory,
    entries are also kept on disk (one file per key, mtime as timestamp) so
    they survive between runs.
    """

    def __init__(
        self,
        ttl: float = DEFAULT_CACHE_TTL,
        max_entries: int = DEFAULT_CACHE_MAX_ENTRIES,
        directory: Path | None = None,
        clock: Callable[[], float] = time.time,
    ):
        self.ttl = ttl
        self.max_entries = max_entries
        self.directory = directory
        self._clock = clock
        self._entries: OrderedDict[str, tuple[float, str]] = OrderedDict()

    def _path(self, key: str) -> Path:
        digest = hashlib.sha256(key.encode("utf-8")).hexdigest()
        return self.directory / f"{digest}.css"

    def _expired(self, stored_at: float) -> bool:
        return self._clock() - stored_at > self.ttl

    def get(self, key: str) -> str | None:
        entry = self._entries.get(key)
        if entry is not None:
            stored_at, value = entry
            if not self._expired(stored_at):
                return value
            del self._entries[key]

        if self.directory is None:
            return None

        path = self._path(key)
        try:
            stored_at = path.stat().st_mtime
            if self._expired(stored_at):
                path.unlink()
                return None
            value = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.warning(f"Ignoring unreadable cache entry {path}: {e}")
            return None

        self._store(key, stored_at, value)
        return value

    def put(self, key: str, value: str) -> None:
        now = self._clock()
        self._store(key, now, value)

        if self.directory is None:
            return

        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            path = self._path(key)
            path.write_text(value, encoding="utf-8")
            os.utime(path, (now, now))
            self._evict_files()
        except OSError as e:
            logger.warning(f"Cannot write cache entry for {key}: {e}")

    def _store(self, key: str, stored_at: float, value: str) -> None:
        self._entries[key] = (stored_at, value)
        self._entries.move_to_end(key)
        while len(self._entries) > self.max_entries:
            self._entries.popitem(last=False)

    def _evict_files(self) -> None:
        files = sorted(self.directory.glob("*.css"), key=lambda p: p.stat().st_mtime)
        for path in files[: max(0, len(files) - self.max_entries)]:
            path.unlink(missing_ok=True)


def google_fonts_url(locale: Locale, weight: FontWeight, display: FontDisplay) -> str:
    """Google Fonts css2 URL for Noto Sans in the given locale."""
    return GOOGLE_FONTS_CSS_URL.format(
        locale=locale.value.upper(),
        weight=int(weight),
        display=display.value,
    )


class GoogleFontsSource:
    """Downloads stylesheets from Google Fonts."""

    def __init__(
        self,
        cache: ResponseCache | None = None,
        session: requests.Session | None = None,
        timeout: float = REQUEST_TIMEOUT,
    ):
        self.cache = cache
        self.session = session or requests.Session()
        self.timeout = timeout

    def fetch(self, locale: Locale, weight: FontWeight, display: FontDisplay) -> str:
        """
        Fetch the stylesheet text.

        Raises:
            FetchError: If the request fails or returns an error status
        """
        url = google_fonts_url(locale, weight, display)

        if self.cache is not None:
            cached = self.cache.get(url)
            if cached is not None:
                logger.info(f"Using cached CSS: {url}")
                return cached

        logger.info(f"Downloading CSS from Google Fonts: {url}")
        try:
            response = self.session.get(
                url, headers={"User-Agent": USER_AGENT}, timeout=self.timeout
            )
            response.raise_for_status()
        except requests.RequestException as e:
            raise FetchError(f"Failed to download {url}: {e}") from e

        css = response.text
        if self.cache is not None:
            self.cache.put(url, css)
        return css
