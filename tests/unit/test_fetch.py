"""Tests for the upstream stylesheet source and its cache."""

import pytest
import requests

from cjk_font_subsetter.config.options import FontDisplay, FontWeight, Locale
from cjk_font_subsetter.config.sources import USER_AGENT
from cjk_font_subsetter.core.errors import FetchError
from cjk_font_subsetter.operations.fetch import (
    GoogleFontsSource,
    ResponseCache,
    google_fonts_url,
)

URL = "https://fonts.googleapis.com/css2?family=Noto+Sans+SC:wght@400&display=swap"


class FakeResponse:
    def __init__(self, text, status_code=200):
        self.text = text
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error")


class FakeSession:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    def get(self, url, **kwargs):
        self.calls.append((url, kwargs))
        if self.error is not None:
            raise self.error
        return self.response


class FakeClock:
    def __init__(self, now=1_000_000.0):
        self.now = now

    def __call__(self):
        return self.now


def fetch(source):
    return source.fetch(Locale.SC, FontWeight.REGULAR, FontDisplay.SWAP)


def test_google_fonts_url():
    """Test the css2 URL for a locale/weight/display triple."""
    assert google_fonts_url(Locale.SC, FontWeight.REGULAR, FontDisplay.SWAP) == URL
    assert google_fonts_url(Locale.JP, FontWeight.BOLD, FontDisplay.BLOCK) == (
        "https://fonts.googleapis.com/css2?family=Noto+Sans+JP:wght@700&display=block"
    )


def test_fetch_sends_browser_user_agent():
    """Test the request carries a browser user agent."""
    session = FakeSession(FakeResponse("css"))

    assert fetch(GoogleFontsSource(session=session)) == "css"
    url, kwargs = session.calls[0]
    assert url == URL
    assert kwargs["headers"]["User-Agent"] == USER_AGENT
    assert kwargs["timeout"] > 0


def test_fetch_http_error():
    """Test an error status raises FetchError."""
    session = FakeSession(FakeResponse("nope", status_code=400))
    with pytest.raises(FetchError):
        fetch(GoogleFontsSource(session=session))


def test_fetch_network_error():
    """Test a connection failure raises FetchError."""
    session = FakeSession(error=requests.ConnectionError("offline"))
    with pytest.raises(FetchError, match="offline"):
        fetch(GoogleFontsSource(session=session))


def test_fetch_uses_cache():
    """Test a cached response is reused instead of downloaded."""
    session = FakeSession(FakeResponse("css"))
    source = GoogleFontsSource(cache=ResponseCache(ttl=60), session=session)

    assert fetch(source) == "css"
    assert fetch(source) == "css"
    assert len(session.calls) == 1


def test_cache_expires():
    """Test entries older than the TTL are ignored."""
    clock = FakeClock()
    cache = ResponseCache(ttl=60, clock=clock)
    cache.put("a", "1")

    clock.now += 59
    assert cache.get("a") == "1"
    clock.now += 2
    assert cache.get("a") is None


def test_cache_evicts_oldest():
    """Test the oldest entry goes once max_entries is exceeded."""
    cache = ResponseCache(ttl=60, max_entries=2, clock=FakeClock())
    cache.put("a", "1")
    cache.put("b", "2")
    cache.put("c", "3")

    assert cache.get("a") is None
    assert cache.get("b") == "2"
    assert cache.get("c") == "3"


def test_cache_persists_to_directory(tmp_path):
    """Test entries written to a directory are read by a new cache."""
    clock = FakeClock()
    ResponseCache(ttl=60, directory=tmp_path, clock=clock).put(URL, "css")

    assert ResponseCache(ttl=60, directory=tmp_path, clock=clock).get(URL) == "css"

    clock.now += 61
    assert ResponseCache(ttl=60, directory=tmp_path, clock=clock).get(URL) is None
    assert list(tmp_path.glob("*.css")) == []


def test_cache_directory_eviction(tmp_path):
    """Test the directory keeps at most max_entries files."""
    clock = FakeClock()
    cache = ResponseCache(ttl=600, max_entries=2, directory=tmp_path, clock=clock)
    for key in ("a", "b", "c"):
        cache.put(key, key)
        clock.now += 1

    assert len(list(tmp_path.glob("*.css"))) == 2
    assert ResponseCache(ttl=600, directory=tmp_path, clock=clock).get("a") is None
