"""
Upstream stylesheet source configuration.
"""

GOOGLE_FONTS_CSS_URL = (
    "https://fonts.googleapis.com/css2"
    "?family=Noto+Sans+{locale}:wght@{weight}&display={display}"
)

# Google Fonts serves WOFF2 with per-range @font-face rules to modern browsers
USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:95.0) Gecko/20100101 Firefox/95.0"
)

REQUEST_TIMEOUT = 60  # seconds

# Response cache
DEFAULT_CACHE_TTL = 24 * 60 * 60  # seconds
DEFAULT_CACHE_MAX_ENTRIES = 32
