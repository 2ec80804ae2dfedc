"""Shared pytest fixtures."""

import threading
import time

import pytest
from fontTools.fontBuilder import FontBuilder
from fontTools.pens.ttGlyphPen import TTGlyphPen

from cjk_font_subsetter.core.font_io import FontInfo

SAMPLE_CSS = """\
/* [0] */
@font-face {
  font-family: 'Noto Sans SC';
  font-style: normal;
  font-weight: 400;
  font-display: swap;
  src: url(https://fonts.gstatic.com/s/notosanssc/v36/k3kXo84MPvpLmixcA63oeALhLIiP-Q-87KaAaH7rzeAODp22mF0qmF4CSjmPC6A0Rg5g1igg1w.0.woff2) format('woff2');
  unicode-range: U+4E00-9FFF;
}
/* [1] */
@font-face {
  font-family: 'Noto Sans SC';
  font-style: normal;
  font-weight: 400;
  font-display: swap;
  src: url(https://fonts.gstatic.com/s/notosanssc/v36/k3kXo84MPvpLmixcA63oeALhLIiP-Q-87KaAaH7rzeAODp22mF0qmF4CSjmPC6A0Rg5g1igg1w.1.woff2) format('woff2');
  unicode-range: U+3400-4DBF;
}
"""

POSTSCRIPT_NAME = "TestSans-Regular"
FAMILY_NAME = "Test Sans"


class FakeSource:
    """Stylesheet source returning fixed CSS and counting calls."""

    def __init__(self, css: str = SAMPLE_CSS):
        self.css = css
        self.calls = []

    def fetch(self, locale, weight, display):
        self.calls.append((locale, weight, display))
        return self.css


class RecordingSubsetter:
    """
    Subsetter that writes placeholder bytes and records every call.

    Tracks the peak number of concurrent calls. `fail` decides from
    (unicodes, flavor) whether a call raises SubsetJobError.
    """

    def __init__(self, delay: float = 0.0, fail=None, delays=None):
        self.delay = delay
        self.delays = delays or {}
        self.fail = fail or (lambda unicodes, flavor: False)
        self.calls = []
        self.in_flight = 0
        self.max_in_flight = 0
        self._lock = threading.Lock()

    def subset(self, input_font, output_font, unicodes, flavor):
        from cjk_font_subsetter.core.errors import SubsetJobError

        with self._lock:
            self.calls.append((input_font, output_font, unicodes, flavor))
            self.in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            time.sleep(self.delays.get((unicodes, flavor), self.delay))
            if self.fail(unicodes, flavor):
                raise SubsetJobError(f"cannot subset {flavor}", output="boom")
            output_font.write_bytes(f"{unicodes} {flavor}".encode())
        finally:
            with self._lock:
                self.in_flight -= 1


@pytest.fixture
def sample_css():
    return SAMPLE_CSS


@pytest.fixture
def fake_source():
    return FakeSource()


@pytest.fixture
def font_info():
    return FontInfo(postscript_name=POSTSCRIPT_NAME, family_name=FAMILY_NAME)


@pytest.fixture
def input_font(tmp_path):
    """Placeholder input font file, for runs whose font reader is faked."""
    path = tmp_path / "input.ttf"
    path.write_bytes(b"\0")
    return path


def _square(size: int):
    pen = TTGlyphPen(None)
    pen.moveTo((0, 0))
    pen.lineTo((0, size))
    pen.lineTo((size, size))
    pen.lineTo((size, 0))
    pen.closePath()
    return pen.glyph()


def build_font(path, names):
    """Save a TrueType font covering U+4E00 and U+3400 with the given names."""
    glyph_order = [".notdef", "uni4E00", "uni3400"]
    fb = FontBuilder(1000, isTTF=True)
    fb.setupGlyphOrder(glyph_order)
    fb.setupCharacterMap({0x4E00: "uni4E00", 0x3400: "uni3400"})
    fb.setupGlyf({name: _square(500) for name in glyph_order})
    fb.setupHorizontalMetrics({name: (1000, 0) for name in glyph_order})
    fb.setupHorizontalHeader(ascent=880, descent=-120)
    fb.setupNameTable(names)
    fb.setupOS2(sTypoAscender=880, sTypoDescender=-120, usWinAscent=880, usWinDescent=120)
    fb.setupPost()

    fb.save(str(path))
    return path


@pytest.fixture
def tiny_font(tmp_path):
    """A real TrueType font covering U+4E00 and U+3400."""
    return build_font(
        tmp_path / "TestSans-Regular.ttf",
        {"familyName": FAMILY_NAME, "styleName": "Regular", "psName": POSTSCRIPT_NAME},
    )


@pytest.fixture
def make_font():
    """Factory saving a test font with custom name table entries."""
    return build_font


@pytest.fixture
def make_subsetter():
    """Factory for RecordingSubsetter instances."""
    return RecordingSubsetter


@pytest.fixture
def make_source():
    """Factory for FakeSource instances."""
    return FakeSource
