"""
Font introspection.
"""

from dataclasses import dataclass
from pathlib import Path

from fontTools.ttLib import TTFont, TTLibError

from cjk_font_subsetter.core.errors import FontReadError

# name table IDs
FAMILY_NAME_ID = 1
POSTSCRIPT_NAME_ID = 6


@dataclass(frozen=True)
class FontInfo:
    """Names read from a font's name table."""

    postscript_name: str
    family_name: str


def _sanitize_postscript_name(name: str) -> str:
    # PostScript names are restricted to printable ASCII without these
    return "".join(
        c for c in name if 33 <= ord(c) <= 126 and c not in "[](){}<>/%"
    )


def read_font_info(path: Path) -> FontInfo:
    """
    Read the PostScript and family names of a font file.

    Falls back to the file stem when the font carries no PostScript name,
    and to the PostScript name when it carries no family name.

    Raises:
        FontReadError: If the file cannot be opened as a font
    """
    try:
        font = TTFont(path, lazy=True)
    except (OSError, TTLibError, AssertionError) as e:
        raise FontReadError(f"Cannot read font {path}: {e}") from e

    try:
        name_table = font["name"] if "name" in font else None
        postscript_name = None
        family_name = None
        if name_table is not None:
            postscript_name = name_table.getDebugName(POSTSCRIPT_NAME_ID)
            # legacy family (ID 1), not the typographic family (ID 16)
            family_name = name_table.getDebugName(FAMILY_NAME_ID)
    except (TTLibError, KeyError, ValueError) as e:
        raise FontReadError(f"Cannot read name table of {path}: {e}") from e
    finally:
        font.close()

    postscript_name = _sanitize_postscript_name(postscript_name or "")
    if not postscript_name:
        postscript_name = _sanitize_postscript_name(Path(path).stem)
    if not postscript_name:
        raise FontReadError(f"Cannot derive a PostScript name for {path}")

    return FontInfo(
        postscript_name=postscript_name,
        family_name=family_name or postscript_name,
    )
