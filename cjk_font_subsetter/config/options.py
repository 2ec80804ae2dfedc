"""
Pipeline options and the closed value sets they draw from.

Options are validated once, by build_options(), before any network or
filesystem work starts.
"""

import os
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum, IntEnum
from pathlib import Path

from cjk_font_subsetter.core.errors import ValidationError


class Locale(str, Enum):
    """Supported locales. Values are Noto Sans CJK family suffixes."""

    SC = "sc"  # Simplified Chinese
    TC = "tc"  # Traditional Chinese
    HK = "hk"  # Hong Kong
    JP = "jp"  # Japanese
    KR = "kr"  # Korean


class FontWeight(IntEnum):
    """Weights published for Noto Sans CJK on Google Fonts."""

    THIN = 100
    LIGHT = 300
    REGULAR = 400
    MEDIUM = 500
    BOLD = 700
    BLACK = 900


class FontDisplay(str, Enum):
    """CSS font-display keywords."""

    AUTO = "auto"
    BLOCK = "block"
    SWAP = "swap"
    FALLBACK = "fallback"
    OPTIONAL = "optional"


class WebFontFormat(str, Enum):
    """Output font formats. The value doubles as the file extension."""

    WOFF2 = "woff2"
    WOFF = "woff"


DEFAULT_FORMATS = (WebFontFormat.WOFF2, WebFontFormat.WOFF)
DEFAULT_SRC_PREFIX = "../webfonts"
DEFAULT_TIMEOUT = 600.0


def default_concurrency() -> int:
    """Number of parallel subset jobs when none is requested."""
    return os.cpu_count() or 1


@dataclass(frozen=True)
class PipelineOptions:
    """Validated configuration for one pipeline run."""

    input_font: Path
    output_path: Path
    locale: Locale = Locale.SC
    font_weight: FontWeight = FontWeight.REGULAR
    font_display: FontDisplay = FontDisplay.SWAP
    formats: tuple[WebFontFormat, ...] = DEFAULT_FORMATS
    font_family: str | None = None
    src_prefix: str = DEFAULT_SRC_PREFIX
    overwrite: bool = False
    concurrency: int = 1
    timeout: float = DEFAULT_TIMEOUT
    print_width: int | None = None


def _parse_formats(formats: Iterable[str] | str) -> tuple[WebFontFormat, ...]:
    if isinstance(formats, str):
        formats = formats.split(",")

    names = [str(getattr(fmt, "value", fmt)).strip().lower() for fmt in formats]
    names = [name for name in names if name]
    if not names:
        raise ValidationError("Invalid formats: at least one format is required")

    parsed: list[WebFontFormat] = []
    for name in names:
        try:
            fmt = WebFontFormat(name)
        except ValueError:
            raise ValidationError(f"Invalid formats: {','.join(names)}") from None
        if fmt not in parsed:
            parsed.append(fmt)
    return tuple(parsed)


def _parse_enum(enum_cls, value, label: str):
    if isinstance(value, enum_cls):
        return value
    try:
        if issubclass(enum_cls, IntEnum):
            return enum_cls(int(value))
        return enum_cls(str(value).strip().lower())
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid {label}: {value}") from None


def build_options(
    *,
    input_font: str | Path | None,
    output_path: str | Path | None,
    locale: str = Locale.SC.value,
    font_weight: int | str = FontWeight.REGULAR.value,
    font_display: str = FontDisplay.SWAP.value,
    formats: Iterable[str] | str = tuple(fmt.value for fmt in DEFAULT_FORMATS),
    font_family: str | None = None,
    src_prefix: str = DEFAULT_SRC_PREFIX,
    overwrite: bool = False,
    concurrency: int | None = None,
    timeout: float = DEFAULT_TIMEOUT,
    print_width: int | None = None,
) -> PipelineOptions:
    """
    Normalize and validate raw option values.

    Enum-typed values are checked first so that an invalid enum is reported
    without touching the filesystem.

    Raises:
        ValidationError: If any value is invalid
    """
    parsed_formats = _parse_formats(formats)
    display = _parse_enum(FontDisplay, font_display, "font display")
    weight = _parse_enum(FontWeight, font_weight, "font weight")
    parsed_locale = _parse_enum(Locale, locale, "locale")

    if concurrency is None:
        concurrency = default_concurrency()
    if concurrency < 1:
        raise ValidationError(f"Invalid concurrency: {concurrency}")
    if timeout <= 0:
        raise ValidationError(f"Invalid timeout: {timeout}")
    if print_width is not None and print_width < 1:
        raise ValidationError(f"Invalid print width: {print_width}")

    if not input_font or not Path(input_font).is_file():
        raise ValidationError(f"Invalid font file path: {input_font}")

    if not output_path:
        raise ValidationError(f"Invalid output path: {output_path}")

    return PipelineOptions(
        input_font=Path(input_font),
        output_path=Path(output_path),
        locale=parsed_locale,
        font_weight=weight,
        font_display=display,
        formats=parsed_formats,
        font_family=font_family or None,
        src_prefix=src_prefix,
        overwrite=overwrite,
        concurrency=concurrency,
        timeout=timeout,
        print_width=print_width,
    )
