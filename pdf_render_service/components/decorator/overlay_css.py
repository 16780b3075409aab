"""
CSS generation for watermark and stamp overlays.

Overlays are pseudo-elements on <body> (`::after` for the watermark,
`::before` for the stamp) with `position: fixed`, so Chromium repeats them on
every printed page. Every user-supplied value is emitted through
`css_string()`; nothing is interpolated raw.
"""
from typing import Dict, Optional, Union

from pdf_render_service.components.decorator.image_resolver import resolve_image_url
from pdf_render_service.core.exceptions import DecorationError
from pdf_render_service.core.models import (
    ImageStamp,
    ImageWatermark,
    Position,
    TextWatermark,
    Watermark,
)

WATERMARK_OPACITY = 0.2
WATERMARK_FONT_SIZE = "50px"
WATERMARK_ROTATION = "rotate(-45deg)"
STAMP_SIZE = "180px"

ANCHOR_RULES: Dict[Position, str] = {
    Position.LEFT_TOP: "top: 0; left: 0;",
    Position.LEFT_BOTTOM: "bottom: 0; left: 0;",
    Position.RIGHT_TOP: "top: 0; right: 0;",
    Position.RIGHT_BOTTOM: "bottom: 0; right: 0;",
    Position.CENTER: "top: 50%; left: 50%;",
}

BACKGROUND_POSITIONS: Dict[Position, str] = {
    Position.LEFT_TOP: "left top",
    Position.LEFT_BOTTOM: "left bottom",
    Position.RIGHT_TOP: "right top",
    Position.RIGHT_BOTTOM: "right bottom",
    Position.CENTER: "center center",
}

CENTER_TRANSLATION = "translate(-50%, -50%)"


def _normalize_position(position: Union[Position, str, None]) -> Position:
    if isinstance(position, Position):
        return position
    return Position.parse(position, default=Position.RIGHT_BOTTOM)


def anchor_rules(position: Union[Position, str, None]) -> str:
    """Returns the offset declarations for a position; unknown or missing positions anchor bottom-right."""
    return ANCHOR_RULES[_normalize_position(position)]


def anchor_transform(position: Union[Position, str, None], rotation: Optional[str] = None) -> str:
    """
    Builds the `transform` value for an anchored overlay.

    Center needs a -50%/-50% translation so the element's midpoint sits on the
    page midpoint; the rotation, if any, is applied after it.
    """
    parts = []
    if _normalize_position(position) is Position.CENTER:
        parts.append(CENTER_TRANSLATION)
    if rotation:
        parts.append(rotation)
    return " ".join(parts) if parts else "none"


def css_string(value: str) -> str:
    """
    Quotes a value as a CSS string literal.

    Quotes, backslashes, angle brackets and control characters are written as
    hex escapes so the value cannot terminate the string or the style block.
    """
    escaped = []
    for ch in value:
        code = ord(ch)
        if ch in "\\'\"<>" or code < 0x20 or code == 0x7F:
            escaped.append(f"\\{code:x} ")
        else:
            escaped.append(ch)
    return "'" + "".join(escaped) + "'"


def text_watermark_css(watermark: TextWatermark) -> str:
    return f"""
        body::after {{
            content: {css_string(watermark.text)};
            position: fixed;
            {anchor_rules(watermark.position)}
            transform: {anchor_transform(watermark.position, WATERMARK_ROTATION)};
            font-size: {WATERMARK_FONT_SIZE};
            font-weight: 800;
            white-space: nowrap;
            color: rgba(0, 0, 0, {WATERMARK_OPACITY});
            pointer-events: none;
            z-index: 9999;
        }}"""


def image_watermark_css(watermark: ImageWatermark) -> str:
    image_url = resolve_image_url(watermark.image)
    return f"""
        body::after {{
            content: '';
            position: fixed;
            width: 100%;
            height: 100%;
            {anchor_rules(watermark.position)}
            transform: {anchor_transform(watermark.position, WATERMARK_ROTATION)};
            background: url({css_string(image_url)}) no-repeat;
            background-position: {BACKGROUND_POSITIONS[watermark.position]};
            background-size: contain;
            opacity: {WATERMARK_OPACITY};
            pointer-events: none;
            z-index: 9999;
        }}"""


def watermark_css(watermark: Optional[Watermark]) -> str:
    """Returns the style block for a watermark, or an empty string when there is none."""
    if watermark is None:
        return ""
    if isinstance(watermark, TextWatermark):
        return text_watermark_css(watermark)
    if isinstance(watermark, ImageWatermark):
        return image_watermark_css(watermark)
    raise DecorationError(f"Unsupported watermark type: {type(watermark).__name__}")


def stamp_css(stamp: Optional[ImageStamp]) -> str:
    """Returns the style block for a stamp, or an empty string when there is none."""
    if stamp is None:
        return ""
    image_url = resolve_image_url(stamp.image)
    return f"""
        body::before {{
            content: '';
            position: fixed;
            {anchor_rules(stamp.position)}
            transform: {anchor_transform(stamp.position)};
            width: {STAMP_SIZE};
            height: {STAMP_SIZE};
            background: url({css_string(image_url)}) no-repeat center center;
            background-size: contain;
            opacity: 1;
            pointer-events: none;
            z-index: 10000;
        }}"""
