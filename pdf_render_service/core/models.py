"""
Domain models for a single render request.

A `RenderRequest` is built once from transport input, consumed once by
`RenderingManager.render()`, and discarded. Overlays are modelled as tagged
unions (`kind` literal) so the text-over-image tie-break lives in one place:
`select_watermark()`.
"""
import re
from enum import Enum
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, Field

from pdf_render_service.core.exceptions import InvalidRequestError
from pdf_render_service.core.logger import get_logger

logger = get_logger(__name__)

MISSING_SOURCE_MESSAGE = "A URL or HTML content must be provided"

PDF_MEDIA_TYPE = "application/pdf"
PDF_FILENAME = "generated.pdf"
DEFAULT_IMAGE_MIME_TYPE = "application/octet-stream"

# Delimiters accepted between selectors in the HideSelectors form field.
_SELECTOR_DELIMITERS = re.compile(r"[,;|]")


class Position(str, Enum):
    """Anchor of an overlay on the page."""
    LEFT_TOP = "LeftTop"
    LEFT_BOTTOM = "LeftBottom"
    RIGHT_TOP = "RightTop"
    RIGHT_BOTTOM = "RightBottom"
    CENTER = "Center"

    @classmethod
    def parse(cls, value: Optional[str], default: 'Position') -> 'Position':
        """
        Parses a position name as sent by clients.

        Blank or missing values give `default`. Names are matched case-insensitively
        ("rightbottom", "RightBottom"). Unrecognized values fall back to RightBottom.
        """
        if value is None or not str(value).strip():
            return default
        wanted = str(value).strip().lower()
        for member in cls:
            if member.value.lower() == wanted or member.name.lower() == wanted:
                return member
        logger.warning(f"Unrecognized position '{value}', falling back to {cls.RIGHT_BOTTOM.value}.")
        return cls.RIGHT_BOTTOM


class ImageSource(BaseModel):
    """An overlay image, either uploaded inline or referenced by URL. Inline bytes win when both are set."""
    inline_bytes: Optional[bytes] = None
    mime_type: Optional[str] = None
    remote_url: Optional[str] = None

    @classmethod
    def from_parts(
        cls,
        data: Optional[bytes] = None,
        mime_type: Optional[str] = None,
        url: Optional[str] = None,
    ) -> Optional['ImageSource']:
        """Returns an ImageSource, or None when neither non-empty bytes nor a non-blank URL is given."""
        has_bytes = bool(data)
        clean_url = url.strip() if url else ""
        if not has_bytes and not clean_url:
            return None
        return cls(
            inline_bytes=data if has_bytes else None,
            mime_type=(mime_type or DEFAULT_IMAGE_MIME_TYPE) if has_bytes else None,
            remote_url=clean_url or None,
        )


class TextWatermark(BaseModel):
    kind: Literal["text"] = "text"
    text: str
    position: Position = Position.CENTER


class ImageWatermark(BaseModel):
    kind: Literal["image"] = "image"
    image: ImageSource
    position: Position = Position.CENTER


class ImageStamp(BaseModel):
    kind: Literal["image"] = "image"
    image: ImageSource
    position: Position = Position.RIGHT_BOTTOM


Watermark = Union[TextWatermark, ImageWatermark]


class UrlSource(BaseModel):
    kind: Literal["url"] = "url"
    url: str


class MarkupSource(BaseModel):
    kind: Literal["markup"] = "markup"
    markup: str


RenderSource = Union[UrlSource, MarkupSource]


class RenderRequest(BaseModel):
    """The validated input of the rendering pipeline."""
    source: RenderSource = Field(..., discriminator="kind")
    hide_selectors: List[str] = Field(default_factory=list)
    watermark: Optional[Watermark] = Field(default=None, discriminator="kind")
    stamp: Optional[ImageStamp] = None


class RenderResult(BaseModel):
    """PDF bytes plus the fixed media type and suggested filename."""
    content: bytes
    media_type: str = PDF_MEDIA_TYPE
    filename: str = PDF_FILENAME


def resolve_source(url: Optional[str], html_content: Optional[str]) -> RenderSource:
    """
    Picks the content source of a request.

    A non-empty URL takes priority over HTML content when both are supplied.
    Both values are used exactly as given, without trimming.

    Raises:
        InvalidRequestError: If neither is supplied.
    """
    if url:
        return UrlSource(url=url)
    if html_content:
        return MarkupSource(markup=html_content)
    raise InvalidRequestError(MISSING_SOURCE_MESSAGE)


def parse_hide_selectors(raw: Union[None, str, List[str]]) -> List[str]:
    """
    Splits raw selector input on ',', ';' and '|', trimming whitespace and dropping empty entries.

    >>> parse_hide_selectors(" .ads ; #banner|| footer ")
    ['.ads', '#banner', 'footer']
    """
    if not raw:
        return []
    chunks = [raw] if isinstance(raw, str) else raw
    selectors: List[str] = []
    for chunk in chunks:
        if not chunk:
            continue
        selectors.extend(part.strip() for part in _SELECTOR_DELIMITERS.split(chunk) if part.strip())
    return selectors


def select_watermark(
    text: Optional[str],
    image: Optional[ImageSource],
    position: Optional[Position] = None,
) -> Optional[Watermark]:
    """Text wins over an image when both are supplied; neither gives no watermark."""
    effective_position = position or Position.CENTER
    if text and text.strip():
        return TextWatermark(text=text, position=effective_position)
    if image is not None:
        return ImageWatermark(image=image, position=effective_position)
    return None


def select_stamp(image: Optional[ImageSource], position: Optional[Position] = None) -> Optional[ImageStamp]:
    if image is None:
        return None
    return ImageStamp(image=image, position=position or Position.RIGHT_BOTTOM)
