"""
Transport-level models for the `/generate-pdf` endpoint.

`PdfRequestForm` mirrors the multipart form fields one to one; its
`to_render_request()` turns them into the pipeline's `RenderRequest`.
"""
from typing import Optional

from fastapi import UploadFile
from pydantic import BaseModel

from pdf_render_service.core.models import (
    ImageSource,
    Position,
    RenderRequest,
    parse_hide_selectors,
    resolve_source,
    select_stamp,
    select_watermark,
)


class UploadedImage(BaseModel):
    """Contents of an uploaded image file."""
    data: bytes
    content_type: Optional[str] = None
    filename: Optional[str] = None


async def read_upload(upload: Optional[UploadFile]) -> Optional[UploadedImage]:
    """Reads an uploaded file; missing or zero-byte uploads count as no upload."""
    if upload is None:
        return None
    data = await upload.read()
    if not data:
        return None
    return UploadedImage(data=data, content_type=upload.content_type, filename=upload.filename)


class PdfRequestForm(BaseModel):
    """
    Raw form input of a PDF generation request.

    Every field is optional at this level; the only request-level rule (a URL
    or HTML content must be present) is enforced by `to_render_request()`.
    """
    url: Optional[str] = None
    html_content: Optional[str] = None
    hide_selectors: Optional[str] = None
    watermark_text: Optional[str] = None
    watermark_image_url: Optional[str] = None
    watermark_image_file: Optional[UploadedImage] = None
    watermark_position: Optional[str] = None
    stamp_image_url: Optional[str] = None
    stamp_image_file: Optional[UploadedImage] = None
    stamp_position: Optional[str] = None

    @staticmethod
    def _image(upload: Optional[UploadedImage], url: Optional[str]) -> Optional[ImageSource]:
        if upload is not None:
            return ImageSource.from_parts(data=upload.data, mime_type=upload.content_type, url=url)
        return ImageSource.from_parts(url=url)

    def to_render_request(self) -> RenderRequest:
        """
        Builds the pipeline input.

        Raises:
            InvalidRequestError: If neither `Url` nor `HtmlContent` is given.
        """
        source = resolve_source(self.url, self.html_content)
        watermark = select_watermark(
            self.watermark_text,
            self._image(self.watermark_image_file, self.watermark_image_url),
            Position.parse(self.watermark_position, default=Position.CENTER),
        )
        stamp = select_stamp(
            self._image(self.stamp_image_file, self.stamp_image_url),
            Position.parse(self.stamp_position, default=Position.RIGHT_BOTTOM),
        )
        return RenderRequest(
            source=source,
            hide_selectors=parse_hide_selectors(self.hide_selectors),
            watermark=watermark,
            stamp=stamp,
        )
