"""
Resolves overlay images to URLs the rendering surface can load.

Uploaded bytes are embedded as a data URL so the browser never has to reach
back into the API's own upload handling; remote URLs are handed to the browser
untouched.
"""
import base64
from typing import Optional

from pdf_render_service.core.models import DEFAULT_IMAGE_MIME_TYPE, ImageSource


def to_data_url(data: bytes, mime_type: Optional[str]) -> str:
    """Encodes raw bytes as a `data:<mime>;base64,<payload>` URL."""
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{mime_type or DEFAULT_IMAGE_MIME_TYPE};base64,{encoded}"


def resolve_image_url(image: Optional[ImageSource]) -> str:
    """
    Returns the URL to use as an overlay background.

    Args:
        image (Optional[ImageSource]): The overlay image, if any.

    Returns:
        str: A data URL for inline bytes, the remote URL unchanged when only a URL
             is present, or an empty string when there is no image at all.
    """
    if image is None:
        return ""
    if image.inline_bytes:
        return to_data_url(image.inline_bytes, image.mime_type)
    if image.remote_url:
        return image.remote_url
    return ""
