"""
Decorator component for the PDF Render Service.

Generates overlay CSS (watermark, stamp), resolves overlay images to URLs and
applies element hiding, all against a `RenderSurface` from the renderer component.
"""
from .decoration_applier import DecorationApplier
from .image_resolver import resolve_image_url, to_data_url
from .overlay_css import anchor_rules, anchor_transform, css_string, stamp_css, watermark_css

__all__ = [
    "DecorationApplier",
    "resolve_image_url",
    "to_data_url",
    "anchor_rules",
    "anchor_transform",
    "css_string",
    "stamp_css",
    "watermark_css",
]
