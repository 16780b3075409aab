"""
API routes for PDF generation.

Defines `POST /generate-pdf`, which accepts a multipart form describing the
source and its decorations and answers with the rendered PDF.
"""
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Response, UploadFile, status

from pdf_render_service.api.auth import require_api_key
from pdf_render_service.api.deps import get_rendering_manager
from pdf_render_service.api.models import PdfRequestForm, read_upload
from pdf_render_service.core.logger import get_logger
from pdf_render_service.core.manager import RenderingManager

logger = get_logger(__name__)

router = APIRouter(dependencies=[Depends(require_api_key)])


@router.post(
    "/generate-pdf",
    response_class=Response,
    status_code=status.HTTP_200_OK,
    summary="Render a URL or HTML content to PDF",
    description="Loads the given URL (or HTML content), hides the elements matching HideSelectors "
                "(delimited by ',', ';' or '|'), overlays an optional watermark (text or image) and "
                "stamp image, waits for network activity to settle and returns an A4 PDF.",
    responses={
        200: {"content": {"application/pdf": {}}, "description": "The generated PDF."},
        400: {"content": {"text/plain": {}}, "description": "Neither Url nor HtmlContent was provided."},
        401: {"content": {"text/plain": {}}, "description": "API key missing or invalid."},
    },
)
async def generate_pdf(
    url: Optional[str] = Form(None, alias="Url"),
    html_content: Optional[str] = Form(None, alias="HtmlContent"),
    hide_selectors: Optional[str] = Form(None, alias="HideSelectors"),
    watermark_text: Optional[str] = Form(None, alias="WatermarkText"),
    watermark_image_url: Optional[str] = Form(None, alias="WatermarkImageUrl"),
    watermark_image_file: Optional[UploadFile] = File(None, alias="WatermarkImageFile"),
    watermark_position: Optional[str] = Form(None, alias="WatermarkPosition"),
    stamp_image_url: Optional[str] = Form(None, alias="StampImageUrl"),
    stamp_image_file: Optional[UploadFile] = File(None, alias="StampImageFile"),
    stamp_position: Optional[str] = Form(None, alias="StampPosition"),
    manager: RenderingManager = Depends(get_rendering_manager),
) -> Response:
    """
    Handles a PDF generation request.

    Raises:
        InvalidRequestError: Neither Url nor HtmlContent given (mapped to 400 by the app).
        RendererError: The browser failed at any stage (mapped to 500 by the app).
    """
    form = PdfRequestForm(
        url=url,
        html_content=html_content,
        hide_selectors=hide_selectors,
        watermark_text=watermark_text,
        watermark_image_url=watermark_image_url,
        watermark_image_file=await read_upload(watermark_image_file),
        watermark_position=watermark_position,
        stamp_image_url=stamp_image_url,
        stamp_image_file=await read_upload(stamp_image_file),
        stamp_position=stamp_position,
    )
    render_request = form.to_render_request()

    result = await manager.render(render_request)

    return Response(
        content=result.content,
        media_type=result.media_type,
        headers={"Content-Disposition": f'attachment; filename="{result.filename}"'},
    )
